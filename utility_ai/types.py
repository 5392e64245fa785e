from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

@dataclass
class Agent:
    """
    The acting agent a selector decides for.

    Passed explicitly into every action hook so actions never have to look
    up their owner.

    Attributes:
        agent_id: Stable identifier, used in logs and traces
        body: The acting body in the host simulation (None when unpossessed)
        blackboard: Host-owned scratch data that actions may read
    """
    agent_id: str
    body: Optional[Any] = None
    blackboard: Dict[str, Any] = field(default_factory=dict)

    @property
    def has_body(self) -> bool:
        return self.body is not None

    def bind_body(self, body: Optional[Any]) -> None:
        """Possess a new body (or release it with None)."""
        self.body = body
