"""
Base class for utility actions.

An action is one candidate behavior. The selector asks it whether it can
run and how desirable it is, then drives its enter/tick/exit lifecycle.
Concrete actions subclass UtilityAction and implement score().
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional

from ..types import Agent


class UtilityAction(ABC):
    """
    A single candidate behavior.

    Lifecycle:
        spawn -> (can_run, score)* -> enter -> tick* -> exit -> ...

    Attributes:
        last_score: Result of the most recent scoring call
        last_can_run: Result of the most recent eligibility check
    """

    # Optional display name; defaults to the class name
    action_name: Optional[str] = None

    def __init__(self):
        self.last_score: float = 0.0
        self.last_can_run: bool = False
        self._pending_kill = False

    @property
    def name(self) -> str:
        return self.action_name or type(self).__name__

    # Hooks

    def spawn(self, agent: Agent) -> None:
        """Called once when the registry creates this instance."""

    def can_run(self, agent: Agent, body: Optional[Any]) -> bool:
        """Eligibility check. Must not mutate state visible to other calls."""
        return True

    @abstractmethod
    def score(self, agent: Agent, body: Optional[Any]) -> float:
        """Desirability of this action. Only called when can_run() is True."""

    def enter(self, agent: Agent, body: Optional[Any]) -> None:
        """Called when this action becomes the current action."""

    def tick(self, delta_time: float, agent: Agent, body: Optional[Any]) -> None:
        """Called once per cycle while this action is current."""

    def exit(self, agent: Agent, body: Optional[Any]) -> None:
        """Called when this action stops being current."""

    # Soft delete

    def kill(self) -> None:
        """
        Exclude this action from selection.

        Does not call exit(); the selector exits a killed current action
        on its next cycle.
        """
        self._pending_kill = True

    def clear_pending_kill(self) -> None:
        self._pending_kill = False

    @property
    def is_pending_kill(self) -> bool:
        return self._pending_kill

    def __repr__(self) -> str:
        flags = " pending_kill" if self._pending_kill else ""
        return f"<{self.name} score={self.last_score:.3f}{flags}>"
