"""
Action registry: the set of instantiated actions for one agent.

Guarantees at most one live instance per action type and a stable,
insertion-ordered enumeration.
"""
from __future__ import annotations

import inspect
import logging
from typing import Callable, Dict, Iterator, List, Optional

from ..types import Agent
from .action import UtilityAction
from .catalog import ActionCatalog, ActionRef, ActionType, default_catalog
from .events import EventBus, SelectorEvent

logger = logging.getLogger(__name__)

ActionFactory = Callable[[ActionType, Agent], UtilityAction]


def default_factory(action_type: ActionType, agent: Agent) -> UtilityAction:
    """Instantiate an action with its no-argument constructor."""
    return action_type()


class ActionRegistry:
    """
    Owns the action instances of one agent.

    Instances are destroyed only with the registry; a killed action stays
    registered (see UtilityAction.kill).
    """

    def __init__(
        self,
        agent: Optional[Agent] = None,
        events: Optional[EventBus] = None,
        catalog: Optional[ActionCatalog] = None,
        factory: Optional[ActionFactory] = None,
    ):
        """
        Initialize registry.

        Args:
            agent: Agent passed to the factory and to spawn()
            events: Bus receiving ACTION_SPAWNED notifications
            catalog: Resolves action names (default: process-wide catalog)
            factory: Builds an instance of a type for an agent
        """
        self.agent = agent
        self.events = events or EventBus()
        self.catalog = catalog or default_catalog
        self.factory = factory or default_factory

        # dicts keep insertion order
        self._instances: Dict[ActionType, UtilityAction] = {}

    def _resolve_concrete(self, ref: ActionRef) -> Optional[ActionType]:
        action_type = self.catalog.resolve(ref)
        if action_type is not None and inspect.isabstract(action_type):
            logger.warning(f"Action {action_type.__name__} is abstract, cannot spawn")
            return None
        return action_type

    def can_spawn_instance(self, ref: ActionRef) -> bool:
        """True if the type is concrete and no instance of it exists yet."""
        action_type = self._resolve_concrete(ref)
        if action_type is None:
            return False
        return action_type not in self._instances

    def spawn_instance(self, ref: ActionRef) -> Optional[UtilityAction]:
        """
        Create, store and spawn an instance of an action type.

        Args:
            ref: Action type or registered name

        Returns:
            The new instance, or None if the type is missing, unknown or
            abstract, already instanced, or no agent is bound
        """
        action_type = self._resolve_concrete(ref)
        if action_type is None:
            return None

        if action_type in self._instances:
            logger.debug(f"Action {action_type.__name__} already spawned")
            return None

        if self.agent is None:
            logger.debug(f"No agent bound, cannot spawn {action_type.__name__}")
            return None

        action = self.factory(action_type, self.agent)
        self._instances[action_type] = action
        action.spawn(self.agent)
        self.events.emit(SelectorEvent.ACTION_SPAWNED, action)

        logger.debug(f"Spawned action {action.name} for {self.agent.agent_id}")
        return action

    def instances(self) -> List[UtilityAction]:
        """All instances in insertion order (a new list each call)."""
        return list(self._instances.values())

    def instance_by_type(self, ref: ActionRef) -> Optional[UtilityAction]:
        action_type = self.catalog.resolve(ref)
        if action_type is None:
            return None
        return self._instances.get(action_type)

    def __iter__(self) -> Iterator[UtilityAction]:
        return iter(self.instances())

    def __len__(self) -> int:
        return len(self._instances)

    def __contains__(self, action: UtilityAction) -> bool:
        return self._instances.get(type(action)) is action
