"""
Action catalog: resolves action type names to UtilityAction subclasses.

Lets configuration files list actions by name.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional, Type, Union

from .action import UtilityAction

logger = logging.getLogger(__name__)

ActionType = Type[UtilityAction]
ActionRef = Union[ActionType, str, None]


class ActionCatalog:
    """
    Name -> action type mapping.

    Example:
        >>> catalog = ActionCatalog()
        >>> @catalog.register
        ... class Patrol(UtilityAction):
        ...     def score(self, agent, body): return 5.0
        >>> catalog.resolve("Patrol") is Patrol
        True
    """

    def __init__(self):
        self._types: Dict[str, ActionType] = {}

    def register(self, action_type: ActionType, name: Optional[str] = None) -> ActionType:
        """
        Register an action type under `name` (default: its action name).

        Returns the type so this can be used as a class decorator.
        """
        if not (isinstance(action_type, type) and issubclass(action_type, UtilityAction)):
            raise TypeError(f"{action_type!r} is not a UtilityAction subclass")

        key = name or action_type.action_name or action_type.__name__
        existing = self._types.get(key)
        if existing is not None and existing is not action_type:
            logger.warning(f"Action name {key} re-registered: {existing.__name__} -> {action_type.__name__}")
        self._types[key] = action_type
        return action_type

    def resolve(self, ref: ActionRef) -> Optional[ActionType]:
        """
        Resolve a type or name to an action type.

        Returns:
            The action type, or None for None, unknown names and
            non-action classes
        """
        if ref is None:
            return None
        if isinstance(ref, str):
            action_type = self._types.get(ref)
            if action_type is None:
                logger.warning(f"Unknown action type: {ref}")
            return action_type
        if isinstance(ref, type) and issubclass(ref, UtilityAction):
            return ref
        logger.warning(f"Not an action type: {ref!r}")
        return None

    def names(self) -> List[str]:
        return sorted(self._types)

    def __contains__(self, name: str) -> bool:
        return name in self._types

    def __len__(self) -> int:
        return len(self._types)


# Process-wide default catalog
default_catalog = ActionCatalog()


def register_action(action_type: ActionType) -> ActionType:
    """Class decorator registering an action in the default catalog."""
    return default_catalog.register(action_type)
