"""
Utility-based action selection.

This package picks one action per decision cycle from a fixed pool of
candidate actions, based on eligibility and a numeric score.

Design:
- Action: polymorphic candidate with can_run/score and lifecycle hooks
- Catalog: resolves configured action names to types
- Registry: one instance per action type, insertion-ordered
- Comparator: tie tolerance, inverted scoring, priority or random tie-break
- Selector: switching state machine with a minimum dwell time
- Events: synchronous observer lists
"""

from .action import UtilityAction
from .catalog import ActionCatalog, default_catalog, register_action
from .registry import ActionRegistry, default_factory
from .comparator import ScoringPolicy, is_better, select_best
from .events import EventBus, SelectorEvent
from .selector import UtilitySelector, CycleResult, CycleOutcome

__all__ = [
    "UtilityAction",
    "ActionCatalog",
    "default_catalog",
    "register_action",
    "ActionRegistry",
    "default_factory",
    "ScoringPolicy",
    "is_better",
    "select_best",
    "EventBus",
    "SelectorEvent",
    "UtilitySelector",
    "CycleResult",
    "CycleOutcome",
]
