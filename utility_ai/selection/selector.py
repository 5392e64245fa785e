"""
Utility selector: the per-agent decision engine.

Each decision cycle scores every registered action, folds the eligible
ones through the comparator and either keeps ticking the current action,
switches to a better one (subject to the minimum dwell time), or drops to
idle when nothing is eligible.
"""
from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from ..config import SelectorConfig
from ..types import Agent
from .action import UtilityAction
from .catalog import ActionCatalog, ActionRef, ActionType
from .comparator import ScoringPolicy, select_best
from .events import EventBus, SelectorEvent
from .registry import ActionFactory, ActionRegistry

logger = logging.getLogger(__name__)


class CycleOutcome(str, Enum):
    """How a decision cycle ended."""
    SKIPPED = "skipped"                  # no agent, or no body and body required
    UNAVAILABLE = "unavailable"          # no eligible action
    TICKED = "ticked"                    # current action kept and ticked
    SWITCHED = "switched"                # switched to a new action and ticked it
    SWITCH_REJECTED = "switch_rejected"  # better action found, dwell time not elapsed
    ABORTED = "aborted"                  # switch rejected with no current action


@dataclass
class CycleResult:
    """
    Summary of one decision cycle.

    Attributes:
        cycle: 1-based cycle counter
        outcome: How the cycle ended
        time: Clock value the cycle ran at
        delta_time: Delta passed to the ticked action
        selected: Best action found by evaluation (None if none eligible)
        current: Current action after the cycle
        previous: Current action before the cycle
    """
    cycle: int
    outcome: CycleOutcome
    time: float
    delta_time: float = 0.0
    selected: Optional[UtilityAction] = None
    current: Optional[UtilityAction] = None
    previous: Optional[UtilityAction] = None

    @property
    def ticked(self) -> Optional[UtilityAction]:
        """The action that was ticked this cycle, if any."""
        if self.outcome in (CycleOutcome.TICKED, CycleOutcome.SWITCHED, CycleOutcome.SWITCH_REJECTED):
            return self.current
        return None


class UtilitySelector:
    """
    Picks and runs the best action for one agent.

    Features:
    - Normal or inverted scoring with tie tolerance
    - Priority (enumeration order) or randomized tie-breaking
    - Minimum dwell time between switches
    - Enter/tick/exit lifecycle and observable events

    Example:
        >>> selector = UtilitySelector(Agent("guard_01"), SelectorConfig(actions=["Idle", "Patrol"]))
        >>> selector.initialise()
        >>> selector.tick_component(0.016)  # from the host's frame loop
        >>> selector.current_action
        <Patrol score=5.000>

    Subclasses may override compute_best_action() and score_filter().
    """

    def __init__(
        self,
        agent: Optional[Agent] = None,
        config: Optional[SelectorConfig] = None,
        catalog: Optional[ActionCatalog] = None,
        factory: Optional[ActionFactory] = None,
        clock: Optional[Callable[[], float]] = None,
        rng: Optional[random.Random] = None,
        events: Optional[EventBus] = None,
    ):
        """
        Initialize selector.

        Args:
            agent: The agent to decide for (cycles are skipped while None)
            config: Selector settings (defaults if omitted)
            catalog: Resolves action names to types
            factory: Builds action instances (default: no-arg constructor)
            clock: Returns current simulation seconds (default: time.monotonic)
            rng: Tie-break random source (default: seeded from config.random_seed)
            events: Event bus to emit on (a private one if omitted)
        """
        self.config = config or SelectorConfig()
        self.events = events or EventBus()
        self.registry = ActionRegistry(agent, self.events, catalog, factory)
        self.clock = clock or time.monotonic
        self._rng = rng if rng is not None else random.Random(self.config.random_seed)

        # Accumulated since the last decision cycle
        self.tick_delta_time = 0.0

        self._current_action: Optional[UtilityAction] = None
        self._current_body: Optional[Any] = None
        self.last_switch_time: Optional[float] = None
        self._cycle = 0

        self._stats: Dict[str, int] = {
            "cycles": 0,
            "skipped": 0,
            "switches": 0,
            "rejected_switches": 0,
            "unavailable": 0,
            "ticks": 0,
        }

    # Context

    @property
    def agent(self) -> Optional[Agent]:
        return self.registry.agent

    @agent.setter
    def agent(self, agent: Optional[Agent]) -> None:
        self.registry.agent = agent

    @property
    def current_action(self) -> Optional[UtilityAction]:
        return self._current_action

    @property
    def current_action_type(self) -> Optional[ActionType]:
        return type(self._current_action) if self._current_action is not None else None

    @property
    def current_body(self) -> Optional[Any]:
        """Body the current action was last ticked with."""
        return self._current_body

    @property
    def random_source(self) -> random.Random:
        return self._rng

    def set_random_source(self, rng: random.Random) -> None:
        """Use `rng` for all future tie-breaks."""
        self._rng = rng

    # Registry passthrough

    def initialise(self, action_types: Optional[List[ActionRef]] = None) -> List[UtilityAction]:
        """
        Reset selection state and spawn the initial action set.

        A current action is exited first, as when nothing is eligible.
        Already spawned types are kept and not spawned again.

        Args:
            action_types: Types or names to spawn (default: config.actions)

        Returns:
            The actions spawned by this call
        """
        old = self._current_action
        if old is not None:
            logger.debug(f"Re-initialising, exiting {old.name}", extra=self._log_extra())
            self.events.emit(SelectorEvent.ACTION_SWITCHED, None, old)
            old.exit(self.agent, self._current_body)

        self._current_action = None
        self._current_body = None
        self.last_switch_time = None
        self.tick_delta_time = 0.0

        refs = self.config.actions if action_types is None else action_types
        spawned = []
        for ref in refs:
            action = self.registry.spawn_instance(ref)
            if action is not None:
                spawned.append(action)

        logger.info(f"Selector initialised with {len(spawned)} actions", extra=self._log_extra())
        self.events.emit(SelectorEvent.INITIALISED)
        return spawned

    def spawn_action_instance(self, ref: ActionRef) -> Optional[UtilityAction]:
        return self.registry.spawn_instance(ref)

    def can_spawn_action_instance(self, ref: ActionRef) -> bool:
        return self.registry.can_spawn_instance(ref)

    def actions(self) -> List[UtilityAction]:
        return self.registry.instances()

    def action_by_type(self, ref: ActionRef) -> Optional[UtilityAction]:
        return self.registry.instance_by_type(ref)

    def subscribe(self, event: SelectorEvent, callback: Callable[..., None]) -> Callable[[], None]:
        """Shortcut for events.subscribe()."""
        return self.events.subscribe(event, callback)

    # Scoring

    def scoring_policy(self) -> ScoringPolicy:
        return ScoringPolicy(
            equality_tolerance=self.config.equality_tolerance,
            invert_scoring=self.config.invert_scoring,
            invert_priority=self.config.invert_priority,
            randomize_on_equality=self.config.randomize_on_equality,
        )

    def score_filter(self, action: UtilityAction, score: float) -> float:
        """Post-process a raw score before ranking. Identity by default."""
        return score

    def compute_best_action(self, agent: Agent, body: Optional[Any]) -> Optional[UtilityAction]:
        """
        Evaluate every action and return the best eligible one.

        Updates last_can_run and last_score on each evaluated action.
        """
        candidates = []
        for action in self.registry.instances():
            action.last_can_run = not action.is_pending_kill and bool(action.can_run(agent, body))
            if not action.last_can_run:
                continue

            raw = action.score(agent, body)
            if isinstance(raw, bool) or not isinstance(raw, (int, float)):
                raise TypeError(f"{action.name}.score() returned {type(raw).__name__}, expected a number")

            action.last_score = float(self.score_filter(action, raw))
            if self.config.ignore_zero_score and action.last_score == 0:
                continue

            candidates.append(action)

        return select_best(candidates, self.scoring_policy(), self._rng)

    # Cycle entry points

    def tick_component(self, delta_time: float) -> Optional[CycleResult]:
        """
        Per-frame entry point for the host's update loop.

        Accumulates delta time and runs a decision cycle unless the config
        asks for manual ticking.
        """
        self.tick_delta_time += delta_time
        if self.config.tick_manually:
            return None
        return self.tick_utility_ai()

    def tick_utility_ai(self, now: Optional[float] = None) -> CycleResult:
        """
        Run one decision cycle.

        Args:
            now: Clock value for this cycle (default: self.clock())
        """
        try:
            return self._evaluate(self.clock() if now is None else now)
        finally:
            self.tick_delta_time = 0.0

    def _evaluate(self, now: float) -> CycleResult:
        self._cycle += 1
        self._stats["cycles"] += 1
        previous = self._current_action
        delta_time = self.tick_delta_time

        agent = self.agent
        body = agent.body if agent is not None else None
        if agent is None or (body is None and not self.config.can_run_without_body):
            self._stats["skipped"] += 1
            logger.debug("Cycle skipped: no agent or body", extra=self._log_extra())
            return CycleResult(self._cycle, CycleOutcome.SKIPPED, now, current=previous, previous=previous)

        self.events.emit(SelectorEvent.PRE_SCORING)
        best = self.compute_best_action(agent, body)

        if best is None:
            return self._become_unavailable(agent, now, previous)

        self.events.emit(SelectorEvent.ACTION_SELECTED, best)
        selected = best
        outcome = CycleOutcome.TICKED

        if best is not self._current_action:
            # None until the first accepted switch
            elapsed = now - self.last_switch_time if self.last_switch_time is not None else None
            if elapsed is None or elapsed > self.config.minimum_dwell_seconds:
                self._switch(agent, body, best, now)
                outcome = CycleOutcome.SWITCHED
            elif self._current_action is None:
                # Unreachable while state is consistent: nothing to keep ticking
                logger.debug(f"Switch to {best.name} rejected with no current action", extra=self._log_extra())
                return CycleResult(self._cycle, CycleOutcome.ABORTED, now, delta_time, selected, None, previous)
            else:
                self._stats["rejected_switches"] += 1
                logger.debug(
                    f"Switch {self._current_action.name} -> {best.name} rejected "
                    f"({elapsed:.3f}s < {self.config.minimum_dwell_seconds:.3f}s)",
                    extra=self._log_extra(),
                )
                best = self._current_action
                outcome = CycleOutcome.SWITCH_REJECTED

        best.tick(delta_time, agent, body)
        self._current_action = best
        self._current_body = body
        self._stats["ticks"] += 1
        self.events.emit(SelectorEvent.ACTION_TICKED, best)

        return CycleResult(self._cycle, outcome, now, delta_time, selected, best, previous)

    def _switch(self, agent: Agent, body: Optional[Any], new: UtilityAction, now: float) -> None:
        old = self._current_action
        logger.debug(
            f"Switching {old.name if old else 'idle'} -> {new.name}",
            extra=self._log_extra(),
        )
        self.events.emit(SelectorEvent.ACTION_SWITCHED, new, old)
        if old is not None:
            old.exit(agent, self._current_body)
        new.enter(agent, body)
        self._current_action = new
        self.last_switch_time = now
        self._stats["switches"] += 1

    def _become_unavailable(
        self,
        agent: Agent,
        now: float,
        previous: Optional[UtilityAction],
    ) -> CycleResult:
        self._stats["unavailable"] += 1
        self.events.emit(SelectorEvent.ACTION_UNAVAILABLE)

        old = self._current_action
        if old is not None:
            logger.debug(f"No eligible action, exiting {old.name}", extra=self._log_extra())
            self.events.emit(SelectorEvent.ACTION_SWITCHED, None, old)
            old.exit(agent, self._current_body)
            old.clear_pending_kill()
            self._current_action = None
            self._current_body = None

        return CycleResult(self._cycle, CycleOutcome.UNAVAILABLE, now, previous=previous)

    # Introspection

    def stats(self) -> Dict[str, Any]:
        """Counters and current state."""
        return {
            **self._stats,
            "current_action": self._current_action.name if self._current_action else None,
            "last_switch_time": self.last_switch_time,
            "actions": len(self.registry),
        }

    def _log_extra(self) -> Dict[str, Any]:
        return {
            "agent_id": self.agent.agent_id if self.agent else None,
            "cycle": self._cycle,
            "subsystem": "selector",
        }
