"""
Deterministic scenario harness.

Runs scripted decision scenarios against a selector and records the
resulting trace, so selection behavior can be checked and replayed
without a host simulation.
"""
from __future__ import annotations

import json
import logging
import os
import random
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Type

import yaml

from .config import SelectorConfig, get_preset
from .driver import SimulationClock
from .replay import CycleRecord, TraceDiff
from .selection.action import UtilityAction
from .selection.catalog import ActionCatalog
from .selection.selector import UtilitySelector
from .types import Agent
from .validation import validate_selector_config

logger = logging.getLogger(__name__)

Call = Tuple[str, str]


def _at(values: Any, index: int) -> Any:
    """Per-step value: scalars are constant, lists repeat their last item."""
    if isinstance(values, (list, tuple)):
        if not values:
            return None
        return values[min(index, len(values) - 1)]
    return values


class ScriptedAction(UtilityAction):
    """
    Action whose eligibility and score follow a per-step script.

    The harness stores the current step index in the agent blackboard under
    "step" and collects lifecycle calls in blackboard["calls"].
    """

    script_can_run: Any = True
    script_score: Any = 0.0

    def _step(self, agent: Agent) -> int:
        return agent.blackboard.get("step", 0)

    def _record(self, agent: Agent, hook: str) -> None:
        agent.blackboard.setdefault("calls", []).append((hook, self.name))

    def can_run(self, agent, body):
        return bool(_at(self.script_can_run, self._step(agent)))

    def score(self, agent, body):
        value = _at(self.script_score, self._step(agent))
        return float(value) if value is not None else 0.0

    def spawn(self, agent):
        self._record(agent, "spawn")

    def enter(self, agent, body):
        self._record(agent, "enter")

    def tick(self, delta_time, agent, body):
        self._record(agent, "tick")

    def exit(self, agent, body):
        self._record(agent, "exit")


def make_scripted_action(name: str, score: Any = 0.0, can_run: Any = True) -> Type[ScriptedAction]:
    """Create a distinct ScriptedAction subclass named `name`."""
    return type(name, (ScriptedAction,), {
        "action_name": name,
        "script_score": score,
        "script_can_run": can_run,
    })


@dataclass
class ScenarioStep:
    """One decision cycle of a scenario."""
    time: float
    delta: float = 0.0
    body: bool = True


@dataclass
class Scenario:
    """
    A scripted sequence of decision cycles.

    Attributes:
        name: Scenario name (used as the agent id)
        config: Selector settings
        actions: Action scripts: {"name", "score", "can_run", "kill_at"}
        steps: Cycles to run, in order
    """
    name: str
    config: SelectorConfig = field(default_factory=SelectorConfig)
    actions: List[Dict[str, Any]] = field(default_factory=list)
    steps: List[ScenarioStep] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Scenario":
        """
        Build a scenario from a mapping.

        `config` may be a mapping or a preset name; steps may be mappings
        with time/delta/body or bare times (delta = time since previous).
        """
        raw_config = data.get("config") or {}
        if isinstance(raw_config, str):
            config = get_preset(raw_config)
            if config is None:
                raise ValueError(f"Unknown preset: {raw_config}")
        else:
            validate_selector_config(raw_config).raise_if_invalid("Scenario config")
            config = SelectorConfig.from_dict(raw_config)

        steps = []
        last_time = 0.0
        for raw in data.get("steps", []):
            if isinstance(raw, dict):
                t = float(raw["time"])
                step = ScenarioStep(t, float(raw.get("delta", t - last_time)), bool(raw.get("body", True)))
            else:
                t = float(raw)
                step = ScenarioStep(t, t - last_time)
            steps.append(step)
            last_time = t

        actions = list(data.get("actions", []))
        for action in actions:
            if "name" not in action:
                raise ValueError(f"Action script without a name: {action}")

        return cls(
            name=str(data.get("name", "scenario")),
            config=config,
            actions=actions,
            steps=steps,
        )

    @classmethod
    def load(cls, path: str) -> "Scenario":
        """Load a scenario from a YAML or JSON file."""
        with open(path, "r", encoding="utf-8") as f:
            content = f.read()
        if path.endswith((".yaml", ".yml")):
            data = yaml.safe_load(content) or {}
        else:
            data = json.loads(content)
        if "name" not in data:
            data["name"] = os.path.splitext(os.path.basename(path))[0]
        return cls.from_dict(data)

    def build_catalog(self) -> ActionCatalog:
        """A fresh catalog with one scripted type per action script."""
        catalog = ActionCatalog()
        for script in self.actions:
            catalog.register(make_scripted_action(
                script["name"],
                score=script.get("score", 0.0),
                can_run=script.get("can_run", True),
            ))
        return catalog


@dataclass
class ScenarioResult:
    """Trace and lifecycle calls of a scenario run."""
    name: str
    records: List[CycleRecord]
    calls: List[Call]
    stats: Dict[str, Any]

    @property
    def final_action(self) -> Optional[str]:
        return self.records[-1].current if self.records else None


@dataclass
class ReplayResult:
    """Result of a determinism check."""
    success: bool
    runs: int
    total_cycles: int
    mismatches: List[str]


class ScenarioHarness:
    """
    Runs scenarios against fresh selectors.

    Example:
        >>> harness = ScenarioHarness()
        >>> result = harness.run(Scenario.load("patrol.yaml"))
        >>> [r.current for r in result.records]
        ['Patrol', 'Patrol', 'Flee']
    """

    def __init__(self, selector_cls: Type[UtilitySelector] = UtilitySelector):
        self.selector_cls = selector_cls

    def build_selector(
        self,
        scenario: Scenario,
        clock: SimulationClock,
        rng: Optional[random.Random] = None,
    ) -> UtilitySelector:
        config = SelectorConfig.from_dict(scenario.config.to_dict())
        config.actions = [script["name"] for script in scenario.actions]
        agent = Agent(scenario.name, body=scenario.name)
        return self.selector_cls(
            agent,
            config,
            catalog=scenario.build_catalog(),
            clock=clock.now,
            rng=rng,
        )

    def run(self, scenario: Scenario, rng: Optional[random.Random] = None) -> ScenarioResult:
        """
        Run every step of a scenario on a new selector.

        Args:
            scenario: The scenario to run
            rng: Tie-break source (default: seeded from the scenario config)
        """
        clock = SimulationClock()
        selector = self.build_selector(scenario, clock, rng)
        agent = selector.agent
        selector.initialise()

        kill_steps = {
            script["name"]: int(script["kill_at"])
            for script in scenario.actions
            if script.get("kill_at") is not None
        }

        records = []
        for index, step in enumerate(scenario.steps):
            agent.blackboard["step"] = index
            agent.bind_body(scenario.name if step.body else None)
            for name, kill_at in kill_steps.items():
                if kill_at == index:
                    selector.action_by_type(name).kill()

            clock.set(max(clock.now(), step.time))
            result = selector.tick_component(step.delta)
            if result is None:
                result = selector.tick_utility_ai()
            records.append(CycleRecord.from_result(result, selector.actions()))

        logger.debug(f"Scenario {scenario.name}: {len(records)} cycles")
        return ScenarioResult(
            name=scenario.name,
            records=records,
            calls=list(agent.blackboard.get("calls", [])),
            stats=selector.stats(),
        )

    def verify_determinism(self, scenario: Scenario, runs: int = 2) -> ReplayResult:
        """
        Run a scenario several times and compare the traces.

        Randomized ties only replay identically when random_seed is set.
        """
        baseline = self.run(scenario)
        mismatches: List[str] = []
        for run in range(1, runs):
            diff = TraceDiff.compute(baseline.records, self.run(scenario).records)
            mismatches.extend(f"run {run + 1}: {m}" for m in diff.mismatches)

        return ReplayResult(
            success=not mismatches,
            runs=runs,
            total_cycles=len(baseline.records),
            mismatches=mismatches,
        )
