#!/usr/bin/env python3
"""
Utility AI demo.

A guard agent chooses between idling, patrolling and fleeing while its
health drops. Shows:
1. Score-based selection
2. The minimum dwell time holding off a better action
3. Dropping to idle when nothing is eligible

Run with:
    python demo.py
"""
import logging

from utility_ai.config import SelectorConfig
from utility_ai.driver import SimulationClock, TickDriver
from utility_ai.logging_config import configure_logging
from utility_ai.selection import ActionCatalog, SelectorEvent, UtilityAction, UtilitySelector
from utility_ai.types import Agent

catalog = ActionCatalog()


@catalog.register
class Idle(UtilityAction):
    def score(self, agent, body):
        return 1.0


@catalog.register
class Patrol(UtilityAction):
    def can_run(self, agent, body):
        return agent.blackboard["stamina"] > 0

    def score(self, agent, body):
        return 5.0

    def tick(self, delta_time, agent, body):
        agent.blackboard["stamina"] -= delta_time


@catalog.register
class Flee(UtilityAction):
    def can_run(self, agent, body):
        return agent.blackboard["health"] < 50

    def score(self, agent, body):
        return 10.0 - agent.blackboard["health"] / 10.0

    def enter(self, agent, body):
        print(f"    {agent.agent_id} turns to run!")


def print_header(text: str):
    """Print a styled header."""
    print(f"\n{'='*60}")
    print(f"  {text}")
    print(f"{'='*60}\n")


def main():
    configure_logging("WARNING")

    print_header("Guard decision loop")

    clock = SimulationClock()
    agent = Agent("guard_01", body="guard_pawn", blackboard={"health": 100, "stamina": 2.0})
    config = SelectorConfig(
        actions=["Idle", "Patrol", "Flee"],
        minimum_dwell_seconds=1.0,
    )
    selector = UtilitySelector(agent, config, catalog=catalog, clock=clock.now)
    selector.subscribe(
        SelectorEvent.ACTION_SWITCHED,
        lambda new, old: print(
            f"  t={clock.now():4.2f}  {old.name if old else 'idle'} -> {new.name if new else 'idle'}"
        ),
    )
    selector.initialise()

    driver = TickDriver(clock)
    driver.add(selector)

    for frame in range(40):
        if frame == 10:
            agent.blackboard["health"] = 30
            print(f"  t={clock.now():4.2f}  guard is wounded (health 30)")
        driver.step(0.1)

    print_header("Summary")
    for key, value in selector.stats().items():
        print(f"  {key}: {value}")


if __name__ == "__main__":
    main()
