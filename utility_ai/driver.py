"""
Frame driver for hosts without their own update loop.

Provides:
- SimulationClock: manually advanced, monotonic simulation time
- TickDriver: advances the clock and ticks every attached selector
"""
from __future__ import annotations

import logging
from typing import List, Optional

from .selection.selector import CycleResult, UtilitySelector

logger = logging.getLogger(__name__)


class SimulationClock:
    """
    Simulation time in seconds, moved forward by the host.

    Pass `clock.now` as a selector's clock so decisions use sim time.
    """

    def __init__(self, start: float = 0.0):
        self._now = float(start)

    def now(self) -> float:
        return self._now

    def advance(self, delta_time: float) -> float:
        """Move time forward and return the new time."""
        if delta_time < 0:
            raise ValueError(f"Cannot advance clock by negative delta {delta_time}")
        self._now += delta_time
        return self._now

    def set(self, t: float) -> None:
        """Jump to an absolute time, never backwards."""
        if t < self._now:
            raise ValueError(f"Cannot move clock back from {self._now} to {t}")
        self._now = float(t)


class TickDriver:
    """
    Per-frame driver for a group of selectors.

    Each step advances the clock, then calls tick_component() on every
    selector in the order they were added. Selectors configured with
    tick_manually only accumulate delta time.

    Example:
        >>> clock = SimulationClock()
        >>> selector = UtilitySelector(agent, config, clock=clock.now)
        >>> driver = TickDriver(clock)
        >>> driver.add(selector)
        >>> driver.run(steps=60, delta_time=1 / 30)
    """

    def __init__(self, clock: Optional[SimulationClock] = None):
        self.clock = clock or SimulationClock()
        self._selectors: List[UtilitySelector] = []
        self.frame = 0

    def add(self, selector: UtilitySelector) -> None:
        if selector not in self._selectors:
            self._selectors.append(selector)

    def remove(self, selector: UtilitySelector) -> None:
        if selector in self._selectors:
            self._selectors.remove(selector)

    @property
    def selectors(self) -> List[UtilitySelector]:
        return list(self._selectors)

    def step(self, delta_time: float) -> List[Optional[CycleResult]]:
        """
        Advance one frame.

        Returns:
            One entry per selector: its cycle result, or None if it ticks
            manually
        """
        self.clock.advance(delta_time)
        self.frame += 1
        return [selector.tick_component(delta_time) for selector in self._selectors]

    def run(self, steps: int, delta_time: float) -> List[List[Optional[CycleResult]]]:
        """Run `steps` frames of `delta_time` seconds each."""
        logger.debug(f"Running {steps} frames of {delta_time:.4f}s for {len(self._selectors)} selectors")
        return [self.step(delta_time) for _ in range(steps)]
