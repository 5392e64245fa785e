from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from .config import get_preset, list_presets, PRESETS
from .harness import Scenario, ScenarioHarness
from .logging_config import configure_logging, get_logger, StructuredLogger
from .replay import TraceRecorder
from .selection.events import SelectorEvent
from .selection.selector import UtilitySelector


class LoggingSelector(UtilitySelector):
    """Selector that reports switches through the structured event logger."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._event_log = get_logger("utility_ai.events")
        self.subscribe(SelectorEvent.ACTION_SWITCHED, self._log_switch)
        self.subscribe(SelectorEvent.ACTION_UNAVAILABLE, self._log_unavailable)

    def _log_switch(self, new, old) -> None:
        if isinstance(self._event_log, StructuredLogger):
            self._event_log.event(
                SelectorEvent.ACTION_SWITCHED.value,
                f"{old.name if old else 'idle'} -> {new.name if new else 'idle'}",
                agent_id=self.agent.agent_id,
                subsystem="selector",
            )

    def _log_unavailable(self) -> None:
        if isinstance(self._event_log, StructuredLogger):
            self._event_log.event(
                SelectorEvent.ACTION_UNAVAILABLE.value,
                "no eligible action",
                agent_id=self.agent.agent_id,
                subsystem="selector",
            )


def _load_scenario(args) -> Scenario:
    scenario = Scenario.load(args.scenario)
    if getattr(args, "preset", None):
        preset = get_preset(args.preset)
        if preset is None:
            raise SystemExit(f"Unknown preset: {args.preset} (choose from {', '.join(list_presets())})")
        scenario.config = preset
    return scenario


def cmd_run(args) -> int:
    scenario = _load_scenario(args)
    result = ScenarioHarness(LoggingSelector).run(scenario)

    print(f"Scenario {result.name}: {len(result.records)} cycles")
    for record in result.records:
        print(f"  {record.summary()}")
    print(f"Final action: {result.final_action or 'none'}")

    if args.trace_dir:
        recorder = TraceRecorder(args.trace_dir)
        session_id = recorder.start_session(result.name)
        for record in result.records:
            recorder.record_cycle(record)
        recorder.end_session()
        print(f"Trace written: {session_id}")

    return 0


def cmd_check(args) -> int:
    scenario = _load_scenario(args)
    replay = ScenarioHarness().verify_determinism(scenario, runs=args.runs)

    if replay.success:
        print(f"Deterministic: {replay.runs} runs x {replay.total_cycles} cycles")
        return 0

    print("Non-deterministic:")
    for mismatch in replay.mismatches:
        print(f"  {mismatch}")
    return 1


def cmd_presets(args) -> int:
    for name in list_presets():
        settings = ", ".join(
            f"{k}={v}" for k, v in PRESETS[name].to_dict().items() if k != "actions"
        )
        print(f"{name}: {settings}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(
        description="Utility AI - run and check scripted action selection scenarios"
    )
    ap.add_argument("--verbose", action="store_true", help="Enable debug logging")
    ap.add_argument("--log-dir", help="Also write rotating human/JSON logs here")

    sub = ap.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Run a scenario and print the decision trace")
    run.add_argument("scenario", help="Scenario file (.yaml/.yml/.json)")
    run.add_argument("--preset", help="Override the scenario config with a preset")
    run.add_argument("--trace-dir", help="Write a JSONL trace to this directory")
    run.set_defaults(func=cmd_run)

    check = sub.add_parser("check", help="Verify a scenario replays identically")
    check.add_argument("scenario", help="Scenario file (.yaml/.yml/.json)")
    check.add_argument("--preset", help="Override the scenario config with a preset")
    check.add_argument("--runs", type=int, default=3, help="Number of runs to compare")
    check.set_defaults(func=cmd_check)

    presets = sub.add_parser("presets", help="List built-in selector presets")
    presets.set_defaults(func=cmd_presets)

    args = ap.parse_args(argv)

    configure_logging("DEBUG" if args.verbose else "WARNING", log_dir=args.log_dir)

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
