"""
Decision trace recording and comparison.

Provides:
- CycleRecord: Serializable record of one decision cycle
- TraceDiff: Cycle-by-cycle comparison of two traces
- TraceRecorder: Append-only JSONL logger for traces
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, asdict
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Any, Sequence

from .selection.action import UtilityAction
from .selection.selector import CycleResult

logger = logging.getLogger(__name__)


def _name(action: Optional[UtilityAction]) -> Optional[str]:
    return action.name if action is not None else None


@dataclass
class CycleRecord:
    """Single decision cycle in a trace."""
    cycle: int
    time: float
    outcome: str
    selected: Optional[str] = None
    current: Optional[str] = None
    previous: Optional[str] = None
    delta_time: float = 0.0
    scores: Dict[str, Optional[float]] = field(default_factory=dict)

    @classmethod
    def from_result(
        cls,
        result: CycleResult,
        actions: Sequence[UtilityAction] = (),
    ) -> "CycleRecord":
        """
        Build a record from a cycle result.

        Args:
            result: The cycle result
            actions: Actions whose last score to capture (None if they
                were ineligible this cycle)
        """
        scores = {
            a.name: (a.last_score if a.last_can_run else None)
            for a in actions
        }
        return cls(
            cycle=result.cycle,
            time=result.time,
            outcome=result.outcome.value,
            selected=_name(result.selected),
            current=_name(result.current),
            previous=_name(result.previous),
            delta_time=result.delta_time,
            scores=scores,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CycleRecord":
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})

    def decision_key(self) -> tuple:
        """The fields that define the decision, excluding scores."""
        return (self.cycle, self.outcome, self.selected, self.current)

    def summary(self) -> str:
        line = f"#{self.cycle:<4} t={self.time:8.3f} {self.outcome:<15} current={self.current or '-'}"
        if self.selected and self.selected != self.current:
            line += f" (best={self.selected})"
        return line


@dataclass
class TraceDiff:
    """Differences between two decision traces."""
    mismatches: List[str] = field(default_factory=list)

    @classmethod
    def compute(cls, expected: Sequence[CycleRecord], actual: Sequence[CycleRecord]) -> "TraceDiff":
        """Compare two traces cycle by cycle."""
        mismatches = []
        if len(expected) != len(actual):
            mismatches.append(f"length: {len(expected)} != {len(actual)}")

        for exp, act in zip(expected, actual):
            if exp.decision_key() != act.decision_key():
                mismatches.append(
                    f"cycle {exp.cycle}: {exp.outcome}/{exp.current} != {act.outcome}/{act.current}"
                )
            elif exp.scores != act.scores:
                mismatches.append(f"cycle {exp.cycle}: scores {exp.scores} != {act.scores}")

        return cls(mismatches=mismatches)

    @property
    def identical(self) -> bool:
        return not self.mismatches

    def summary(self) -> str:
        """Human-readable summary of differences."""
        if not self.mismatches:
            return "Traces identical."
        return "Trace differences:\n" + "\n".join(f"  {m}" for m in self.mismatches)


class TraceRecorder:
    """
    Records decision traces to JSONL files.

    Example:
        >>> recorder = TraceRecorder("./traces")
        >>> recorder.start_session("guard_01")
        >>> recorder.record_cycle(CycleRecord.from_result(result, selector.actions()))
        >>> recorder.end_session()
    """

    def __init__(self, base_path: str):
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)

        self._current_session: Optional[str] = None
        self._session_path: Optional[Path] = None
        self._cycle_count = 0

    @property
    def session_id(self) -> Optional[str]:
        return self._current_session

    def start_session(self, agent_id: str, session_id: Optional[str] = None) -> str:
        """Start a new recording session."""
        if not session_id:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            session_id = f"{agent_id}_{timestamp}"

        self._current_session = session_id
        self._session_path = self.base_path / f"{session_id}.jsonl"
        self._cycle_count = 0

        self._write({
            "type": "session_start",
            "session_id": session_id,
            "agent_id": agent_id,
            "timestamp": datetime.now().isoformat(),
        })

        logger.info(f"Started trace session: {session_id}")
        return session_id

    def record_cycle(self, record: CycleRecord) -> None:
        """Append a cycle record to the current session."""
        if not self._current_session:
            return
        self._cycle_count += 1
        self._write({"type": "cycle", "data": record.to_dict()})

    def end_session(self) -> None:
        """End the current session."""
        if not self._current_session:
            return

        self._write({
            "type": "session_end",
            "timestamp": datetime.now().isoformat(),
            "total_cycles": self._cycle_count,
        })

        self._current_session = None
        self._session_path = None

    def _write(self, data: Dict) -> None:
        """Append data to session file."""
        if not self._session_path:
            return

        try:
            with open(self._session_path, "a", encoding="utf-8") as f:
                f.write(json.dumps(data) + "\n")
        except OSError as e:
            logger.error(f"Failed to write trace: {e}")

    def load_trace(self, session_id: str) -> List[Dict]:
        """Load all lines of a trace session."""
        path = self.base_path / f"{session_id}.jsonl"
        if not path.exists():
            return []

        events = []
        with open(path, "r", encoding="utf-8") as f:
            for line in f:
                try:
                    events.append(json.loads(line))
                except json.JSONDecodeError:
                    continue
        return events

    def load_records(self, session_id: str) -> List[CycleRecord]:
        """Load only the cycle records of a trace session."""
        return [
            CycleRecord.from_dict(event["data"])
            for event in self.load_trace(session_id)
            if event.get("type") == "cycle"
        ]
