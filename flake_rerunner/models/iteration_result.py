"""
Iteration Result Models
=======================
Per-iteration outcome and the running tally kept by the orchestrator.

Outcome:
    success — attempt concluded "success"
    failure — attempt concluded "failure"; artifacts were downloaded
    other   — any other conclusion (cancelled, timed_out, ...); logged as an
              anomaly and counted in neither bucket

The tally is local state of a single RerunOrchestrator.run() call and is
never persisted.
"""
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel


class Outcome(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    OTHER = "other"


class IterationResult(BaseModel):
    iteration: int
    attempt_number: int
    conclusion: Optional[str] = None
    outcome: Outcome
    artifacts: List[str] = []
    duration_seconds: float = 0.0


class RerunTally(BaseModel):
    successes: int = 0
    failures: int = 0
    anomalies: int = 0

    @property
    def total(self) -> int:
        return self.successes + self.failures + self.anomalies

    def record(self, outcome: Outcome) -> None:
        if outcome is Outcome.SUCCESS:
            self.successes += 1
        elif outcome is Outcome.FAILURE:
            self.failures += 1
        else:
            self.anomalies += 1


class RerunSummary(BaseModel):
    run_id: int
    initial_attempt_count: int
    tally: RerunTally
    iterations: List[IterationResult] = []
