"""
Orchestrator Agent
==================
Drives the Rerun → Wait → Poll → Classify loop for one workflow run.

Loop:
    1. Look up the run once; its run_attempt is the initial attempt count.
    2. For iteration 1..number_of_attempts (inclusive) run the attempt
       controller against attempt initial_attempt_count + iteration.
    3. success → successes += 1
       failure → download artifacts (awaited), failures += 1
       other   → anomalies += 1, logged only
    4. Log the running tally after every iteration and the totals at the end.

Counters live in a RerunTally created per run() call. Any fatal error
propagates out of run() without a partial summary.
"""
import logging
import time
from pathlib import Path
from typing import Optional, Union

from flake_rerunner.agents.attempt_controller import AttemptController, expected_attempt_number
from flake_rerunner.core import config
from flake_rerunner.core.errors import RunNotFoundError
from flake_rerunner.models.iteration_result import (
    IterationResult,
    Outcome,
    RerunSummary,
    RerunTally,
)
from flake_rerunner.models.settings import RerunSettings
from flake_rerunner.services.actions_client import ActionsClient
from flake_rerunner.services.artifact_retriever import ArtifactRetriever

logger = logging.getLogger(__name__)


class RerunOrchestrator:

    def __init__(
        self,
        client: ActionsClient,
        artifacts_dir: Union[str, Path] = config.ARTIFACTS_DIR,
        grace_period_seconds: float = config.RERUN_GRACE_PERIOD_SECONDS,
        retriever: Optional[ArtifactRetriever] = None,
    ) -> None:
        self.client = client
        self.grace_period_seconds = grace_period_seconds
        self.retriever = retriever or ArtifactRetriever(client, artifacts_dir)

    async def _initial_attempt_count(self, settings: RerunSettings) -> int:
        run = await self.client.get_run(settings.repo_owner, settings.repo_name, settings.run_id)
        if run is None:
            raise RunNotFoundError(settings.run_id)
        count = run.run_attempt or 1
        logger.info("Initial attempt count: %d", count)
        return count

    async def run(self, settings: RerunSettings) -> RerunSummary:
        initial_attempt_count = await self._initial_attempt_count(settings)
        controller = AttemptController(self.client, settings, self.grace_period_seconds)
        summary = RerunSummary(
            run_id=settings.run_id,
            initial_attempt_count=initial_attempt_count,
            tally=RerunTally(),
        )
        tally = summary.tally

        for iteration in range(1, settings.number_of_attempts + 1):
            logger.info("Run #%d", iteration)
            started = time.time()

            attempt_number = expected_attempt_number(initial_attempt_count, iteration)
            attempt, outcome = await controller.run(attempt_number)

            saved = []
            if outcome is Outcome.FAILURE:
                saved = await self.retriever.download_for_attempt(
                    settings.repo_owner, settings.repo_name, settings.run_id, attempt_number
                )
            tally.record(outcome)

            summary.iterations.append(IterationResult(
                iteration=iteration,
                attempt_number=attempt_number,
                conclusion=attempt.conclusion,
                outcome=outcome,
                artifacts=[str(p) for p in saved],
                duration_seconds=round(time.time() - started, 2),
            ))
            logger.info(
                "Results as of iteration #%d: %d successes, %d failures",
                iteration, tally.successes, tally.failures,
            )

        logger.info("Successes: %d, Failures: %d", tally.successes, tally.failures)
        if tally.anomalies:
            logger.warning("%d attempt(s) ended with an unexpected conclusion", tally.anomalies)
        return summary
