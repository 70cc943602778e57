"""
Attempt Controller
==================
Drives a single rerun of the workflow run through

    TRIGGERING → AWAITING_CREATION → POLLING → COMPLETED

TRIGGERING          request the rerun, then wait a fixed grace period
AWAITING_CREATION   fetch attempt (initial_attempt_count + iteration);
                    if GitHub does not know it yet the process stops
POLLING             re-fetch every poll interval until status == completed;
                    there is no timeout
COMPLETED           classify the conclusion as success / failure / other
"""
import asyncio
import logging
from enum import Enum
from typing import Optional, Tuple

import httpx

from flake_rerunner.core import config
from flake_rerunner.core.constants import CONCLUSION_FAILURE, CONCLUSION_SUCCESS
from flake_rerunner.core.errors import AttemptNotCreatedError
from flake_rerunner.models.iteration_result import Outcome
from flake_rerunner.models.settings import RerunSettings
from flake_rerunner.models.workflow_run import RunAttempt
from flake_rerunner.services.actions_client import ActionsClient

logger = logging.getLogger(__name__)


class AttemptState(str, Enum):
    IDLE = "idle"
    TRIGGERING = "triggering"
    AWAITING_CREATION = "awaiting_creation"
    POLLING = "polling"
    COMPLETED = "completed"


def expected_attempt_number(initial_attempt_count: int, iteration: int) -> int:
    return initial_attempt_count + iteration


def classify_conclusion(conclusion: Optional[str]) -> Outcome:
    if conclusion == CONCLUSION_SUCCESS:
        return Outcome.SUCCESS
    if conclusion == CONCLUSION_FAILURE:
        return Outcome.FAILURE
    return Outcome.OTHER


class AttemptController:
    """
    Runs one iteration of the rerun loop. Holds no counters; the caller
    decides what to do with the returned outcome.
    """

    def __init__(
        self,
        client: ActionsClient,
        settings: RerunSettings,
        grace_period_seconds: float = config.RERUN_GRACE_PERIOD_SECONDS,
    ) -> None:
        self.client = client
        self.settings = settings
        self.grace_period_seconds = grace_period_seconds
        self.state = AttemptState.IDLE
        self.poll_count = 0

    async def _fetch(self, attempt_number: int) -> RunAttempt:
        s = self.settings
        return await self.client.get_attempt(s.repo_owner, s.repo_name, s.run_id, attempt_number)

    async def trigger(self) -> None:
        self.state = AttemptState.TRIGGERING
        s = self.settings
        await self.client.rerun(s.repo_owner, s.repo_name, s.run_id)
        await asyncio.sleep(self.grace_period_seconds)

    async def await_creation(self, attempt_number: int) -> RunAttempt:
        self.state = AttemptState.AWAITING_CREATION
        try:
            attempt = await self._fetch(attempt_number)
        except httpx.HTTPError as e:
            logger.error("Attempt %d not available: %s", attempt_number, e)
            raise AttemptNotCreatedError(attempt_number) from e
        logger.info("Successfully created attempt %d: %s", attempt_number, attempt.id)
        return attempt

    async def poll_until_completed(self, attempt_number: int, attempt: RunAttempt) -> RunAttempt:
        self.state = AttemptState.POLLING
        self.poll_count = 0
        while not attempt.is_completed:
            logger.debug("Attempt %d is %s", attempt_number, attempt.status)
            await asyncio.sleep(self.settings.poll_frequency_seconds)
            attempt = await self._fetch(attempt_number)
            self.poll_count += 1
        self.state = AttemptState.COMPLETED
        return attempt

    async def run(self, attempt_number: int) -> Tuple[RunAttempt, Outcome]:
        """Rerun the workflow and follow ``attempt_number`` until it concludes."""
        await self.trigger()
        attempt = await self.await_creation(attempt_number)
        finished = await self.poll_until_completed(attempt_number, attempt)

        logger.info("Attempt %d finished with conclusion %s", attempt_number, finished.conclusion)
        outcome = classify_conclusion(finished.conclusion)
        if outcome is Outcome.OTHER:
            logger.error("Unknown conclusion %s for attempt %d", finished.conclusion, attempt_number)
        return finished, outcome
