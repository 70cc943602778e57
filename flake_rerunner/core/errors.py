"""
Errors
======
Fatal conditions that stop the rerun loop.

Every exception here ends the process with exit code 1 (see main.py).
Only the initial run lookup recovers from transport errors; it returns None
and the orchestrator converts that into RunNotFoundError.
"""


class RerunnerError(Exception):
    """Base class for all fatal rerunner errors."""


class ConfigurationError(RerunnerError):
    """An environment value could not be turned into a setting."""


class MissingTokenError(ConfigurationError):
    """GITHUB_TOKEN is not set. Raised before any network call."""


class RunNotFoundError(RerunnerError):
    def __init__(self, run_id: int) -> None:
        super().__init__(f"Could not find run {run_id}")
        self.run_id = run_id


class AttemptNotCreatedError(RerunnerError):
    def __init__(self, attempt_number: int) -> None:
        super().__init__(f"Attempt {attempt_number} was not created in time")
        self.attempt_number = attempt_number


class MissingDownloadUrlError(RerunnerError):
    def __init__(self, artifact_id: int) -> None:
        super().__init__(f"No download url returned for artifact {artifact_id}")
        self.artifact_id = artifact_id


class ArtifactDownloadError(RerunnerError):
    """The signed artifact URL answered with a non-success status."""
