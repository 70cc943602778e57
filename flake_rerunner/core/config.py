"""
Configuration
=============
Loads environment variables from .env file using python-dotenv.

Environment Variables:
    GITHUB_TOKEN                — Required. Token used for every GitHub API call
    GITHUB_ACTION_RUN_ID        — Run to re-execute (prompted if unset)
    POLL_FREQUENCY_MS           — Delay between attempt status checks (prompted if unset)
    NUMBER_OF_ATTEMPTS          — How many reruns to trigger (prompted if unset)
    GITHUB_REPOSITORY_OWNER     — Repository owner (prompted if unset)
    GITHUB_REPOSITORY_NAME      — Repository name (prompted if unset)
    GITHUB_API_URL              — API root (default: https://api.github.com)
    RERUN_GRACE_PERIOD_SECONDS  — Wait after triggering a rerun (default: 10)
    ARTIFACTS_DIR               — Root of the downloaded artifact tree (default: artifacts)
    HTTP_TIMEOUT_SECONDS        — Per-request timeout (default: 20)
    LOG_DIR                     — Enables the daily log file when set

Grace Period:
    After a rerun is requested GitHub needs a moment to register the new
    attempt. The grace period is a fixed wait and is NOT derived from the poll
    frequency. If the attempt still does not exist afterwards the whole
    process stops.
"""
import os
from dotenv import load_dotenv

from flake_rerunner.core.errors import MissingTokenError

load_dotenv()

GITHUB_API_URL = os.getenv("GITHUB_API_URL", "https://api.github.com").rstrip("/")
GITHUB_API_VERSION = "2022-11-28"
USER_AGENT = "Workflow-Flake-Rerunner"

RERUN_GRACE_PERIOD_SECONDS = float(os.getenv("RERUN_GRACE_PERIOD_SECONDS", 10))
ARTIFACTS_DIR = os.getenv("ARTIFACTS_DIR", "artifacts")
HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", 20))
LOG_DIR = os.getenv("LOG_DIR") or None

# Names of the variables that let a run skip the interactive prompts
ENV_RUN_ID = "GITHUB_ACTION_RUN_ID"
ENV_POLL_FREQUENCY_MS = "POLL_FREQUENCY_MS"
ENV_NUMBER_OF_ATTEMPTS = "NUMBER_OF_ATTEMPTS"
ENV_REPO_OWNER = "GITHUB_REPOSITORY_OWNER"
ENV_REPO_NAME = "GITHUB_REPOSITORY_NAME"

# Fallbacks for an empty prompt answer
DEFAULT_POLL_FREQUENCY_MS = 10_000
DEFAULT_NUMBER_OF_ATTEMPTS = 100


def require_token(env=None) -> str:
    """Return the GitHub token or fail before any work is done."""
    token = (env if env is not None else os.environ).get("GITHUB_TOKEN")
    if not token:
        raise MissingTokenError("GITHUB_TOKEN environment variable is not set")
    return token
