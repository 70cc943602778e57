"""
Settings Resolver
=================
Collects the rerun settings from the environment, falling back to
interactive prompts for anything that is not set.

Rules:
    - An environment value always wins and is never prompted for.
    - Run id, repository owner and repository name are asked for again
      until the answer is non-empty.
    - Poll frequency and attempt count fall back to their defaults on an
      empty answer. Poll frequency is asked for in seconds but stored in ms.
    - A non-integer answer is re-prompted; a non-integer env value is fatal.
"""
import logging
import os
from typing import Callable, Mapping, Optional

from flake_rerunner.core import config
from flake_rerunner.core.errors import ConfigurationError
from flake_rerunner.models.settings import RerunSettings

logger = logging.getLogger(__name__)

Ask = Callable[[str], str]

RUN_ID_PROMPT = "Enter run id: "
POLL_FREQUENCY_PROMPT = (
    "Consider how long the workflow typically takes to run. "
    "How often should we poll to check if it's done? "
    f"Enter time in seconds (default is {config.DEFAULT_POLL_FREQUENCY_MS // 1000}): "
)
ATTEMPTS_PROMPT = (
    "Enter the number of times you would like the action attempted "
    f"(default is {config.DEFAULT_NUMBER_OF_ATTEMPTS}): "
)
REPO_NAME_PROMPT = "Enter repository name: "
REPO_OWNER_PROMPT = "Enter repository's owner: "


def _env_int(env: Mapping[str, str], name: str) -> Optional[int]:
    raw = env.get(name)
    if not raw:
        return None
    try:
        return int(raw.strip())
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


def _ask_required(ask: Ask, prompt: str) -> str:
    while True:
        answer = ask(prompt).strip()
        if answer:
            return answer


def _ask_int(ask: Ask, prompt: str, required: bool = True) -> Optional[int]:
    """Ask until an integer is given. An empty optional answer returns None."""
    while True:
        answer = ask(prompt).strip()
        if not answer:
            if not required:
                return None
            continue
        try:
            return int(answer)
        except ValueError:
            logger.warning("%r is not a whole number, try again", answer)


def resolve_run_id(env: Mapping[str, str], ask: Ask) -> int:
    from_env = _env_int(env, config.ENV_RUN_ID)
    if from_env is not None:
        return from_env
    return _ask_int(ask, RUN_ID_PROMPT)


def resolve_poll_frequency_ms(env: Mapping[str, str], ask: Ask) -> int:
    from_env = _env_int(env, config.ENV_POLL_FREQUENCY_MS)
    if from_env is not None:
        return from_env
    seconds = _ask_int(ask, POLL_FREQUENCY_PROMPT, required=False)
    if seconds is None:
        return config.DEFAULT_POLL_FREQUENCY_MS
    return seconds * 1000


def resolve_number_of_attempts(env: Mapping[str, str], ask: Ask) -> int:
    from_env = _env_int(env, config.ENV_NUMBER_OF_ATTEMPTS)
    if from_env is not None:
        return from_env
    attempts = _ask_int(ask, ATTEMPTS_PROMPT, required=False)
    return config.DEFAULT_NUMBER_OF_ATTEMPTS if attempts is None else attempts


def resolve_repo_name(env: Mapping[str, str], ask: Ask) -> str:
    return env.get(config.ENV_REPO_NAME) or _ask_required(ask, REPO_NAME_PROMPT)


def resolve_repo_owner(env: Mapping[str, str], ask: Ask) -> str:
    return env.get(config.ENV_REPO_OWNER) or _ask_required(ask, REPO_OWNER_PROMPT)


def resolve_settings(env: Optional[Mapping[str, str]] = None, ask: Ask = input) -> RerunSettings:
    """
    Resolve all five settings in the fixed prompt order:
    run id, poll frequency, attempt count, repository name, repository owner.
    """
    env = os.environ if env is None else env

    run_id = resolve_run_id(env, ask)
    poll_frequency_ms = resolve_poll_frequency_ms(env, ask)
    number_of_attempts = resolve_number_of_attempts(env, ask)
    repo_name = resolve_repo_name(env, ask)
    repo_owner = resolve_repo_owner(env, ask)

    if poll_frequency_ms < 0 or number_of_attempts < 0:
        raise ConfigurationError("Poll frequency and number of attempts must not be negative")

    settings = RerunSettings(
        run_id=run_id,
        poll_frequency_ms=poll_frequency_ms,
        number_of_attempts=number_of_attempts,
        repo_owner=repo_owner,
        repo_name=repo_name,
    )
    logger.info(
        "Rerunning %s/%s run %s %d time(s), polling every %dms",
        settings.repo_owner, settings.repo_name, settings.run_id,
        settings.number_of_attempts, settings.poll_frequency_ms,
    )
    return settings
