"""
Workflow Flake Rerunner
=======================
Reruns one GitHub Actions workflow run N times, counts successes and
failures and downloads the artifacts of every failed attempt.

Usage:
  export GITHUB_TOKEN=<your_token>
  python main.py                      # prompts for anything not in the environment
  GITHUB_ACTION_RUN_ID=123 NUMBER_OF_ATTEMPTS=20 python main.py --log-level DEBUG

Exit codes: 0 when every iteration ran, 1 on a fatal error, 130 on Ctrl-C.
"""
import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence

import httpx

from flake_rerunner.agents.orchestrator import RerunOrchestrator
from flake_rerunner.core import config
from flake_rerunner.core.errors import RerunnerError
from flake_rerunner.models.iteration_result import RerunSummary
from flake_rerunner.models.settings import RerunSettings
from flake_rerunner.services.actions_client import ActionsClient
from flake_rerunner.services.settings_resolver import resolve_settings
from flake_rerunner.utils.logging_config import add_file_handler, setup_logging

logger = logging.getLogger("main")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Rerun a GitHub Actions workflow run repeatedly to measure how flaky it is",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
        epilog="Requires GITHUB_TOKEN. Other settings come from the environment or are prompted for.",
    )
    parser.add_argument("-o", "--artifacts-dir", default=config.ARTIFACTS_DIR, metavar="DIR",
                        help="Where artifacts of failed attempts are saved")
    parser.add_argument("-v", "--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Logging level")
    return parser.parse_args(argv)


async def run_reruns(token: str, settings: RerunSettings, artifacts_dir: str) -> RerunSummary:
    async with ActionsClient(token) as client:
        orchestrator = RerunOrchestrator(client, artifacts_dir=artifacts_dir)
        return await orchestrator.run(settings)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(level=getattr(logging, args.log_level))

    try:
        token = config.require_token()
        # Nothing touches the disk until the token is known to be present
        if config.LOG_DIR:
            add_file_handler(config.LOG_DIR)
        settings = resolve_settings()
        asyncio.run(run_reruns(token, settings, args.artifacts_dir))
    except (RerunnerError, httpx.HTTPError) as e:
        logger.error("%s", e, exc_info=args.log_level == "DEBUG")
        return 1
    except EOFError:
        logger.error("Standard input closed before all settings were answered")
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted; aborting.")
        return 130
    except Exception as exc:
        logger.exception("Unhandled error: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
