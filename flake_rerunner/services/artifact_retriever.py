"""
Artifact Retriever
==================
Downloads every artifact of a failed attempt to

    <artifacts_dir>/runs/<run_id>/attempts/<attempt_number>/<artifact_name>.zip

Behaviour:
    - No artifacts → nothing is created, nothing is raised.
    - The directory is created on the first artifact (parents included).
    - Existing archives with the same name are overwritten.
    - A missing download URL stops the whole process.
"""
import logging
import os
from pathlib import Path
from typing import List, Union

from flake_rerunner.core import config
from flake_rerunner.core.constants import ARCHIVE_FORMAT, ARTIFACT_PATH_TEMPLATE
from flake_rerunner.core.errors import MissingDownloadUrlError
from flake_rerunner.services.actions_client import ActionsClient

logger = logging.getLogger(__name__)


def attempt_artifact_dir(artifacts_dir: Union[str, Path], run_id: int, attempt_number: int) -> Path:
    """Directory holding the archives of one attempt."""
    return Path(artifacts_dir) / ARTIFACT_PATH_TEMPLATE.format(
        run_id=run_id, attempt_number=attempt_number
    )


class ArtifactRetriever:

    def __init__(self, client: ActionsClient, artifacts_dir: Union[str, Path] = config.ARTIFACTS_DIR) -> None:
        self.client = client
        self.artifacts_dir = Path(artifacts_dir)

    async def download_for_attempt(
        self, owner: str, repo: str, run_id: int, attempt_number: int
    ) -> List[Path]:
        """Download all artifacts of one attempt and return the written paths."""
        logger.info("Downloading artifacts for failed attempt #%d", attempt_number)

        attempt = await self.client.get_attempt(owner, repo, run_id, attempt_number)
        artifacts = await self.client.list_artifacts(owner, repo, attempt.id)
        if not artifacts:
            logger.info("Attempt #%d produced no artifacts", attempt_number)
            return []

        dest_dir = attempt_artifact_dir(self.artifacts_dir, run_id, attempt_number)
        written: List[Path] = []
        for artifact in artifacts:
            url = await self.client.get_artifact_download_url(owner, repo, artifact.id)
            if not url:
                raise MissingDownloadUrlError(artifact.id)

            os.makedirs(dest_dir, exist_ok=True)
            dest = dest_dir / f"{artifact.name}.{ARCHIVE_FORMAT}"
            await self.client.download_file(url, dest)
            logger.info("Saved artifact %s to %s", artifact.name, dest)
            written.append(dest)

        return written
