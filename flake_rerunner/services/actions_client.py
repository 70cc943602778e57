"""
Actions Client
==============
Thin async wrapper over the GitHub Actions REST endpoints the rerun loop
needs: fetch a run, fetch one attempt of a run, request a rerun, list a
run's artifacts and resolve an artifact's short-lived zip URL.

Error policy:
    - get_run() logs transport/API errors and malformed payloads and returns None.
    - Every other call raises httpx errors to the caller.
"""
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx

from flake_rerunner.core import config
from flake_rerunner.core.constants import ARCHIVE_FORMAT, DOWNLOAD_CHUNK_SIZE
from flake_rerunner.core.errors import ArtifactDownloadError
from flake_rerunner.models.artifact import Artifact
from flake_rerunner.models.workflow_run import RunAttempt, WorkflowRun

logger = logging.getLogger(__name__)

_ARTIFACTS_PER_PAGE = 100


class ActionsClient:
    """
    GitHub Actions API client bound to one token.

    Use as an async context manager so the underlying connection pools are
    closed::

        async with ActionsClient(token) as client:
            run = await client.get_run("octo", "repo", 42)
    """

    def __init__(
        self,
        token: str,
        base_url: str = config.GITHUB_API_URL,
        timeout: float = config.HTTP_TIMEOUT_SECONDS,
        client: Optional[httpx.AsyncClient] = None,
        download_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": config.GITHUB_API_VERSION,
            "User-Agent": config.USER_AGENT,
        }
        self._client = client or httpx.AsyncClient(
            base_url=base_url, headers=self.headers, timeout=timeout
        )
        # Signed artifact URLs live on another host and must not receive the token
        self._download_client = download_client or httpx.AsyncClient(
            headers={"User-Agent": config.USER_AGENT},
            timeout=timeout,
            follow_redirects=True,
        )

    async def __aenter__(self) -> "ActionsClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()
        await self._download_client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        logger.debug("%s %s", method, path)
        response = await self._client.request(method, path, **kwargs)
        response.raise_for_status()
        return response

    @staticmethod
    def _run_path(owner: str, repo: str, run_id: int) -> str:
        return f"/repos/{owner}/{repo}/actions/runs/{run_id}"

    async def get_run(self, owner: str, repo: str, run_id: int) -> Optional[WorkflowRun]:
        try:
            response = await self._request("GET", self._run_path(owner, repo, run_id))
            return WorkflowRun.model_validate(response.json())
        except (httpx.HTTPError, ValueError) as e:
            # ValueError covers non-JSON bodies and pydantic ValidationError
            logger.error("Error getting run %s: %s", run_id, e)
            return None

    async def get_attempt(self, owner: str, repo: str, run_id: int, attempt_number: int) -> RunAttempt:
        path = f"{self._run_path(owner, repo, run_id)}/attempts/{attempt_number}"
        response = await self._request("GET", path)
        return RunAttempt.model_validate(response.json())

    async def rerun(self, owner: str, repo: str, run_id: int) -> None:
        await self._request("POST", f"{self._run_path(owner, repo, run_id)}/rerun")

    async def list_artifacts(self, owner: str, repo: str, run_id: int) -> List[Artifact]:
        path = f"{self._run_path(owner, repo, run_id)}/artifacts"
        artifacts: List[Artifact] = []
        page = 1
        while True:
            response = await self._request(
                "GET", path, params={"per_page": _ARTIFACTS_PER_PAGE, "page": page}
            )
            data: Dict[str, Any] = response.json() or {}
            batch = data.get("artifacts") or []
            artifacts.extend(Artifact.model_validate(a) for a in batch)
            total = int(data.get("total_count") or 0)
            if not batch or len(artifacts) >= total:
                return artifacts
            page += 1

    async def get_artifact_download_url(self, owner: str, repo: str, artifact_id: int) -> Optional[str]:
        """
        Resolve the short-lived archive URL. GitHub answers with a 302 whose
        Location header is the signed URL; the redirect is not followed.
        """
        path = f"/repos/{owner}/{repo}/actions/artifacts/{artifact_id}/{ARCHIVE_FORMAT}"
        logger.debug("GET %s", path)
        response = await self._client.get(path, follow_redirects=False)
        if response.has_redirect_location:
            return response.headers["Location"]
        response.raise_for_status()
        return None

    async def download_file(self, url: str, dest: Path) -> Path:
        """
        Stream ``url`` into ``dest``. The body lands in ``<dest>.part`` first and
        only replaces an existing archive once it is complete.
        """
        async with self._download_client.stream("GET", url) as response:
            if not response.is_success:
                raise ArtifactDownloadError(
                    f"Unexpected response while downloading file: "
                    f"{response.status_code} {response.reason_phrase}"
                )
            partial = dest.with_name(dest.name + ".part")
            try:
                with open(partial, "wb") as f:
                    async for chunk in response.aiter_bytes(DOWNLOAD_CHUNK_SIZE):
                        f.write(chunk)
            except Exception:
                partial.unlink(missing_ok=True)
                raise
        os.replace(partial, dest)
        return dest
