"""
Constants
Centralised storage for GitHub Actions status values and artifact layout.
"""
STATUS_COMPLETED = "completed"

CONCLUSION_SUCCESS = "success"
CONCLUSION_FAILURE = "failure"

ARCHIVE_FORMAT = "zip"
ARTIFACT_PATH_TEMPLATE = "runs/{run_id}/attempts/{attempt_number}"
DOWNLOAD_CHUNK_SIZE = 64 * 1024
