"""
Workflow Run Models
===================
Pydantic views over the GitHub Actions run payloads.

The attempt endpoint returns a full run object; its ``id`` is the run's
canonical id and ``run_attempt`` is the attempt number it describes.
Unknown payload keys are ignored.
"""
from typing import Optional
from pydantic import BaseModel

from flake_rerunner.core.constants import STATUS_COMPLETED


class WorkflowRun(BaseModel):
    id: int
    run_attempt: Optional[int] = None
    name: Optional[str] = None
    status: Optional[str] = None
    conclusion: Optional[str] = None
    html_url: str = ""


class RunAttempt(BaseModel):
    id: int
    run_attempt: int
    status: Optional[str] = None       # queued / in_progress / waiting / completed
    conclusion: Optional[str] = None   # set once status == completed
    html_url: str = ""

    @property
    def is_completed(self) -> bool:
        return self.status == STATUS_COMPLETED
