"""
Artifact Model
Named zip bundle produced by a workflow attempt.
"""
from typing import Optional
from pydantic import BaseModel


class Artifact(BaseModel):
    id: int
    name: str
    size_in_bytes: int = 0
    expired: bool = False
    archive_download_url: Optional[str] = None
