"""
Rerun Settings Model
====================
The five values the configuration resolver produces.

Fields:
    run_id              — run to re-execute
    poll_frequency_ms   — delay between status checks of a running attempt
    number_of_attempts  — how many reruns to trigger (0 is allowed)
    repo_owner          — repository owner (user or organisation)
    repo_name           — repository name
"""
from pydantic import BaseModel, Field


class RerunSettings(BaseModel):
    run_id: int
    poll_frequency_ms: int = Field(ge=0)
    number_of_attempts: int = Field(ge=0)
    repo_owner: str = Field(min_length=1)
    repo_name: str = Field(min_length=1)

    @property
    def poll_frequency_seconds(self) -> float:
        return self.poll_frequency_ms / 1000
