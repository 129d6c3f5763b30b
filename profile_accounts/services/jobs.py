"""
Job Scheduler Interface

Re-verification of profile data (e-mail confirmation, lookup server
checks) runs outside this package. The account store only enqueues
requests and never waits for them.
"""

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field


class QueuedJob(BaseModel):
    """A job as recorded by InMemoryJobQueue."""

    job_type: str
    payload: dict[str, Any] = Field(default_factory=dict)


class JobSchedulerInterface(ABC):
    """Anything that accepts background jobs."""

    @abstractmethod
    def enqueue(self, job_type: str, payload: dict[str, Any]) -> None:
        """
        Queue a job for later execution.

        Failures propagate to the caller; there is no local retry.
        """
        pass


class InMemoryJobQueue(JobSchedulerInterface):
    """Records jobs in a list for tests; nothing is executed."""

    def __init__(self):
        self.jobs: list[QueuedJob] = []

    def enqueue(self, job_type: str, payload: dict[str, Any]) -> None:
        self.jobs.append(QueuedJob(job_type=job_type, payload=dict(payload)))

    def jobs_of_type(self, job_type: str) -> list[QueuedJob]:
        return [job for job in self.jobs if job.job_type == job_type]
