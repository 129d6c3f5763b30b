"""Services package."""

from profile_accounts.services.events import EventBusInterface, InMemoryEventBus
from profile_accounts.services.jobs import (
    InMemoryJobQueue,
    JobSchedulerInterface,
    QueuedJob,
)
from profile_accounts.services.storage import (
    AccountStorageInterface,
    ConnectionError,
    DuplicateError,
    IndexRow,
    InMemoryAccountStorage,
    NotFoundError,
    SqlAccountStorage,
    StorageError,
)

__all__ = [
    # Event bus
    "EventBusInterface",
    "InMemoryEventBus",
    # Job scheduling
    "InMemoryJobQueue",
    "JobSchedulerInterface",
    "QueuedJob",
    # Storage services
    "AccountStorageInterface",
    "ConnectionError",
    "DuplicateError",
    "IndexRow",
    "InMemoryAccountStorage",
    "NotFoundError",
    "SqlAccountStorage",
    "StorageError",
]
