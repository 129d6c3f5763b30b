"""
Shared fixtures.

Test strategy:
1. Unit tests for models, validators, codec and tracker
2. Flow tests for the AccountManager with in-memory collaborators
3. No real database server (SQL storage runs on in-memory SQLite)
"""

from unittest.mock import MagicMock

import pytest

from profile_accounts.audit import AuditLogger
from profile_accounts.config import AccountSettings
from profile_accounts.manager import AccountManager
from profile_accounts.models import AccountUser
from profile_accounts.services import (
    InMemoryAccountStorage,
    InMemoryEventBus,
    InMemoryJobQueue,
)


@pytest.fixture
def settings():
    return AccountSettings(
        default_phone_region="",
        max_value_length=2048,
        search_chunk_size=500,
        transactional_writes=True,
    )


@pytest.fixture
def storage():
    return InMemoryAccountStorage()


@pytest.fixture
def job_queue():
    return InMemoryJobQueue()


@pytest.fixture
def event_bus():
    return InMemoryEventBus()


@pytest.fixture
def audit_logger():
    return MagicMock(spec=AuditLogger)


@pytest.fixture
def manager(storage, job_queue, event_bus, audit_logger, settings):
    return AccountManager(
        storage=storage,
        job_scheduler=job_queue,
        event_bus=event_bus,
        audit_logger=audit_logger,
        settings=settings,
    )


@pytest.fixture
def user():
    return AccountUser(uid="alice", display_name="Alice Example", email="alice@example.com")
