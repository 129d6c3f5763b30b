"""
Account Manager

This module ties together all the components and defines the
end-to-end flows for one user's profile:
1. Read (blob → decode → defaults if missing or broken)
2. Save (validate → diff against stored snapshot → verify → write → publish)
3. Delete (blob and index rows)

DESIGN DECISION: The whole property set is the unit of persistence.
Every save rewrites the blob and then deletes and reinserts the user's
index rows. Both writes run inside storage.transaction(); on backends
without transactions a concurrent save for the same user can leave the
index out of step with the blob until the next save.
"""

from contextlib import nullcontext
from typing import Iterable, Optional

from profile_accounts.audit import AuditLogger
from profile_accounts.config import AccountSettings, get_settings
from profile_accounts.models.account import Account, AccountUser
from profile_accounts.models.events import AccountEventBuilder
from profile_accounts.models.property import (
    AccountProperty,
    PropertyName,
    Scope,
    VerificationStatus,
    is_collection,
)
from profile_accounts.queries import AccountSearch
from profile_accounts.serialization import decode, encode
from profile_accounts.services.events import EventBusInterface
from profile_accounts.services.jobs import JobSchedulerInterface
from profile_accounts.services.storage import AccountStorageInterface, SqlAccountStorage
from profile_accounts.validation import (
    check_property_scope,
    check_value_lengths,
    validate_properties,
)
from profile_accounts.verification import VerificationTracker


def _snapshot_key(properties: Iterable[AccountProperty]) -> dict[str, list[tuple]]:
    """Comparable form of a property list: group order ignored, element order kept."""
    grouped: dict[str, list[tuple]] = {}
    for prop in properties:
        grouped.setdefault(prop.name, []).append((
            prop.value,
            prop.scope,
            prop.verified.value,
            prop.verification_data,
        ))
    return grouped


class AccountManager:
    """
    Reads, saves and deletes account records.

    Collaborators are injected so storage, job queue and event bus can
    be swapped without touching this class.
    """

    def __init__(
        self,
        storage: AccountStorageInterface,
        job_scheduler: JobSchedulerInterface,
        event_bus: EventBusInterface,
        audit_logger: Optional[AuditLogger] = None,
        search: Optional[AccountSearch] = None,
        settings: Optional[AccountSettings] = None,
    ):
        self._settings = settings or get_settings().accounts
        self._storage = storage
        self._event_bus = event_bus
        self._audit_logger = audit_logger or AuditLogger()
        self._tracker = VerificationTracker(job_scheduler, self._audit_logger)
        self._search = search or AccountSearch(storage, self._settings.search_chunk_size)

    # ==================== READ ====================

    def build_default_record(self, user: AccountUser) -> list[AccountProperty]:
        """Record for a user who has never saved a profile."""
        def prop(name: PropertyName, scope: Scope, value: str = "") -> AccountProperty:
            return AccountProperty(
                name=name.value,
                value=value,
                scope=scope.value,
                verified=VerificationStatus.NOT_VERIFIED,
            )

        return [
            prop(PropertyName.DISPLAYNAME, Scope.FEDERATED, user.display_name),
            prop(PropertyName.ADDRESS, Scope.LOCAL),
            prop(PropertyName.WEBSITE, Scope.LOCAL),
            prop(PropertyName.EMAIL, Scope.FEDERATED, user.email or ""),
            prop(PropertyName.AVATAR, Scope.FEDERATED),
            prop(PropertyName.PHONE, Scope.LOCAL),
            prop(PropertyName.TWITTER, Scope.LOCAL),
        ]

    def get(self, user: AccountUser, create_if_missing: bool = True) -> list[AccountProperty]:
        """
        Stored properties of a user.

        Args:
            user: Owner of the record
            create_if_missing: Persist the default record when the user
                has none yet

        A record that cannot be decoded is replaced by the default record
        in the result (it is not rewritten in storage).
        """
        properties, _ = self._load(user, create_if_missing)
        return properties

    def _load(
        self,
        user: AccountUser,
        create_if_missing: bool,
    ) -> tuple[list[AccountProperty], bool]:
        """Returns (properties, whether a blob row exists)."""
        blob = self._storage.fetch_blob(user.uid)

        if blob is None:
            defaults = self.build_default_record(user)
            if not create_if_missing:
                return defaults, False
            with self._transaction(user.uid):
                self._storage.insert_blob(user.uid, encode(defaults))
                self._write_index(user.uid, defaults)
            self._audit_logger.log_account_created(user.uid, defaults)
            return defaults, True

        properties = decode(blob, user.uid, self._audit_logger)
        if not properties:
            return self.build_default_record(user), True
        return properties, True

    def get_account(self, user: AccountUser) -> Account:
        """
        Stored record as an Account.

        Legacy data is sanitized on the way in: over-long values are
        cleared and scopes are migrated to the current encoding.
        """
        properties = self.get(user)
        check_value_lengths(properties, strict=False, max_length=self._settings.max_value_length)
        for prop in properties:
            check_property_scope(prop, strict=False)

        account = Account(user)
        for prop in properties:
            if is_collection(prop.name):
                account.add_to_collection(prop.name, prop)
            else:
                account.set_property(
                    prop.name,
                    prop.value,
                    prop.scope,
                    prop.verified,
                    prop.verification_data,
                )
        return account

    # ==================== WRITE ====================

    def save(
        self,
        user: AccountUser,
        properties: Iterable[AccountProperty],
        strict: bool = True,
    ) -> list[AccountProperty]:
        """
        Validate and persist the complete property set of a user.

        The given properties are updated in place (normalized values,
        migrated scopes, verification status).

        Raises:
            InvalidValueError: In strict mode, for any invalid property
            StorageError: Storage failures are not handled here
        """
        properties = list(properties)
        validate_properties(
            properties,
            default_region=self._settings.default_phone_region,
            strict=strict,
            max_length=self._settings.max_value_length,
        )

        old_properties, exists = self._load(user, create_if_missing=False)
        self._tracker.apply(user.uid, properties, old_properties)

        if _snapshot_key(properties) == _snapshot_key(old_properties):
            return properties

        with self._transaction(user.uid):
            if exists:
                self._storage.update_blob(user.uid, encode(properties))
            else:
                self._storage.insert_blob(user.uid, encode(properties))
            self._write_index(user.uid, properties)

        event = AccountEventBuilder.account_updated(user.uid, properties)
        self._audit_logger.log(event)
        self._event_bus.publish(event.event_type.value, event.to_payload())
        return properties

    def update_account(self, account: Account) -> list[AccountProperty]:
        """Persist an Account obtained from get_account() (strict)."""
        return self.save(account.user, list(account.get_all_properties()), strict=True)

    def delete(self, user: AccountUser) -> None:
        """Remove the record and index rows of a user; safe to repeat."""
        with self._transaction(user.uid):
            self._storage.delete_blob(user.uid)
            self._storage.delete_index_rows(user.uid)
        self._audit_logger.log_account_deleted(user.uid)

    def delete_user_data(self, user: AccountUser) -> None:
        """Remove only the index rows of a user."""
        self._storage.delete_index_rows(user.uid)

    def _write_index(self, uid: str, properties: list[AccountProperty]) -> None:
        self._storage.delete_index_rows(uid)
        self._storage.insert_index_rows(uid, [
            (prop.name, prop.value)
            for prop in properties
            if prop.name != PropertyName.AVATAR.value
        ])

    def _transaction(self, uid: str):
        if self._settings.transactional_writes:
            return self._storage.transaction(uid)
        return nullcontext()

    # ==================== SEARCH ====================

    def search_users(self, property_name: str, values: Iterable[str]) -> dict[str, str]:
        return self._search.search_users(property_name, values)


def create_account_manager(
    job_scheduler: JobSchedulerInterface,
    event_bus: EventBusInterface,
    storage: Optional[AccountStorageInterface] = None,
    verify_connection: bool = False,
) -> AccountManager:
    """
    Factory function to create an AccountManager.

    Args:
        job_scheduler: Runner for re-verification jobs. Required: a job
                       that is never run leaves the e-mail in progress.
        event_bus: Receiver of account change events.
        storage: Storage backend. Defaults to SQL storage on the
                 configured database, with tables created if needed.
        verify_connection: Probe the database before returning.
    """
    if storage is None:
        sql_storage = SqlAccountStorage()
        if verify_connection:
            sql_storage.check_connection()
        sql_storage.create_tables()
        storage = sql_storage

    return AccountManager(
        storage=storage,
        job_scheduler=job_scheduler,
        event_bus=event_bus,
        audit_logger=AuditLogger(),
    )
