"""
Transaction store for the church ledger.

Provides the create/update/delete operations on a church's transactions.
Each mutation is one unit of work: the transaction row and the tithe
sub-ledger writes it implies are committed together or not at all. After a
commit the store publishes a fresh snapshot to the live feed.
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional
from dateutil.relativedelta import relativedelta
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from churchledger.core.exceptions import (
    ConflictError, InvalidState, NotFound, PersistenceError,
)
from churchledger.core.tenancy import TenantSession, require_session
from churchledger.models.base import generate_id
from churchledger.models.transaction import Transaction, TransactionKind
from churchledger.schemas.transaction import (
    EntryCreate, EntryUpdate, EntryRecord,
    ExpenseCreate, ExpenseUpdate, ExpenseRecord,
    TransactionRecord,
)
from churchledger.services.decoding import as_utc, decode_transaction
from churchledger.services.feed import SnapshotCallback, Subscription, TransactionFeed, transaction_feed
from churchledger.services.members import get_member_by_id
from churchledger.services.normalization import normalize, normalize_optional
from churchledger.services.tithe_sync import EntryState, TitheSynchronizer

logger = logging.getLogger(__name__)

# Patch fields that may be cleared with an explicit null
CLEARABLE_ENTRY_FIELDS = {"description", "member_id", "member_name"}
CLEARABLE_EXPENSE_FIELDS = {"description", "main_category", "sub_category"}

_KIND_LABELS = {
    TransactionKind.ENTRY: "entry",
    TransactionKind.EXPENSE: "expense",
}


def month_bounds(year: int, month: int) -> tuple[datetime, datetime]:
    """Return the [start, end) UTC bounds of a calendar month."""
    start = datetime(year, month, 1, tzinfo=timezone.utc)
    return start, start + relativedelta(months=1)


class TransactionStore:
    """
    CRUD for one church's transactions.

    ``session`` is the authenticated principal; without one every mutating
    call raises Unauthenticated. Reads only need ``church_id``.
    """

    def __init__(
        self,
        db: AsyncSession,
        church_id: str,
        session: Optional[TenantSession] = None,
        feed: Optional[TransactionFeed] = None,
    ):
        self.db = db
        self.church_id = church_id
        self.session = session
        self.feed = feed if feed is not None else transaction_feed
        self.tithes = TitheSynchronizer(db, church_id)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def _load(self, transaction_id: str) -> Transaction:
        result = await self.db.execute(
            select(Transaction).where(
                Transaction.id == transaction_id,
                Transaction.church_id == self.church_id
            )
        )
        row = result.scalar_one_or_none()
        if row is None:
            raise NotFound(f"Transaction {transaction_id} not found")
        return row

    async def get(self, transaction_id: str) -> TransactionRecord:
        return decode_transaction(await self._load(transaction_id))

    async def list_by_period(self, year: int, month: int) -> list[TransactionRecord]:
        """Transactions that occurred in the given calendar month, newest first."""
        start, end = month_bounds(year, month)
        result = await self.db.execute(
            select(Transaction).where(
                Transaction.church_id == self.church_id,
                Transaction.occurred_at >= start,
                Transaction.occurred_at < end
            ).order_by(Transaction.occurred_at.desc(), Transaction.created.desc())
        )
        return [decode_transaction(row) for row in result.scalars().all()]

    async def list_all(self) -> list[TransactionRecord]:
        """The church's whole history, newest first."""
        result = await self.db.execute(
            select(Transaction).where(
                Transaction.church_id == self.church_id
            ).order_by(Transaction.occurred_at.desc(), Transaction.created.desc())
        )
        return [decode_transaction(row) for row in result.scalars().all()]

    async def subscribe(self, on_change: SnapshotCallback) -> Subscription:
        """
        Follow the church's transactions.

        ``on_change`` gets the current snapshot right away and a new one after
        every committed mutation, until ``unsubscribe()`` is called.
        """
        subscription = self.feed.subscribe(self.church_id, on_change)
        await self.feed.deliver(subscription, await self.list_all())
        return subscription

    # ------------------------------------------------------------------
    # Unit of work
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _unit_of_work(self, operation: str):
        try:
            yield
            await self.db.commit()
        except StaleDataError as exc:
            await self.db.rollback()
            raise ConflictError(f"{operation}: transaction was modified concurrently") from exc
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.error(f"{operation} failed for church {self.church_id}: {exc}")
            raise PersistenceError(f"{operation} failed: {exc.__class__.__name__}") from exc
        await self._publish()

    async def _publish(self) -> None:
        if not self.feed.subscriber_count(self.church_id):
            return
        try:
            snapshot = await self.list_all()
        except SQLAlchemyError as e:
            # The write is already committed; subscribers catch up on the next change
            logger.error(f"Could not read snapshot for church {self.church_id}: {e}")
            return
        await self.feed.publish(self.church_id, snapshot)

    def _expect(self, row: Transaction, kind: TransactionKind) -> None:
        if row.tipo != kind:
            raise InvalidState(
                f"Transaction {row.id} is an {_KIND_LABELS[row.tipo]}, not an {_KIND_LABELS[kind]}"
            )

    def _check_version(self, row: Transaction, version: Optional[int]) -> None:
        if version is not None and version != row.version:
            raise ConflictError(
                f"Transaction {row.id} is at version {row.version}, request was based on {version}",
                current_version=row.version,
            )

    async def _find_by_idempotency_key(self, key: Optional[str]) -> Optional[Transaction]:
        if not key:
            return None
        result = await self.db.execute(
            select(Transaction).where(
                Transaction.church_id == self.church_id,
                Transaction.idempotency_key == key
            )
        )
        return result.scalar_one_or_none()

    async def _resolve_member_name(self, member_id: Optional[str]) -> Optional[str]:
        if not member_id:
            return None
        member = await get_member_by_id(self.db, self.church_id, member_id)
        if member is None:
            logger.warning(f"Member {member_id} not found in church {self.church_id}; keeping reference")
            return None
        return member.name

    async def _insert(self, row: Transaction, operation: str) -> str:
        """Persist a new row (plus its tithe record) honoring its idempotency key."""
        existing = await self._find_by_idempotency_key(row.idempotency_key)
        if existing is not None:
            logger.info(f"{operation}: idempotency key {row.idempotency_key!r} already used by {existing.id}")
            return existing.id

        try:
            async with self._unit_of_work(operation):
                self.db.add(row)
                if row.tipo == TransactionKind.ENTRY:
                    await self.tithes.on_create(row)
        except PersistenceError as exc:
            # Lost a race with a concurrent create using the same key
            if row.idempotency_key and isinstance(exc.__cause__, IntegrityError):
                existing = await self._find_by_idempotency_key(row.idempotency_key)
                if existing is not None:
                    return existing.id
            raise

        logger.info(f"{operation}: created {row.id} ({row.category}, {row.amount}) in church {self.church_id}")
        return row.id

    # ------------------------------------------------------------------
    # Entries
    # ------------------------------------------------------------------

    async def add_entry(self, draft: EntryCreate) -> str:
        """Record an entry; tithes with a member also get a sub-ledger record."""
        session = require_session(self.session)

        member_name = draft.member_name
        if draft.member_id and not member_name:
            member_name = await self._resolve_member_name(draft.member_id)

        row = Transaction(
            id=generate_id(),
            church_id=self.church_id,
            tipo=TransactionKind.ENTRY,
            amount=draft.amount,
            occurred_at=as_utc(draft.occurred_at),
            description=draft.description,
            settled=True,
            category=normalize(draft.category),
            member_id=draft.member_id or None,
            member_name=member_name,
            payment_method=normalize(draft.payment_method),
            idempotency_key=draft.idempotency_key,
            created_by_id=session.user_id,
        )
        return await self._insert(row, "add_entry")

    async def update_entry(self, transaction_id: str, patch: EntryUpdate) -> EntryRecord:
        require_session(self.session)
        row = await self._load(transaction_id)
        self._expect(row, TransactionKind.ENTRY)
        self._check_version(row, patch.version)

        before = EntryState.from_row(row)
        changes = patch.model_dump(exclude_unset=True, exclude={"version"})

        # Once the row is dirty any query autoflushes it, so every read below
        # happens inside the unit of work.
        async with self._unit_of_work("update_entry"):
            for field, value in changes.items():
                if value is None and field not in CLEARABLE_ENTRY_FIELDS:
                    continue
                if field == "category":
                    value = normalize(value)
                elif field == "payment_method":
                    value = normalize(value)
                elif field == "occurred_at":
                    value = as_utc(value)
                elif field == "member_id":
                    value = value or None
                setattr(row, field, value)

            if row.member_id != before.member_id and "member_name" not in changes:
                row.member_name = await self._resolve_member_name(row.member_id)

            action = await self.tithes.on_update(before, row)

        logger.info(f"update_entry: {row.id} now version {row.version} (sub-ledger: {action.value})")
        return decode_transaction(row)

    async def delete_entry(self, transaction_id: str, version: Optional[int] = None) -> None:
        require_session(self.session)
        row = await self._load(transaction_id)
        self._expect(row, TransactionKind.ENTRY)
        self._check_version(row, version)

        async with self._unit_of_work("delete_entry"):
            action = await self.tithes.on_delete(row)
            await self.db.delete(row)

        logger.info(f"delete_entry: removed {transaction_id} (sub-ledger: {action.value})")

    # ------------------------------------------------------------------
    # Expenses
    # ------------------------------------------------------------------

    async def add_expense(self, draft: ExpenseCreate) -> str:
        session = require_session(self.session)

        row = Transaction(
            id=generate_id(),
            church_id=self.church_id,
            tipo=TransactionKind.EXPENSE,
            amount=draft.amount,
            occurred_at=as_utc(draft.occurred_at),
            description=draft.description,
            settled=True,
            category=normalize(draft.category),
            main_category=normalize_optional(draft.main_category),
            sub_category=normalize_optional(draft.sub_category),
            idempotency_key=draft.idempotency_key,
            created_by_id=session.user_id,
        )
        return await self._insert(row, "add_expense")

    async def update_expense(self, transaction_id: str, patch: ExpenseUpdate) -> ExpenseRecord:
        require_session(self.session)
        row = await self._load(transaction_id)
        self._expect(row, TransactionKind.EXPENSE)
        self._check_version(row, patch.version)

        changes = patch.model_dump(exclude_unset=True, exclude={"version"})
        async with self._unit_of_work("update_expense"):
            for field, value in changes.items():
                if value is None and field not in CLEARABLE_EXPENSE_FIELDS:
                    continue
                if field == "category":
                    value = normalize(value)
                elif field in ("main_category", "sub_category"):
                    value = normalize_optional(value)
                elif field == "occurred_at":
                    value = as_utc(value)
                setattr(row, field, value)
            await self.db.flush()

        logger.info(f"update_expense: {row.id} now version {row.version}")
        return decode_transaction(row)

    async def delete_expense(self, transaction_id: str, version: Optional[int] = None) -> None:
        require_session(self.session)
        row = await self._load(transaction_id)
        self._expect(row, TransactionKind.EXPENSE)
        self._check_version(row, version)

        async with self._unit_of_work("delete_expense"):
            await self.db.delete(row)

        logger.info(f"delete_expense: removed {transaction_id}")
