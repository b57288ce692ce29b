"""
Tithe sub-ledger synchronization.

Keeps ``tithe_records`` in step with tithe entries: every entry whose
category is Dízimo and that names a member has exactly one record under that
member, referencing it by ``transaction_id``, and no other record exists.

The synchronizer only stages changes on the session. The transaction store
owns the unit of work and commits the entry and its sub-ledger writes
together.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from churchledger.models.base import generate_id
from churchledger.models.tithe_record import TitheRecord
from churchledger.models.transaction import Transaction, TransactionKind
from churchledger.services.normalization import is_tithe

logger = logging.getLogger(__name__)


class SyncAction(str, Enum):
    """Sub-ledger write chosen for an entry transition."""
    NONE = "none"
    CREATE = "create"
    UPDATE = "update"
    MOVE = "move"
    DELETE = "delete"


@dataclass(frozen=True)
class EntryState:
    """The fields of an entry the sub-ledger depends on."""
    transaction_id: str
    category: str
    member_id: Optional[str]
    amount: Decimal
    occurred_at: datetime
    payment_method: Optional[str]
    description: Optional[str]

    @property
    def tithe_with_member(self) -> bool:
        return is_tithe(self.category) and bool(self.member_id)

    @classmethod
    def from_row(cls, row: Transaction) -> "EntryState":
        return cls(
            transaction_id=row.id,
            category=row.category,
            member_id=row.member_id,
            amount=row.amount,
            occurred_at=row.occurred_at,
            payment_method=row.payment_method,
            description=row.description,
        )


def plan(before: Optional[EntryState], after: Optional[EntryState]) -> SyncAction:
    """
    Choose the sub-ledger write for an entry going from ``before`` to ``after``.

    ``before`` is None for a create and ``after`` is None for a delete.
    """
    was_tithe = before is not None and before.tithe_with_member
    now_tithe = after is not None and after.tithe_with_member

    if not was_tithe and not now_tithe:
        return SyncAction.NONE
    if not was_tithe:
        return SyncAction.CREATE
    if not now_tithe:
        return SyncAction.DELETE
    if before.member_id != after.member_id:
        return SyncAction.MOVE
    return SyncAction.UPDATE


class TitheSynchronizer:
    """Stages tithe record writes for one church on a session."""

    def __init__(self, db: AsyncSession, church_id: str):
        self.db = db
        self.church_id = church_id

    async def _find(self, member_id: str, transaction_id: str) -> Optional[TitheRecord]:
        result = await self.db.execute(
            select(TitheRecord).where(
                TitheRecord.church_id == self.church_id,
                TitheRecord.member_id == member_id,
                TitheRecord.transaction_id == transaction_id
            )
        )
        return result.scalars().first()

    def _create(self, state: EntryState) -> TitheRecord:
        record = TitheRecord(
            id=generate_id(),
            church_id=self.church_id,
            member_id=state.member_id,
            transaction_id=state.transaction_id,
            amount=state.amount,
            occurred_at=state.occurred_at,
            payment_method=state.payment_method,
            description=state.description,
        )
        self.db.add(record)
        return record

    async def _delete(self, state: EntryState) -> None:
        record = await self._find(state.member_id, state.transaction_id)
        if record is None:
            logger.warning(
                f"No tithe record for transaction {state.transaction_id} "
                f"under member {state.member_id}; leaving sub-ledger as is"
            )
            return
        await self.db.delete(record)

    async def apply(self, before: Optional[EntryState], after: Optional[EntryState]) -> SyncAction:
        """Stage the writes ``plan`` selects for this transition."""
        action = plan(before, after)

        if action == SyncAction.CREATE:
            self._create(after)

        elif action == SyncAction.DELETE:
            await self._delete(before)

        elif action == SyncAction.MOVE:
            await self._delete(before)
            self._create(after)

        elif action == SyncAction.UPDATE:
            record = await self._find(before.member_id, before.transaction_id)
            if record is None:
                logger.warning(
                    f"No tithe record for transaction {before.transaction_id} "
                    f"under member {before.member_id}; update not mirrored"
                )
            else:
                record.amount = after.amount
                record.occurred_at = after.occurred_at
                record.payment_method = after.payment_method
                record.description = after.description

        if action != SyncAction.NONE:
            logger.debug(f"Tithe sub-ledger {action.value} for transaction {(after or before).transaction_id}")
        return action

    async def on_create(self, row: Transaction) -> SyncAction:
        return await self.apply(None, EntryState.from_row(row))

    async def on_update(self, before: EntryState, row: Transaction) -> SyncAction:
        return await self.apply(before, EntryState.from_row(row))

    async def on_delete(self, row: Transaction) -> SyncAction:
        if row.tipo != TransactionKind.ENTRY:
            return SyncAction.NONE
        return await self.apply(EntryState.from_row(row), None)
