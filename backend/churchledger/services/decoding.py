"""
Decoders for rows read from the database.

Every row crosses into the services through one of these functions. They
apply the few deliberate defaults the ledger has (UTC for naive timestamps,
category normalization, "Não informado" for entries stored without a payment
method) and raise SchemaError for anything else that does not fit the
domain types.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from pydantic import TypeAdapter, ValidationError

from churchledger.core.exceptions import SchemaError
from churchledger.models.member import Member
from churchledger.models.tithe_record import TitheRecord
from churchledger.models.transaction import Transaction, TransactionKind
from churchledger.schemas.member import MemberResponse
from churchledger.schemas.transaction import TransactionRecord, TitheRecordResponse
from churchledger.services import categories
from churchledger.services.normalization import normalize, normalize_optional

logger = logging.getLogger(__name__)

_transaction_adapter = TypeAdapter(TransactionRecord)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes (SQLite drops the offset)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _kind_value(tipo) -> Optional[str]:
    if isinstance(tipo, TransactionKind):
        return tipo.value
    return tipo


def decode_transaction(row: Transaction) -> TransactionRecord:
    """Decode a ``transactions`` row into an EntryRecord or ExpenseRecord."""
    data = {
        "id": row.id,
        "church_id": row.church_id,
        "tipo": _kind_value(row.tipo),
        "amount": row.amount,
        "occurred_at": as_utc(row.occurred_at),
        "description": row.description,
        "settled": row.settled,
        "category": normalize(row.category) if row.category else row.category,
        "version": row.version,
        "created_by_id": row.created_by_id,
        "created": as_utc(row.created),
        "updated": as_utc(row.updated),
    }
    if data["tipo"] == TransactionKind.ENTRY.value:
        data["member_id"] = row.member_id
        data["member_name"] = row.member_name
        data["payment_method"] = normalize_optional(row.payment_method) or categories.NOT_INFORMED
    else:
        data["main_category"] = normalize_optional(row.main_category)
        data["sub_category"] = normalize_optional(row.sub_category)

    try:
        return _transaction_adapter.validate_python(data)
    except ValidationError as exc:
        logger.error(f"Transaction {row.id} does not match the ledger schema: {exc}")
        raise SchemaError(f"Transaction {row.id} is malformed: {exc.error_count()} invalid field(s)") from exc


def decode_tithe_record(row: TitheRecord) -> TitheRecordResponse:
    """Decode a ``tithe_records`` row."""
    try:
        return TitheRecordResponse(
            id=row.id,
            church_id=row.church_id,
            member_id=row.member_id,
            transaction_id=row.transaction_id,
            amount=row.amount,
            occurred_at=as_utc(row.occurred_at),
            payment_method=normalize_optional(row.payment_method),
            description=row.description,
            created=as_utc(row.created),
            updated=as_utc(row.updated),
        )
    except ValidationError as exc:
        raise SchemaError(f"Tithe record {row.id} is malformed: {exc.error_count()} invalid field(s)") from exc


def decode_member(row: Member) -> MemberResponse:
    """Decode a ``members`` row."""
    try:
        return MemberResponse.model_validate(row)
    except ValidationError as exc:
        raise SchemaError(f"Member {row.id} is malformed: {exc.error_count()} invalid field(s)") from exc
