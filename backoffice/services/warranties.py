"""Warranty ticket service.

Flow for a new ticket:
1. Resolve the code (caller-supplied, or generated as WR-YYYYMMDD-NNNN from
   the number of tickets already created today)
2. Check that the referenced customer, product and invoice exist
3. Apply defaults (status PENDING, received now) and insert

Generated codes are allocated under a per-day Redis lock held until the
insert is committed. Without Redis the unique index on warranties.code is the
only guard and a collision surfaces as ConflictFailure. Nothing is retried.

The service commits its own writes; callers pass a session from get_session().
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator, Callable
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from redis.asyncio.lock import Lock
from redis.exceptions import LockError, RedisError
from sqlalchemy import ColumnElement, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from backoffice.models import Customer, Invoice, Product, User, Warranty
from backoffice.schemas import WarrantyCreate, WarrantyFilter, WarrantyUpdate
from backoffice.services.warranty_status import (
    DEFAULT_STATUS,
    WarrantyStatus,
    apply_status_side_effects,
)
from backoffice.settings import get_settings
from backoffice.stores.postgres import is_foreign_key_violation, is_unique_violation
from backoffice.stores.redis import get_lock

logger = logging.getLogger("uvicorn.error")

Clock = Callable[[], datetime]

# Columns that may not be cleared through an update
_NON_NULLABLE_UPDATE_FIELDS = frozenset({"status", "received_date", "charged"})


def local_now() -> datetime:
    """Current time, timezone-aware, in the process's local timezone."""
    return datetime.now().astimezone()


# ============================================================
# Errors
# ============================================================


class WarrantyError(Exception):
    """Base class for failures reported to API callers."""

    status_code = 400
    code = "BAD_REQUEST"

    def __init__(self, message: str, *, detail: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail


class ValidationFailure(WarrantyError):
    """A referenced record does not exist or a filter value is malformed."""

    code = "VALIDATION_FAILED"


class ConflictFailure(WarrantyError):
    """A unique or foreign key constraint rejected the write."""

    code = "CONFLICT"


class NotFoundFailure(WarrantyError):
    status_code = 404
    code = "NOT_FOUND"


# ============================================================
# Code generation
# ============================================================


def format_warranty_code(day: datetime, sequence: int, prefix: str = "WR") -> str:
    """Format a ticket code, e.g. WR-20261019-0006.

    The sequence is zero-padded to at least 4 digits and grows past 9999.
    """
    return f"{prefix}-{day:%Y%m%d}-{sequence:04d}"


def day_bounds(now: datetime) -> tuple[datetime, datetime]:
    """First and last instant of `now`'s calendar day, in `now`'s timezone."""
    start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    end = now.replace(hour=23, minute=59, second=59, microsecond=999999)
    return start, end


async def generate_warranty_code(session: AsyncSession, *, now: datetime, prefix: str = "WR") -> str:
    """Next code for `now`'s day: 1 + tickets created so far that day."""
    start, end = day_bounds(now)
    result = await session.execute(
        select(func.count(Warranty.id)).where(
            Warranty.created_at >= start,
            Warranty.created_at <= end,
        )
    )
    count = result.scalar() or 0
    return format_warranty_code(now, count + 1, prefix)


def code_lock_key(now: datetime) -> str:
    return f"warranty_code:{now:%Y%m%d}"


@asynccontextmanager
async def warranty_code_lock(key: str, *, ttl: int, wait: float) -> AsyncGenerator[bool, None]:
    """Hold the per-day code lock for the duration of the block.

    Yields True if the lock was taken. Creation goes ahead either way; the
    unique index catches whatever the lock could not prevent. Release only
    deletes the key while this worker still owns it.
    """
    lock: Lock | None = None
    acquired = False
    try:
        lock = get_lock(key, ttl=ttl, wait=wait)
        acquired = await lock.acquire()
    except RuntimeError:
        # Redis not initialized (tests / local minimal env).
        logger.debug(f"Redis unavailable, allocating {key} without lock")
    except RedisError as e:
        logger.warning(f"Redis error while locking {key}: {e}")
    else:
        if not acquired:
            logger.warning(f"Timed out after {wait}s waiting for {key}, creating without lock")

    try:
        yield acquired
    finally:
        if acquired and lock is not None:
            try:
                await lock.release()
            except LockError as e:
                # TTL ran out first; the key is gone or belongs to another worker.
                logger.warning(f"Lock {key} expired before release: {e}")
            except RedisError as e:
                # The TTL releases it eventually.
                logger.warning(f"Failed to release {key}: {e}")


# ============================================================
# Reference validation
# ============================================================


async def validate_references(
    session: AsyncSession,
    *,
    customer_id: int | None = None,
    product_id: int | None = None,
    invoice_id: int | None = None,
) -> None:
    """Check that each supplied reference resolves to a record.

    Checked in order customer, product, invoice; stops at the first miss.

    Raises:
        ValidationFailure: Naming the entity type and id that was not found.
    """
    checks: tuple[tuple[type, str, int | None], ...] = (
        (Customer, "Customer", customer_id),
        (Product, "Product", product_id),
        (Invoice, "Invoice", invoice_id),
    )
    for model, label, ref_id in checks:
        if ref_id is None:
            continue
        if await session.get(model, ref_id) is None:
            raise ValidationFailure(
                f"{label} with ID {ref_id} not found",
                detail={"entity": label.lower(), "id": ref_id},
            )


# ============================================================
# List filters
# ============================================================


def build_warranty_filters(filters: WarrantyFilter) -> list[ColumnElement[bool]]:
    """Translate optional list filters into WHERE clauses (combined with AND).

    Empty strings count as absent. code and serial number match as
    case-insensitive substrings; ids match exactly; start/end bound
    received_date inclusively.

    Raises:
        ValidationFailure: If an id is not an integer, a date is not ISO-8601
            or the status is unknown.
    """
    clauses: list[ColumnElement[bool]] = []

    if filters.code:
        clauses.append(Warranty.code.icontains(filters.code, autoescape=True))
    if filters.serial_number:
        clauses.append(Warranty.serial_number.icontains(filters.serial_number, autoescape=True))
    if filters.status:
        clauses.append(Warranty.status == _parse_status(filters.status))

    id_filters = (
        (Warranty.customer_id, "customerId", filters.customer_id),
        (Warranty.product_id, "productId", filters.product_id),
        (Warranty.invoice_id, "invoiceId", filters.invoice_id),
        (Warranty.technician_id, "technicianId", filters.technician_id),
        (Warranty.creator_id, "creatorId", filters.creator_id),
    )
    for column, name, raw in id_filters:
        if raw:
            clauses.append(column == _parse_id(name, raw))

    if filters.start_date:
        clauses.append(Warranty.received_date >= _parse_date("startDate", filters.start_date))
    if filters.end_date:
        clauses.append(Warranty.received_date <= _parse_date("endDate", filters.end_date))

    return clauses


def _parse_id(name: str, raw: str) -> int:
    try:
        return int(raw.strip())
    except ValueError:
        raise ValidationFailure(f"{name} must be an integer", detail={name: raw}) from None


def _parse_status(raw: str) -> WarrantyStatus:
    try:
        return WarrantyStatus(raw.strip().upper())
    except ValueError:
        allowed = ", ".join(s.value for s in WarrantyStatus)
        raise ValidationFailure(f"status must be one of {allowed}", detail={"status": raw}) from None


def _parse_date(name: str, raw: str) -> datetime:
    """Parse an ISO-8601 filter bound.

    Without an offset, a bare date (2026-10-15) is midnight UTC and a date-time
    (2026-10-15T10:00:00) is server local time.
    """
    s = raw.strip()
    try:
        parsed = datetime.fromisoformat(s)
    except ValueError:
        raise ValidationFailure(f"{name} must be an ISO-8601 date", detail={name: raw}) from None
    if parsed.tzinfo is None:
        if "T" in s or " " in s:
            parsed = parsed.astimezone()
        else:
            parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# ============================================================
# Lifecycle
# ============================================================


# Related records embedded in read responses; staff limited to id/name/email.
_DETAIL_LOADERS = (
    selectinload(Warranty.customer),
    selectinload(Warranty.product),
    selectinload(Warranty.invoice),
    selectinload(Warranty.creator).load_only(User.id, User.name, User.email),
    selectinload(Warranty.technician).load_only(User.id, User.name, User.email),
)


class WarrantyService:
    """Create, read, update and delete warranty tickets."""

    def __init__(self, session: AsyncSession, *, clock: Clock = local_now) -> None:
        self.session = session
        self._clock = clock
        self._settings = get_settings()

    async def create(self, data: WarrantyCreate) -> Warranty:
        """Create a ticket, generating its code when none is supplied.

        Raises:
            ValidationFailure: A referenced customer/product/invoice is missing.
            ConflictFailure: Duplicate code or dangling reference on insert.
        """
        now = self._clock()
        payload = data.model_dump(exclude_none=True)
        supplied_code = payload.pop("code", None)

        if supplied_code:
            return await self._insert(payload, code=supplied_code, now=now)

        async with warranty_code_lock(
            code_lock_key(now),
            ttl=self._settings.warranty_code_lock_ttl,
            wait=self._settings.warranty_code_lock_wait,
        ):
            code = await generate_warranty_code(
                self.session, now=now, prefix=self._settings.warranty_code_prefix
            )
            return await self._insert(payload, code=code, now=now)

    async def _insert(self, payload: dict[str, Any], *, code: str, now: datetime) -> Warranty:
        await validate_references(
            self.session,
            customer_id=payload.get("customer_id"),
            product_id=payload.get("product_id"),
            invoice_id=payload.get("invoice_id"),
        )

        payload.setdefault("status", DEFAULT_STATUS)
        payload.setdefault("received_date", now)
        warranty = Warranty(**payload, code=code, created_at=now)
        self.session.add(warranty)

        try:
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            if is_unique_violation(exc):
                raise ConflictFailure("Warranty code must be unique", detail={"code": code}) from exc
            if is_foreign_key_violation(exc):
                raise ConflictFailure("Foreign key constraint failed") from exc
            raise

        await self.session.refresh(warranty)
        logger.info(f"[warranty] created id={warranty.id} code={warranty.code}")
        return warranty

    async def find_all(self, filters: WarrantyFilter | None = None) -> list[Warranty]:
        """List tickets matching `filters`, most recently received first."""
        clauses = build_warranty_filters(filters or WarrantyFilter())
        result = await self.session.execute(
            select(Warranty)
            .options(*_DETAIL_LOADERS)
            .where(*clauses)
            .order_by(Warranty.received_date.desc())
        )
        return list(result.scalars().all())

    async def find_one(self, warranty_id: int) -> Warranty:
        """Get a ticket with its related records.

        Raises:
            NotFoundFailure: If no ticket has this id.
        """
        warranty = await self._find_by(Warranty.id == warranty_id)
        if warranty is None:
            raise NotFoundFailure(
                f"Warranty with ID {warranty_id} not found",
                detail={"id": warranty_id},
            )
        return warranty

    async def find_by_code(self, code: str) -> Warranty:
        """Get a ticket by its code.

        Raises:
            NotFoundFailure: If no ticket has this code.
        """
        warranty = await self._find_by(Warranty.code == code)
        if warranty is None:
            raise NotFoundFailure(
                f"Warranty with code {code} not found",
                detail={"code": code},
            )
        return warranty

    async def _find_by(self, clause: ColumnElement[bool]) -> Warranty | None:
        result = await self.session.execute(
            select(Warranty).options(*_DETAIL_LOADERS).where(clause)
        )
        return result.scalar_one_or_none()

    async def update(self, warranty_id: int, data: WarrantyUpdate) -> Warranty:
        """Apply the fields present in `data`.

        Moving to COMPLETED without an actual_return_date stamps it with now.

        Raises:
            NotFoundFailure: If no ticket has this id.
            ConflictFailure: On a unique constraint violation.
        """
        warranty = await self.find_one(warranty_id)

        patch = {
            k: v
            for k, v in data.model_dump(exclude_unset=True).items()
            if v is not None or k not in _NON_NULLABLE_UPDATE_FIELDS
        }
        patch = apply_status_side_effects(patch, self._clock())
        for field, value in patch.items():
            setattr(warranty, field, value)

        try:
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            if is_unique_violation(exc):
                raise ConflictFailure("Warranty code must be unique") from exc
            raise

        await self.session.refresh(warranty)
        logger.info(
            f"[warranty] updated id={warranty.id} code={warranty.code} fields={sorted(patch)}"
        )
        return warranty

    async def remove(self, warranty_id: int) -> Warranty:
        """Hard-delete a ticket and return it.

        Raises:
            NotFoundFailure: If no ticket has this id.
        """
        warranty = await self.find_one(warranty_id)
        await self.session.delete(warranty)
        await self.session.commit()
        logger.info(f"[warranty] deleted id={warranty.id} code={warranty.code}")
        return warranty

    async def status_summary(self) -> dict[str, int]:
        """Count tickets per status, plus the total."""
        result = await self.session.execute(
            select(Warranty.status, func.count(Warranty.id)).group_by(Warranty.status)
        )
        counts = {status: 0 for status in WarrantyStatus}
        for status, n in result.all():
            counts[WarrantyStatus(status)] = n

        summary = {status.value.lower(): n for status, n in counts.items()}
        summary["total"] = sum(counts.values())
        return summary
