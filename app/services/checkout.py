# =========================================================
# CHECKOUT ENGINE
#
# Applies a batch of stock movements as one unit of work:
# - lines run in the order given, one conditional UPDATE each
# - every successful UPDATE is paired with one ledger row
# - any failing line rolls the whole batch back
# - the session is always closed, whatever happens
# =========================================================

import logging
import secrets
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.database import SessionLocal
from app.models.inventory import InventoryItem
from app.models.transactions import LedgerEntry, ISSUED, MOVEMENT_TYPES
from app.services.errors import (
    CheckoutError,
    InsufficientStockError,
    StoreUnavailableError,
    TransactionError,
    UnknownItemError,
    ValidationError,
)

logger = logging.getLogger("app")

# Column limits: quantities are 32-bit integers, prices Numeric(10, 2)
MAX_QUANTITY = 2**31 - 1
MAX_PRICE = Decimal("100000000")
CENT = Decimal("0.01")


@dataclass(frozen=True)
class CheckoutLine:
    item_code: str
    quantity: int
    movement_type: str
    unit_price: Decimal


@dataclass(frozen=True)
class Bill:
    bill_id: str
    total_amount: Decimal
    lines: tuple[CheckoutLine, ...]
    created_at: datetime


def generate_bill_id() -> str:
    return f"BILL_{time.time_ns() // 1_000_000}_{secrets.token_hex(4)}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CheckoutEngine:
    def __init__(
        self,
        session_factory: Callable[[], Session],
        clock: Callable[[], datetime] | None = None,
        bill_id_factory: Callable[[], str] | None = None,
        include_received_in_total: bool = True,
    ):
        self._session_factory = session_factory
        self._clock = clock or _utcnow
        self._bill_id_factory = bill_id_factory or generate_bill_id
        self._include_received_in_total = include_received_in_total

    # =========================================================
    # PUBLIC API
    # =========================================================
    def checkout(self, lines: Sequence[CheckoutLine], actor: str | None = None) -> Bill:
        """
        Apply every line or none of them.

        Raises ValidationError before touching the store, and
        InsufficientStockError / UnknownItemError / StoreUnavailableError /
        TransactionError otherwise. The store is unchanged after any error.
        """
        validated = self._validate(lines)

        bill_id = self._bill_id_factory()
        session = self._acquire()
        index = 0

        try:
            total_amount = Decimal("0.00")

            for index, line in enumerate(validated):
                self._apply_line(session, index, line, bill_id, actor)

                if line.movement_type == ISSUED or self._include_received_in_total:
                    total_amount += line.unit_price * line.quantity

        except CheckoutError as exc:
            logger.warning(f"Checkout {bill_id} rolled back at line {index + 1}: {exc.message}")
            self._rollback(session, bill_id)
            raise

        except SQLAlchemyError as exc:
            logger.error(f"Checkout {bill_id} failed at line {index + 1}: {exc}")
            self._rollback(session, bill_id)
            line = validated[index]
            raise TransactionError(
                f"Unable to record transaction for item {line.item_code}",
                item_code=line.item_code,
                line_index=index,
            ) from exc

        except BaseException:
            self._rollback(session, bill_id)
            raise

        else:
            try:
                session.commit()
            except SQLAlchemyError as exc:
                logger.error(f"Checkout {bill_id} commit failed: {exc}")
                self._rollback(session, bill_id)
                raise TransactionError("Transaction commit failed") from exc

        finally:
            session.close()

        logger.info(
            f"Checkout {bill_id} committed "
            f"Lines: {len(validated)} "
            f"Total: {total_amount}"
        )

        return Bill(
            bill_id=bill_id,
            total_amount=total_amount,
            lines=tuple(validated),
            created_at=self._clock(),
        )

    # =========================================================
    # VALIDATION (NO STORE ACCESS)
    # =========================================================
    def _validate(self, lines) -> list[CheckoutLine]:
        if isinstance(lines, (str, bytes)) or not isinstance(lines, Sequence) or not lines:
            raise ValidationError("Items array is required and cannot be empty.")

        return [self._validate_line(index, line) for index, line in enumerate(lines)]

    @staticmethod
    def _validate_line(index: int, line) -> CheckoutLine:
        position = f"Item {index + 1}"
        item_code = getattr(line, "item_code", None)

        if not isinstance(item_code, str) or not item_code.strip():
            raise ValidationError(f"{position}: item_code is required", line_index=index)

        item_code = item_code.strip()
        quantity = getattr(line, "quantity", None)

        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise ValidationError(
                f"{position} ({item_code}): quantity must be a positive integer",
                item_code=item_code,
                line_index=index,
            )

        if quantity > MAX_QUANTITY:
            raise ValidationError(
                f"{position} ({item_code}): quantity must not exceed {MAX_QUANTITY}",
                item_code=item_code,
                line_index=index,
            )

        movement_type = getattr(line, "movement_type", None)

        if movement_type not in MOVEMENT_TYPES:
            raise ValidationError(
                f"{position} ({item_code}): transaction_type must be 'issued' or 'received'",
                item_code=item_code,
                line_index=index,
            )

        raw_price = getattr(line, "unit_price", None)

        try:
            unit_price = Decimal(str(raw_price)) if raw_price is not None else None
        except InvalidOperation:
            unit_price = None

        if unit_price is None or not unit_price.is_finite() or unit_price < 0:
            raise ValidationError(
                f"{position} ({item_code}): price must be a number greater than or equal to zero",
                item_code=item_code,
                line_index=index,
            )

        # Stored prices have two decimals; the line and the bill use the stored value
        if unit_price < MAX_PRICE:
            unit_price = unit_price.quantize(CENT, rounding=ROUND_HALF_UP)

        if unit_price >= MAX_PRICE:
            raise ValidationError(
                f"{position} ({item_code}): price must be below {MAX_PRICE}",
                item_code=item_code,
                line_index=index,
            )

        return CheckoutLine(
            item_code=item_code,
            quantity=quantity,
            movement_type=movement_type,
            unit_price=unit_price,
        )

    # =========================================================
    # UNIT OF WORK
    # =========================================================
    def _acquire(self) -> Session:
        session = None

        try:
            session = self._session_factory()
            session.begin()
            # Check out the pooled connection now so a dead store fails here
            session.connection()
        except SQLAlchemyError as exc:
            logger.error(f"Inventory store unavailable: {exc}")
            if session is not None:
                session.close()
            raise StoreUnavailableError("Database connection error") from exc

        return session

    def _apply_line(
        self,
        session: Session,
        index: int,
        line: CheckoutLine,
        bill_id: str,
        actor: str | None,
    ) -> None:
        item = InventoryItem

        if line.movement_type == ISSUED:
            statement = (
                update(item)
                .where(item.comp_code == line.item_code, item.quantity >= line.quantity)
                .values(quantity=item.quantity - line.quantity)
            )
        else:
            statement = (
                update(item)
                .where(item.comp_code == line.item_code)
                .values(quantity=item.quantity + line.quantity)
            )

        result = session.execute(statement.execution_options(synchronize_session=False))

        if result.rowcount == 0:
            exists = session.scalar(select(item.id).where(item.comp_code == line.item_code))

            if exists is None:
                raise UnknownItemError(
                    f"Invalid item code: {line.item_code}",
                    item_code=line.item_code,
                    line_index=index,
                )

            raise InsufficientStockError(
                f"Not enough stock for item: {line.item_code}",
                item_code=line.item_code,
                line_index=index,
            )

        session.add(
            LedgerEntry(
                item_code=line.item_code,
                quantity=line.quantity,
                transaction_type=line.movement_type,
                price=line.unit_price,
                transaction_date=self._clock(),
                updated_by=actor,
                bill_id=bill_id,
            )
        )
        session.flush()

    def _rollback(self, session: Session, bill_id: str) -> None:
        try:
            session.rollback()
        except SQLAlchemyError as exc:
            logger.error(f"Checkout {bill_id} rollback failed: {exc}")
            raise TransactionError("Transaction rollback failed") from exc


def get_checkout_engine() -> CheckoutEngine:
    return CheckoutEngine(
        SessionLocal,
        include_received_in_total=settings.BILL_INCLUDES_RECEIVED,
    )
