"""Order placement and the order ledger read side.

Placing an order is a single transaction: lock the requested books, check
stock, price the order from the locked rows, write the order and its items,
and take the units off stock. Any failure rolls all of it back.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Sequence

from sqlalchemy import select
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload, selectinload

from bookstore.core.errors import (
    BadRequestError,
    BookstoreError,
    ConflictError,
    InsufficientStockError,
    NotFoundError,
    PersistenceError,
)
from bookstore.models.order import Order
from bookstore.models.order_item import OrderItem
from bookstore.services import inventory

logger = logging.getLogger(__name__)

# serialization_failure, deadlock_detected, lock_not_available
CONFLICT_SQLSTATES = {"40001", "40P01", "55P03"}


@dataclass(frozen=True)
class OrderLine:
    book_id: str
    amount: int


def place_order(db: Session, lines: Sequence[OrderLine]) -> str:
    """Place an order and return its id.

    ``db`` must not have a transaction in progress; this function owns the
    transaction from begin to commit or rollback.

    Raises NotFoundError for an unknown or archived book, InsufficientStockError
    when a line asks for more than is in stock, BadRequestError for an empty
    order or a non-positive amount, ConflictError when the store aborted the
    transaction because of contention and PersistenceError for anything else
    the store reports.
    """
    _check_lines(lines)

    try:
        with db.begin():
            snapshot = inventory.get_stock_snapshot(db, {line.book_id for line in lines})

            # Lines naming the same book draw on the same stock
            remaining = {book_id: entry.stock_quantity for book_id, entry in snapshot.items()}
            for line in lines:
                if line.book_id not in snapshot:
                    raise NotFoundError(line.book_id, "Book")
                if line.amount > remaining[line.book_id]:
                    raise InsufficientStockError(line.book_id, line.amount, remaining[line.book_id])
                remaining[line.book_id] -= line.amount

            total_price = sum(line.amount * snapshot[line.book_id].price for line in lines)

            order = Order(
                id=str(uuid.uuid4()),
                created_at=datetime.now(timezone.utc),
                total_price=total_price,
            )
            db.add(order)
            db.flush()

            for position, line in enumerate(lines):
                db.add(OrderItem(
                    id=str(uuid.uuid4()),
                    order_id=order.id,
                    book_id=line.book_id,
                    position=position,
                    price=snapshot[line.book_id].price,
                    amount=line.amount,
                ))
                db.flush()
                if inventory.decrement_stock(db, line.book_id, line.amount) == 0:
                    raise InsufficientStockError(line.book_id, line.amount)

            order_id = order.id
    except BookstoreError as exc:
        logger.warning(f"Order rejected: {exc.message}")
        raise
    except SQLAlchemyError as exc:
        raise translate_db_error(exc) from exc

    logger.info(f"Order {order_id} placed: {len(lines)} line(s), total {total_price}")
    return order_id


def _check_lines(lines: Sequence[OrderLine]) -> None:
    if not lines:
        raise BadRequestError("Order must contain at least one item")
    for line in lines:
        if line.amount <= 0:
            raise BadRequestError(f"Amount for book {line.book_id} must be positive", line.book_id)


def translate_db_error(exc: SQLAlchemyError) -> BookstoreError:
    """Map a store error onto ConflictError or a generic PersistenceError."""
    if isinstance(exc, DBAPIError):
        sqlstate = getattr(exc.orig, "pgcode", None) or getattr(exc.orig, "sqlstate", None)
        if sqlstate in CONFLICT_SQLSTATES or "database is locked" in str(exc.orig):
            logger.warning(f"Transaction aborted by contention: {exc.orig}")
            return ConflictError()
    logger.error(f"Database error: {exc}")
    return PersistenceError()


def list_orders(db: Session, offset: int = 0, limit: int = 100) -> List[Order]:
    """Return orders newest first, each with its items and their books loaded."""
    try:
        return list(
            db.execute(
                select(Order)
                .options(selectinload(Order.items).joinedload(OrderItem.book))
                .order_by(Order.created_at.desc(), Order.id.desc())
                .offset(offset)
                .limit(limit)
            ).scalars().all()
        )
    except SQLAlchemyError as exc:
        raise translate_db_error(exc) from exc


def get_order(db: Session, order_id: str) -> Order:
    try:
        order = db.execute(
            select(Order)
            .options(selectinload(Order.items).joinedload(OrderItem.book))
            .where(Order.id == order_id)
        ).scalar_one_or_none()
    except SQLAlchemyError as exc:
        raise translate_db_error(exc) from exc

    if order is None:
        raise NotFoundError(order_id, "Order")
    return order
