"""Inventory store: stock reads and decrements for the order flow.

Both functions work on the caller's session and transaction. They never
begin, commit or roll back on their own.
"""

from dataclasses import dataclass
from typing import Dict, Iterable

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from bookstore.models.book import Book


@dataclass(frozen=True)
class StockEntry:
    price: int
    stock_quantity: int


def get_stock_snapshot(db: Session, book_ids: Iterable[str]) -> Dict[str, StockEntry]:
    """Return price and stock of the orderable books among ``book_ids``.

    Archived and unknown ids are simply absent from the result. The rows are
    read with FOR UPDATE, in id order, so two orders over overlapping books
    queue behind each other instead of deadlocking.
    """
    ids = sorted(set(book_ids))
    if not ids:
        return {}

    rows = db.execute(
        select(Book.id, Book.price, Book.stock_quantity)
        .where(Book.archived.is_(False), Book.id.in_(ids))
        .order_by(Book.id)
        .with_for_update()
    ).all()

    return {row.id: StockEntry(price=row.price, stock_quantity=row.stock_quantity) for row in rows}


def decrement_stock(db: Session, book_id: str, amount: int) -> int:
    """Take ``amount`` units off a book's stock; return the number of rows changed.

    The update only applies while the book is still orderable and holds at
    least ``amount`` units, so 0 means the stock ran out at write time.
    """
    result = db.execute(
        update(Book)
        .where(
            Book.id == book_id,
            Book.archived.is_(False),
            Book.stock_quantity >= amount,
        )
        .values(stock_quantity=Book.stock_quantity - amount)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount
