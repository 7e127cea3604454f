import logging
from typing import List
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from bookstore.core.config import settings
from bookstore.core.errors import ConflictError
from bookstore.database.session import get_db
from bookstore.models.order import Order
from bookstore.schemas.order import OrderInDB, OrderItemCreate, OrderItemInDB
from bookstore.services import ordering

logger = logging.getLogger(__name__)

router = APIRouter()

def serialize_order(order: Order) -> OrderInDB:
    return OrderInDB(
        id=order.id,
        created_at=order.created_at,
        total_price=order.total_price,
        items=[
            OrderItemInDB(
                id=item.id,
                price=item.price,
                amount=item.amount,
                book_id=item.book_id,
                book_title=item.book.title,
                book_author=item.book.author,
                book_publication_date=item.book.publication_date,
            )
            for item in order.items
        ],
    )

@router.post("", response_model=str, status_code=status.HTTP_201_CREATED)
def create_order(
    payload: List[OrderItemCreate],
    request: Request,
    db: Session = Depends(get_db),
):
    """Place an order and return its id."""
    lines = [ordering.OrderLine(book_id=str(item.book_id), amount=item.amount) for item in payload]
    retries = request.app.state.settings.ORDER_CONFLICT_RETRIES

    attempt = 0
    while True:
        try:
            return ordering.place_order(db, lines)
        except ConflictError:
            if attempt >= retries:
                raise
            attempt += 1
            logger.info(f"Retrying order after conflict (attempt {attempt} of {retries})")

@router.get("", response_model=List[OrderInDB])
def get_orders(
    offset: int = Query(0, ge=0),
    limit: int = Query(settings.DEFAULT_PAGE_LIMIT, ge=1, le=settings.MAX_PAGE_LIMIT),
    db: Session = Depends(get_db),
):
    """Get orders with their items, newest first."""
    orders = ordering.list_orders(db, offset=offset, limit=limit)
    return [serialize_order(order) for order in orders]

@router.get("/{order_id}", response_model=OrderInDB)
def get_order(
    order_id: str,
    db: Session = Depends(get_db),
):
    """Get a specific order by ID."""
    return serialize_order(ordering.get_order(db, order_id))
