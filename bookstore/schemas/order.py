from datetime import date, datetime
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict

# One requested line of a new order
class OrderItemCreate(BaseModel):
    book_id: UUID
    # Checked by the placement service so a non-positive amount is a 400, not a 422
    amount: int

# Line item as recorded in the ledger, joined with the book it references
class OrderItemInDB(BaseModel):
    id: str
    price: int
    amount: int
    book_id: str
    book_title: str
    book_author: str
    book_publication_date: Optional[date] = None

    model_config = ConfigDict(from_attributes=True)

# Order returned to clients
class OrderInDB(BaseModel):
    id: str
    created_at: datetime
    total_price: int
    items: List[OrderItemInDB] = []

    model_config = ConfigDict(from_attributes=True)
