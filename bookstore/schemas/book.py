from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

# Catalog fields accepted on create and full update
class BookBase(BaseModel):
    title: str = Field(min_length=1)
    author: str = Field(min_length=1)
    publication_date: Optional[date] = None
    stock_quantity: int = Field(ge=0)
    price: int = Field(ge=0)

# Schema for creating a new Book
class BookCreate(BookBase):
    pass

# Schema for replacing an existing Book
class BookUpdate(BookBase):
    pass

# Schema for Book in DB (returned to client)
class BookInDB(BookBase):
    id: str
    archived: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
