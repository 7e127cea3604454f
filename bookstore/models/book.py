from sqlalchemy import Boolean, CheckConstraint, Column, Date, DateTime, Integer, String
from sqlalchemy.sql import func

from bookstore.database.session import Base

class Book(Base):
    __tablename__ = "books"
    __table_args__ = (
        CheckConstraint("stock_quantity >= 0", name="ck_books_stock_non_negative"),
        CheckConstraint("price >= 0", name="ck_books_price_non_negative"),
    )

    id = Column(String, primary_key=True, index=True)
    title = Column(String, nullable=False, index=True)
    author = Column(String, nullable=False, index=True)
    publication_date = Column(Date, nullable=True)
    price = Column(Integer, nullable=False)  # Minor currency units
    stock_quantity = Column(Integer, nullable=False, default=0)
    archived = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=func.now())
    updated_at = Column(DateTime(timezone=True), default=func.now(), onupdate=func.now())
