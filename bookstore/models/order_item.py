from sqlalchemy import CheckConstraint, Column, String, Integer, ForeignKey
from sqlalchemy.orm import relationship

from bookstore.database.session import Base

class OrderItem(Base):
    __tablename__ = "order_items"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_order_items_amount_positive"),
    )

    id = Column(String, primary_key=True, index=True)
    order_id = Column(String, ForeignKey("orders.id"), nullable=False, index=True)
    book_id = Column(String, ForeignKey("books.id"), nullable=False)
    position = Column(Integer, nullable=False)  # Line number within the request
    price = Column(Integer, nullable=False)  # Unit price captured when the order was placed
    amount = Column(Integer, nullable=False)

    # Relationships
    order = relationship("Order", back_populates="items")
    book = relationship("Book")
