from sqlalchemy import Column, String, DateTime, Integer
from sqlalchemy.orm import relationship

from bookstore.database.session import Base

class Order(Base):
    __tablename__ = "orders"

    id = Column(String, primary_key=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
    total_price = Column(Integer, nullable=False)  # Sum of item price * amount, fixed at creation

    # Relationships
    items = relationship(
        "OrderItem",
        back_populates="order",
        order_by="OrderItem.position",
    )
