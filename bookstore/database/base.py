from bookstore.database.session import Base

# Import all models here so that Base has them registered
# The following imports are for SQLAlchemy to create the tables
from bookstore.models.book import Book
from bookstore.models.order import Order
from bookstore.models.order_item import OrderItem
