from fastapi import APIRouter

from bookstore.api.endpoints import books, orders

api_router = APIRouter()

# Include all API endpoint routers
api_router.include_router(books.router, prefix="/books", tags=["Books"])
api_router.include_router(orders.router, prefix="/orders", tags=["Orders"])
