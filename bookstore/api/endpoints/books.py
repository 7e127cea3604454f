import uuid
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from bookstore.core.config import settings
from bookstore.core.errors import NotFoundError
from bookstore.database.session import get_db
from bookstore.models.book import Book
from bookstore.schemas.book import BookCreate, BookUpdate, BookInDB
from bookstore.api.endpoints.auth import Principal, UserRole, check_user_role

router = APIRouter()

@router.post("", response_model=str, status_code=status.HTTP_201_CREATED)
def create_book(
    book: BookCreate,
    db: Session = Depends(get_db),
    current_user: Principal = Depends(check_user_role([UserRole.ADMIN]))
):
    """Add a book to the catalog (admin only)."""
    db_book = Book(id=str(uuid.uuid4()), **book.model_dump())

    db.add(db_book)
    db.commit()

    return db_book.id

@router.get("", response_model=List[BookInDB])
def get_books(
    title: Optional[str] = None,
    author: Optional[str] = None,
    offset: int = Query(0, ge=0),
    limit: int = Query(settings.DEFAULT_PAGE_LIMIT, ge=1, le=settings.MAX_PAGE_LIMIT),
    db: Session = Depends(get_db),
):
    """Get books, optionally filtered by title or author prefix."""
    query = db.query(Book)

    if title:
        query = query.filter(Book.title.startswith(title, autoescape=True))

    if author:
        query = query.filter(Book.author.startswith(author, autoescape=True))

    return query.order_by(Book.title, Book.id).offset(offset).limit(limit).all()

@router.get("/{book_id}", response_model=BookInDB)
def get_book(
    book_id: str,
    db: Session = Depends(get_db),
):
    """Get a specific book by ID."""
    book = db.query(Book).filter(Book.id == book_id).first()
    if not book:
        raise NotFoundError(book_id, "Book")
    return book

@router.put("/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
def update_book(
    book_id: str,
    book_update: BookUpdate,
    db: Session = Depends(get_db),
    current_user: Principal = Depends(check_user_role([UserRole.ADMIN]))
):
    """Replace a book's catalog data (admin only).

    Orders already placed keep the price they were placed at.
    """
    db_book = db.query(Book).filter(Book.id == book_id).first()
    if not db_book:
        raise NotFoundError(book_id, "Book")

    for key, value in book_update.model_dump().items():
        setattr(db_book, key, value)

    db.commit()

    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.delete("/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
def archive_book(
    book_id: str,
    db: Session = Depends(get_db),
    current_user: Principal = Depends(check_user_role([UserRole.ADMIN]))
):
    """Archive a book so it can no longer be ordered (admin only)."""
    db_book = db.query(Book).filter(Book.id == book_id).first()
    if not db_book:
        raise NotFoundError(book_id, "Book")

    db_book.archived = True
    db.commit()

    return Response(status_code=status.HTTP_204_NO_CONTENT)
