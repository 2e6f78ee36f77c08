"""
Database Schemas for the book marketplace

Each Pydantic model below maps to a MongoDB collection with the lowercase
name of the class (e.g., Book -> "book"). The models hold normalized
fields only; ``_id`` and ``createdAt`` are assigned by the record store.
"""

from typing import Any

from pydantic import BaseModel, Field


class Book(BaseModel):
    """
    Books offered for sale
    Collection name: "book"
    """
    title: str = Field(..., description="Book title", min_length=1)
    author: str = Field(..., description="Book author", min_length=1)
    price: float = Field(..., description="Asking price", gt=0)
    phone: str = Field(..., description="Seller phone number")


class Purchase(BaseModel):
    """
    Purchases recorded against a book, with a snapshot of the listing
    Collection name: "purchase"
    """
    bookId: Any = Field(..., description="Reference to the purchased book")
    bookTitle: str = Field(..., description="Book title at purchase time")
    bookAuthor: str = Field(..., description="Book author at purchase time")
    bookPrice: float = Field(..., description="Book price at purchase time")
    buyerName: str = Field(..., description="Full name of the buyer")
    buyerEmail: str = Field(..., description="Buyer email")
    buyerPhone: str = Field(..., description="Buyer phone number")


class Contact(BaseModel):
    """
    Messages submitted from the website contact form
    Collection name: "contact"
    """
    name: str = Field(..., description="Name of the sender", min_length=1)
    email: str = Field(..., description="Contact email")
    message: str = Field(..., description="Message body", min_length=1)


def collection_name(model: type) -> str:
    return model.__name__.lower()
