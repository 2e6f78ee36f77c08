"""Field validation for incoming submissions.

Each ``parse_*`` function takes the raw request body (a mapping of field
name to text or number) and returns either the normalized schema model or
a ``Rejected`` value naming the first rule that failed.
"""

import math
import re
from enum import Enum
from typing import Any, Mapping, Optional, Sequence, Union

from pydantic import BaseModel

from schemas import Book, Contact, Purchase

PHONE_PATTERN = re.compile(r"\+?[0-9 \-]{7,15}")
EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")


class ErrorKind(str, Enum):
    MISSING_FIELDS = "MissingFields"
    INVALID_PRICE = "InvalidPrice"
    INVALID_PHONE = "InvalidPhone"
    INVALID_EMAIL = "InvalidEmail"


ERROR_MESSAGES = {
    ErrorKind.MISSING_FIELDS: "Missing fields",
    ErrorKind.INVALID_PRICE: "Price must be a positive number",
    ErrorKind.INVALID_PHONE: "Invalid phone number",
    ErrorKind.INVALID_EMAIL: "Invalid email address",
}


class Rejected(BaseModel):
    kind: ErrorKind
    message: str

    @classmethod
    def because(cls, kind: ErrorKind) -> "Rejected":
        return cls(kind=kind, message=ERROR_MESSAGES[kind])


BookResult = Union[Book, Rejected]
PurchaseResult = Union[Purchase, Rejected]
ContactResult = Union[Contact, Rejected]


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def _missing(data: Mapping[str, Any], fields: Sequence[str]) -> bool:
    return any(_is_blank(data.get(field)) for field in fields)


def _text(value: Any) -> str:
    return str(value).strip()


def _to_price(value: Any) -> Optional[float]:
    """Coerce a price to float, or None when it is not a finite number."""
    if isinstance(value, bool):
        return None
    try:
        price = float(value.strip() if isinstance(value, str) else value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(price):
        return None
    return price


def is_valid_phone(phone: str) -> bool:
    return PHONE_PATTERN.fullmatch(phone) is not None


def is_valid_email(email: str) -> bool:
    return EMAIL_PATTERN.fullmatch(email) is not None


def parse_book(data: Mapping[str, Any]) -> BookResult:
    if _missing(data, ("title", "author", "price", "phone")):
        return Rejected.because(ErrorKind.MISSING_FIELDS)

    price = _to_price(data["price"])
    if price is None or price <= 0:
        return Rejected.because(ErrorKind.INVALID_PRICE)

    phone = _text(data["phone"])
    if not is_valid_phone(phone):
        return Rejected.because(ErrorKind.INVALID_PHONE)

    return Book(
        title=_text(data["title"]),
        author=_text(data["author"]),
        price=price,
        phone=phone,
    )


def parse_purchase(data: Mapping[str, Any]) -> PurchaseResult:
    required = (
        "bookId", "bookTitle", "bookAuthor", "bookPrice",
        "buyerName", "buyerEmail", "buyerPhone",
    )
    if _missing(data, required):
        return Rejected.because(ErrorKind.MISSING_FIELDS)

    buyer_phone = _text(data["buyerPhone"])
    if not is_valid_phone(buyer_phone):
        return Rejected.because(ErrorKind.INVALID_PHONE)

    # The snapshot price is not range-checked, but it must be a number.
    book_price = _to_price(data["bookPrice"])
    if book_price is None:
        return Rejected.because(ErrorKind.INVALID_PRICE)

    return Purchase(
        bookId=data["bookId"],
        bookTitle=_text(data["bookTitle"]),
        bookAuthor=_text(data["bookAuthor"]),
        bookPrice=book_price,
        buyerName=_text(data["buyerName"]),
        buyerEmail=_text(data["buyerEmail"]),
        buyerPhone=buyer_phone,
    )


def parse_contact(data: Mapping[str, Any]) -> ContactResult:
    if _missing(data, ("name", "email", "message")):
        return Rejected.because(ErrorKind.MISSING_FIELDS)

    email = _text(data["email"])
    if not is_valid_email(email):
        return Rejected.because(ErrorKind.INVALID_EMAIL)

    return Contact(
        name=_text(data["name"]),
        email=email,
        message=_text(data["message"]),
    )
