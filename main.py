import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import Settings, get_settings
from database import RecordStore, StorageError
from observability import setup_logging
from schemas import Book, Contact, Purchase, collection_name
from validation import Rejected, parse_book, parse_contact, parse_purchase

logger = logging.getLogger(__name__)

BOOKS = collection_name(Book)
PURCHASES = collection_name(Purchase)
CONTACTS = collection_name(Contact)


def create_app(settings: Optional[Settings] = None, store: Optional[RecordStore] = None) -> FastAPI:
    """Build the API. A ``store`` passed in is used as-is and never closed here."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings.log_level, settings.log_format)
        owns_store = app.state.store is None
        if owns_store:
            app.state.store = RecordStore.from_settings(settings)
        logger.info("Bookswap API started")
        yield
        if owns_store:
            app.state.store.close()
            app.state.store = None
        logger.info("Bookswap API shutting down")

    app = FastAPI(title="Bookswap Backend", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error("Unhandled error", exc_info=exc, extra={"path": request.url.path})
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Server error."},
        )

    _register_routes(app)
    return app


def get_store(request: Request) -> RecordStore:
    return request.app.state.store


async def read_payload(request: Request) -> Dict[str, Any]:
    """Request body as a flat dict, from JSON or form encoding."""
    content_type = request.headers.get("content-type", "")
    if content_type.lower().startswith("application/json"):
        try:
            data = await request.json()
        except ValueError:
            logger.info("Ignoring malformed JSON body", extra={"path": request.url.path})
            return {}
        return data if isinstance(data, dict) else {}
    form = await request.form()
    # Uploaded files never stand in for text fields.
    return {key: value for key, value in form.items() if isinstance(value, str)}


def _rejected(result: Rejected) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": result.message, "code": result.kind.value},
    )


def _storage_failed(message: str, exc: StorageError, request: Request) -> JSONResponse:
    logger.error(message, exc_info=exc, extra={"path": request.url.path})
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": message},
    )


def _register_routes(app: FastAPI) -> None:

    @app.get("/")
    def read_root():
        return {"message": "Bookswap API is running"}

    @app.get("/test")
    def test_database(request: Request, store: RecordStore = Depends(get_store)):
        """Test endpoint to check if database is available and accessible"""
        settings: Settings = request.app.state.settings
        response: Dict[str, Any] = {
            "backend": "Running",
            "database": "Not Available",
            "database_url": "Set" if settings.database_url else "Not Set",
            "database_name": None,
            "connection_status": "Not Connected",
            "collections": [],
        }
        if store is None:
            return response

        response["database_name"] = store.name
        try:
            response["collections"] = store.list_collections(limit=10)
        except StorageError as e:
            logger.warning("Database check failed: %s", e.__cause__, extra={"path": request.url.path})
            response["database"] = "Connected but Error"
            return response
        response["database"] = "Connected & Working"
        response["connection_status"] = "Connected"
        return response

    @app.post("/api/books", status_code=status.HTTP_201_CREATED)
    def submit_book(
        request: Request,
        payload: Dict[str, Any] = Depends(read_payload),
        store: RecordStore = Depends(get_store),
    ):
        result = parse_book(payload)
        if isinstance(result, Rejected):
            return _rejected(result)
        try:
            store.create(BOOKS, result)
        except StorageError as e:
            return _storage_failed("Could not save book.", e, request)
        return {"message": "Book saved!"}

    @app.get("/api/books")
    def list_books(request: Request, store: RecordStore = Depends(get_store)):
        try:
            books = store.list_all(BOOKS)
        except StorageError as e:
            return _storage_failed("Fetch error.", e, request)
        return books

    @app.post("/api/purchases", status_code=status.HTTP_201_CREATED)
    def submit_purchase(
        request: Request,
        payload: Dict[str, Any] = Depends(read_payload),
        store: RecordStore = Depends(get_store),
    ):
        result = parse_purchase(payload)
        if isinstance(result, Rejected):
            return _rejected(result)
        try:
            store.create(PURCHASES, result)
        except StorageError as e:
            return _storage_failed("Could not save purchase.", e, request)
        return {"message": "Purchase saved!"}

    @app.post("/api/contact", status_code=status.HTTP_201_CREATED)
    def submit_contact(
        request: Request,
        payload: Dict[str, Any] = Depends(read_payload),
        store: RecordStore = Depends(get_store),
    ):
        logger.info("Contact form submitted")
        result = parse_contact(payload)
        if isinstance(result, Rejected):
            return _rejected(result)
        try:
            store.create(CONTACTS, result)
        except StorageError as e:
            return _storage_failed("Server error.", e, request)
        return {"message": "Message received! Thanks!"}

    @app.get("/api/contact")
    def list_contacts(request: Request, store: RecordStore = Depends(get_store)):
        try:
            contacts = store.list_all(CONTACTS)
        except StorageError as e:
            return _storage_failed("Fetch error.", e, request)
        return contacts


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=app.state.settings.port)
