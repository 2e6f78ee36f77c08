import mongomock
import pytest
from fastapi.testclient import TestClient
from pymongo.errors import ServerSelectionTimeoutError

from config import Settings
from database import RecordStore
from main import create_app


class UnreachableCollection:
    def insert_one(self, doc):
        raise ServerSelectionTimeoutError("no servers available")

    def find(self, *args, **kwargs):
        raise ServerSelectionTimeoutError("no servers available")


class UnreachableDatabase:
    name = "bookswap_test"

    def __getitem__(self, name):
        return UnreachableCollection()

    def list_collection_names(self):
        raise ServerSelectionTimeoutError("no servers available")


@pytest.fixture
def store():
    return RecordStore(mongomock.MongoClient(), "bookswap_test")


@pytest.fixture
def broken_store(store):
    store.db = UnreachableDatabase()
    return store


@pytest.fixture
def client(store):
    app = create_app(settings=Settings(_env_file=None), store=store)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def broken_client(broken_store):
    app = create_app(settings=Settings(_env_file=None), store=broken_store)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def book_body():
    return {
        "title": "  Dune ",
        "author": " Frank Herbert",
        "price": "12.50",
        "phone": " +1 555-1234 ",
    }


@pytest.fixture
def purchase_body():
    return {
        "bookId": "65f1c0ffee0000000000abcd",
        "bookTitle": "Dune",
        "bookAuthor": "Frank Herbert",
        "bookPrice": "12.50",
        "buyerName": " Ada Lovelace ",
        "buyerEmail": "ada@example.com",
        "buyerPhone": "0123 456 789",
    }
