def test_submit_book_form_encoded(client, store, book_body):
    r = client.post("/api/books", data=book_body)
    assert r.status_code == 201
    assert r.json() == {"message": "Book saved!"}

    books = store.list_all("book")
    assert len(books) == 1
    assert books[0]["title"] == "Dune"
    assert books[0]["price"] == 12.5


def test_submit_book_json_then_list(client, book_body):
    r = client.post("/api/books", json=book_body)
    assert r.status_code == 201

    r = client.get("/api/books")
    assert r.status_code == 200
    [book] = r.json()
    assert book["title"] == "Dune"
    assert book["author"] == "Frank Herbert"
    assert book["phone"] == "+1 555-1234"
    assert book["price"] == 12.5
    assert book["_id"]
    assert book["createdAt"]


def test_list_books_newest_first(client, book_body):
    for title in ("First", "Second", "Third"):
        r = client.post("/api/books", json={**book_body, "title": title})
        assert r.status_code == 201

    titles = [b["title"] for b in client.get("/api/books").json()]
    assert titles == ["Third", "Second", "First"]


def test_missing_fields_rejected_without_write(client, store, book_body):
    del book_body["author"]
    r = client.post("/api/books", json=book_body)
    assert r.status_code == 400
    assert r.json() == {"error": "Missing fields", "code": "MissingFields"}
    assert client.get("/api/books").json() == []


def test_invalid_price_rejected(client, book_body):
    for price in ("0", "-5"):
        r = client.post("/api/books", json={**book_body, "price": price})
        assert r.status_code == 400
        assert r.json()["code"] == "InvalidPrice"
    assert client.get("/api/books").json() == []


def test_invalid_phone_rejected(client, book_body):
    for phone in ("abc", "12", "1" * 20):
        r = client.post("/api/books", json={**book_body, "phone": phone})
        assert r.status_code == 400
        assert r.json()["code"] == "InvalidPhone"
    assert client.get("/api/books").json() == []


def test_malformed_json_is_missing_fields(client):
    r = client.post(
        "/api/books",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert r.status_code == 400
    assert r.json()["code"] == "MissingFields"


def test_storage_failure_returns_generic_error(broken_client, book_body):
    r = broken_client.post("/api/books", json=book_body)
    assert r.status_code == 500
    assert r.json() == {"error": "Could not save book."}

    r = broken_client.get("/api/books")
    assert r.status_code == 500
    assert r.json() == {"error": "Fetch error."}
