"""
Tests for the FastAPI application.
"""

import pytest
from fastapi.testclient import TestClient

from api.config import APIConfig
from api.main import create_app


@pytest.fixture
def seeded_client(client, sample_book_payload):
    """Create a test client with one stored book."""
    response = client.post("/books", json=sample_book_payload)
    assert response.status_code == 201
    return client


def test_health_check(client):
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["database_status"] == "healthy"
    assert "timestamp" in data
    assert "version" in data


class TestListBooks:
    """GET /books"""

    def test_empty_list(self, client):
        response = client.get("/books")
        assert response.status_code == 200
        assert response.json() == {"books": []}

    def test_list_contains_test_book(self, seeded_client, sample_book_payload):
        response = seeded_client.get("/books")
        books = response.json()["books"]
        assert len(books) == 1
        assert books[0] == sample_book_payload


class TestGetBook:
    """GET /books/{isbn}"""

    def test_get_single_book(self, seeded_client, sample_book_payload):
        response = seeded_client.get(f"/books/{sample_book_payload['isbn']}")
        assert response.status_code == 200
        assert response.json() == {"book": sample_book_payload}

    def test_missing_book(self, seeded_client):
        response = seeded_client.get("/books/9999")
        assert response.status_code == 404
        assert response.json() == {
            "error": {"message": "There is no book with an isbn of '9999'", "status": 404}
        }


class TestCreateBook:
    """POST /books"""

    def test_create_book(self, client, other_book_payload):
        response = client.post("/books", json=other_book_payload)
        assert response.status_code == 201
        assert response.json() == {"book": other_book_payload}

    def test_missing_fields(self, client):
        response = client.post("/books", json={"year": 2000})
        assert response.status_code == 400
        error = response.json()["error"]
        assert error["status"] == 400
        assert "isbn: Field required" in error["message"]
        assert "title: Field required" in error["message"]

        assert client.get("/books").json() == {"books": []}

    def test_duplicate_isbn(self, seeded_client, sample_book_payload):
        response = seeded_client.post("/books", json=dict(sample_book_payload, title="Other"))
        assert response.status_code == 409
        assert response.json()["error"]["status"] == 409

        book = seeded_client.get(f"/books/{sample_book_payload['isbn']}").json()["book"]
        assert book["title"] == sample_book_payload["title"]

    def test_wrong_types(self, client, sample_book_payload):
        response = client.post("/books", json=dict(sample_book_payload, pages="999"))
        assert response.status_code == 400
        assert response.json()["error"]["message"].startswith("pages:")

    def test_pages_beyond_storage_range(self, client, sample_book_payload):
        response = client.post("/books", json=dict(sample_book_payload, pages=10**20))
        assert response.status_code == 400
        assert response.json()["error"]["message"].startswith("pages:")
        assert client.get("/books").json() == {"books": []}

    def test_non_object_body(self, client):
        response = client.post("/books", json=["not", "a", "book"])
        assert response.status_code == 400

    def test_missing_body(self, client):
        response = client.post("/books")
        assert response.status_code == 400

    def test_malformed_json(self, client):
        response = client.post(
            "/books",
            content=b"{not json",
            headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 400
        assert response.json()["error"]["status"] == 400


class TestUpdateBook:
    """PUT /books/{isbn}"""

    def test_update_book(self, seeded_client, sample_book_payload, full_update_payload):
        isbn = sample_book_payload["isbn"]
        response = seeded_client.put(f"/books/{isbn}", json=full_update_payload)
        assert response.status_code == 200
        assert response.json() == {"book": dict(full_update_payload, isbn=isbn)}

    def test_partial_update(self, seeded_client, sample_book_payload):
        isbn = sample_book_payload["isbn"]
        response = seeded_client.put(f"/books/{isbn}", json={"title": "X"})
        assert response.status_code == 200
        assert response.json()["book"] == dict(sample_book_payload, title="X")
        assert seeded_client.get(f"/books/{isbn}").json()["book"] == dict(sample_book_payload, title="X")

    def test_empty_update(self, seeded_client, sample_book_payload):
        isbn = sample_book_payload["isbn"]
        response = seeded_client.put(f"/books/{isbn}", json={})
        assert response.status_code == 200
        assert response.json() == {"book": sample_book_payload}

    def test_bad_update(self, seeded_client, sample_book_payload, full_update_payload):
        isbn = sample_book_payload["isbn"]
        response = seeded_client.put(
            f"/books/{isbn}",
            json=dict(full_update_payload, isbn="86753909", badField="Non-existant field")
        )
        assert response.status_code == 400
        assert response.json() == {
            "error": {
                "message": "isbn: The isbn of a book cannot be changed; "
                           "badField: Extra inputs are not permitted",
                "status": 400
            }
        }
        assert seeded_client.get(f"/books/{isbn}").json()["book"] == sample_book_payload
        assert seeded_client.get("/books/86753909").status_code == 404

    def test_year_beyond_storage_range(self, seeded_client, sample_book_payload):
        isbn = sample_book_payload["isbn"]
        response = seeded_client.put(f"/books/{isbn}", json={"year": 2**63})
        assert response.status_code == 400
        assert response.json()["error"]["message"].startswith("year:")
        assert seeded_client.get(f"/books/{isbn}").json()["book"] == sample_book_payload

    def test_update_missing_book(self, seeded_client, full_update_payload):
        response = seeded_client.put("/books/9999", json=full_update_payload)
        assert response.status_code == 404

    def test_bad_update_of_missing_book(self, seeded_client, full_update_payload):
        response = seeded_client.put(
            "/books/9999",
            json=dict(full_update_payload, isbn="86753909", badField="Non-existant field")
        )
        assert response.status_code == 400


class TestDeleteBook:
    """DELETE /books/{isbn}"""

    def test_delete_book(self, seeded_client, sample_book_payload):
        response = seeded_client.delete(f"/books/{sample_book_payload['isbn']}")
        assert response.status_code == 200
        assert response.json() == {"message": "Book deleted"}
        assert seeded_client.get("/books").json() == {"books": []}

    def test_delete_twice(self, seeded_client, sample_book_payload):
        isbn = sample_book_payload["isbn"]
        assert seeded_client.delete(f"/books/{isbn}").status_code == 200
        response = seeded_client.delete(f"/books/{isbn}")
        assert response.status_code == 404
        assert response.json()["error"]["status"] == 404


def test_unknown_route(client):
    """Test that unknown routes use the error envelope."""
    response = client.get("/authors")
    assert response.status_code == 404
    assert response.json() == {"error": {"message": "Not Found", "status": 404}}


def test_unhandled_error_hides_details(sample_book_payload):
    """Test that unexpected failures return a generic 500."""
    app = create_app(APIConfig(database_path=":memory:"))
    with TestClient(app, raise_server_exceptions=False) as client:
        async def broken_list_books():
            raise RuntimeError("secret connection string")

        app.state.database.list_books = broken_list_books
        response = client.get("/books")

    assert response.status_code == 500
    assert response.json() == {"error": {"message": "Internal server error", "status": 500}}
