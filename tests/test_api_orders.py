"""HTTP tests for /orders: status mapping, bodies and pagination."""

import uuid

import pytest
from sqlalchemy.exc import SQLAlchemyError

from bookstore.core.errors import ConflictError
from bookstore.services import ordering
from tests.helpers import add_book, read_book


class TestCreateOrder:

    def test_created_returns_order_id(self, client, app_session_factory):
        book_id = add_book(app_session_factory, price=1200, stock_quantity=3)

        response = client.post("/orders", json=[{"book_id": book_id, "amount": 2}])

        assert response.status_code == 201
        assert uuid.UUID(response.json())
        assert read_book(app_session_factory, book_id).stock_quantity == 1

    def test_unknown_book_is_404(self, client, app_session_factory):
        valid = add_book(app_session_factory, stock_quantity=3)
        unknown = str(uuid.uuid4())

        response = client.post("/orders", json=[
            {"book_id": valid, "amount": 1},
            {"book_id": unknown, "amount": 1},
        ])

        assert response.status_code == 404
        assert response.json()["id"] == unknown
        assert read_book(app_session_factory, valid).stock_quantity == 3

    def test_insufficient_stock_is_400(self, client, app_session_factory):
        book_id = add_book(app_session_factory, stock_quantity=1)

        response = client.post("/orders", json=[{"book_id": book_id, "amount": 2}])

        assert response.status_code == 400
        assert response.json()["id"] == book_id
        assert "Insufficient stock" in response.json()["error"]

    def test_non_positive_amount_is_400(self, client, app_session_factory):
        book_id = add_book(app_session_factory)
        response = client.post("/orders", json=[{"book_id": book_id, "amount": 0}])
        assert response.status_code == 400

    def test_empty_order_is_400(self, client):
        response = client.post("/orders", json=[])
        assert response.status_code == 400

    def test_malformed_payload_is_422(self, client):
        response = client.post("/orders", json=[{"book_id": "not-a-uuid", "amount": 1}])
        assert response.status_code == 422

    def test_persistence_failure_hides_details(self, client, app_session_factory, monkeypatch):
        book_id = add_book(app_session_factory)

        def broken(db, lines):
            raise ordering.translate_db_error(
                SQLAlchemyError("relation \"orders\" does not exist")
            )

        monkeypatch.setattr(ordering, "place_order", broken)
        response = client.post("/orders", json=[{"book_id": book_id, "amount": 1}])

        assert response.status_code == 500
        assert response.json() == {"error": "Database error"}


class TestConflictRetry:

    def test_retries_once_then_succeeds(self, client, app_session_factory, monkeypatch):
        book_id = add_book(app_session_factory)
        real_place_order = ordering.place_order
        calls = []

        def flaky(db, lines):
            calls.append(lines)
            if len(calls) == 1:
                raise ConflictError()
            return real_place_order(db, lines)

        monkeypatch.setattr(ordering, "place_order", flaky)
        response = client.post("/orders", json=[{"book_id": book_id, "amount": 1}])

        assert response.status_code == 201
        assert len(calls) == 2

    def test_gives_up_with_409(self, client, app_session_factory, monkeypatch):
        book_id = add_book(app_session_factory)
        calls = []

        def always_conflicting(db, lines):
            calls.append(lines)
            raise ConflictError()

        monkeypatch.setattr(ordering, "place_order", always_conflicting)
        response = client.post("/orders", json=[{"book_id": book_id, "amount": 1}])

        assert response.status_code == 409
        assert len(calls) == 2


class TestListOrders:

    def test_orders_with_items_newest_first(self, client, app_session_factory):
        dune = add_book(app_session_factory, price=1500)
        emma = add_book(app_session_factory, price=899, title="Emma", author="Jane Austen")
        first = client.post("/orders", json=[{"book_id": dune, "amount": 1}]).json()
        second = client.post("/orders", json=[
            {"book_id": dune, "amount": 2},
            {"book_id": emma, "amount": 1},
        ]).json()

        response = client.get("/orders")

        assert response.status_code == 200
        orders = response.json()
        assert [o["id"] for o in orders] == [second, first]
        assert orders[0]["total_price"] == 2 * 1500 + 899
        assert [(i["book_id"], i["amount"], i["price"]) for i in orders[0]["items"]] == [
            (dune, 2, 1500),
            (emma, 1, 899),
        ]
        assert orders[0]["items"][1]["book_title"] == "Emma"
        assert orders[0]["items"][1]["book_author"] == "Jane Austen"

    def test_pagination(self, client, app_session_factory):
        book_id = add_book(app_session_factory)
        placed = [
            client.post("/orders", json=[{"book_id": book_id, "amount": 1}]).json()
            for _ in range(3)
        ]

        response = client.get("/orders", params={"offset": 1, "limit": 1})

        assert [o["id"] for o in response.json()] == [placed[1]]

    @pytest.mark.parametrize("params", [
        {"offset": -1},
        {"limit": 0},
        {"limit": 501},
    ])
    def test_out_of_range_pagination_is_422(self, client, params):
        assert client.get("/orders", params=params).status_code == 422

    def test_get_single_order(self, client, app_session_factory):
        book_id = add_book(app_session_factory, price=700)
        order_id = client.post("/orders", json=[{"book_id": book_id, "amount": 3}]).json()

        response = client.get(f"/orders/{order_id}")

        assert response.status_code == 200
        assert response.json()["total_price"] == 2100

    def test_get_unknown_order_is_404(self, client):
        assert client.get(f"/orders/{uuid.uuid4()}").status_code == 404
