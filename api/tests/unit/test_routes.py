"""Tests for the records API endpoints."""

from datetime import timedelta
from unittest.mock import AsyncMock, patch

import pytest
from fastapi import status

from token_pagination.errors.problem_details import ConflictError, StoreQueryFailed
from token_pagination.pagination import decode_cursor
from token_pagination.routes.records import resolve_page_size

from tests.factories import BASE_TIME, make_record


@pytest.mark.parametrize("raw, expected", [
    (None, 5),
    ("", 5),
    ("abc", 5),
    ("0", 5),
    ("-3", 5),
    ("1", 1),
    ("42", 42),
    ("100", 100),
    ("101", 100),
    ("5000", 100),
])
def test_resolve_page_size(raw, expected):
    assert resolve_page_size(raw, default=5, maximum=100) == expected


class TestCreateRecord:
    """Test POST /api/v1/records and /api/v1/records/create."""

    def test_create_from_json(self, test_client):
        with patch("token_pagination.routes.records.insert_record", new=AsyncMock()) as mock_insert:
            mock_insert.return_value = make_record("user-1", context="ctx")
            response = test_client.post(
                "/api/v1/records",
                json={"resource_id": "user-1", "resource_type": "user", "context": "ctx"}
            )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json() == {
            "message": "Record created successfully",
            "resource_id": "user-1",
            "resource_type": "user"
        }
        record_data = mock_insert.call_args.args[0]
        assert record_data.context == "ctx"

    def test_create_from_json_missing_field(self, test_client):
        with patch("token_pagination.routes.records.insert_record", new=AsyncMock()) as mock_insert:
            response = test_client.post("/api/v1/records", json={"resource_id": "user-1"})

        assert response.status_code == 422
        assert response.headers["content-type"] == "application/problem+json"
        mock_insert.assert_not_called()

    def test_create_duplicate(self, test_client):
        with patch(
            "token_pagination.routes.records.insert_record",
            new=AsyncMock(side_effect=ConflictError("Record 'user/user-1' already exists"))
        ):
            response = test_client.post("/api/v1/records", json={"resource_id": "user-1", "resource_type": "user"})

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["title"] == "Conflict"

    def test_create_from_query(self, test_client):
        with patch("token_pagination.routes.records.insert_record", new=AsyncMock()) as mock_insert:
            mock_insert.return_value = make_record("123", "order")
            response = test_client.post("/api/v1/records/create?resource_id=123&resource_type=order")

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["resource_type"] == "order"
        assert mock_insert.call_args.args[0].context is None

    @pytest.mark.parametrize("query, missing", [
        ("resource_type=order", "resource_id"),
        ("resource_id=123", "resource_type"),
        ("resource_id=&resource_type=order", "resource_id"),
    ])
    def test_create_from_query_missing_param(self, test_client, query, missing):
        with patch("token_pagination.routes.records.insert_record", new=AsyncMock()) as mock_insert:
            response = test_client.post(f"/api/v1/records/create?{query}")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"] == f"{missing} query parameter is required"
        mock_insert.assert_not_called()

    def test_create_from_query_with_delimiter(self, test_client):
        with patch("token_pagination.routes.records.insert_record", new=AsyncMock()) as mock_insert:
            response = test_client.post("/api/v1/records/create?resource_id=a%7Cb&resource_type=order")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        mock_insert.assert_not_called()


class TestListRecords:
    """Test GET /api/v1/records."""

    def test_list_all(self, test_client):
        records = [make_record("u2", created_at=BASE_TIME + timedelta(seconds=1)), make_record("u1", context="c")]
        with patch("token_pagination.routes.records.get_all_records", new=AsyncMock(return_value=records)):
            response = test_client.get("/api/v1/records")

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert [r["resource_id"] for r in body["records"]] == ["u2", "u1"]
        assert "context" not in body["records"][0]
        assert body["records"][1]["context"] == "c"

    def test_list_all_store_failure(self, test_client):
        with patch(
            "token_pagination.routes.records.get_all_records",
            new=AsyncMock(side_effect=StoreQueryFailed("Failed to retrieve records"))
        ):
            response = test_client.get("/api/v1/records")

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR


class TestListRecordsPaginated:
    """Test GET /api/v1/records/paginated against an in-memory store."""

    def test_first_and_last_page(self, test_client, record_store, six_records):
        record_store.records = six_records

        first = test_client.get("/api/v1/records/paginated", params={"page_size": 5})
        assert first.status_code == status.HTTP_200_OK
        first_body = first.json()
        assert len(first_body["records"]) == 5
        token = first_body["next_continuation_token"]
        assert decode_cursor(token).resource_id == "user-1"
        assert "continuation_token=" in first.headers["link"]
        assert first.headers["link"].endswith('rel="next"')

        second = test_client.get(
            "/api/v1/records/paginated",
            params={"page_size": 5, "continuation_token": token}
        )
        second_body = second.json()
        assert [r["resource_id"] for r in second_body["records"]] == ["user-0"]
        assert "next_continuation_token" not in second_body
        assert "link" not in second.headers

    def test_default_page_size(self, test_client, record_store, six_records):
        record_store.records = six_records

        response = test_client.get("/api/v1/records/paginated")

        assert len(response.json()["records"]) == 5
        assert record_store.calls[0]["limit"] == 6

    @pytest.mark.parametrize("page_size", ["0", "-4", "lots"])
    def test_invalid_page_size_falls_back_to_default(self, test_client, record_store, six_records, page_size):
        record_store.records = six_records

        response = test_client.get("/api/v1/records/paginated", params={"page_size": page_size})

        assert response.status_code == status.HTTP_200_OK
        assert len(response.json()["records"]) == 5

    def test_page_size_capped(self, test_client, record_store):
        test_client.get("/api/v1/records/paginated", params={"page_size": 1000})
        assert record_store.calls[0]["limit"] == 101

    def test_empty_store(self, test_client, record_store):
        response = test_client.get("/api/v1/records/paginated")
        assert response.json() == {"records": []}

    def test_invalid_token(self, test_client, record_store):
        response = test_client.get(
            "/api/v1/records/paginated",
            params={"continuation_token": "definitely not a token"}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        body = response.json()
        assert body["title"] == "Bad Request"
        assert body["error_type"] == "InvalidTokenEncoding"
        assert body["instance"] == "/api/v1/records/paginated"

    def test_store_failure(self, test_client):
        with patch(
            "token_pagination.routes.records.get_paginated_records",
            new=AsyncMock(side_effect=StoreQueryFailed("Failed to retrieve records"))
        ):
            response = test_client.get("/api/v1/records/paginated")

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json()["title"] == "Internal Server Error"
