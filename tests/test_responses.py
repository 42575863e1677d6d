"""
Tests for the JSON response envelope and wire schemas.
"""

import json
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from api.responses import error_response, from_json, json_error, json_success, status_for_error
from api.schemas import ConfirmRequest, PageQuery, SubscriberIn
from core.config import get_settings
from core.errors import AlreadySubscribedError, InvalidArgumentError, StorageError
from core.storage import PageParams, SubscriberEntry


def _body(response):
    return json.loads(response.body)


def test_success_serializes_entry():
    entry = SubscriberEntry(
        id=7,
        email="a@example.com",
        confirmed_at=datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc),
        opt_out=True,
    )

    response = json_success(entry)

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/json"
    body = _body(response)
    assert body["id"] == 7
    assert body["email"] == "a@example.com"
    assert body["opt_out"] is True
    assert body["confirmed_at"].startswith("2024-01-15T10:00:00")


def test_success_serializes_list_of_entries():
    entries = [
        SubscriberEntry(id=1, email="a@example.com"),
        SubscriberEntry(id=2, email="b@example.com"),
    ]

    body = _body(json_success(entries))

    assert [item["email"] for item in body] == ["a@example.com", "b@example.com"]
    assert body[0]["confirmed_at"].startswith("1970-01-01T00:00:00")


def test_success_serializes_unsaved_entry():
    entry = ConfirmRequest(email="a@example.com", opt_out=True).to_entry()

    body = _body(json_success(entry))

    assert body["id"] is None
    assert body["email"] == "a@example.com"
    assert body["opt_out"] is True


def test_success_empty_page_is_empty_list():
    assert _body(json_success([])) == []


def test_success_custom_status():
    response = json_success({"message": "subscribed"}, status_code=201)

    assert response.status_code == 201
    assert _body(response) == {"message": "subscribed"}


def test_error_envelope_shape():
    response = json_error("boom", 500)

    assert response.status_code == 500
    assert _body(response) == {"error": "boom"}


@pytest.mark.parametrize(
    "exc, expected",
    [
        (AlreadySubscribedError("a@example.com"), 409),
        (InvalidArgumentError("limit must be a positive integer"), 400),
        (StorageError("failed to list subscribers"), 500),
        (RuntimeError("unexpected"), 500),
    ],
)
def test_status_for_error(exc, expected):
    assert status_for_error(exc) == expected


def test_error_response_uses_store_message():
    response = error_response(AlreadySubscribedError("a@example.com"))

    assert response.status_code == 409
    assert _body(response) == {"error": "a@example.com is already subscribed"}


def test_from_json_decodes_model():
    request = from_json(b'{"email": "a@example.com", "opt_out": true}', ConfirmRequest)

    entry = request.to_entry()
    assert entry.email == "a@example.com"
    assert entry.opt_out is True


@pytest.mark.parametrize("body", [b"not json", b"{}", b'{"email": ""}'])
def test_from_json_rejects_bad_bodies(body):
    with pytest.raises(InvalidArgumentError):
        from_json(body, SubscriberIn)


def test_page_query_converts_to_params():
    assert PageQuery(offset=2, limit=10).to_params() == PageParams(offset=2, limit=10)


def test_page_query_rejects_non_positive():
    with pytest.raises(ValidationError):
        PageQuery(offset=0, limit=10)
    with pytest.raises(ValidationError):
        PageQuery(offset=1, limit=0)


def test_page_query_limit_follows_settings():
    settings = get_settings()

    assert PageQuery().limit == settings.default_page_size
    assert PageQuery(limit=settings.max_page_size).limit == settings.max_page_size
    with pytest.raises(ValidationError):
        PageQuery(limit=settings.max_page_size + 1)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
