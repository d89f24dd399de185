"""Tests for mapping error kinds to HTTP responses."""

import pytest
from fastapi import HTTPException

from backend.core.exceptions import (
    LocalStoreError, NetworkError, NoIdentityResolved, RemoteRejected, RequestTimeoutError
)
from backend.utils.error_handling import format_exception_for_client, get_error_code, handle_exception


@pytest.mark.parametrize("exception, status_code, code", [
    (RequestTimeoutError("https://hooks.test", 8000), 504, "timeout"),
    (RemoteRejected(500, "boom"), 502, "remote_rejected"),
    (NetworkError("refused"), 502, "network_error"),
    (NoIdentityResolved("nothing"), 409, "no_identity_resolved"),
    (LocalStoreError("Assistant create failed"), 500, "local_store_error"),
    (ValueError("missing client_phone"), 422, "invalid_value"),
    (RuntimeError("unexpected"), 500, "runtime_error"),
])
def test_error_kinds_map_to_status(exception, status_code, code):
    http_exc = handle_exception(exception, "Failed")

    assert http_exc.status_code == status_code
    assert get_error_code(exception) == code


def test_http_exception_passes_through():
    original = HTTPException(status_code=404, detail="Assistant not found")

    assert handle_exception(original) is original


def test_local_store_details_are_hidden():
    http_exc = handle_exception(LocalStoreError("Assistant create failed"), "Failed to create assistant")

    assert http_exc.detail == "Failed to create assistant"


def test_client_format():
    formatted = format_exception_for_client(RemoteRejected(502, "down"))

    assert formatted["error_type"] == "RemoteRejected"
    assert formatted["code"] == "remote_rejected"
