# tests/test_core/test_logging.py

import pytest
import structlog
from structlog.testing import capture_logs

from app.core.logging import log_security_event


@pytest.mark.anyio
async def test_every_response_carries_a_request_id(client):
    first = await client.get("/health")
    second = await client.get("/reviews/missing")

    assert len(first.headers["x-request-id"]) == 32
    assert second.status_code == 404
    assert second.headers["x-request-id"] != first.headers["x-request-id"]


@pytest.mark.anyio
async def test_request_id_is_unbound_after_the_request(client):
    await client.get("/health")

    assert "request_id" not in structlog.contextvars.get_contextvars()


def test_security_event_levels():
    with capture_logs() as logs:
        log_security_event("review_delete_denied", review_id="r1")
        log_security_event("role_changed", severity="low", target_uid="u1")

    assert [(e["event_type"], e["log_level"]) for e in logs] == [
        ("review_delete_denied", "warning"),
        ("role_changed", "info"),
    ]
