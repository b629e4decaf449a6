"""Integration tests for the push variant: POST /upload_qr and GET /events."""

from __future__ import annotations

from fastapi.testclient import TestClient

from qr_relay.api.main import create_app
from qr_relay.broadcast import Broadcaster
from qr_relay.container import RelayContainer
from qr_relay.json_utils import load_json_str, narrow_json_to_dict

from .conftest import make_settings


class _ExplodingBroadcaster(Broadcaster):
    def publish(self, payload: str) -> int:
        raise RuntimeError("fan-out broke")


def _client(container: RelayContainer) -> TestClient:
    return TestClient(create_app(container=container), raise_server_exceptions=False)


def test_upload_without_viewers_succeeds(push_container: RelayContainer) -> None:
    client = _client(push_container)

    response = client.post("/upload_qr", json={"data": "HELLO"})

    assert response.status_code == 200
    assert response.text == "Data received"


def test_upload_reaches_connected_sessions_only(
    push_container: RelayContainer, broadcaster: Broadcaster
) -> None:
    client = _client(push_container)
    a = broadcaster.open_session()
    b = broadcaster.open_session()

    client.post("/upload_qr", json={"data": "X"})
    c = broadcaster.open_session()

    assert a.queue.get_nowait() == "X"
    assert b.queue.get_nowait() == "X"
    assert c.queue.empty()


def test_rejected_upload_is_not_broadcast(
    push_container: RelayContainer, broadcaster: Broadcaster
) -> None:
    client = _client(push_container)
    session = broadcaster.open_session()

    response = client.post("/upload_qr", json={"data": ""})

    assert response.status_code == 400
    assert narrow_json_to_dict(load_json_str(response.text))["code"] == "INVALID_INPUT"
    assert session.queue.empty()


def test_duplicate_skipped_when_configured(broadcaster: Broadcaster) -> None:
    settings = make_settings("push", duplicate_policy="skip_consecutive")
    client = _client(RelayContainer(settings, broadcaster=broadcaster))
    session = broadcaster.open_session()

    client.post("/upload_qr", json={"data": "SAME"})
    response = client.post("/upload_qr", json={"data": "SAME"})

    assert response.text == "Duplicate ignored"
    assert session.queue.qsize() == 1


def test_publish_failure_returns_500() -> None:
    container = RelayContainer(make_settings("push"), broadcaster=_ExplodingBroadcaster())
    client = _client(container)

    response = client.post("/upload_qr", json={"data": "X"})

    assert response.status_code == 500
    body = narrow_json_to_dict(load_json_str(response.text))
    assert body["code"] == "BROADCAST_ERROR"
    assert body["message"] == "Error broadcasting data"


def test_events_stream_headers_and_end(
    push_container: RelayContainer, broadcaster: Broadcaster
) -> None:
    client = _client(push_container)
    broadcaster.close()

    response = client.get("/events")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")
    assert response.headers["cache-control"] == "no-cache"
    assert response.text == "retry: 1000\n\n"
    assert broadcaster.session_count == 0


def test_qr_data_route_not_mounted(push_container: RelayContainer) -> None:
    client = _client(push_container)

    assert client.get("/qr_data").status_code == 404
