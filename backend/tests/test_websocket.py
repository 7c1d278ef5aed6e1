"""End-to-end tests for the websocket endpoint and health route."""

from unittest.mock import AsyncMock, Mock

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from mentor.app_factory.app_factory import AppFactory
from mentor.main import create_app
from mentor.models.domain import GuidanceResult


@pytest.fixture
def factory(config):
    factory = AppFactory(config=config)
    # Keep test output out of the project log file
    factory.logging_manager = Mock()

    guidance_client = Mock(timeout=20.0)
    guidance_client.generate_guidance = AsyncMock(
        return_value=GuidanceResult(
            explanation="Transistors switch and amplify current.",
            visualization_directive="NPN transistor with three leads",
        )
    )
    factory.guidance_client = guidance_client
    factory.mesh_client = Mock(timeout=15.0)
    return factory


@pytest.fixture
def client(factory):
    with TestClient(create_app(factory)) as client:
        yield client


def test_health_reports_cad_mode(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "cad_mode": "MOCK"}


def test_mentor_query_round_trip(client, factory):
    with client.websocket_connect("/ws") as ws:
        ws.send_json({"type": "mentor_query", "query": "what is a transistor"})
        message = ws.receive_json()

    assert message["type"] == "mentor_response"
    assert message["guidance"] == "Transistors switch and amplify current."
    expected = factory.get_catalog().lookup("transistor")
    assert message["modelData"] == expected.to_dict()


def test_execute_code_round_trip(client):
    with client.websocket_connect("/ws") as ws:
        ws.send_json({"type": "execute_code", "code": "return 2 + 2"})
        message = ws.receive_json()

    assert message == {"type": "execution_result", "result": "4"}


def test_restricted_code_round_trip(client):
    with client.websocket_connect("/ws") as ws:
        ws.send_json({"type": "execute_code", "code": "import os"})
        message = ws.receive_json()

    assert message == {
        "type": "execution_result",
        "result": "Execution Error: Restricted keywords detected",
    }


def test_unknown_and_invalid_messages_keep_the_connection_open(client):
    with client.websocket_connect("/ws") as ws:
        ws.send_json({"type": "chat", "text": "hi"})
        assert ws.receive_json() == {"type": "error", "message": "Unknown message type: chat"}

        ws.send_text("{not json")
        assert ws.receive_json() == {"type": "error", "message": "Invalid message"}

        ws.send_bytes(b"\xff\xfe not utf-8")
        assert ws.receive_json() == {"type": "error", "message": "Invalid message"}

        ws.send_bytes(b'{"type": "execute_code", "code": "return 6 * 7"}')
        assert ws.receive_json() == {"type": "execution_result", "result": "42"}

        ws.send_json({"type": "execute_code", "code": "return 'still here'"})
        assert ws.receive_json() == {"type": "execution_result", "result": "still here"}


def test_disconnect_ends_the_session(client, factory):
    with client.websocket_connect("/ws") as ws:
        ws.send_json({"type": "execute_code", "code": "return 1"})
        ws.receive_json()
        assert factory.get_session_manager().get_session_count() == 1

    assert factory.get_session_manager().get_session_count() == 0


def test_foreign_origin_is_rejected(client):
    with pytest.raises(WebSocketDisconnect) as exc_info:
        with client.websocket_connect("/ws", headers={"origin": "http://evil.example"}):
            pass

    assert exc_info.value.code == 1008


def test_configured_origin_is_accepted(client):
    with client.websocket_connect("/ws", headers={"origin": "http://localhost:3000"}) as ws:
        ws.send_json({"type": "execute_code", "code": "return 'ok'"})
        assert ws.receive_json()["result"] == "ok"
