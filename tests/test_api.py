from __future__ import annotations

import httpx
import pytest
from openai import APIStatusError

from fastapi.testclient import TestClient

from conftest import FakeLLM, make_app_config, make_llm_config, make_service
from npc_gateway.main import create_app
from npc_gateway.services.chat_service import ChatService

GATE_WARDEN_TURN = {
    "npc": {"name": "Gate Warden", "persona": "gruff"},
    "message": "Open the gate",
    "messageType": "speech",
    "history": [],
}
GATE_WARDEN_REPLY = {"reply": "Nay, not without the seal.", "intent": "none", "targets": []}


def test_gate_warden_end_to_end(client_factory) -> None:
    fake = FakeLLM(content='{"reply":"Nay, not without the seal.","intent":"none","targets":[]}')
    client = client_factory(fake)

    response = client.post("/api/chat", json=GATE_WARDEN_TURN)

    assert response.status_code == 200
    assert response.json() == GATE_WARDEN_REPLY
    assert len(fake.calls) == 1


def test_garbage_upstream_still_yields_reply_shape(client_factory) -> None:
    client = client_factory(FakeLLM(content="I am not JSON, good sir."))

    response = client.post("/api/chat", json=GATE_WARDEN_TURN)

    assert response.status_code == 200
    assert response.json() == {"reply": "I am not JSON, good sir.", "intent": "none", "targets": []}


def test_missing_message_is_400_without_upstream_call(client_factory) -> None:
    fake = FakeLLM(content="{}")
    client = client_factory(fake)

    response = client.post("/api/chat", json={"npc": {"name": "Gate Warden"}})

    assert response.status_code == 400
    assert response.json() == {"error": "Missing message or npc"}
    assert fake.calls == []


def test_invalid_json_body_is_400(client_factory) -> None:
    fake = FakeLLM(content="{}")
    client = client_factory(fake)

    response = client.post(
        "/api/chat", content=b"{oops", headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Missing message or npc"
    assert fake.calls == []


@pytest.mark.parametrize("headers", [{}, {"X-API-Key": "nope"}])
def test_wrong_or_missing_secret_is_401(client_factory, headers: dict[str, str]) -> None:
    fake = FakeLLM(content="{}")
    client = client_factory(fake, shared_secret="s3cret")

    response = client.post("/api/chat", json=GATE_WARDEN_TURN, headers=headers)

    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}
    assert fake.calls == []


def test_matching_secret_is_accepted(client_factory, fake_llm: FakeLLM) -> None:
    client = client_factory(fake_llm, shared_secret="s3cret")

    response = client.post("/api/chat", json=GATE_WARDEN_TURN, headers={"X-API-Key": "s3cret"})

    assert response.status_code == 200


def test_options_is_empty_200(client_factory, fake_llm: FakeLLM) -> None:
    client = client_factory(fake_llm)

    response = client.options("/api/chat")

    assert response.status_code == 200
    assert response.content == b""
    assert response.headers["access-control-allow-origin"] == "*"
    assert response.headers["access-control-allow-methods"] == "GET, POST, OPTIONS"
    assert response.headers["access-control-allow-headers"] == "Content-Type, X-API-Key"
    assert fake_llm.calls == []


def test_get_on_chat_is_405(client_factory, fake_llm: FakeLLM) -> None:
    client = client_factory(fake_llm)

    response = client.get("/api/chat")

    assert response.status_code == 405
    assert response.json() == {"error": "Use POST"}
    assert response.headers["access-control-allow-origin"] == "*"


def test_missing_api_key_is_500(client_factory) -> None:
    client = client_factory(None, api_key=None)

    response = client.post("/api/chat", json=GATE_WARDEN_TURN)

    assert response.status_code == 500
    assert response.json() == {"error": "OPENAI_API_KEY missing"}


def test_upstream_failure_is_502_with_detail(client_factory) -> None:
    upstream = httpx.Response(
        500,
        text="model overloaded",
        request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions"),
    )
    fake = FakeLLM(error=APIStatusError("Server error", response=upstream, body=None))
    client = client_factory(fake)

    response = client.post("/api/chat", json=GATE_WARDEN_TURN)

    assert response.status_code == 502
    assert response.json() == {"error": "LLM upstream error", "detail": "model overloaded"}
    assert response.headers["access-control-allow-origin"] == "*"


def test_unexpected_failure_is_generic_500(client_factory) -> None:
    client = client_factory(FakeLLM(error=KeyError("internal secret path")))

    response = client.post("/api/chat", json=GATE_WARDEN_TURN)

    assert response.status_code == 500
    assert response.json() == {"error": "Server error"}


def test_allow_list_echoes_known_origin(client_factory, fake_llm: FakeLLM) -> None:
    client = client_factory(fake_llm, public_cors="https://itch.io, http://localhost:8000")

    known = client.post("/api/chat", json=GATE_WARDEN_TURN, headers={"Origin": "http://localhost:8000"})
    unknown = client.post("/api/chat", json=GATE_WARDEN_TURN, headers={"Origin": "https://evil.test"})

    assert known.headers["access-control-allow-origin"] == "http://localhost:8000"
    assert unknown.headers["access-control-allow-origin"] == "https://itch.io"


def test_ping_reports_configuration(client_factory) -> None:
    client = client_factory(None, shared_secret="s3cret", api_key=None)

    response = client.get("/api/ping")

    assert response.status_code == 200
    assert response.json() == {"ok": True, "hasKey": False, "hasSecret": True}
    assert response.headers["access-control-allow-origin"] == "*"


def test_ping_options_is_empty_200(client_factory) -> None:
    client = client_factory(None, api_key=None)

    response = client.options("/api/ping")

    assert response.status_code == 200
    assert response.content == b""


def test_unknown_path_is_json_404(client_factory) -> None:
    client = client_factory(None, api_key=None)

    response = client.get("/api/nowhere")

    assert response.status_code == 404
    assert response.json() == {"error": "Not Found"}


def test_head_on_chat_is_405(client_factory, fake_llm: FakeLLM) -> None:
    client = client_factory(fake_llm)

    response = client.head("/api/chat")

    assert response.status_code == 405
    assert response.headers["access-control-allow-origin"] == "*"
    assert fake_llm.calls == []


class CrashingChatService(ChatService):
    async def handle(self, method, headers, body):
        raise RuntimeError("handler blew up")


def test_crash_outside_service_is_json_500_with_cors(fake_llm: FakeLLM) -> None:
    base = make_service(fake_llm)
    service = CrashingChatService(
        llm_config=base.llm_config, app_config=base.app_config, llm_service=base.llm_service
    )
    app = create_app(make_app_config(public_cors="https://itch.io"), chat_service=service)
    client = TestClient(app)

    response = client.post("/api/chat", json=GATE_WARDEN_TURN)

    assert response.status_code == 500
    assert response.json() == {"error": "Server error"}
    assert response.headers["access-control-allow-origin"] == "https://itch.io"


def test_app_builds_service_from_given_config() -> None:
    app = create_app(make_app_config(shared_secret="s3cret"), make_llm_config(api_key=None))
    client = TestClient(app)

    ping = client.get("/api/ping")
    chat = client.post("/api/chat", json=GATE_WARDEN_TURN)

    assert ping.json() == {"ok": True, "hasKey": False, "hasSecret": True}
    assert chat.status_code == 401
    assert chat.json() == {"error": "Unauthorized"}
