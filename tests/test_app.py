from __future__ import annotations

import re

from fastapi.testclient import TestClient

from gemini_gateway.serve.app import BUSY_MESSAGE, create_app

from _fakes import ScriptedUpstream, error_payload, make_config, ok_payload


def _client(upstream: ScriptedUpstream, delays: list[int] | None = None) -> TestClient:
    sleep = delays.append if delays is not None else (lambda ms: None)
    return TestClient(create_app(make_config(), client=upstream.client(), sleep=sleep))


def test_health_ok() -> None:
    client = _client(ScriptedUpstream([]))
    r = client.get("/health")
    assert r.status_code == 200
    data = r.json()
    assert data["status"] == "ok"
    assert data["models"] == ["model-a", "model-b", "model-c"]


def test_index_serves_landing_page() -> None:
    r = _client(ScriptedUpstream([])).get("/")
    assert r.status_code == 200
    assert "Gemini Gateway" in r.text


def test_generate_returns_text_and_model() -> None:
    upstream = ScriptedUpstream([(429, error_payload("busy")), (200, ok_payload("Hello test"))])
    r = _client(upstream).post(
        "/generate",
        json={"prompt": "hi", "history": [{"role": "assistant", "content": "earlier"}]},
    )
    assert r.status_code == 200
    assert r.json() == {"response": "Hello test", "model": "model-b"}


def test_generate_without_prompt_is_400() -> None:
    upstream = ScriptedUpstream([])
    client = _client(upstream)
    r = client.post("/generate", json={})
    assert r.status_code == 400
    assert "error" in r.json()
    assert client.post("/generate", json={"prompt": ""}).status_code == 400
    assert upstream.requests == []


def test_generate_invalid_body_is_400() -> None:
    r = _client(ScriptedUpstream([])).post("/generate", json={"prompt": "hi", "history": "nope"})
    assert r.status_code == 400
    assert "error" in r.json()


def test_generate_terminal_failure_is_500() -> None:
    delays: list[int] = []
    upstream = ScriptedUpstream([(429, error_payload("Resource exhausted"))] * 9)
    r = _client(upstream, delays).post("/generate", json={"prompt": "hi"})
    assert r.status_code == 500
    assert r.json() == {"error": "Resource exhausted", "response": BUSY_MESSAGE}
    assert delays == [1500, 1500]


def test_generate_malformed_envelope_is_500() -> None:
    upstream = ScriptedUpstream([(200, {"candidates": []})])
    r = _client(upstream).post("/generate", json={"prompt": "hi"})
    assert r.status_code == 500
    assert r.json()["response"] == BUSY_MESSAGE


def test_export_pdf() -> None:
    content = "\n".join(f"row {i}" for i in range(60))
    r = _client(ScriptedUpstream([])).post("/exportPDF", json={"content": content})
    assert r.status_code == 200
    assert r.headers["content-type"] == "application/pdf"
    assert r.headers["content-disposition"] == "attachment; filename=export.pdf"
    assert r.content.startswith(b"%PDF")
    assert len(re.findall(rb"/Type /Page\b", r.content)) == 2


def test_export_pdf_without_content_is_400() -> None:
    client = _client(ScriptedUpstream([]))
    assert client.post("/exportPDF", json={}).status_code == 400
    r = client.post("/exportPDF", json={"content": ""})
    assert r.status_code == 400
    assert r.json() == {"error": "No content provided"}


def test_export_pdf_failure_is_500(monkeypatch) -> None:
    import gemini_gateway.serve.app as app_mod

    def _boom(text: str) -> bytes:
        raise RuntimeError("font exploded")

    monkeypatch.setattr(app_mod, "render_pdf", _boom)
    r = _client(ScriptedUpstream([])).post("/exportPDF", json={"content": "x"})
    assert r.status_code == 500
    assert r.json() == {"error": "font exploded"}
