"""
tests/test_client.py — 추론 클라이언트 테스트

테스트 대상:
  - client.request_parts (세그먼트 → Gemini 파트)
  - client.GeminiInferenceClient.generate (생성 설정, 타임아웃, 빈 응답)
  - cli._make_client (설정 전달)

Gemini SDK 호출부는 가짜 모듈로 바꿔 네트워크 없이 확인합니다.
"""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from copydesk import cli
from copydesk.client import GeminiInferenceClient, request_parts
from copydesk.config import Settings
from copydesk.errors import ConfigError, EmptyResponse, TransportFailure
from copydesk.schema import OutputContract, Segment, TaskKind, TaskRequest


def _request(structured: bool = True) -> TaskRequest:
    contract = (
        OutputContract(mode="schema", schema={"type": "OBJECT"})
        if structured else OutputContract(mode="skeleton")
    )
    return TaskRequest(
        task_kind=TaskKind.SEARCH,
        instruction_text="Find save",
        output_contract=contract,
        system_instruction="You are a UX writer.",
        segments=(
            Segment.of_text("Find save"),
            Segment.of_binary(b"%PDF-1.4", "application/pdf"),
            Segment.of_text("[SOURCE FILE: terms.csv]"),
        ),
    )


class FakeGenai:
    """google.generativeai 호출 기록용."""

    def __init__(self, response):
        self.response = response
        self.calls: list[dict] = []

    def GenerationConfig(self, **kwargs):
        return dict(kwargs)

    def GenerativeModel(self, name, system_instruction=None):
        genai = self

        class _Model:
            def generate_content(self, parts, generation_config=None, request_options=None):
                genai.calls.append({
                    "model": name,
                    "system_instruction": system_instruction,
                    "parts": parts,
                    "config": generation_config,
                    "request_options": request_options,
                })
                if isinstance(genai.response, Exception):
                    raise genai.response
                return genai.response

        return _Model()


def _client(response, **kwargs) -> tuple[GeminiInferenceClient, FakeGenai]:
    client = GeminiInferenceClient(api_key="test-key", **kwargs)
    fake = FakeGenai(response)
    client._genai = fake
    return client, fake


# ── 파트 변환 ─────────────────────────────────────────────────────

class TestRequestParts:
    """세그먼트 순서와 형태."""

    def test_text_and_binary(self):
        parts = request_parts(_request())
        assert parts == [
            "Find save",
            {"mime_type": "application/pdf", "data": b"%PDF-1.4"},
            "[SOURCE FILE: terms.csv]",
        ]

    def test_empty(self):
        assert request_parts(TaskRequest(task_kind=TaskKind.STYLE_GUIDE, instruction_text="x")) == []


# ── Gemini 호출 ───────────────────────────────────────────────────

class TestGeminiClient:
    """generate_content 호출 1회."""

    def test_requires_api_key(self):
        with pytest.raises(ConfigError):
            GeminiInferenceClient(api_key="")

    def test_structured_request(self):
        response = SimpleNamespace(candidates=[object()], text='{"matchFound": true}')
        client, fake = _client(response, model="gemini-test", temperature=0.2, timeout=45.0)

        assert client.generate(_request()) == '{"matchFound": true}'
        call = fake.calls[0]
        assert call["model"] == "gemini-test"
        assert call["system_instruction"] == "You are a UX writer."
        assert call["config"] == {
            "temperature": 0.2,
            "response_mime_type": "application/json",
            "response_schema": {"type": "OBJECT"},
        }
        assert call["request_options"] == {"timeout": 45.0}

    def test_free_form_without_timeout(self):
        response = SimpleNamespace(candidates=[object()], text="## 1. Voice & Tone")
        client, fake = _client(response)
        client.generate(_request(structured=False))
        assert fake.calls[0]["config"] == {}
        assert fake.calls[0]["request_options"] is None

    def test_no_candidates(self):
        client, _ = _client(SimpleNamespace(candidates=[], text=""))
        with pytest.raises(EmptyResponse):
            client.generate(_request())

    def test_sdk_error_is_transport_failure(self):
        client, _ = _client(RuntimeError("deadline exceeded"))
        with pytest.raises(TransportFailure):
            client.generate(_request())


# ── CLI 설정 전달 ─────────────────────────────────────────────────

class TestMakeClient:
    """Settings → GeminiInferenceClient."""

    def test_settings_passed_through(self, monkeypatch):
        created = {}

        def fake_client(**kwargs):
            created.update(kwargs)
            return "client"

        monkeypatch.setattr("copydesk.client.GeminiInferenceClient", fake_client)
        settings = Settings(api_key="k", model="gemini-x", temperature=0.5, timeout=12.0)
        assert cli._make_client(settings) == "client"
        assert created == {"model": "gemini-x", "api_key": "k", "temperature": 0.5, "timeout": 12.0}
