"""
tests/test_store_session.py — 콘텐츠 저장소 및 작업 조율 테스트

테스트 대상:
  - store.ContentStore (add / remove / retag / snapshot)
  - session.AssistantSession (작업별 진입점, 오래된 응답 폐기, 최신 결과 슬롯)
"""

from __future__ import annotations

import logging

import pytest

from copydesk.errors import FailureKind, TransportFailure
from copydesk.ingest import SourceIngestor
from copydesk.schema import (
    BilingualAlignment,
    ContentCategory,
    ErrorResult,
    GenerationResult,
    SearchResult,
    StyleGuideText,
    TaskKind,
)
from copydesk.session import AssistantSession
from copydesk.store import ContentStore

from conftest import ALIGNMENT_REPLY, SEARCH_REPLY, STYLE_GUIDE_REPLY, FakeClient, as_json


def _unit(name: str, text: str = "Save,บันทึก", category=None):
    return SourceIngestor().ingest_bytes(name, text.encode("utf-8"), category)


@pytest.fixture
def store() -> ContentStore:
    return ContentStore([
        _unit("glossary.csv"),
        _unit("style-notes.md", "Be brief."),
        _unit("more-terms.txt", "Cancel,ยกเลิก"),
    ])


# ── 저장소 ────────────────────────────────────────────────────────

class TestContentStore:
    """세션 소유 저장소."""

    def test_snapshot_order(self, store):
        assert [u.display_name for u in store.snapshot()] == [
            "glossary.csv", "style-notes.md", "more-terms.txt",
        ]
        assert isinstance(store.snapshot(), tuple)

    def test_snapshot_by_category(self, store):
        assert [u.display_name for u in store.snapshot(ContentCategory.STYLE_GUIDE)] == ["style-notes.md"]
        assert len(store.snapshot(ContentCategory.GLOSSARY)) == 2

    def test_retag_keeps_position(self, store):
        first = store.snapshot()[0]
        retagged = store.retag(first.id, ContentCategory.STYLE_GUIDE)
        assert retagged.category == ContentCategory.STYLE_GUIDE
        assert first.category == ContentCategory.GLOSSARY
        assert store.snapshot()[0].id == first.id
        assert len(store.snapshot(ContentCategory.STYLE_GUIDE)) == 2

    def test_snapshot_is_stable(self, store):
        """스냅샷은 이후 변경의 영향을 받지 않는다."""
        snap = store.snapshot()
        store.remove(snap[1].id)
        assert len(snap) == 3
        assert len(store) == 2
        assert snap[1].id not in store

    def test_missing_id(self, store):
        with pytest.raises(KeyError):
            store.get("nope")

    def test_duplicate_id(self, store):
        with pytest.raises(ValueError):
            store.add(store.snapshot()[0])


# ── 작업 조율 ─────────────────────────────────────────────────────

class TestAssistantSession:
    """작업별 진입점."""

    def test_search_uses_glossary_only(self, store, fake_client):
        session = AssistantSession(store, fake_client)
        result = session.search("  save ")
        assert isinstance(result, SearchResult)
        request = fake_client.requests[0]
        assert [u.display_name for u in request.attached_units] == ["glossary.csv", "more-terms.txt"]
        assert '"save"' in request.instruction_text
        assert session.latest(TaskKind.SEARCH) is result

    def test_search_guard_rails(self, fake_client):
        """빈 질의 또는 용어집 없음 → None, 요청 없음."""
        empty = AssistantSession(ContentStore([_unit("style.md", "x")]), fake_client)
        assert empty.search("save") is None
        with_glossary = AssistantSession(ContentStore([_unit("terms.txt")]), fake_client)
        assert with_glossary.search("   ") is None
        assert fake_client.requests == []

    def test_generate(self, store, fake_client):
        session = AssistantSession(store, fake_client)
        result = session.generate("Delete dialog in English and Thai")
        assert isinstance(result, GenerationResult)
        assert len(result.primary.content) == 2
        names = [u.display_name for u in fake_client.requests[0].attached_units]
        assert names == ["glossary.csv", "more-terms.txt", "style-notes.md"]
        assert session.generate("") is None

    def test_generate_failure(self, store):
        client = FakeClient({TaskKind.GENERATE: TransportFailure("offline")})
        result = AssistantSession(store, client).generate("Save button")
        assert isinstance(result, ErrorResult)

    def test_match_bilingual_explicit_units(self, store, fake_client):
        session = AssistantSession(store, fake_client)
        upload = _unit("bilingual.txt", "Save บันทึก", ContentCategory.GENERAL)
        result = session.match_bilingual([upload])
        assert isinstance(result, BilingualAlignment)
        assert fake_client.requests[0].attached_units[0].display_name == "bilingual.txt"

    def test_match_bilingual_defaults_to_glossary(self, store, fake_client):
        AssistantSession(store, fake_client).match_bilingual()
        assert len(fake_client.requests[0].attached_units) == 2

    def test_style_guide_then_refine(self, store, fake_client):
        """수정은 최신 가이드를 바탕으로 하고 같은 슬롯을 교체한다."""
        session = AssistantSession(store, fake_client)
        created = session.create_style_guide()
        assert isinstance(created, StyleGuideText)
        assert len(fake_client.requests[0].attached_units) == 3

        refined = session.refine_style_guide("Make it warmer")
        assert "Warm" in refined.text
        refine_request = fake_client.requests[1]
        assert refine_request.task_kind == TaskKind.STYLE_GUIDE_REFINE
        assert STYLE_GUIDE_REPLY in refine_request.instruction_text
        assert session.latest(TaskKind.STYLE_GUIDE) is refined
        assert session.latest(TaskKind.STYLE_GUIDE_REFINE) is refined

    def test_refine_needs_guide(self, store, fake_client):
        session = AssistantSession(store, fake_client)
        assert session.refine_style_guide("Make it warmer") is None
        assert session.refine_style_guide("", current_guide="## A") is None
        assert fake_client.requests == []

    def test_refine_skips_failed_guide(self, store):
        client = FakeClient({TaskKind.STYLE_GUIDE: TransportFailure("too large")})
        session = AssistantSession(store, client)
        failed = session.create_style_guide()
        assert failed.failure == FailureKind.TRANSPORT
        assert session.refine_style_guide("Shorter") is None

    def test_results_superseded(self, store):
        """같은 종류의 새 결과는 이전 결과를 통째로 교체."""
        replies = iter([as_json(SEARCH_REPLY), "not json"])
        client = FakeClient({TaskKind.SEARCH: lambda request: next(replies)})
        session = AssistantSession(store, client)
        session.search("save")
        second = session.search("save")
        assert session.latest(TaskKind.SEARCH) is second
        assert second.results == ()


class TestStaleResponse:
    """겹친 요청의 늦은 응답 폐기."""

    def test_late_response_discarded(self, store, caplog):
        """먼저 보낸 요청의 응답이 나중에 오면 버린다."""
        session: AssistantSession

        def reply(request):
            if len(client.requests) == 1:
                # 첫 응답이 오기 전에 같은 종류의 새 요청이 나간다.
                session.search("cancel")
                return as_json(dict(SEARCH_REPLY, message="first"))
            return as_json(dict(SEARCH_REPLY, message="second"))

        client = FakeClient({TaskKind.SEARCH: reply})
        session = AssistantSession(store, client)

        with caplog.at_level(logging.DEBUG, logger="copydesk.session"):
            outcome = session.search("save")

        assert outcome is None
        assert session.latest(TaskKind.SEARCH).message == "second"
        assert "오래된 응답 폐기" in caplog.text

    def test_kinds_independent(self, store):
        """다른 종류의 요청은 서로의 티켓에 영향을 주지 않는다."""
        session: AssistantSession

        def search_reply(request):
            session.match_bilingual()
            return as_json(SEARCH_REPLY)

        client = FakeClient({
            TaskKind.SEARCH: search_reply,
            TaskKind.BILINGUAL_MATCH: as_json(ALIGNMENT_REPLY),
        })
        session = AssistantSession(store, client)

        assert isinstance(session.search("save"), SearchResult)
        assert isinstance(session.latest(TaskKind.BILINGUAL_MATCH), BilingualAlignment)
