"""
copydesk.session — 작업 조율

작업 종류마다 하나의 진입점을 둡니다. 각 호출은 종류별 단조 증가 티켓을
받고, 응답이 왔을 때 그 티켓이 여전히 최신이면 해당 종류의 최신 결과로
저장합니다. 더 새 요청이 이미 나갔다면 늦게 도착한 응답은 버립니다.

결과는 통째로 교체되며 병합하지 않습니다. 스타일 가이드 수정은 생성과
같은 슬롯을 씁니다.
"""

from __future__ import annotations

import itertools
import logging
import threading
from typing import Iterable

from copydesk.client import InferenceClientProtocol
from copydesk.composer import RequestComposer
from copydesk.decoder import execute
from copydesk.schema import (
    ContentCategory,
    ContentUnit,
    StyleGuideText,
    TaskKind,
    TaskRequest,
    TaskResult,
)
from copydesk.store import ContentStore

logger = logging.getLogger(__name__)


def _slot(kind: TaskKind) -> TaskKind:
    if kind == TaskKind.STYLE_GUIDE_REFINE:
        return TaskKind.STYLE_GUIDE
    return kind


class AssistantSession:
    """
    세션 하나의 작업 조율기.

    사용법:
        session = AssistantSession(store, GeminiInferenceClient(api_key=...))
        result = session.search("save")
        guide = session.create_style_guide()
    """

    def __init__(
        self,
        store: ContentStore,
        client: InferenceClientProtocol,
        composer: RequestComposer | None = None,
    ):
        self.store = store
        self.client = client
        self.composer = composer or RequestComposer()
        self._lock = threading.Lock()
        self._counters = {kind: itertools.count(1) for kind in TaskKind if _slot(kind) == kind}
        self._issued: dict[TaskKind, int] = {}
        self._latest: dict[TaskKind, TaskResult] = {}

    # ── 작업 진입점 ───────────────────────────────────────────────

    def search(self, query: str) -> TaskResult | None:
        """용어집 검색. 빈 질의 또는 용어집이 없으면 None."""
        query = query.strip()
        glossary = self.store.snapshot(ContentCategory.GLOSSARY)
        if not query or not glossary:
            logger.info("검색 생략: 질의 또는 용어집 없음")
            return None
        return self._run(self.composer.search(query, glossary))

    def generate(self, request: str) -> TaskResult | None:
        """마이크로카피 생성. 용어집/스타일 가이드 단위를 모두 첨부합니다."""
        request = request.strip()
        if not request:
            return None
        return self._run(self.composer.generate(
            request,
            self.store.snapshot(ContentCategory.GLOSSARY),
            self.store.snapshot(ContentCategory.STYLE_GUIDE),
        ))

    def match_bilingual(self, units: Iterable[ContentUnit] | None = None) -> TaskResult | None:
        """영어/태국어 정렬. units 를 주지 않으면 용어집 단위를 씁니다."""
        selected = tuple(units) if units is not None else self.store.snapshot(ContentCategory.GLOSSARY)
        if not selected:
            return None
        return self._run(self.composer.bilingual_match(selected))

    def create_style_guide(self, units: Iterable[ContentUnit] | None = None) -> TaskResult | None:
        """스타일 가이드 합성. units 를 주지 않으면 저장소 전체를 씁니다."""
        selected = tuple(units) if units is not None else self.store.snapshot()
        if not selected:
            return None
        return self._run(self.composer.style_guide(selected))

    def refine_style_guide(self, instruction: str, current_guide: str | None = None) -> TaskResult | None:
        """
        현재 스타일 가이드를 지시에 따라 수정합니다.

        current_guide 를 주지 않으면 이 세션의 최신 가이드(실패값 제외)를 씁니다.
        """
        instruction = instruction.strip()
        if current_guide is None:
            latest = self._latest.get(TaskKind.STYLE_GUIDE)
            if isinstance(latest, StyleGuideText) and latest.failure is None:
                current_guide = latest.text
        if not instruction or not current_guide:
            return None
        return self._run(self.composer.refine_style_guide(current_guide, instruction))

    def latest(self, kind: TaskKind) -> TaskResult | None:
        """해당 종류의 현재 결과."""
        return self._latest.get(_slot(TaskKind(kind)))

    # ── 티켓 ──────────────────────────────────────────────────────

    def _issue(self, kind: TaskKind) -> int:
        slot = _slot(kind)
        with self._lock:
            ticket = next(self._counters[slot])
            self._issued[slot] = ticket
        return ticket

    def _settle(self, kind: TaskKind, ticket: int, result: TaskResult) -> bool:
        slot = _slot(kind)
        with self._lock:
            if self._issued.get(slot) != ticket:
                logger.debug(
                    "오래된 응답 폐기: %s (티켓 %d, 최신 %d)",
                    kind.value, ticket, self._issued.get(slot, 0),
                )
                return False
            self._latest[slot] = result
        return True

    def _run(self, request: TaskRequest) -> TaskResult | None:
        """
        요청 1회 실행. 응답이 최신이면 결과를, 더 새 요청에 밀렸으면 None 을
        반환합니다.
        """
        kind = request.task_kind
        ticket = self._issue(kind)
        result = execute(self.client, request)
        if not self._settle(kind, ticket, result):
            return None
        return result
