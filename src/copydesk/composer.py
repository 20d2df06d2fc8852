"""
copydesk.composer — 작업별 추론 요청 조립

지시문(프롬프트 템플릿) + 콘텐츠 단위 + 출력 계약을 하나의 TaskRequest 로
묶습니다. 세그먼트 순서는 항상:

  1. 지시문
  2. 콘텐츠 단위 (수집 순서), 텍스트 단위는 출처 경계 표시로 감쌈
       [SOURCE FILE: 이름]
       ...
       [END SOURCE FILE]

프롬프트 템플릿은 copydesk/prompts/*.txt 에 있으며 {변수} 로 치환합니다.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Iterable

from copydesk.budget import CONTENT_CEILING, guard_units
from copydesk.schema import (
    ContentUnit,
    OutputContract,
    Segment,
    TaskKind,
    TaskRequest,
)

logger = logging.getLogger(__name__)

# ── 프롬프트 템플릿 디렉토리 ──────────────────────────────────────

PROMPTS_DIR = Path(__file__).parent / "prompts"

TEMPLATE_FILES: dict[TaskKind, str] = {
    TaskKind.SEARCH: "search.txt",
    TaskKind.GENERATE: "generate.txt",
    TaskKind.BILINGUAL_MATCH: "bilingual_match.txt",
    TaskKind.STYLE_GUIDE: "style_guide.txt",
    TaskKind.STYLE_GUIDE_REFINE: "style_guide_refine.txt",
}

# ── 스타일 가이드 섹션 골격 ───────────────────────────────────────

STYLE_GUIDE_SKELETON: tuple[str, ...] = (
    "1. Voice & Tone",
    "2. Core Principles",
    "3. Formatting & Mechanics",
    "4. Component Microcopy Patterns",
    "5. Terminology",
)

GLOSSARY_DIVIDER = "--- GLOSSARY FILES ---"
STYLE_GUIDE_DIVIDER = "--- STYLE GUIDE FILES ---"

# ── 출력 스키마 (Gemini response_schema 형식) ─────────────────────

_STRING = {"type": "STRING"}

SEARCH_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "matchFound": {"type": "BOOLEAN"},
        "message": _STRING,
        "results": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "term": _STRING,
                    "definitions": {
                        "type": "ARRAY",
                        "items": {
                            "type": "OBJECT",
                            "properties": {"label": _STRING, "text": _STRING},
                            "required": ["label", "text"],
                        },
                    },
                    "metadata": {
                        "type": "ARRAY",
                        "items": {
                            "type": "OBJECT",
                            "properties": {"key": _STRING, "value": _STRING},
                            "required": ["key", "value"],
                        },
                    },
                    "source": _STRING,
                    "usageNotes": _STRING,
                },
                "required": ["term", "definitions", "source"],
            },
        },
    },
    "required": ["matchFound", "message", "results"],
}

_MICROCOPY_CONTENT = {
    "type": "OBJECT",
    "properties": {
        "language": _STRING,
        "title": _STRING,
        "description": _STRING,
        "primaryButton": _STRING,
        "secondaryButton": _STRING,
    },
    "required": ["description", "language"],
}

_GENERATION_OPTION = {
    "type": "OBJECT",
    "properties": {
        "variantName": _STRING,
        "content": {"type": "ARRAY", "items": _MICROCOPY_CONTENT},
    },
    "required": ["variantName", "content"],
}

GENERATION_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "primary": _GENERATION_OPTION,
        "alternatives": {"type": "ARRAY", "items": _GENERATION_OPTION},
        "rationale": {"type": "STRING", "description": "Why these choices were made."},
    },
    "required": ["primary", "alternatives", "rationale"],
}

BILINGUAL_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "matches": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {"en": _STRING, "th": _STRING},
                "required": ["en", "th"],
            },
        },
        "unmatchedEn": {"type": "ARRAY", "items": _STRING},
        "unmatchedTh": {"type": "ARRAY", "items": _STRING},
    },
    "required": ["matches", "unmatchedEn", "unmatchedTh"],
}

SKELETON_CONTRACT = OutputContract(mode="skeleton", skeleton=STYLE_GUIDE_SKELETON)

_VARIABLE_RE = re.compile(r"\{(\w+)\}")


def load_template(name: str, prompts_dir: Path = PROMPTS_DIR) -> str:
    """프롬프트 템플릿 파일을 읽습니다."""
    path = prompts_dir / name
    if not path.exists():
        raise FileNotFoundError(f"프롬프트 템플릿 없음: {path}")
    return path.read_text(encoding="utf-8")


def substitute_variables(template: str, var_map: dict[str, str]) -> str:
    """템플릿 내 {variable} 패턴을 한 번에 치환. 모르는 변수는 그대로 둡니다."""
    return _VARIABLE_RE.sub(lambda m: var_map.get(m.group(1), m.group(0)), template)


def source_segment(unit: ContentUnit) -> Segment:
    """콘텐츠 단위 하나 → 전송 세그먼트."""
    if unit.is_binary:
        return Segment.of_binary(unit.payload.raw, unit.mime_type or "application/octet-stream")  # type: ignore[union-attr]
    return Segment.of_text(f"[SOURCE FILE: {unit.display_name}]\n{unit.text}\n[END SOURCE FILE]")


class RequestComposer:
    """작업별 TaskRequest 조립기."""

    def __init__(self, prompts_dir: Path = PROMPTS_DIR, ceiling: int = CONTENT_CEILING):
        self.prompts_dir = Path(prompts_dir)
        self.ceiling = ceiling
        self._system_instruction: str | None = None

    @property
    def system_instruction(self) -> str:
        if self._system_instruction is None:
            self._system_instruction = load_template("system_instruction.txt", self.prompts_dir).strip()
        return self._system_instruction

    def search(self, query: str, units: Iterable[ContentUnit]) -> TaskRequest:
        """용어집 검색 요청."""
        return self._build(
            TaskKind.SEARCH,
            {"query": query},
            units,
            OutputContract(mode="schema", schema=SEARCH_SCHEMA),
        )

    def generate(
        self,
        request: str,
        glossary_units: Iterable[ContentUnit],
        style_units: Iterable[ContentUnit],
    ) -> TaskRequest:
        """마이크로카피 생성 요청. 용어집 → 스타일 가이드 순서로 첨부."""
        instruction = self._render(TaskKind.GENERATE, {"request": request})
        glossary = guard_units(glossary_units, self.ceiling)
        styles = guard_units(style_units, self.ceiling)

        segments = [Segment.of_text(instruction), Segment.of_text(GLOSSARY_DIVIDER)]
        segments.extend(source_segment(u) for u in glossary)
        segments.append(Segment.of_text(STYLE_GUIDE_DIVIDER))
        segments.extend(source_segment(u) for u in styles)

        return TaskRequest(
            task_kind=TaskKind.GENERATE,
            instruction_text=instruction,
            attached_units=glossary + styles,
            output_contract=OutputContract(mode="schema", schema=GENERATION_SCHEMA),
            system_instruction=self.system_instruction,
            segments=tuple(segments),
        )

    def bilingual_match(self, units: Iterable[ContentUnit]) -> TaskRequest:
        """영어/태국어 용어 정렬 요청."""
        return self._build(
            TaskKind.BILINGUAL_MATCH,
            {},
            units,
            OutputContract(mode="schema", schema=BILINGUAL_SCHEMA),
        )

    def style_guide(self, units: Iterable[ContentUnit]) -> TaskRequest:
        """스타일 가이드 합성 요청 (헤딩 골격 계약)."""
        return self._build(
            TaskKind.STYLE_GUIDE,
            {"skeleton": _render_skeleton()},
            units,
            SKELETON_CONTRACT,
            system_instruction=self.system_instruction,
        )

    def refine_style_guide(self, current_guide: str, instruction: str) -> TaskRequest:
        """
        기존 가이드 수정 요청.

        콘텐츠 단위를 첨부하지 않고, 기존 가이드 전문과 수정 지시를 지시문에
        넣습니다. 응답은 골격을 유지한 전체 가이드여야 합니다.
        """
        return self._build(
            TaskKind.STYLE_GUIDE_REFINE,
            {
                "current_guide": current_guide,
                "instruction": instruction,
                "skeleton": _render_skeleton(),
            },
            (),
            SKELETON_CONTRACT,
            system_instruction=self.system_instruction,
        )

    # ── 내부 메서드 ───────────────────────────────────────────────

    def _render(self, kind: TaskKind, var_map: dict[str, str]) -> str:
        template = load_template(TEMPLATE_FILES[kind], self.prompts_dir)
        return substitute_variables(template, var_map).strip()

    def _build(
        self,
        kind: TaskKind,
        var_map: dict[str, str],
        units: Iterable[ContentUnit],
        contract: OutputContract,
        system_instruction: str | None = None,
    ) -> TaskRequest:
        instruction = self._render(kind, var_map)
        guarded = guard_units(units, self.ceiling)
        segments = (Segment.of_text(instruction),) + tuple(source_segment(u) for u in guarded)

        logger.debug(
            "요청 조립: %s (지시문 %d자, 첨부 %d개)",
            kind.value, len(instruction), len(guarded),
        )
        return TaskRequest(
            task_kind=kind,
            instruction_text=instruction,
            attached_units=guarded,
            output_contract=contract,
            system_instruction=system_instruction,
            segments=segments,
        )


def _render_skeleton() -> str:
    return "\n".join(f"   ## {title}" for title in STYLE_GUIDE_SKELETON)
