"""
copydesk.schema — 콘텐츠 단위 / 요청 / 결과 데이터 모델

  - ContentUnit: 업로드·붙여넣기·원격 가져오기로 만든 정규화 콘텐츠 (불변)
  - TaskRequest: 작업별 지시문 + 첨부 단위 + 출력 계약
  - TaskResult:  SearchResult | GenerationResult | BilingualAlignment
                 | StyleGuideText | ErrorResult 의 태그 유니온

결과 클래스의 from_dict / to_dict 는 추론 서비스의 와이어 필드명
(matchFound, unmatchedEn, variantName ...)을 사용합니다.
"""

from __future__ import annotations

import base64
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, TypeVar, Union

from copydesk.errors import FailureKind

T = TypeVar("T")


# ── 콘텐츠 단위 ───────────────────────────────────────────────────

class ContentCategory(str, Enum):
    """콘텐츠 용도 분류."""
    GLOSSARY = "glossary"
    STYLE_GUIDE = "style-guide"
    GENERAL = "general"


@dataclass(frozen=True)
class TextPayload:
    """읽을 수 있는 텍스트 본문."""
    text: str


@dataclass(frozen=True)
class BinaryPayload:
    """
    바이너리 본문.

    data 는 원본 바이트의 base64 표현입니다. 텍스트 기반 전송로를 지나기 위한
    스테이징일 뿐, 텍스트 콘텐츠로 취급하거나 잘라내면 안 됩니다.
    """
    data: str
    mime_type: str

    @classmethod
    def from_bytes(cls, raw: bytes, mime_type: str) -> BinaryPayload:
        return cls(data=base64.b64encode(raw).decode("ascii"), mime_type=mime_type)

    @property
    def raw(self) -> bytes:
        """스테이징된 원본 바이트."""
        return base64.b64decode(self.data)


Payload = Union[TextPayload, BinaryPayload]


@dataclass(frozen=True)
class SizeInfo:
    """원본 크기 정보 (텍스트=문자 수, 바이너리=바이트 수)."""
    original_size: int
    unit: str = "chars"
    truncated: bool = False


def new_unit_id() -> str:
    return uuid.uuid4().hex[:9]


@dataclass(frozen=True)
class ContentUnit:
    """수집된 소스 하나의 정규화 표현."""
    id: str
    display_name: str
    category: ContentCategory
    payload: Payload
    size_info: SizeInfo

    def __post_init__(self) -> None:
        if not isinstance(self.payload, (TextPayload, BinaryPayload)):
            raise TypeError(f"지원하지 않는 payload 유형: {type(self.payload).__name__}")

    @property
    def is_binary(self) -> bool:
        return isinstance(self.payload, BinaryPayload)

    @property
    def text(self) -> str:
        """텍스트 본문. 바이너리 단위에서는 TypeError."""
        if isinstance(self.payload, BinaryPayload):
            raise TypeError(f"바이너리 단위는 텍스트로 읽을 수 없습니다: {self.display_name}")
        return self.payload.text

    @property
    def mime_type(self) -> str | None:
        if isinstance(self.payload, BinaryPayload):
            return self.payload.mime_type
        return None

    def with_category(self, category: ContentCategory) -> ContentUnit:
        """분류만 바꾼 새 단위."""
        return replace(self, category=ContentCategory(category))

    def with_payload(self, payload: Payload, size_info: SizeInfo) -> ContentUnit:
        return replace(self, payload=payload, size_info=size_info)

    def to_dict(self, preview_chars: int = 80) -> dict[str, Any]:
        """요약 딕셔너리 (바이너리 본문은 포함하지 않음)."""
        if isinstance(self.payload, BinaryPayload):
            preview = "Binary content ready for processing"
        else:
            preview = self.payload.text[:preview_chars].replace("\n", " ")
        return {
            "id": self.id,
            "name": self.display_name,
            "category": self.category.value,
            "binary": self.is_binary,
            "mimeType": self.mime_type,
            "size": self.size_info.original_size,
            "sizeUnit": self.size_info.unit,
            "truncated": self.size_info.truncated,
            "preview": preview,
        }


# ── 요청 ──────────────────────────────────────────────────────────

class TaskKind(str, Enum):
    """작업 종류."""
    SEARCH = "search"
    GENERATE = "generate"
    BILINGUAL_MATCH = "bilingual-match"
    STYLE_GUIDE = "style-guide"
    STYLE_GUIDE_REFINE = "style-guide-refine"


@dataclass(frozen=True)
class OutputContract:
    """
    출력 계약.

    mode="schema"   → 엄격한 JSON 스키마 (schema)
    mode="skeleton" → 자유 형식 마크다운, 고정 헤딩 골격 (skeleton)
    """
    mode: str
    schema: dict[str, Any] | None = None
    skeleton: tuple[str, ...] = ()

    @property
    def is_structured(self) -> bool:
        return self.mode == "schema"


@dataclass(frozen=True)
class Segment:
    """전송 세그먼트 하나 (텍스트 또는 인라인 바이너리)."""
    text: str | None = None
    data: bytes | None = None
    mime_type: str | None = None

    @classmethod
    def of_text(cls, text: str) -> Segment:
        return cls(text=text)

    @classmethod
    def of_binary(cls, data: bytes, mime_type: str) -> Segment:
        return cls(data=data, mime_type=mime_type)

    @property
    def is_binary(self) -> bool:
        return self.data is not None


@dataclass(frozen=True)
class TaskRequest:
    """추론 서비스로 보낼 1회성 요청."""
    task_kind: TaskKind
    instruction_text: str
    attached_units: tuple[ContentUnit, ...] = ()
    output_contract: OutputContract = field(default_factory=lambda: OutputContract(mode="skeleton"))
    system_instruction: str | None = None
    segments: tuple[Segment, ...] = ()


# ── 결과 ──────────────────────────────────────────────────────────

@dataclass(frozen=True)
class LabeledText:
    label: str
    text: str


@dataclass(frozen=True)
class KeyValue:
    key: str
    value: str


@dataclass(frozen=True)
class SearchResultItem:
    """용어집 검색 결과 항목 하나."""
    term: str
    definitions: tuple[LabeledText, ...] = ()
    metadata: tuple[KeyValue, ...] = ()
    source: str = ""
    usage_notes: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SearchResultItem:
        return cls(
            term=data["term"],
            definitions=tuple(
                LabeledText(label=d.get("label", ""), text=d.get("text", ""))
                for d in data.get("definitions") or []
            ),
            metadata=tuple(
                KeyValue(key=m.get("key", ""), value=m.get("value", ""))
                for m in data.get("metadata") or []
            ),
            source=data.get("source") or "",
            usage_notes=data.get("usageNotes") or "",
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "term": self.term,
            "definitions": [{"label": d.label, "text": d.text} for d in self.definitions],
            "metadata": [{"key": m.key, "value": m.value} for m in self.metadata],
            "source": self.source,
            "usageNotes": self.usage_notes,
        }


@dataclass(frozen=True)
class SearchResult:
    match_found: bool
    message: str
    results: tuple[SearchResultItem, ...] = ()
    failure: FailureKind | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SearchResult:
        return cls(
            match_found=bool(data["matchFound"]),
            message=data.get("message") or "",
            results=tuple(SearchResultItem.from_dict(r) for r in data.get("results") or []),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "matchFound": self.match_found,
            "message": self.message,
            "results": [r.to_dict() for r in self.results],
        }


@dataclass(frozen=True)
class MicrocopyContent:
    """언어 하나에 대한 UI 문구 묶음."""
    description: str
    language: str = ""
    title: str = ""
    primary_button: str = ""
    secondary_button: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MicrocopyContent:
        return cls(
            description=data["description"],
            language=data.get("language") or "",
            title=data.get("title") or "",
            primary_button=data.get("primaryButton") or "",
            secondary_button=data.get("secondaryButton") or "",
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"language": self.language, "description": self.description}
        if self.title:
            out["title"] = self.title
        if self.primary_button:
            out["primaryButton"] = self.primary_button
        if self.secondary_button:
            out["secondaryButton"] = self.secondary_button
        return out


@dataclass(frozen=True)
class GenerationOption:
    variant_name: str
    content: tuple[MicrocopyContent, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GenerationOption:
        return cls(
            variant_name=data["variantName"],
            content=tuple(MicrocopyContent.from_dict(c) for c in data["content"]),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "variantName": self.variant_name,
            "content": [c.to_dict() for c in self.content],
        }


@dataclass(frozen=True)
class GenerationResult:
    primary: GenerationOption
    alternatives: tuple[GenerationOption, ...] = ()
    rationale: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GenerationResult:
        return cls(
            primary=GenerationOption.from_dict(data["primary"]),
            alternatives=tuple(GenerationOption.from_dict(a) for a in data["alternatives"]),
            rationale=data.get("rationale") or "",
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "primary": self.primary.to_dict(),
            "alternatives": [a.to_dict() for a in self.alternatives],
            "rationale": self.rationale,
        }


@dataclass(frozen=True)
class AlignmentPair:
    en: str
    th: str


@dataclass(frozen=True)
class UnmatchedTerm:
    language: str
    term: str


@dataclass(frozen=True)
class BilingualAlignment:
    matches: tuple[AlignmentPair, ...] = ()
    unmatched_en: tuple[str, ...] = ()
    unmatched_th: tuple[str, ...] = ()
    failure: FailureKind | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BilingualAlignment:
        return cls(
            matches=tuple(AlignmentPair(en=m["en"], th=m["th"]) for m in data["matches"]),
            unmatched_en=tuple(data["unmatchedEn"]),
            unmatched_th=tuple(data["unmatchedTh"]),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "matches": [{"en": m.en, "th": m.th} for m in self.matches],
            "unmatchedEn": list(self.unmatched_en),
            "unmatchedTh": list(self.unmatched_th),
        }

    @property
    def is_empty(self) -> bool:
        return not (self.matches or self.unmatched_en or self.unmatched_th)


@dataclass(frozen=True)
class StyleGuideText:
    """합성/수정된 스타일 가이드 마크다운 전문."""
    text: str
    failure: FailureKind | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text}


@dataclass(frozen=True)
class ErrorResult:
    """결과 없음 (생성 작업의 실패 상태)."""
    task_kind: TaskKind
    failure: FailureKind
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "taskKind": self.task_kind.value,
            "failure": self.failure.value,
            "message": self.message,
        }


TaskResult = Union[SearchResult, GenerationResult, BilingualAlignment, StyleGuideText, ErrorResult]


def match_result(
    result: TaskResult,
    *,
    on_search: Callable[[SearchResult], T],
    on_generation: Callable[[GenerationResult], T],
    on_alignment: Callable[[BilingualAlignment], T],
    on_style_guide: Callable[[StyleGuideText], T],
    on_error: Callable[[ErrorResult], T],
) -> T:
    """TaskResult 변형별로 분기합니다. 모든 변형의 처리기가 필수입니다."""
    if isinstance(result, SearchResult):
        return on_search(result)
    if isinstance(result, GenerationResult):
        return on_generation(result)
    if isinstance(result, BilingualAlignment):
        return on_alignment(result)
    if isinstance(result, StyleGuideText):
        return on_style_guide(result)
    if isinstance(result, ErrorResult):
        return on_error(result)
    raise TypeError(f"알 수 없는 결과 유형: {type(result).__name__}")


def is_failure(result: TaskResult) -> bool:
    """중립 실패값 여부."""
    return match_result(
        result,
        on_search=lambda r: r.failure is not None,
        on_generation=lambda r: False,
        on_alignment=lambda r: r.failure is not None,
        on_style_guide=lambda r: r.failure is not None,
        on_error=lambda r: True,
    )


# ── 파생 뷰 ───────────────────────────────────────────────────────

@dataclass(frozen=True)
class StyleGuideSection:
    """스타일 가이드 섹션 (StyleGuideText 에서 파생). 머리말은 has_heading=False."""
    title: str
    body: str
    order: int
    has_heading: bool = True
