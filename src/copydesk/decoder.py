"""
copydesk.decoder — 응답 검증/디코딩

원시 응답 텍스트를 작업의 출력 계약에 맞춰 TaskResult 로 변환합니다.
execute() 는 전송/스키마 오류가 밖으로 새지 않는 유일한 경계입니다.
실패 시 작업별 중립 실패값을 돌려줍니다:

  search           → SearchResult(match_found=False, message=설명, results=())
  bilingual-match  → BilingualAlignment() (세 목록 모두 비어 있음)
  generate         → ErrorResult (호출 측이 일반 실패 상태를 표시)
  style-guide(*)   → StyleGuideText(안내 문구)
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from copydesk.client import InferenceClientProtocol
from copydesk.errors import (
    EmptyResponse,
    FailureKind,
    InferenceError,
    SchemaViolation,
)
from copydesk.schema import (
    BilingualAlignment,
    ErrorResult,
    GenerationResult,
    SearchResult,
    StyleGuideText,
    TaskKind,
    TaskRequest,
    TaskResult,
)

logger = logging.getLogger(__name__)

# ── 실패 안내 문구 ────────────────────────────────────────────────

SEARCH_FAILURE_MESSAGE = (
    "Error processing search. The inputs might be too large or the API key is missing."
)
SEARCH_EMPTY_MESSAGE = "No response was returned for this search. Please try again."
SEARCH_SCHEMA_MESSAGE = "The search response could not be read. Please try again."
GENERATION_FAILURE_MESSAGE = "Could not generate microcopy. Please try again."
STYLE_GUIDE_FAILURE_MESSAGE = (
    "Error creating style guide. This is likely due to the size of the uploaded documents "
    "exceeding the model's limit. Try uploading smaller files or fewer files."
)
STYLE_GUIDE_EMPTY_MESSAGE = "No response generated."

_FENCE_RE = re.compile(r"^\s*```(?:json)?\s*\n(.*?)\n?```\s*$", re.DOTALL)


# ── 디코딩 ────────────────────────────────────────────────────────

def decode(kind: TaskKind, raw_text: str | None) -> TaskResult:
    """
    응답 텍스트를 작업별 결과로 디코딩합니다.

    Raises:
        EmptyResponse: 응답 텍스트가 없음
        SchemaViolation: 출력 계약과 불일치
    """
    if raw_text is None or not raw_text.strip():
        raise EmptyResponse("응답 텍스트가 비어 있습니다")

    if kind in (TaskKind.STYLE_GUIDE, TaskKind.STYLE_GUIDE_REFINE):
        _warn_missing_headings(raw_text)
        return StyleGuideText(raw_text.strip())

    data = parse_json(raw_text)
    try:
        if kind == TaskKind.SEARCH:
            _check_search(data)
            return SearchResult.from_dict(data)
        if kind == TaskKind.GENERATE:
            _check_generation(data)
            return GenerationResult.from_dict(data)
        if kind == TaskKind.BILINGUAL_MATCH:
            _check_alignment(data)
            return BilingualAlignment.from_dict(data)
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise SchemaViolation(f"{kind.value} 응답 변환 실패: {e}") from e

    raise ValueError(f"알 수 없는 작업: {kind}")


def parse_json(raw_text: str) -> dict[str, Any]:
    """JSON 객체 파싱 (마크다운 코드 펜스 허용)."""
    text = raw_text.strip()
    m = _FENCE_RE.match(text)
    if m:
        text = m.group(1)
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise SchemaViolation(f"JSON 파싱 실패: {e}") from e
    if not isinstance(data, dict):
        raise SchemaViolation(f"JSON 객체가 아닙니다: {type(data).__name__}")
    return data


def neutral_failure(kind: TaskKind, failure: FailureKind, detail: str = "") -> TaskResult:
    """작업별 중립 실패값."""
    if kind == TaskKind.SEARCH:
        message = {
            FailureKind.TRANSPORT: SEARCH_FAILURE_MESSAGE,
            FailureKind.EMPTY: SEARCH_EMPTY_MESSAGE,
            FailureKind.SCHEMA: SEARCH_SCHEMA_MESSAGE,
        }[failure]
        return SearchResult(match_found=False, message=message, results=(), failure=failure)
    if kind == TaskKind.BILINGUAL_MATCH:
        return BilingualAlignment(failure=failure)
    if kind == TaskKind.GENERATE:
        return ErrorResult(task_kind=kind, failure=failure, message=detail or GENERATION_FAILURE_MESSAGE)
    if failure == FailureKind.EMPTY:
        return StyleGuideText(STYLE_GUIDE_EMPTY_MESSAGE, failure=failure)
    return StyleGuideText(STYLE_GUIDE_FAILURE_MESSAGE, failure=failure)


def execute(client: InferenceClientProtocol, request: TaskRequest) -> TaskResult:
    """
    요청 1회를 보내고 결과를 디코딩합니다.

    어떤 전송/스키마 오류도 밖으로 전파하지 않으며, 요청마다 정확히 하나의
    종결 결과(성공 또는 중립 실패값)를 반환합니다.
    """
    kind = request.task_kind
    try:
        raw = client.generate(request)
        result = decode(kind, raw)
    except InferenceError as e:
        if e.failure_kind == FailureKind.TRANSPORT:
            logger.error("추론 전송 실패 [%s]: %s", kind.value, e)
        else:
            logger.warning("추론 응답 오류 [%s/%s]: %s", kind.value, e.failure_kind.value, e)
        return neutral_failure(kind, e.failure_kind, str(e))
    except Exception as e:
        logger.exception("추론 클라이언트 예외 [%s]", kind.value)
        return neutral_failure(kind, FailureKind.TRANSPORT, str(e))

    logger.info("추론 결과 디코딩 완료: %s", kind.value)
    return result


# ── 구조 검증 ─────────────────────────────────────────────────────

def _require(data: dict[str, Any], key: str, expected: type | tuple[type, ...], where: str) -> Any:
    if key not in data:
        raise SchemaViolation(f"{where}: '{key}' 필드 누락")
    value = data[key]
    if not isinstance(value, expected):
        raise SchemaViolation(f"{where}: '{key}' 형식 오류 ({type(value).__name__})")
    return value


def _check_search(data: dict[str, Any]) -> None:
    _require(data, "matchFound", bool, "search")
    _require(data, "message", str, "search")
    results = _require(data, "results", list, "search")
    for i, item in enumerate(results):
        where = f"search.results[{i}]"
        if not isinstance(item, dict):
            raise SchemaViolation(f"{where}: 객체가 아닙니다")
        _require(item, "term", str, where)
        for field in ("definitions", "metadata"):
            entries = item.get(field) or []
            if not isinstance(entries, list):
                raise SchemaViolation(f"{where}: '{field}' 형식 오류 ({type(entries).__name__})")
            for entry in entries:
                if not isinstance(entry, dict):
                    raise SchemaViolation(f"{where}.{field}: 객체가 아닙니다")
        for field in ("source", "usageNotes"):
            if item.get(field) is not None:
                _require(item, field, str, where)


def _check_option(option: Any, where: str) -> None:
    if not isinstance(option, dict):
        raise SchemaViolation(f"{where}: 객체가 아닙니다")
    _require(option, "variantName", str, where)
    content = _require(option, "content", list, where)
    if not content:
        raise SchemaViolation(f"{where}: content 가 비어 있습니다")
    for j, c in enumerate(content):
        cw = f"{where}.content[{j}]"
        if not isinstance(c, dict):
            raise SchemaViolation(f"{cw}: 객체가 아닙니다")
        _require(c, "description", str, cw)
        _require(c, "language", str, cw)


def _check_generation(data: dict[str, Any]) -> None:
    _check_option(_require(data, "primary", dict, "generate"), "generate.primary")
    alternatives = _require(data, "alternatives", list, "generate")
    for i, alt in enumerate(alternatives):
        _check_option(alt, f"generate.alternatives[{i}]")
    _require(data, "rationale", str, "generate")


def _check_alignment(data: dict[str, Any]) -> None:
    matches = _require(data, "matches", list, "bilingual-match")
    for i, m in enumerate(matches):
        where = f"bilingual-match.matches[{i}]"
        if not isinstance(m, dict):
            raise SchemaViolation(f"{where}: 객체가 아닙니다")
        _require(m, "en", str, where)
        _require(m, "th", str, where)
    for key in ("unmatchedEn", "unmatchedTh"):
        values = _require(data, key, list, "bilingual-match")
        if not all(isinstance(v, str) for v in values):
            raise SchemaViolation(f"bilingual-match: '{key}' 에 문자열이 아닌 항목")


def _warn_missing_headings(text: str) -> None:
    from copydesk.composer import STYLE_GUIDE_SKELETON

    headings = {
        re.sub(r"^\d+\.\s*", "", line[3:].strip()).lower()
        for line in text.splitlines()
        if line.startswith("## ")
    }
    missing = [
        title for title in STYLE_GUIDE_SKELETON
        if re.sub(r"^\d+\.\s*", "", title).lower() not in headings
    ]
    if missing:
        logger.warning("스타일 가이드 골격 누락 섹션: %s", ", ".join(missing))
