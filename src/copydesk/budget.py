"""
copydesk.budget — 텍스트 콘텐츠 크기 상한

추론 전송로의 페이로드/토큰 제한 때문에 텍스트 단위는 상한(80만 자)을 넘으면
앞부분만 남기고 잘림 표시를 덧붙입니다. 바이너리 단위는 잘라내면 깨지므로
대상이 아닙니다.
"""

from __future__ import annotations

import logging
from typing import Iterable

from copydesk.schema import ContentUnit, SizeInfo, TextPayload

logger = logging.getLogger(__name__)

CONTENT_CEILING = 800_000
TRUNCATION_MARKER = "\n...[TRUNCATED due to size]..."


def apply_budget(unit: ContentUnit, ceiling: int = CONTENT_CEILING) -> ContentUnit:
    """상한을 넘는 텍스트 단위를 잘라 새 단위로 반환합니다."""
    if unit.is_binary:
        return unit

    text = unit.text
    if len(text) <= ceiling:
        return unit

    logger.warning(
        "콘텐츠 상한 초과로 잘림: %s (%d자 → %d자)",
        unit.display_name, len(text), ceiling,
    )
    size_info = SizeInfo(
        original_size=unit.size_info.original_size,
        unit=unit.size_info.unit,
        truncated=True,
    )
    return unit.with_payload(TextPayload(text[:ceiling] + TRUNCATION_MARKER), size_info)


def guard_units(units: Iterable[ContentUnit], ceiling: int = CONTENT_CEILING) -> tuple[ContentUnit, ...]:
    return tuple(apply_budget(u, ceiling) for u in units)
