"""
copydesk.sections — 스타일 가이드 섹션 분할

"## " 로 시작하는 줄마다 나눕니다. 첫 경계 앞의 내용이 있으면 제목 없는
"Introduction" 섹션이 됩니다. 구조만 보며, 제목 중복/누락은 오류가 아니라
중복 제목/빈 제목으로 남습니다.
"""

from __future__ import annotations

import re
from typing import Iterable

from copydesk.schema import StyleGuideSection

INTRODUCTION = "Introduction"
HEADING_MARKER = "## "

_BOUNDARY_RE = re.compile(r"^(?=## )", re.MULTILINE)


def split_sections(text: str) -> list[StyleGuideSection]:
    """
    스타일 가이드 텍스트를 순서 있는 섹션 목록으로 나눕니다.

    Example:
        >>> [s.title for s in split_sections("intro\\n\\n## Voice\\nFriendly")]
        ['Introduction', 'Voice']
    """
    if not text:
        return []

    sections: list[StyleGuideSection] = []
    for chunk in _BOUNDARY_RE.split(text):
        if not chunk.startswith(HEADING_MARKER):
            if chunk.strip():
                sections.append(StyleGuideSection(
                    title=INTRODUCTION,
                    body=chunk.strip(),
                    order=len(sections),
                    has_heading=False,
                ))
            continue

        first_line, _, rest = chunk.partition("\n")
        sections.append(StyleGuideSection(
            title=first_line[len(HEADING_MARKER):].strip(),
            body=rest.strip(),
            order=len(sections),
        ))
    return sections


def join_sections(sections: Iterable[StyleGuideSection]) -> str:
    """섹션 목록을 다시 마크다운 텍스트로 합칩니다 (split_sections 의 역)."""
    parts: list[str] = []
    for section in sections:
        if not section.has_heading:
            parts.append(section.body)
            continue
        heading = f"{HEADING_MARKER}{section.title}"
        parts.append(f"{heading}\n{section.body}" if section.body else heading)
    return "\n\n".join(parts)