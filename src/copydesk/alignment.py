"""
copydesk.alignment — 이중언어 정렬 결과 투영

BilingualAlignment 하나를 두 가지 평문/문서 형태로 만듭니다.

  클립보드 텍스트:  "en\\tth" 행들
                    + "\\n\\nUnmatched English:\\n..."  (비어 있으면 생략)
                    + "\\n\\nUnmatched Thai:\\n..."     (비어 있으면 생략)
  내보내기 HTML:    2열 매칭 표 + 미매칭 영어/태국어 항목 (비어 있으면 생략)
"""

from __future__ import annotations

from html import escape

from copydesk.schema import BilingualAlignment, UnmatchedTerm

ENGLISH = "en"
THAI = "th"


def to_clipboard_text(alignment: BilingualAlignment) -> str:
    text = "\n".join(f"{m.en}\t{m.th}" for m in alignment.matches)
    if alignment.unmatched_en:
        text += "\n\nUnmatched English:\n" + "\n".join(alignment.unmatched_en)
    if alignment.unmatched_th:
        text += "\n\nUnmatched Thai:\n" + "\n".join(alignment.unmatched_th)
    return text


def to_export_html(alignment: BilingualAlignment) -> str:
    """보고서 본문 HTML 조각. 값은 모두 이스케이프합니다."""
    rows = "".join(
        "\n    <tr>"
        f"<td>{escape(m.en)}</td>"
        f"<td>{escape(m.th)}</td>"
        "</tr>"
        for m in alignment.matches
    )
    parts = [
        "<h1>Bilingual Glossary Alignment Report</h1>",
        f"<h2>1. Matched Pairs ({len(alignment.matches)})</h2>",
        "<table>\n  <thead>\n    <tr><th>English Term</th><th>Thai Term</th></tr>\n  </thead>\n"
        f"  <tbody>{rows}\n  </tbody>\n</table>",
    ]
    if alignment.unmatched_en:
        parts.append(f"<h2>2. Unmatched English Terms ({len(alignment.unmatched_en)})</h2>")
        parts.extend(f'<div class="unmatched">{escape(t)}</div>' for t in alignment.unmatched_en)
    if alignment.unmatched_th:
        parts.append(f"<h2>3. Unmatched Thai Terms ({len(alignment.unmatched_th)})</h2>")
        parts.extend(f'<div class="unmatched">{escape(t)}</div>' for t in alignment.unmatched_th)
    return "\n".join(parts)


def unmatched_terms(alignment: BilingualAlignment) -> list[UnmatchedTerm]:
    """미매칭 용어를 언어 태그와 함께 (영어 → 태국어 순)."""
    return [UnmatchedTerm(ENGLISH, t) for t in alignment.unmatched_en] + [
        UnmatchedTerm(THAI, t) for t in alignment.unmatched_th
    ]
