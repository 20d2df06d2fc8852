"""
copydesk.export — 워드 호환 HTML 문서 / 클립보드 텍스트

워드프로세서가 .doc 로 여는 Office 네임스페이스 HTML 을 만듭니다.
파일은 UTF-8 BOM 을 붙여 저장해야 태국어/한글이 깨지지 않습니다.
"""

from __future__ import annotations

import logging
import re
from html import escape
from pathlib import Path

from copydesk.alignment import to_export_html
from copydesk.schema import BilingualAlignment, MicrocopyContent

logger = logging.getLogger(__name__)

STYLE_GUIDE_FILENAME = "UX_Style_Guide.doc"
ALIGNMENT_FILENAME = "Bilingual_Alignment_Report.doc"

STYLE_GUIDE_CSS = """\
body { font-family: 'Arial', sans-serif; line-height: 1.6; }
h1 { color: #333; border-bottom: 2px solid #333; padding-bottom: 10px; }
h2 { color: #4F46E5; margin-top: 20px; }
h3 { color: #666; }
code { background: #f4f4f5; padding: 2px 5px; border-radius: 4px; font-family: monospace; }"""

ALIGNMENT_CSS = """\
body { font-family: 'Arial', sans-serif; line-height: 1.6; color: #333; }
h1 { color: #4F46E5; }
h2 { color: #1F2937; margin-top: 30px; border-bottom: 2px solid #E5E7EB; padding-bottom: 8px; }
table { width: 100%; border-collapse: collapse; margin-bottom: 20px; }
th { background-color: #F3F4F6; text-align: left; border: 1px solid #D1D5DB; padding: 12px; font-weight: bold; }
td { border: 1px solid #E5E7EB; padding: 10px; }
.unmatched { padding: 10px; background: #F9FAFB; border-radius: 4px; margin-bottom: 5px; }"""


def word_document(title: str, body_html: str, css: str = "") -> str:
    """Office 네임스페이스 HTML 문서 껍데기."""
    return f"""<html xmlns:o='urn:schemas-microsoft-com:office:office' xmlns:w='urn:schemas-microsoft-com:office:word' xmlns='http://www.w3.org/TR/REC-html40'>
<head>
  <meta charset='utf-8'>
  <title>{escape(title)}</title>
  <style>
{css}
  </style>
</head>
<body>
{body_html}
</body>
</html>
"""


def markdown_to_html(text: str) -> str:
    """
    스타일 가이드용 최소 마크다운→HTML 변환.

    #/##/### 헤딩, **굵게** → <b>, *기울임* → <i>, 그 외 줄바꿈은 <br>.
    """
    html_lines: list[str] = []
    for line in escape(text, quote=False).split("\n"):
        m = re.match(r"^(#{1,3}) (.*)$", line)
        if m:
            level = len(m.group(1))
            html_lines.append(f"<h{level}>{_inline(m.group(2))}</h{level}>")
        else:
            html_lines.append(_inline(line) + "<br>")
    return "\n".join(html_lines)


def _inline(text: str) -> str:
    text = re.sub(r"\*\*(.+?)\*\*", r"<b>\1</b>", text)
    return re.sub(r"\*(.+?)\*", r"<i>\1</i>", text)


def style_guide_document(text: str) -> str:
    return word_document("UX Style Guide", markdown_to_html(text), STYLE_GUIDE_CSS)


def alignment_document(alignment: BilingualAlignment) -> str:
    return word_document("Bilingual Alignment Report", to_export_html(alignment), ALIGNMENT_CSS)


def save_word_document(html: str, path: str | Path) -> Path:
    """UTF-8 BOM 을 붙여 .doc 파일로 저장합니다."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\ufeff" + html, encoding="utf-8")
    logger.info("문서 저장: %s", path)
    return path


def microcopy_clipboard_text(content: MicrocopyContent) -> str:
    """UI 문구 하나를 복사용 평문으로 (빈 항목 생략)."""
    lines = []
    if content.title:
        lines.append(f"Title: {content.title}")
    lines.append(f"Description: {content.description}")
    if content.primary_button:
        lines.append(f"Button (Primary): {content.primary_button}")
    if content.secondary_button:
        lines.append(f"Button (Secondary): {content.secondary_button}")
    return "\n".join(lines)
