"""
copydesk.ingest — 업로드 소스 → ContentUnit 정규화

확장자별 추출 표(FORMAT_TABLE)에 따라 파일 하나를 텍스트 또는 바이너리
콘텐츠 단위로 변환합니다. 모든 업로드 경로(용어집, 스타일 가이드 입력,
이중언어 정렬 입력, 붙여넣기, 원격 가져오기)가 같은 팩토리를 사용합니다.

  .docx            → 텍스트 (python-docx, 문단 + 표)
  .doc             → 바이너리 application/msword (OLE2 컨테이너 확인만)
  .xlsx / .xls     → 텍스트 (시트별 CSV, "[Sheet: 이름]" 표시)
  .pdf             → 바이너리 application/pdf (로컬 추출 없음)
  이미지           → 바이너리 image/*
  .txt .md .json … → 텍스트 원문 그대로
  그 외            → IngestionError

배치 수집은 파일 단위로 진행되며, 한 파일의 실패가 나머지를 막지 않습니다.
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Union

import olefile

from copydesk.errors import IngestionError
from copydesk.schema import (
    BinaryPayload,
    ContentCategory,
    ContentUnit,
    SizeInfo,
    TextPayload,
    new_unit_id,
)

logger = logging.getLogger(__name__)

# ── 형식 표 ───────────────────────────────────────────────────────

TEXT = "text"
BINARY = "binary"

FORMAT_TABLE: dict[str, dict[str, str]] = {
    ".docx": {"kind": TEXT, "extractor": "docx"},
    ".doc": {"kind": BINARY, "mime": "application/msword"},
    ".xlsx": {"kind": TEXT, "extractor": "xlsx"},
    ".xls": {"kind": TEXT, "extractor": "xls"},
    ".pdf": {"kind": BINARY, "mime": "application/pdf"},
    ".png": {"kind": BINARY, "mime": "image/png"},
    ".jpg": {"kind": BINARY, "mime": "image/jpeg"},
    ".jpeg": {"kind": BINARY, "mime": "image/jpeg"},
    ".gif": {"kind": BINARY, "mime": "image/gif"},
    ".webp": {"kind": BINARY, "mime": "image/webp"},
    ".txt": {"kind": TEXT, "extractor": "plain"},
    ".md": {"kind": TEXT, "extractor": "plain"},
    ".markdown": {"kind": TEXT, "extractor": "plain"},
    ".json": {"kind": TEXT, "extractor": "plain"},
    ".csv": {"kind": TEXT, "extractor": "plain"},
    ".tsv": {"kind": TEXT, "extractor": "plain"},
}

SUPPORTED_EXTENSIONS = tuple(FORMAT_TABLE)


def classify_category(name: str) -> ContentCategory:
    """
    파일명으로 기본 분류를 추정합니다.

    대소문자 무시 "style" 포함 → 스타일 가이드, 그 외 → 용어집.
    사용자가 나중에 바꿀 수 있는 기본값일 뿐입니다.
    """
    if "style" in name.lower():
        return ContentCategory.STYLE_GUIDE
    return ContentCategory.GLOSSARY


# ── 결과 ──────────────────────────────────────────────────────────

@dataclass
class IngestBatch:
    """배치 수집 결과 (부분 성공)."""
    units: list[ContentUnit] = field(default_factory=list)
    errors: list[IngestionError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def error_messages(self) -> list[str]:
        return [str(e) for e in self.errors]


BatchItem = Union[str, Path, tuple[str, bytes]]


# ── 수집기 ────────────────────────────────────────────────────────

class SourceIngestor:
    """
    ContentUnit 팩토리.

    사용법:
        ingestor = SourceIngestor()
        unit = ingestor.ingest_file("glossary.xlsx")
        batch = ingestor.ingest_batch(["a.docx", "b.exe", "style.md"])
    """

    def __init__(
        self,
        classifier: Callable[[str], ContentCategory] = classify_category,
    ):
        self.classifier = classifier

    def ingest_bytes(
        self,
        name: str,
        data: bytes,
        category: ContentCategory | None = None,
    ) -> ContentUnit:
        """파일명 + 원본 바이트로 콘텐츠 단위를 만듭니다."""
        suffix = Path(name).suffix.lower()
        entry = FORMAT_TABLE.get(suffix)
        if entry is None:
            raise IngestionError(name, f"지원하지 않는 파일 형식입니다: {suffix or '(확장자 없음)'}")

        if not data:
            raise IngestionError(name, "내용이 비어 있습니다")

        if category is None:
            category = self.classifier(name)

        if entry["kind"] == BINARY:
            if suffix == ".doc" and not olefile.isOleFile(data):
                raise IngestionError(name, "OLE2(.doc) 문서가 아닙니다")
            payload = BinaryPayload.from_bytes(data, entry["mime"])
            unit = ContentUnit(
                id=new_unit_id(),
                display_name=name,
                category=ContentCategory(category),
                payload=payload,
                size_info=SizeInfo(original_size=len(data), unit="bytes"),
            )
            logger.info("바이너리 수집: %s (%s, %d bytes)", name, entry["mime"], len(data))
            return unit

        try:
            text = _EXTRACTORS[entry["extractor"]](data)
        except IngestionError as e:
            raise IngestionError(name, e.reason) from e
        except Exception as e:
            raise IngestionError(name, f"텍스트 추출 실패: {e}") from e

        return self._text_unit(name, text, ContentCategory(category))

    def ingest_file(self, path: str | Path, category: ContentCategory | None = None) -> ContentUnit:
        """로컬 파일 하나를 수집합니다."""
        path = Path(path)
        if not path.is_file():
            raise IngestionError(path.name, f"파일을 찾을 수 없습니다: {path}")
        try:
            data = path.read_bytes()
        except OSError as e:
            raise IngestionError(path.name, f"파일 읽기 실패: {e}") from e
        return self.ingest_bytes(path.name, data, category)

    def ingest_text(
        self,
        name: str,
        text: str,
        category: ContentCategory = ContentCategory.GENERAL,
    ) -> ContentUnit:
        """붙여넣은 텍스트 또는 원격 문서 텍스트를 수집합니다."""
        return self._text_unit(name, text, ContentCategory(category))

    def ingest_batch(
        self,
        items: Iterable[BatchItem],
        category: ContentCategory | None = None,
    ) -> IngestBatch:
        """여러 파일을 하나씩 수집합니다. 실패는 모아서 반환합니다."""
        batch = IngestBatch()
        for item in items:
            try:
                if isinstance(item, tuple):
                    name, data = item
                    unit = self.ingest_bytes(name, data, category)
                else:
                    unit = self.ingest_file(item, category)
            except IngestionError as e:
                logger.warning("수집 실패: %s", e)
                batch.errors.append(e)
                continue
            batch.units.append(unit)

        logger.info("배치 수집 완료: %d개 성공, %d개 실패", len(batch.units), len(batch.errors))
        return batch

    # ── 내부 메서드 ───────────────────────────────────────────────

    def _text_unit(self, name: str, text: str, category: ContentCategory) -> ContentUnit:
        if not text.strip():
            raise IngestionError(name, "추출된 텍스트가 비어 있습니다")
        logger.info("텍스트 수집: %s (%d자)", name, len(text))
        return ContentUnit(
            id=new_unit_id(),
            display_name=name,
            category=category,
            payload=TextPayload(text),
            size_info=SizeInfo(original_size=len(text), unit="chars"),
        )


# ── 추출기 ────────────────────────────────────────────────────────

def _extract_plain(data: bytes) -> str:
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise IngestionError("", f"UTF-8 텍스트가 아닙니다 (offset {e.start})") from e


def _extract_docx(data: bytes) -> str:
    """문단과 표를 문서 순서대로 꺼냅니다. 표 행은 탭 구분."""
    import docx
    from docx.oxml.ns import qn
    from docx.table import Table
    from docx.text.paragraph import Paragraph

    document = docx.Document(io.BytesIO(data))
    blocks: list[str] = []
    for child in document.element.body.iterchildren():
        if child.tag == qn("w:tbl"):
            for row in Table(child, document).rows:
                cells = [cell.text.strip() for cell in row.cells]
                if any(cells):
                    blocks.append("\t".join(cells))
        elif child.tag == qn("w:p"):
            text = Paragraph(child, document).text.strip()
            if text:
                blocks.append(text)
    return "\n\n".join(blocks)


def _extract_xlsx(data: bytes) -> str:
    import openpyxl

    workbook = openpyxl.load_workbook(io.BytesIO(data), read_only=True, data_only=True)
    try:
        sheets = [
            (ws.title, ws.iter_rows(values_only=True))
            for ws in workbook.worksheets
        ]
        return _join_sheets(sheets)
    finally:
        workbook.close()


def _extract_xls(data: bytes) -> str:
    import xlrd

    book = xlrd.open_workbook(file_contents=data)
    sheets = [
        (sheet.name, (sheet.row_values(r) for r in range(sheet.nrows)))
        for sheet in book.sheets()
    ]
    return _join_sheets(sheets)


def _join_sheets(sheets: Iterable[tuple[str, Iterable[Iterable[object]]]]) -> str:
    """시트 순서대로 "[Sheet: 이름]\\nCSV" 를 이어 붙입니다. 빈 시트는 생략."""
    parts: list[str] = []
    for sheet_name, rows in sheets:
        sheet_text = _rows_to_csv(rows)
        if sheet_text.strip():
            parts.append(f"[Sheet: {sheet_name}]\n{sheet_text}")
        else:
            logger.debug("빈 시트 생략: %s", sheet_name)
    return "\n\n".join(parts)


def _rows_to_csv(rows: Iterable[Iterable[object]]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    for row in rows:
        cells = [_cell_text(v) for v in row]
        if any(c.strip() for c in cells):
            writer.writerow(cells)
    return buf.getvalue().rstrip("\n")


def _cell_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


_EXTRACTORS: dict[str, Callable[[bytes], str]] = {
    "plain": _extract_plain,
    "docx": _extract_docx,
    "xlsx": _extract_xlsx,
    "xls": _extract_xls,
}
