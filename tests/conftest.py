"""
tests/conftest.py — 공용 픽스처

추론 서비스 대신 FakeClient 를 씁니다. 작업 종류별로 응답 텍스트,
예외, 또는 요청을 받아 응답을 만드는 함수를 지정할 수 있습니다.
"""

from __future__ import annotations

import json
from typing import Any, Callable, Union

import pytest

from copydesk.schema import TaskKind, TaskRequest

Reply = Union[str, BaseException, Callable[[TaskRequest], str], None]


class FakeClient:
    """작업 종류별로 준비된 응답을 돌려주는 추론 클라이언트."""

    def __init__(self, replies: dict[TaskKind, Reply] | None = None):
        self.replies: dict[TaskKind, Reply] = dict(replies or {})
        self.requests: list[TaskRequest] = []

    def generate(self, request: TaskRequest) -> str:
        self.requests.append(request)
        reply = self.replies.get(request.task_kind)
        if isinstance(reply, BaseException):
            raise reply
        if callable(reply):
            return reply(request)
        return reply  # type: ignore[return-value]


def as_json(data: dict[str, Any]) -> str:
    return json.dumps(data, ensure_ascii=False)


SEARCH_REPLY = {
    "matchFound": True,
    "message": "Found 1 match for save (Exact)",
    "results": [
        {
            "term": "Save / บันทึก",
            "definitions": [
                {"label": "English", "text": "Save"},
                {"label": "Thai", "text": "บันทึก"},
            ],
            "metadata": [{"key": "Match Type", "value": "Exact"}],
            "source": "glossary.csv",
            "usageNotes": "Use on primary form actions.",
        }
    ],
}

GENERATION_REPLY = {
    "primary": {
        "variantName": "Direct",
        "content": [
            {
                "language": "English",
                "title": "Delete file?",
                "description": "This file will be removed permanently.",
                "primaryButton": "Delete",
                "secondaryButton": "Cancel",
            },
            {
                "language": "Thai",
                "title": "ลบไฟล์?",
                "description": "ไฟล์นี้จะถูกลบอย่างถาวร",
                "primaryButton": "ลบ",
                "secondaryButton": "ยกเลิก",
            },
        ],
    },
    "alternatives": [
        {
            "variantName": "Soft",
            "content": [
                {"language": "English", "description": "Are you sure you want to delete this file?"},
                {"language": "Thai", "description": "คุณแน่ใจหรือไม่ว่าต้องการลบไฟล์นี้"},
            ],
        },
        {
            "variantName": "Standard",
            "content": [
                {"language": "English", "description": "Delete this file?"},
                {"language": "Thai", "description": "ลบไฟล์นี้หรือไม่"},
            ],
        },
    ],
    "rationale": "Verb-led titles follow the style guide.",
}

ALIGNMENT_REPLY = {
    "matches": [{"en": "Save", "th": "บันทึก"}],
    "unmatchedEn": ["Cancel"],
    "unmatchedTh": [],
}

STYLE_GUIDE_REPLY = """# Acme UX Style Guide

Short introduction.

## 1. Voice & Tone
Friendly and clear.

## 2. Core Principles
Be concise.

## 3. Formatting & Mechanics
Dates: DD MMM YYYY.

## 4. Component Microcopy Patterns
Error dialogs: Title, Body, Buttons.

## 5. Terminology
Prefer "Sign in" over "Login"."""


@pytest.fixture
def fake_client() -> FakeClient:
    """모든 작업에 정상 응답하는 FakeClient."""
    return FakeClient({
        TaskKind.SEARCH: as_json(SEARCH_REPLY),
        TaskKind.GENERATE: as_json(GENERATION_REPLY),
        TaskKind.BILINGUAL_MATCH: as_json(ALIGNMENT_REPLY),
        TaskKind.STYLE_GUIDE: STYLE_GUIDE_REPLY,
        TaskKind.STYLE_GUIDE_REFINE: STYLE_GUIDE_REPLY.replace("Friendly", "Warm"),
    })


@pytest.fixture
def docx_file(tmp_path):
    """문단 + 표가 있는 .docx 파일."""
    import docx

    document = docx.Document()
    document.add_paragraph("Glossary of UI terms")
    table = document.add_table(rows=2, cols=2)
    table.cell(0, 0).text = "Save"
    table.cell(0, 1).text = "บันทึก"
    table.cell(1, 0).text = "Cancel"
    table.cell(1, 1).text = "ยกเลิก"
    document.add_paragraph("End of list")
    path = tmp_path / "terms.docx"
    document.save(str(path))
    return path


@pytest.fixture
def xlsx_file(tmp_path):
    """시트 2개(하나는 빈 시트) + 용어 시트가 있는 .xlsx 파일."""
    import openpyxl

    workbook = openpyxl.Workbook()
    sheet = workbook.active
    sheet.title = "Terms"
    sheet.append(["English", "Thai"])
    sheet.append(["Save", "บันทึก"])
    sheet.append(["Count", 3])
    workbook.create_sheet("Empty")
    notes = workbook.create_sheet("Notes")
    notes.append(["Use sentence case"])
    path = tmp_path / "glossary.xlsx"
    workbook.save(str(path))
    return path


@pytest.fixture
def xls_file(tmp_path):
    """레거시 .xls 파일 (용어 시트, 빈 시트, 메모 시트)."""
    import xlwt

    workbook = xlwt.Workbook(encoding="utf-8")
    terms = workbook.add_sheet("Terms")
    for r, row in enumerate([["English", "Thai"], ["Cancel", "ยกเลิก"], ["Count", 7]]):
        for c, value in enumerate(row):
            terms.write(r, c, value)
    workbook.add_sheet("Blank")
    notes = workbook.add_sheet("Notes")
    notes.write(0, 0, "Avoid jargon")
    path = tmp_path / "legacy.xls"
    workbook.save(str(path))
    return path


OLE_BYTES = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1" + b"\x00" * 1528
