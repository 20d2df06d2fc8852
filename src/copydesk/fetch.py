"""
copydesk.fetch — 웹에 게시된 문서 가져오기

Google Docs/Sheets 의 "웹에 게시" 링크를 받아 텍스트 콘텐츠 단위로 만듭니다.

  - 스프레드시트 /pub 링크는 ?output=csv 로 바꿔 CSV 로 받음
  - HTML 응답은 본문 텍스트만 남김 (BeautifulSoup)
  - URL 에 "style" 이 있으면 스타일 가이드, 아니면 용어집으로 분류
  - 표시 이름 뒤에 가져온 시각을 붙여 같은 종류의 문서끼리 구분
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

import httpx
from bs4 import BeautifulSoup

from copydesk.config import DEFAULT_FETCH_TIMEOUT
from copydesk.errors import IngestionError
from copydesk.ingest import SourceIngestor
from copydesk.schema import ContentCategory, ContentUnit

logger = logging.getLogger(__name__)

DOC_NAME = "Imported Google Doc"
SHEET_NAME = "Imported Google Sheet"
PUBLISH_HINT = 'Use "File > Share > Publish to web" in Google Docs/Sheets and try again.'


def resolve_url(url: str) -> tuple[str, str]:
    """(요청 URL, 표시 이름). 게시된 스프레드시트는 CSV 내보내기 URL 로 바꿉니다."""
    if "docs.google.com/spreadsheets" in url:
        if "pub?output=csv" not in url and "/pub" in url:
            url = url.split("?")[0] + "?output=csv"
        return url, SHEET_NAME
    return url, DOC_NAME


def guess_category(url: str) -> ContentCategory:
    if "style" in url.lower():
        return ContentCategory.STYLE_GUIDE
    return ContentCategory.GLOSSARY


def html_to_text(body: str) -> str:
    """<body> 가 있는 HTML 이면 본문 텍스트만, 아니면 그대로."""
    if "<body" not in body or "</body>" not in body:
        return body
    soup = BeautifulSoup(body, "html.parser")
    for tag in soup(["script", "style"]):
        tag.decompose()
    root = soup.body or soup
    return root.get_text("\n", strip=True)


class RemoteImporter:
    """
    게시된 원격 문서 → ContentUnit.

    사용법:
        importer = RemoteImporter(SourceIngestor(), timeout=30)
        unit = importer.fetch("https://docs.google.com/spreadsheets/d/e/.../pub")
    """

    def __init__(
        self,
        ingestor: SourceIngestor,
        timeout: float = DEFAULT_FETCH_TIMEOUT,
        client: httpx.Client | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.ingestor = ingestor
        self.timeout = timeout
        self._client = client
        self._clock = clock

    def fetch(self, url: str, category: ContentCategory | None = None) -> ContentUnit:
        url = url.strip()
        final_url, name = resolve_url(url)
        if category is None:
            category = guess_category(url)

        logger.info("원격 문서 가져오기: %s", final_url)
        try:
            response = self._get(final_url)
        except httpx.HTTPError as e:
            raise IngestionError(name, f"가져오기 실패: {e}. {PUBLISH_HINT}") from e

        if not response.is_success:
            raise IngestionError(
                name, f"HTTP {response.status_code}: 문서를 가져올 수 없습니다. {PUBLISH_HINT}"
            )

        display_name = f"{name} ({self._clock():%H:%M:%S})"
        return self.ingestor.ingest_text(display_name, html_to_text(response.text), category)

    def _get(self, url: str) -> httpx.Response:
        if self._client is not None:
            return self._client.get(url, timeout=self.timeout, follow_redirects=True)
        with httpx.Client(timeout=self.timeout, follow_redirects=True) as client:
            return client.get(url)
