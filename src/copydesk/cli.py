"""
copydesk.cli — 명령행 인터페이스

Usage:
    copydesk ingest <files...>        파일 수집 결과 미리보기
    copydesk search <query> <files>   용어집 검색
    copydesk generate <request>       마이크로카피 생성
    copydesk match <files...>         영어/태국어 용어 정렬
    copydesk style-guide <files...>   스타일 가이드 합성 / 수정
    copydesk fetch <url>              웹에 게시된 문서 가져오기
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Iterable

import click

from copydesk import __version__
from copydesk.errors import ConfigError, IngestionError
from copydesk.schema import ContentCategory, ContentUnit

logger = logging.getLogger("copydesk")

_CATEGORY_CHOICE = click.Choice([c.value for c in ContentCategory])

MANUAL_INPUT_NAME = "Manual Context Input"


def _setup_logging(verbose: bool) -> None:
    """로깅 설정."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(name)s | %(levelname)s | %(message)s",
        stream=sys.stderr,
    )


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="상세 로그 출력")
@click.version_option(version=__version__, prog_name="copydesk")
def main(verbose: bool) -> None:
    """copydesk — UX writing assistant (용어집 검색 · 마이크로카피 · 스타일 가이드)"""
    _setup_logging(verbose)


# ── ingest ────────────────────────────────────────────────────────

@main.command()
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option("--category", "-c", type=_CATEGORY_CHOICE, default=None,
              help="분류 지정 (기본: 파일명으로 추정)")
@click.option("-o", "--output", type=click.Path(), default=None, help="결과 저장 경로 (JSON)")
def ingest(files: tuple[str, ...], category: str | None, output: str | None) -> None:
    """파일을 콘텐츠 단위로 수집하고 결과를 보여줍니다."""
    from copydesk.ingest import SourceIngestor

    click.echo(f"📥 {len(files)}개 파일 수집 중...")
    batch = SourceIngestor().ingest_batch(files, _category(category))

    click.echo(f"\n{'='*60}")
    click.echo(f"📊 수집 결과: {len(batch.units)}개 성공, {len(batch.errors)}개 실패")
    click.echo(f"{'='*60}")
    for unit in batch.units:
        info = unit.to_dict()
        size = f"{info['size']:,} {info['sizeUnit']}"
        flag = " ✂️  잘림" if info["truncated"] else ""
        click.echo(f"  📄 {unit.display_name} [{unit.category.value}] {size}{flag}")
        click.echo(f"      {info['preview']}")
    for err in batch.errors:
        click.echo(f"  ❌ {err}")

    if output:
        _save_json({
            "units": [u.to_dict() for u in batch.units],
            "errors": [{"name": e.name, "reason": e.reason} for e in batch.errors],
        }, output)
        click.echo(f"\n💾 저장: {output}")

    if not batch.units:
        raise SystemExit(1)


# ── search ────────────────────────────────────────────────────────

@main.command()
@click.argument("query")
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
def search(query: str, files: tuple[str, ...]) -> None:
    """용어집 파일에서 용어를 검색합니다."""
    session = _open_session(_ingest_paths(files, ContentCategory.GLOSSARY))

    click.echo(f"🔍 검색 중: {query}")
    result = session.search(query)
    if result is None:
        click.echo("❌ 검색어 또는 용어집이 비어 있습니다.", err=True)
        raise SystemExit(1)

    click.echo(f"\n{result.message}")
    for item in result.results:
        click.echo(f"\n📌 {item.term}")
        for d in item.definitions:
            click.echo(f"    {d.label}: {d.text}")
        for m in item.metadata:
            click.echo(f"    · {m.key}: {m.value}")
        if item.usage_notes:
            click.echo(f"    💡 {item.usage_notes}")
        if item.source:
            click.echo(f"    출처: {item.source}")

    if result.failure is not None:
        raise SystemExit(1)


# ── generate ──────────────────────────────────────────────────────

@main.command()
@click.argument("request")
@click.option("--glossary", "-g", "glossary_files", multiple=True,
              type=click.Path(exists=True, dir_okay=False), help="용어집 파일 (반복 가능)")
@click.option("--style-guide", "-s", "style_files", multiple=True,
              type=click.Path(exists=True, dir_okay=False), help="스타일 가이드 파일 (반복 가능)")
@click.option("-o", "--output", type=click.Path(), default=None, help="결과 저장 경로 (JSON)")
def generate(
    request: str,
    glossary_files: tuple[str, ...],
    style_files: tuple[str, ...],
    output: str | None,
) -> None:
    """요청에 맞는 UI 마이크로카피를 생성합니다."""
    from copydesk.export import microcopy_clipboard_text
    from copydesk.schema import ErrorResult

    units = _ingest_paths(glossary_files, ContentCategory.GLOSSARY)
    units += _ingest_paths(style_files, ContentCategory.STYLE_GUIDE)
    session = _open_session(units)

    click.echo(f"✍️  생성 중: {request}")
    result = session.generate(request)
    if result is None:
        click.echo("❌ 요청이 비어 있습니다.", err=True)
        raise SystemExit(1)
    if isinstance(result, ErrorResult):
        click.echo(f"❌ 생성 실패: {result.message}", err=True)
        raise SystemExit(1)

    for label, option in [("⭐ 추천", result.primary)] + [("🔁 대안", a) for a in result.alternatives]:
        click.echo(f"\n{label}: {option.variant_name}")
        for content in option.content:
            click.echo(f"  [{content.language}]")
            for line in microcopy_clipboard_text(content).splitlines():
                click.echo(f"    {line}")
    if result.rationale:
        click.echo(f"\n💡 {result.rationale}")

    if output:
        _save_json(result.to_dict(), output)
        click.echo(f"\n💾 저장: {output}")


# ── match ─────────────────────────────────────────────────────────

@main.command()
@click.argument("files", nargs=-1, type=click.Path(exists=True, dir_okay=False))
@click.option("--export", "export_path", type=click.Path(), default=None,
              help="정렬 보고서 저장 경로 (.doc)")
@click.option("--copy-text", "copy_path", type=click.Path(), default=None,
              help="복사용 탭 구분 텍스트 저장 경로")
@click.option("--text", "-t", "text", default=None,
              help="붙여넣은 텍스트 ('-' 이면 표준 입력)")
def match(
    files: tuple[str, ...],
    export_path: str | None,
    copy_path: str | None,
    text: str | None,
) -> None:
    """영어/태국어 용어를 짝지어 정렬합니다."""
    from copydesk.alignment import to_clipboard_text
    from copydesk.export import alignment_document, save_word_document

    units = _ingest_paths(files, ContentCategory.GENERAL) + _manual_units(text)
    if not units:
        click.echo("❌ 정렬할 파일 또는 텍스트를 지정하세요.", err=True)
        raise SystemExit(1)
    session = _open_session(units)

    click.echo(f"🌐 정렬 중: {len(units)}개 소스")
    result = session.match_bilingual(units)
    if result is None:
        click.echo("❌ 정렬할 콘텐츠가 없습니다.", err=True)
        raise SystemExit(1)
    if result.failure is not None:
        click.echo("❌ 정렬 실패: 응답을 받지 못했습니다.", err=True)
        raise SystemExit(1)

    click.echo(f"\n{'='*60}")
    click.echo(f"  매칭: {len(result.matches)}  "
               f"미매칭(영어): {len(result.unmatched_en)}  "
               f"미매칭(태국어): {len(result.unmatched_th)}")
    click.echo(f"{'='*60}")
    click.echo(to_clipboard_text(result))

    if copy_path:
        Path(copy_path).write_text(to_clipboard_text(result), encoding="utf-8")
        click.echo(f"\n📋 텍스트 저장: {copy_path}")
    if export_path:
        save_word_document(alignment_document(result), export_path)
        click.echo(f"📝 보고서 저장: {export_path}")


# ── style-guide ───────────────────────────────────────────────────

@main.command("style-guide")
@click.argument("files", nargs=-1, type=click.Path(exists=True, dir_okay=False))
@click.option("--refine", "-r", "instruction", default=None, help="기존 가이드 수정 지시")
@click.option("--guide", "-g", "guide_path", type=click.Path(exists=True, dir_okay=False),
              default=None, help="수정할 기존 가이드 (마크다운)")
@click.option("-o", "--output", type=click.Path(), default=None, help="가이드 저장 경로 (.md)")
@click.option("--export", "export_path", type=click.Path(), default=None,
              help="워드 문서 저장 경로 (.doc)")
@click.option("--sections", "show_sections", is_flag=True, default=False,
              help="섹션 목록만 출력")
@click.option("--text", "-t", "text", default=None,
              help="붙여넣은 참고 텍스트 ('-' 이면 표준 입력)")
def style_guide(
    files: tuple[str, ...],
    instruction: str | None,
    guide_path: str | None,
    output: str | None,
    export_path: str | None,
    show_sections: bool,
    text: str | None,
) -> None:
    """소스 문서로 UX 스타일 가이드를 만들거나, 기존 가이드를 수정합니다."""
    from copydesk.export import save_word_document, style_guide_document
    from copydesk.sections import split_sections

    if instruction is not None:
        if not guide_path:
            click.echo("❌ --refine 에는 --guide 가 필요합니다.", err=True)
            raise SystemExit(1)
        session = _open_session([])
        current = Path(guide_path).read_text(encoding="utf-8")
        click.echo(f"🛠️  가이드 수정 중: {instruction}")
        result = session.refine_style_guide(instruction, current_guide=current)
    else:
        units = _ingest_paths(files, None) + _manual_units(text)
        if not units:
            click.echo("❌ 소스 파일 또는 텍스트를 지정하세요.", err=True)
            raise SystemExit(1)
        session = _open_session(units)
        click.echo(f"📚 가이드 합성 중: {len(units)}개 소스")
        result = session.create_style_guide()

    if result is None:
        click.echo("❌ 처리할 내용이 없습니다.", err=True)
        raise SystemExit(1)
    if result.failure is not None:
        click.echo(f"❌ {result.text}", err=True)
        raise SystemExit(1)

    if show_sections:
        for section in split_sections(result.text):
            click.echo(f"  {section.order + 1}. {section.title} ({len(section.body)}자)")
    else:
        click.echo(result.text)

    if output:
        out = Path(output)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(result.text, encoding="utf-8")
        click.echo(f"\n💾 저장: {output}")
    if export_path:
        save_word_document(style_guide_document(result.text), export_path)
        click.echo(f"📝 문서 저장: {export_path}")


# ── fetch ─────────────────────────────────────────────────────────

@main.command()
@click.argument("url")
@click.option("--category", "-c", type=_CATEGORY_CHOICE, default=None,
              help="분류 지정 (기본: URL 로 추정)")
def fetch(url: str, category: str | None) -> None:
    """웹에 게시된 Google 문서/시트를 가져와 미리 봅니다."""
    from copydesk.config import load_settings
    from copydesk.fetch import RemoteImporter
    from copydesk.ingest import SourceIngestor

    settings = load_settings()
    importer = RemoteImporter(SourceIngestor(), timeout=settings.fetch_timeout)

    click.echo(f"🌍 가져오는 중: {url}")
    try:
        unit = importer.fetch(url, _category(category))
    except IngestionError as e:
        click.echo(f"❌ {e}", err=True)
        raise SystemExit(1)

    info = unit.to_dict()
    click.echo(f"  📄 {unit.display_name} [{unit.category.value}] {info['size']:,} {info['sizeUnit']}")
    click.echo(f"      {info['preview']}")


# ── 유틸리티 ──────────────────────────────────────────────────────

def _category(value: str | None) -> ContentCategory | None:
    return ContentCategory(value) if value else None


def _ingest_paths(paths: Iterable[str], category: ContentCategory | None) -> list[ContentUnit]:
    """파일 목록을 수집합니다. 실패한 파일은 경고만 출력하고 건너뜁니다."""
    from copydesk.ingest import SourceIngestor

    batch = SourceIngestor().ingest_batch(paths, category)
    for err in batch.errors:
        click.echo(f"⚠️  {err}", err=True)
    return batch.units


def _manual_units(text: str | None) -> list[ContentUnit]:
    """붙여넣은 텍스트를 general 콘텐츠 단위로. '-' 이면 표준 입력을 읽습니다."""
    from copydesk.ingest import SourceIngestor

    if text == "-":
        text = click.get_text_stream("stdin").read()
    if text is None or not text.strip():
        return []
    return [SourceIngestor().ingest_text(MANUAL_INPUT_NAME, text)]


def _make_client(settings):
    from copydesk.client import GeminiInferenceClient

    return GeminiInferenceClient(
        model=settings.model,
        api_key=settings.require_api_key(),
        temperature=settings.temperature,
        timeout=settings.timeout,
    )


def _open_session(units: Iterable[ContentUnit]):
    """설정을 읽고 추론 클라이언트와 세션을 만듭니다."""
    from copydesk.composer import RequestComposer
    from copydesk.config import load_settings
    from copydesk.session import AssistantSession
    from copydesk.store import ContentStore

    settings = load_settings()
    try:
        client = _make_client(settings)
    except ConfigError as e:
        click.echo(f"❌ {e}", err=True)
        raise SystemExit(1)

    return AssistantSession(
        ContentStore(units),
        client,
        RequestComposer(ceiling=settings.content_ceiling),
    )


def _save_json(data: dict, path: str) -> None:
    """결과를 JSON 파일로 저장."""
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(
        json.dumps(data, ensure_ascii=False, indent=2),
        encoding="utf-8",
    )
