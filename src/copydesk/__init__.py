"""
copydesk — UX writing assistant core.

용어집 검색, 마이크로카피 생성, 영어/태국어 용어 정렬, 스타일 가이드 합성.
"""

__version__ = "0.1.0"

from copydesk.schema import (
    ContentCategory,
    ContentUnit,
    TaskKind,
    TaskRequest,
    SearchResult,
    GenerationResult,
    BilingualAlignment,
    StyleGuideText,
    ErrorResult,
    StyleGuideSection,
    match_result,
    is_failure,
)
from copydesk.errors import (
    CopydeskError,
    IngestionError,
    InferenceError,
    TransportFailure,
    SchemaViolation,
    EmptyResponse,
    ConfigError,
    FailureKind,
)
from copydesk.ingest import SourceIngestor, IngestBatch, classify_category
from copydesk.budget import CONTENT_CEILING, apply_budget, guard_units
from copydesk.composer import RequestComposer
from copydesk.client import GeminiInferenceClient
from copydesk.decoder import decode, execute, neutral_failure
from copydesk.sections import split_sections, join_sections
from copydesk.alignment import to_clipboard_text, to_export_html
from copydesk.store import ContentStore
from copydesk.session import AssistantSession

__all__ = [
    # schema
    "ContentCategory",
    "ContentUnit",
    "TaskKind",
    "TaskRequest",
    "SearchResult",
    "GenerationResult",
    "BilingualAlignment",
    "StyleGuideText",
    "ErrorResult",
    "StyleGuideSection",
    "match_result",
    "is_failure",
    # errors
    "CopydeskError",
    "IngestionError",
    "InferenceError",
    "TransportFailure",
    "SchemaViolation",
    "EmptyResponse",
    "ConfigError",
    "FailureKind",
    # ingest
    "SourceIngestor",
    "IngestBatch",
    "classify_category",
    # budget
    "CONTENT_CEILING",
    "apply_budget",
    "guard_units",
    # composer / client / decoder
    "RequestComposer",
    "GeminiInferenceClient",
    "decode",
    "execute",
    "neutral_failure",
    # views
    "split_sections",
    "join_sections",
    "to_clipboard_text",
    "to_export_html",
    # session
    "ContentStore",
    "AssistantSession",
]
