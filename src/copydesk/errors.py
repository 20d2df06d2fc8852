"""
copydesk.errors — 예외 계층

  CopydeskError
  ├── IngestionError       파일 단위 수집 실패 (배치는 계속 진행)
  ├── InferenceError
  │   ├── TransportFailure 네트워크/API 오류
  │   ├── SchemaViolation  응답이 출력 계약과 불일치
  │   └── EmptyResponse    응답 텍스트 없음
  └── ConfigError          설정 누락 (API 키 등)

예산 초과(BudgetTruncation)는 예외가 아니라 SizeInfo.truncated 플래그와
WARNING 로그로 표시합니다.
"""

from __future__ import annotations

from enum import Enum


class FailureKind(str, Enum):
    """중립 실패값에 붙는 실패 유형."""
    TRANSPORT = "transport"
    SCHEMA = "schema"
    EMPTY = "empty"


class CopydeskError(Exception):
    """copydesk 기본 예외."""


class IngestionError(CopydeskError):
    """파일 하나를 콘텐츠 단위로 변환하지 못함."""

    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason
        super().__init__(f"{name}: {reason}")


class InferenceError(CopydeskError):
    """추론 교환 단계의 오류."""
    failure_kind: FailureKind = FailureKind.TRANSPORT


class TransportFailure(InferenceError):
    failure_kind = FailureKind.TRANSPORT


class SchemaViolation(InferenceError):
    failure_kind = FailureKind.SCHEMA


class EmptyResponse(InferenceError):
    failure_kind = FailureKind.EMPTY


class ConfigError(CopydeskError):
    """필수 설정값 누락."""
