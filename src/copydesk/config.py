"""
copydesk.config — 환경 변수 설정

.env 파일(python-dotenv)과 환경 변수에서 읽습니다.

  GOOGLE_API_KEY (또는 API_KEY)  Gemini API 키
  COPYDESK_MODEL                 모델 이름 (기본 gemini-2.5-flash)
  COPYDESK_TEMPERATURE           생성 온도 (미설정 시 모델 기본값)
  COPYDESK_TIMEOUT               추론 요청 타임아웃(초, 미설정 시 SDK 기본값)
  COPYDESK_FETCH_TIMEOUT         원격 가져오기 타임아웃(초, 기본 30)
  COPYDESK_CONTENT_CEILING       텍스트 단위 상한(문자 수, 기본 800000)

숫자 값이 잘못되면 기본값을 씁니다.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from copydesk.budget import CONTENT_CEILING
from copydesk.client import DEFAULT_MODEL
from copydesk.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_FETCH_TIMEOUT = 30.0


@dataclass
class Settings:
    api_key: str
    model: str = DEFAULT_MODEL
    temperature: Optional[float] = None
    timeout: Optional[float] = None
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT
    content_ceiling: int = CONTENT_CEILING

    def require_api_key(self) -> str:
        if not self.api_key:
            raise ConfigError(
                "API 키가 설정되지 않았습니다. GOOGLE_API_KEY 환경 변수 또는 .env 를 확인하세요"
            )
        return self.api_key


def _parse_int(value: Optional[str], default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning("정수 설정값이 잘못되어 기본값 사용: %r", value)
        return default


def _parse_float(value: Optional[str], default: Optional[float]) -> Optional[float]:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError:
        logger.warning("실수 설정값이 잘못되어 기본값 사용: %r", value)
        return default


def load_settings(use_dotenv: bool = True) -> Settings:
    """환경 변수에서 설정을 읽습니다."""
    if use_dotenv:
        load_dotenv()

    return Settings(
        api_key=os.getenv("GOOGLE_API_KEY") or os.getenv("API_KEY") or "",
        model=os.getenv("COPYDESK_MODEL") or DEFAULT_MODEL,
        temperature=_parse_float(os.getenv("COPYDESK_TEMPERATURE"), None),
        timeout=_parse_float(os.getenv("COPYDESK_TIMEOUT"), None),
        fetch_timeout=_parse_float(os.getenv("COPYDESK_FETCH_TIMEOUT"), DEFAULT_FETCH_TIMEOUT),
        content_ceiling=_parse_int(os.getenv("COPYDESK_CONTENT_CEILING"), CONTENT_CEILING),
    )
