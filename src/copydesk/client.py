"""
copydesk.client — 추론 서비스 클라이언트

TaskRequest 를 Gemini(google-generativeai) 호출 1회로 보내고 응답 텍스트를
돌려줍니다. 스트리밍/재시도 없음. 실패는 예외로 올리고, 중립 실패값으로의
변환은 copydesk.decoder.execute 가 담당합니다.

  텍스트 세그먼트   → str 파트
  바이너리 세그먼트 → {"mime_type": ..., "data": bytes} 인라인 파트
  schema 계약       → response_mime_type=application/json + response_schema
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from copydesk.errors import ConfigError, EmptyResponse, TransportFailure
from copydesk.schema import TaskRequest

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"


class InferenceClientProtocol(Protocol):
    """추론 서비스 클라이언트 프로토콜."""

    def generate(self, request: TaskRequest) -> str:
        """요청 1회 → 응답 텍스트."""
        ...


def request_parts(request: TaskRequest) -> list[Any]:
    """TaskRequest 세그먼트를 Gemini 파트 목록으로 변환합니다."""
    parts: list[Any] = []
    for seg in request.segments:
        if seg.is_binary:
            parts.append({"mime_type": seg.mime_type, "data": seg.data})
        else:
            parts.append(seg.text)
    return parts


class GeminiInferenceClient:
    """
    Gemini 추론 클라이언트.

    Example:
        >>> client = GeminiInferenceClient(api_key="...")
        >>> text = client.generate(composer.search("save", units))
    """

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        api_key: str | None = None,
        temperature: float | None = None,
        timeout: float | None = None,
    ):
        """
        Args:
            model: Gemini 모델 이름
            api_key: Google API 키
            temperature: 생성 온도 (None 이면 모델 기본값)
            timeout: 요청 타임아웃(초)
        """
        import google.generativeai as genai

        if not api_key:
            raise ConfigError("GOOGLE_API_KEY 가 필요합니다")

        genai.configure(api_key=api_key)
        self._genai = genai
        self._model_name = model
        self.temperature = temperature
        self.timeout = timeout

    @property
    def model_name(self) -> str:
        return self._model_name

    def generate(self, request: TaskRequest) -> str:
        genai = self._genai
        config: dict[str, Any] = {}
        if self.temperature is not None:
            config["temperature"] = self.temperature
        if request.output_contract.is_structured:
            config["response_mime_type"] = "application/json"
            config["response_schema"] = request.output_contract.schema

        model = genai.GenerativeModel(
            self._model_name,
            system_instruction=request.system_instruction,
        )
        request_options = {"timeout": self.timeout} if self.timeout else None

        logger.info(
            "추론 요청: %s (model=%s, 세그먼트 %d개)",
            request.task_kind.value, self._model_name, len(request.segments),
        )
        try:
            response = model.generate_content(
                request_parts(request),
                generation_config=genai.GenerationConfig(**config),
                request_options=request_options,
            )
        except Exception as e:
            raise TransportFailure(f"Gemini 호출 실패: {e}") from e

        if not response.candidates:
            raise EmptyResponse("응답 후보가 없습니다 (차단 또는 빈 응답)")

        try:
            text = response.text
        except ValueError as e:
            raise EmptyResponse(f"응답 텍스트 없음: {e}") from e

        if not text or not text.strip():
            raise EmptyResponse("응답 텍스트가 비어 있습니다")
        return text
