"""
copydesk.store — 세션 콘텐츠 저장소

세션이 소유하는 순서 있는 ContentUnit 집합입니다. 추가/삭제/재분류는
여기서만 일어나고, 작업 조율 쪽은 snapshot() 으로 받은 불변 튜플만 봅니다.
세션이 끝나면 함께 사라집니다 (영속화 없음).
"""

from __future__ import annotations

import logging
from typing import Iterable

from copydesk.schema import ContentCategory, ContentUnit

logger = logging.getLogger(__name__)


class ContentStore:
    """수집 순서를 유지하는 콘텐츠 단위 저장소."""

    def __init__(self, units: Iterable[ContentUnit] = ()):
        self._units: dict[str, ContentUnit] = {}
        self.add_many(units)

    def __len__(self) -> int:
        return len(self._units)

    def __contains__(self, unit_id: object) -> bool:
        return unit_id in self._units

    def add(self, unit: ContentUnit) -> ContentUnit:
        if unit.id in self._units:
            raise ValueError(f"이미 등록된 단위 ID: {unit.id}")
        self._units[unit.id] = unit
        logger.debug("단위 추가: %s [%s]", unit.display_name, unit.category.value)
        return unit

    def add_many(self, units: Iterable[ContentUnit]) -> list[ContentUnit]:
        return [self.add(u) for u in units]

    def get(self, unit_id: str) -> ContentUnit:
        try:
            return self._units[unit_id]
        except KeyError:
            raise KeyError(f"단위를 찾을 수 없습니다: {unit_id}") from None

    def remove(self, unit_id: str) -> ContentUnit:
        unit = self.get(unit_id)
        del self._units[unit_id]
        logger.debug("단위 삭제: %s", unit.display_name)
        return unit

    def retag(self, unit_id: str, category: ContentCategory) -> ContentUnit:
        """분류를 바꾼 새 단위로 교체합니다 (순서 유지)."""
        unit = self.get(unit_id).with_category(category)
        self._units[unit_id] = unit
        logger.debug("단위 재분류: %s → %s", unit.display_name, unit.category.value)
        return unit

    def snapshot(self, category: ContentCategory | None = None) -> tuple[ContentUnit, ...]:
        """현재 단위들의 불변 스냅샷 (분류 필터 선택)."""
        if category is None:
            return tuple(self._units.values())
        category = ContentCategory(category)
        return tuple(u for u in self._units.values() if u.category == category)
