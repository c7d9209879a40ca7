"""
목적: 접두사 기반 키 표기를 pymongo 키 목록으로 변환한다.
설명: `-field`는 내림차순, `+field`/`field`는 오름차순으로 해석해 정렬과 인덱스에서 함께 사용한다.
디자인 패턴: 빌더 패턴
참조: src/mongo_dal/integrations/db/engines/mongodb/index_manager.py
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from pymongo import ASCENDING, DESCENDING

from mongo_dal.shared.const import DBConst


class MongoKeyBuilder:
    """정렬/인덱스 키 빌더."""

    def build(self, keys: Sequence[str]) -> List[Tuple[str, int]]:
        """키 표기 목록을 (필드, 방향) 목록으로 변환한다."""

        return [self._parse(key) for key in keys]

    def build_sort(self, sort_keys: Optional[Sequence[str]]) -> List[Tuple[str, int]]:
        """정렬 키를 변환한다. 비어 있으면 생성 시각 내림차순을 사용한다."""

        return self.build(list(sort_keys) if sort_keys else [DBConst.DEFAULT_SORT_KEY])

    def _parse(self, key: str) -> Tuple[str, int]:
        if not isinstance(key, str):
            raise ValueError(f"키는 문자열이어야 합니다: {key!r}")
        direction = ASCENDING
        field = key
        if key.startswith("-"):
            direction = DESCENDING
            field = key[1:]
        elif key.startswith("+"):
            field = key[1:]
        if not field:
            raise ValueError(f"필드명이 비어 있는 키입니다: {key!r}")
        return field, direction
