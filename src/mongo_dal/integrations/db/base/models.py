"""
목적: 문서 DB 접근 계층에서 공통으로 사용하는 모델을 정의한다.
설명: 페이지, 인덱스 스펙, 변경 요약, 원자적 변경 지시, 소프트 삭제 메타데이터, Blob 모델을 제공한다.
디자인 패턴: 데이터 전송 객체(DTO)
참조: src/mongo_dal/integrations/db/base/engine.py
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Union

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, model_validator

from mongo_dal.shared.const import DBConst

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")
_INT32_MAX = 2**31 - 1


def _parse_non_negative(raw: Union[str, int, None]) -> Optional[int]:
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, str) and _INTEGER_RE.fullmatch(raw):
        value = int(raw)
    else:
        return None
    if value < 0 or value > _INT32_MAX:
        return None
    return value


class Page(BaseModel):
    """페이지네이션 정보.

    `valid`가 False이면 skip/limit을 적용하지 않고 전체 결과를 반환한다.
    """

    valid: bool = False
    offset: int = Field(default=0, ge=0)
    limit: int = Field(default=0, ge=0)

    @classmethod
    def parse(
        cls,
        offset: Union[str, int, None],
        limit: Union[str, int, None],
    ) -> "Page":
        """offset/limit 입력을 검증해 페이지를 생성한다.

        둘 중 하나라도 비어 있거나 0 이상의 32비트 정수로 해석되지 않으면
        유효하지 않은 페이지를 반환한다.
        """

        parsed_limit = _parse_non_negative(limit)
        parsed_offset = _parse_non_negative(offset)
        if parsed_limit is None or parsed_offset is None:
            return cls.invalid()
        return cls(valid=True, offset=parsed_offset, limit=parsed_limit)

    @classmethod
    def invalid(cls) -> "Page":
        return cls(valid=False)


class IndexSpec(BaseModel):
    """인덱스 스펙.

    키 앞의 `-`는 내림차순, `+` 또는 접두사 없음은 오름차순을 뜻한다.
    """

    keys: List[str] = Field(..., min_length=1)
    unique: bool = True
    sparse: bool = True
    background: bool = True
    drop_dups: bool = True

    @classmethod
    def default(cls) -> "IndexSpec":
        """생성 시각 내림차순 기본 인덱스를 반환한다."""

        return cls(keys=[DBConst.DEFAULT_SORT_KEY])

    @classmethod
    def from_keys(cls, keys: Optional[Sequence[str]] = None) -> "IndexSpec":
        """호출자 키가 있으면 기본 키를 대체한 스펙을 반환한다."""

        if not keys:
            return cls.default()
        return cls(keys=list(keys))


class ChangeInfo(BaseModel):
    """쓰기 작업의 변경 요약."""

    matched: int = 0
    updated: int = 0
    removed: int = 0
    upserted_id: Any = None


class AtomicChange(BaseModel):
    """원자적 find-and-modify 지시.

    Args:
        update: 적용할 업데이트(연산자 문서 또는 대체 문서).
        upsert: 일치 문서가 없을 때 새로 생성할지 여부.
        remove: 일치 문서를 삭제할지 여부.
        return_new: 변경 후 문서를 반환할지 여부.
    """

    update: Optional[Dict[str, Any]] = None
    upsert: bool = False
    remove: bool = False
    return_new: bool = False

    @model_validator(mode="after")
    def _check_exclusive(self) -> "AtomicChange":
        if self.remove and self.update is not None:
            raise ValueError("remove와 update는 함께 지정할 수 없습니다.")
        if not self.remove and self.update is None:
            raise ValueError("update 또는 remove 중 하나가 필요합니다.")
        if self.remove and (self.upsert or self.return_new):
            raise ValueError("remove에는 upsert/return_new를 지정할 수 없습니다.")
        return self


class UpsertResult(BaseModel):
    """업서트 결과. 원자적 변경일 때만 document가 채워진다."""

    document: Optional[Dict[str, Any]] = None
    change_info: ChangeInfo = Field(default_factory=ChangeInfo)


class SoftDeleteMetadata(BaseModel):
    """소프트 삭제 메타데이터."""

    is_delete: bool = True
    delete_at: datetime
    modify_at: datetime

    @classmethod
    def at(cls, now: datetime) -> "SoftDeleteMetadata":
        return cls(is_delete=True, delete_at=now, modify_at=now)

    def to_update(self) -> Dict[str, Any]:
        """필드 단위 `$set` 업데이트 문서를 반환한다."""

        return {
            "$set": {
                DBConst.IS_DELETE_FIELD: self.is_delete,
                DBConst.DELETE_AT_FIELD: self.delete_at,
                DBConst.MODIFY_AT_FIELD: self.modify_at,
            }
        }


class Blob(BaseModel):
    """Blob 저장소에 보관된 바이트 페이로드."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: ObjectId
    name: str
    data: bytes
