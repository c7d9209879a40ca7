"""
목적: 비타입 셀렉터 값을 두 가지 변형 중 하나로 해석한다.
설명: 고유 식별자(`UniqueId`) 또는 필터 맵(`FilterMap`)으로 분류하고, 그 외 입력은 거부한다.
디자인 패턴: 태그드 유니온
참조: src/mongo_dal/integrations/db/base/errors.py
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Dict, Optional, Union

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, ValidationError

from mongo_dal.integrations.db.base.errors import DALErrorKind, DALException
from mongo_dal.shared.const import DBConst


class UniqueId(BaseModel):
    """고유 식별자 셀렉터."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    identifier: ObjectId

    def to_filter(self) -> Dict[str, Any]:
        return {DBConst.ID_FIELD: self.identifier}


class FilterMap(BaseModel):
    """필드-값 매핑 셀렉터."""

    model_config = ConfigDict(frozen=True)

    mapping: Dict[str, Any]

    def to_filter(self) -> Dict[str, Any]:
        return dict(self.mapping)


Selector = Union[UniqueId, FilterMap]


def resolve_selector(value: Any) -> Selector:
    """입력 값을 셀렉터 변형으로 해석한다.

    Args:
        value: ObjectId, 필드-값 매핑, 또는 이미 해석된 셀렉터.

    Returns:
        UniqueId 또는 FilterMap.

    Raises:
        DALException: None이면 NULL_SELECTOR, 그 외 타입이나 문자열이 아닌 키를 가진
            매핑이면 UNSUPPORTED_SELECTOR_KIND.
    """

    if value is None:
        raise DALException(DALErrorKind.NULL_SELECTOR, "셀렉터가 비어 있습니다.")
    if isinstance(value, (UniqueId, FilterMap)):
        return value
    if isinstance(value, ObjectId):
        return UniqueId(identifier=value)
    if isinstance(value, Mapping):
        try:
            return FilterMap(mapping=dict(value))
        except ValidationError as exc:
            raise _unsupported_kind(value, "필터 맵의 키는 문자열이어야 합니다.", exc) from exc
    raise _unsupported_kind(value, "문자열 식별자는 ObjectId로 변환해 전달하세요.")


def _unsupported_kind(
    value: Any, hint: str, original: Optional[BaseException] = None
) -> DALException:
    return DALException(
        DALErrorKind.UNSUPPORTED_SELECTOR_KIND,
        "지원하지 않는 셀렉터 타입입니다. (ObjectId 또는 문자열 키 매핑만 지원)",
        metadata={"type": type(value).__name__},
        hint=hint,
        original=original,
    )
