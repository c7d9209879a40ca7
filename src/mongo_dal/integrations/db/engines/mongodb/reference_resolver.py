"""
목적: 임베디드 참조 필드를 정규화된 컬렉션 간 참조로 변환한다.
설명: `{"id": <hex>}` 형태의 필드를 `<field>_ref` DBRef 또는 `<field>_ref.$id` 식별자로 다시 쓴다.
디자인 패턴: 레지스트리 패턴, 변환기
참조: src/mongo_dal/integrations/db/base/errors.py, src/mongo_dal/shared/const/__init__.py
"""

from __future__ import annotations

import re
from collections.abc import Mapping, MutableMapping
from typing import Any, Dict, Optional, Union

import inflection
from bson import ObjectId
from bson.dbref import DBRef

from mongo_dal.integrations.db.base.errors import DALErrorKind, DALException
from mongo_dal.shared.const import DBConst

_OBJECT_ID_HEX_RE = re.compile(r"[0-9a-fA-F]{24}")

TypeDescriptor = Union[type, str]


def pluralize(word: str) -> str:
    """영어 단어의 복수형을 소문자로 반환한다. 이미 복수형인 단어는 그대로 둔다."""

    return inflection.pluralize(word).lower()


class CollectionNameRegistry:
    """타입 이름과 컬렉션 이름의 명시적 매핑.

    등록되지 않은 타입은 이름을 소문자 복수형으로 바꿔 사용한다.
    """

    def __init__(self, mapping: Optional[Mapping[str, str]] = None) -> None:
        self._mapping: Dict[str, str] = {}
        for type_name, collection in (mapping or {}).items():
            self.register(type_name, collection)

    def register(self, type_descriptor: TypeDescriptor, collection: str) -> None:
        """타입에 컬렉션 이름을 등록한다."""

        if not collection:
            raise ValueError("컬렉션 이름이 비어 있습니다.")
        self._mapping[self._type_name(type_descriptor)] = collection

    def resolve(self, type_descriptor: TypeDescriptor) -> str:
        """타입에 해당하는 컬렉션 이름을 반환한다."""

        type_name = self._type_name(type_descriptor)
        return self._mapping.get(type_name) or pluralize(type_name)

    def _type_name(self, type_descriptor: TypeDescriptor) -> str:
        name = type_descriptor.__name__ if isinstance(type_descriptor, type) else str(type_descriptor)
        if not name:
            raise ValueError("타입 이름이 비어 있습니다.")
        return name


class ReferenceResolver:
    """참조 필드 변환기."""

    def __init__(self, registry: Optional[CollectionNameRegistry] = None) -> None:
        self._registry = registry or CollectionNameRegistry()

    @property
    def registry(self) -> CollectionNameRegistry:
        return self._registry

    def resolve(
        self,
        document: MutableMapping[str, Any],
        field: str,
        type_descriptor: TypeDescriptor,
    ) -> None:
        """`field`를 삭제하고 `<field>_ref`에 DBRef를 기록한다. 필드가 없으면 아무것도 하지 않는다."""

        if field not in document:
            return
        object_id = self._extract_id(document, field)
        collection = self._registry.resolve(type_descriptor)
        del document[field]
        document[f"{field}{DBConst.REFERENCE_SUFFIX}"] = DBRef(collection, object_id)

    def resolve_id(self, document: MutableMapping[str, Any], field: str) -> None:
        """`field`를 삭제하고 `<field>_ref.$id`에 식별자만 기록한다.

        참조하는 문서를 찾는 셀렉터를 만들 때 사용한다.
        """

        if field not in document:
            return
        object_id = self._extract_id(document, field)
        del document[field]
        key = f"{field}{DBConst.REFERENCE_SUFFIX}.{DBConst.REFERENCE_ID_KEY}"
        document[key] = object_id

    def _extract_id(self, document: Mapping[str, Any], field: str) -> ObjectId:
        value = document[field]
        if not isinstance(value, Mapping):
            raise DALException(
                DALErrorKind.INVALID_REFERENCE_SHAPE,
                f"참조 필드는 객체여야 합니다: [{field}]",
                metadata={"field": field, "value": repr(value)},
            )
        if "id" not in value:
            raise DALException(
                DALErrorKind.INVALID_REFERENCE_SHAPE,
                f"{field}는 id 필드를 포함한 객체여야 합니다.",
                metadata={"field": field, "value": repr(value)},
            )
        raw_id = value["id"]
        if not isinstance(raw_id, str) or not _OBJECT_ID_HEX_RE.fullmatch(raw_id):
            raise DALException(
                DALErrorKind.INVALID_IDENTIFIER_FORMAT,
                f"id 형식이 올바르지 않습니다: [{raw_id!r}]",
                metadata={"field": field, "value": repr(raw_id)},
            )
        return ObjectId(raw_id)
