"""
목적: MongoDB 인덱스 보장 모듈을 제공한다.
설명: IndexSpec을 create_index 인자로 변환하고 실패를 INDEX_CREATION_FAILED로 전달한다.
디자인 패턴: 매니저 패턴
참조: src/mongo_dal/integrations/db/base/models.py, src/mongo_dal/integrations/db/engines/mongodb/key_builder.py
"""

from __future__ import annotations

from typing import Any, Dict

from mongo_dal.integrations.db.base.errors import DALErrorKind, driver_errors
from mongo_dal.integrations.db.base.models import IndexSpec
from mongo_dal.integrations.db.engines.mongodb.key_builder import MongoKeyBuilder
from mongo_dal.shared.logging import LogContext, Logger


class MongoIndexManager:
    """MongoDB 인덱스 관리자."""

    def __init__(self, key_builder: MongoKeyBuilder, logger: Logger) -> None:
        self._key_builder = key_builder
        self._logger = logger

    def index_options(self, spec: IndexSpec) -> Dict[str, Any]:
        """create_index 옵션을 반환한다.

        `dropDups`는 MongoDB 3.0에서 제거된 옵션이라 서버로 전달하지 않는다.
        """

        return {
            "unique": spec.unique,
            "sparse": spec.sparse,
            "background": spec.background,
        }

    def ensure(self, coll: Any, spec: IndexSpec, session: Any = None) -> str:
        """인덱스가 존재하도록 보장하고 인덱스 이름을 반환한다."""

        keys = self._key_builder.build(spec.keys)
        with driver_errors(
            DALErrorKind.INDEX_CREATION_FAILED,
            "인덱스 생성에 실패했습니다.",
            collection=coll.name,
            keys=list(spec.keys),
        ):
            name = coll.create_index(keys, session=session, **self.index_options(spec))
        self._logger.debug(
            f"인덱스 보장 완료: {name}",
            LogContext(collection=coll.name, operation="ensure_index"),
            metadata={"keys": list(spec.keys), "drop_dups": spec.drop_dups},
        )
        return name
