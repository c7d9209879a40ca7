"""
목적: DB 베이스 모듈 공개 API를 제공한다.
설명: 공통 모델, 셀렉터, 에러, 엔진/풀 인터페이스를 노출한다.
디자인 패턴: 퍼사드
참조: src/mongo_dal/integrations/db/base/models.py, src/mongo_dal/integrations/db/base/engine.py
"""

from mongo_dal.integrations.db.base.engine import BaseDocumentEngine
from mongo_dal.integrations.db.base.errors import DALErrorKind, DALException, driver_errors
from mongo_dal.integrations.db.base.models import (
    AtomicChange,
    Blob,
    ChangeInfo,
    IndexSpec,
    Page,
    SoftDeleteMetadata,
    UpsertResult,
)
from mongo_dal.integrations.db.base.pool import BaseConnectionPool
from mongo_dal.integrations.db.base.selector import (
    FilterMap,
    Selector,
    UniqueId,
    resolve_selector,
)

__all__ = [
    "AtomicChange",
    "Blob",
    "ChangeInfo",
    "IndexSpec",
    "Page",
    "SoftDeleteMetadata",
    "UpsertResult",
    "FilterMap",
    "Selector",
    "UniqueId",
    "resolve_selector",
    "DALErrorKind",
    "DALException",
    "driver_errors",
    "BaseDocumentEngine",
    "BaseConnectionPool",
]
