"""
목적: DB 통합 모듈 공개 API를 제공한다.
설명: 공통 클라이언트, 엔진 구현체, 셀렉터/페이지/에러 모델을 노출한다.
디자인 패턴: 퍼사드
참조: src/mongo_dal/integrations/db/client.py, src/mongo_dal/integrations/db/engines
"""

from mongo_dal.integrations.db.base import (
    AtomicChange,
    Blob,
    ChangeInfo,
    DALErrorKind,
    DALException,
    FilterMap,
    IndexSpec,
    Page,
    SoftDeleteMetadata,
    UniqueId,
    UpsertResult,
    resolve_selector,
)
from mongo_dal.integrations.db.client import DALClient
from mongo_dal.integrations.db.engines.mongodb import (
    CollectionNameRegistry,
    MongoBlobStore,
    MongoDBEngine,
    ReferenceResolver,
)

__all__ = [
    "DALClient",
    "MongoDBEngine",
    "MongoBlobStore",
    "CollectionNameRegistry",
    "ReferenceResolver",
    "AtomicChange",
    "Blob",
    "ChangeInfo",
    "DALErrorKind",
    "DALException",
    "FilterMap",
    "IndexSpec",
    "Page",
    "SoftDeleteMetadata",
    "UniqueId",
    "UpsertResult",
    "resolve_selector",
]
