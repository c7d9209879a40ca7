"""
목적: 문서 DB 접근 계층(DAL) 패키지의 최상위 API를 제공한다.
설명: 애플리케이션 코드가 MongoDB 질의/업데이트 문법을 직접 다루지 않도록 공통 클라이언트와 모델을 노출한다.
디자인 패턴: 퍼사드
참조: src/mongo_dal/integrations/db/__init__.py
"""

from mongo_dal.integrations.db import (
    AtomicChange,
    ChangeInfo,
    CollectionNameRegistry,
    DALClient,
    DALErrorKind,
    DALException,
    FilterMap,
    IndexSpec,
    MongoBlobStore,
    MongoDBEngine,
    Page,
    ReferenceResolver,
    UniqueId,
    UpsertResult,
)
from mongo_dal.shared.config import MongoSettings

__all__ = [
    "DALClient",
    "MongoDBEngine",
    "MongoBlobStore",
    "ReferenceResolver",
    "CollectionNameRegistry",
    "MongoSettings",
    "AtomicChange",
    "ChangeInfo",
    "DALErrorKind",
    "DALException",
    "FilterMap",
    "IndexSpec",
    "Page",
    "UniqueId",
    "UpsertResult",
]
