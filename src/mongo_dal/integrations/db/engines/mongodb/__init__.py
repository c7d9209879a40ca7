"""
목적: MongoDB 엔진 패키지 공개 API를 제공한다.
설명: 엔진, 커넥션 풀, Blob 저장소, 참조 변환기를 노출한다.
디자인 패턴: 퍼사드
참조: src/mongo_dal/integrations/db/engines/mongodb/engine.py
"""

from mongo_dal.integrations.db.engines.mongodb.blob_store import MongoBlobStore
from mongo_dal.integrations.db.engines.mongodb.connection import (
    MongoConnection,
    MongoConnectionPool,
)
from mongo_dal.integrations.db.engines.mongodb.engine import MongoDBEngine
from mongo_dal.integrations.db.engines.mongodb.reference_resolver import (
    CollectionNameRegistry,
    ReferenceResolver,
    pluralize,
)

__all__ = [
    "MongoDBEngine",
    "MongoConnection",
    "MongoConnectionPool",
    "MongoBlobStore",
    "CollectionNameRegistry",
    "ReferenceResolver",
    "pluralize",
]
