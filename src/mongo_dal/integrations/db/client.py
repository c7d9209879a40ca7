"""
목적: 문서 DB 접근 계층의 공통 클라이언트를 제공한다.
설명: 엔진/Blob 저장소/참조 변환기를 하나의 커넥션 풀 위에 묶고 연결 수명을 관리한다.
디자인 패턴: 파사드
참조: src/mongo_dal/integrations/db/engines/mongodb/engine.py, src/mongo_dal/integrations/db/engines/mongodb/blob_store.py
"""

from __future__ import annotations

from typing import Any, Optional

from mongo_dal.integrations.db.engines.mongodb import (
    CollectionNameRegistry,
    MongoBlobStore,
    MongoDBEngine,
    ReferenceResolver,
)
from mongo_dal.shared.config import MongoSettings
from mongo_dal.shared.logging import Logger


class DALClient:
    """공통 DAL 클라이언트.

    Args:
        engine: 문서 CRUD/조회 엔진.
        blobs: Blob 저장소. 없으면 엔진의 풀로 기본 저장소를 만든다.
        references: 참조 변환기.
    """

    def __init__(
        self,
        engine: MongoDBEngine,
        blobs: Optional[MongoBlobStore] = None,
        references: Optional[ReferenceResolver] = None,
    ) -> None:
        self._engine = engine
        self._blobs = blobs or MongoBlobStore(engine.pool, logger=engine.logger)
        self._references = references or ReferenceResolver()

    @classmethod
    def from_settings(
        cls,
        settings: MongoSettings,
        logger: Optional[Logger] = None,
        registry: Optional[CollectionNameRegistry] = None,
        mongo_client_cls: Any = None,
        bucket_cls: Any = None,
    ) -> "DALClient":
        """설정 모델로 클라이언트를 구성한다."""

        engine = MongoDBEngine.from_settings(
            settings,
            logger=logger,
            mongo_client_cls=mongo_client_cls,
        )
        blobs = MongoBlobStore(
            engine.pool,
            prefix=settings.gridfs_prefix,
            logger=engine.logger,
            bucket_cls=bucket_cls,
        )
        return cls(engine, blobs=blobs, references=ReferenceResolver(registry))

    @property
    def engine(self) -> MongoDBEngine:
        """문서 엔진을 반환한다."""

        return self._engine

    @property
    def blobs(self) -> MongoBlobStore:
        """Blob 저장소를 반환한다."""

        return self._blobs

    @property
    def references(self) -> ReferenceResolver:
        """참조 변환기를 반환한다."""

        return self._references

    def connect(self) -> None:
        """엔진 연결을 초기화한다."""

        self._engine.connect()

    def close(self) -> None:
        """엔진 연결을 종료한다."""

        self._engine.close()

    def __enter__(self) -> "DALClient":
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
