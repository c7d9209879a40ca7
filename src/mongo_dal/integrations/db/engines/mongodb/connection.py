"""
목적: MongoDB 커넥션 풀 모듈을 제공한다.
설명: 공유 MongoClient 위에서 작업마다 독립된 ClientSession을 체크아웃/반환하고 작업 타임아웃 스코프를 적용한다.
디자인 패턴: 오브젝트 풀, 매니저 패턴
참조: src/mongo_dal/integrations/db/base/pool.py, src/mongo_dal/integrations/db/engines/mongodb/engine.py
"""

from __future__ import annotations

import threading
from contextlib import AbstractContextManager, nullcontext
from dataclasses import dataclass
from typing import Any, Optional

import pymongo
from pymongo import MongoClient

from mongo_dal.integrations.db.base.pool import BaseConnectionPool
from mongo_dal.shared.const import DBConst
from mongo_dal.shared.logging import Logger


@dataclass(frozen=True)
class MongoConnection:
    """작업 한 번 동안 빌려 쓰는 MongoDB 커넥션 핸들."""

    client: Any
    database: Any
    session: Any

    def collection(self, name: str) -> Any:
        """컬렉션 객체를 반환한다. 이름이 비어 있으면 기본 컬렉션을 사용한다."""

        return self.database[name or DBConst.DEFAULT_COLLECTION]


class MongoConnectionPool(BaseConnectionPool):
    """MongoDB 커넥션 풀.

    물리 커넥션 풀은 MongoClient가 소유하고, 이 클래스는 작업 단위 세션의
    획득과 반환만 책임진다.
    """

    def __init__(
        self,
        uri: str,
        database_name: str,
        auth_source: Optional[str],
        logger: Logger,
        mongo_client_cls: Any = None,
        operation_timeout: Optional[float] = None,
    ) -> None:
        self._uri = uri
        self._database_name = database_name
        self._auth_source = auth_source
        self._logger = logger
        self._mongo_client_cls = mongo_client_cls or MongoClient
        self._operation_timeout = operation_timeout
        self._client: Any | None = None
        self._lock = threading.Lock()

    @property
    def database_name(self) -> str:
        return self._database_name

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    def connect(self) -> None:
        """MongoClient를 초기화한다."""

        with self._lock:
            if self._client is not None:
                return
            if self._auth_source and "authSource=" not in self._uri:
                self._client = self._mongo_client_cls(self._uri, authSource=self._auth_source)
            else:
                self._client = self._mongo_client_cls(self._uri)
        self._logger.info(f"MongoDB 연결이 초기화되었습니다: database={self._database_name}")

    def close(self) -> None:
        """MongoClient를 종료한다."""

        with self._lock:
            if self._client is None:
                return
            self._client.close()
            self._client = None
        self._logger.info("MongoDB 연결이 종료되었습니다.")

    def ensure_client(self) -> Any:
        """초기화된 MongoClient를 반환한다."""

        if self._client is None:
            raise RuntimeError("MongoDB 연결이 초기화되지 않았습니다.")
        return self._client

    def acquire(self) -> MongoConnection:
        client = self.ensure_client()
        session = client.start_session()
        return MongoConnection(
            client=client,
            database=client[self._database_name],
            session=session,
        )

    def release(self, connection: MongoConnection) -> None:
        connection.session.end_session()

    def operation_scope(self) -> AbstractContextManager:
        if self._operation_timeout is None:
            return nullcontext()
        return pymongo.timeout(self._operation_timeout)
