"""
목적: DB 커넥션 풀 추상화를 제공한다.
설명: 커넥션 획득/반환과 모든 종료 경로에서 반환을 보장하는 with 문 체크아웃을 정의한다.
디자인 패턴: 오브젝트 풀, 컨텍스트 매니저
참조: src/mongo_dal/integrations/db/engines/mongodb/connection.py
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager, contextmanager, nullcontext
from typing import Any, Iterator


class BaseConnectionPool(ABC):
    """커넥션 풀 인터페이스."""

    @abstractmethod
    def acquire(self) -> Any:
        """커넥션을 획득한다."""

    @abstractmethod
    def release(self, connection: Any) -> None:
        """커넥션을 반환한다."""

    @contextmanager
    def checkout(self) -> Iterator[Any]:
        """작업 한 번 동안 커넥션을 빌려주고 종료 시 반드시 반환한다."""

        with self.operation_scope():
            connection = self.acquire()
            try:
                yield connection
            finally:
                self.release(connection)

    def operation_scope(self) -> AbstractContextManager:
        """체크아웃 전체를 감싸는 스코프를 반환한다. 기본은 아무것도 하지 않는다."""

        return nullcontext()
