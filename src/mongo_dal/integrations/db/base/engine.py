"""
목적: 문서 DB 엔진 추상 인터페이스를 정의한다.
설명: 셀렉터 다형 CRUD, 페이지 조회, 집계 파이프라인을 위한 표준 메서드를 제공한다.
디자인 패턴: 전략 패턴
참조: src/mongo_dal/integrations/db/base/models.py, src/mongo_dal/integrations/db/base/selector.py
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from mongo_dal.integrations.db.base.models import (
    AtomicChange,
    ChangeInfo,
    Page,
    UpsertResult,
)


class BaseDocumentEngine(ABC):
    """문서 DB 엔진 인터페이스."""

    @property
    @abstractmethod
    def name(self) -> str:
        """엔진 이름을 반환한다."""

    @abstractmethod
    def connect(self) -> None:
        """DB 연결을 초기화한다."""

    @abstractmethod
    def close(self) -> None:
        """DB 연결을 종료한다."""

    @abstractmethod
    def drop_database(self) -> None:
        """대상 데이터베이스를 삭제한다."""

    @abstractmethod
    def create(
        self,
        collection: str,
        documents: Union[Mapping[str, Any], Sequence[Mapping[str, Any]]],
        index_keys: Optional[Sequence[str]] = None,
    ) -> List[Any]:
        """인덱스를 보장한 뒤 문서를 삽입한다."""

    @abstractmethod
    def upsert(
        self,
        collection: str,
        selector: Any,
        update: Union[Mapping[str, Any], AtomicChange],
    ) -> UpsertResult:
        """문서를 업데이트하거나 없으면 생성한다."""

    @abstractmethod
    def update(
        self,
        collection: str,
        selector: Any,
        fields: Mapping[str, Any],
        multi: bool = False,
    ) -> ChangeInfo:
        """일치 문서를 업데이트한다. 새 문서는 만들지 않는다."""

    @abstractmethod
    def remove(self, collection: str, selector: Any, multi: bool = False) -> ChangeInfo:
        """일치 문서를 물리 삭제한다."""

    @abstractmethod
    def soft_remove(self, collection: str, selector: Any, multi: bool = False) -> ChangeInfo:
        """일치 문서에 소프트 삭제 메타데이터를 기록한다."""

    @abstractmethod
    def find(
        self,
        collection: str,
        query: Any,
        page: Optional[Page] = None,
        sort_keys: Optional[Sequence[str]] = None,
    ) -> Iterable[Dict[str, Any]]:
        """지연 실행되는 조회 핸들을 반환한다."""

    @abstractmethod
    def find_many(
        self,
        collection: str,
        query: Any,
        page: Optional[Page] = None,
        sort_keys: Optional[Sequence[str]] = None,
    ) -> List[Dict[str, Any]]:
        """조회 결과를 모두 읽어 반환한다."""

    @abstractmethod
    def find_one(self, collection: str, selector: Any) -> Dict[str, Any]:
        """단일 문서를 조회한다."""

    @abstractmethod
    def pipeline(
        self,
        collection: str,
        stages: Sequence[Mapping[str, Any]],
    ) -> List[Dict[str, Any]]:
        """집계 파이프라인을 실행한다."""
