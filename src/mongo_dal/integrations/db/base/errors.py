"""
목적: 문서 DB 접근 계층의 예외 종류와 예외 클래스를 정의한다.
설명: 공유 에러 값 대신 명시적 에러 종류 열거형과 실패 지점의 구조화 컨텍스트를 함께 전달한다.
디자인 패턴: 도메인 예외 객체
참조: src/mongo_dal/shared/exceptions/base.py
"""

from __future__ import annotations

from contextlib import contextmanager
from enum import Enum
from typing import Any, Iterator, Optional

from pymongo.errors import PyMongoError

from mongo_dal.shared.exceptions import BaseAppException, ExceptionDetail


class DALErrorKind(str, Enum):
    """DAL 에러 종류."""

    NULL_SELECTOR = "NULL_SELECTOR"
    UNSUPPORTED_SELECTOR_KIND = "UNSUPPORTED_SELECTOR_KIND"
    AMBIGUOUS_MATCH = "AMBIGUOUS_MATCH"
    NOT_FOUND = "NOT_FOUND"
    INVALID_REFERENCE_SHAPE = "INVALID_REFERENCE_SHAPE"
    INVALID_IDENTIFIER_FORMAT = "INVALID_IDENTIFIER_FORMAT"
    INDEX_CREATION_FAILED = "INDEX_CREATION_FAILED"
    STORAGE_OPERATION_FAILED = "STORAGE_OPERATION_FAILED"


class DALException(BaseAppException):
    """DAL 작업 실패 예외이다.

    Args:
        kind: 에러 종류.
        message: 호출자에게 전달할 메시지.
        metadata: 실패 지점 컨텍스트(필드명, 값, 컬렉션 등).
        original: 원본 드라이버 예외.
        hint: 해결 힌트.
    """

    def __init__(
        self,
        kind: DALErrorKind,
        message: str,
        metadata: Optional[dict[str, Any]] = None,
        original: Optional[BaseException] = None,
        hint: Optional[str] = None,
    ) -> None:
        detail = ExceptionDetail(
            code=kind.value,
            cause=str(original) if original is not None else message,
            hint=hint,
            metadata=dict(metadata or {}),
        )
        super().__init__(message, detail, original)
        self._kind = kind

    @property
    def kind(self) -> DALErrorKind:
        """에러 종류를 반환한다."""

        return self._kind

    @property
    def metadata(self) -> dict[str, Any]:
        return self.detail.metadata


@contextmanager
def driver_errors(kind: DALErrorKind, message: str, **metadata: Any) -> Iterator[None]:
    """블록 안에서 발생한 pymongo 예외를 지정한 종류의 DALException으로 변환한다."""

    try:
        yield
    except PyMongoError as exc:
        raise DALException(kind, message, metadata=metadata, original=exc) from exc
