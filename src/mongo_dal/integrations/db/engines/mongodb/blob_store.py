"""
목적: GridFS 기반 Blob 저장소를 제공한다.
설명: 저장 시 식별자를 생성해 스트림으로 기록하고, 조회 시 식별자로 전체 내용을 메모리로 읽어 반환한다.
디자인 패턴: 저장소 패턴
참조: src/mongo_dal/integrations/db/engines/mongodb/connection.py, src/mongo_dal/integrations/db/base/models.py
"""

from __future__ import annotations

from typing import Any, Optional, Union

from bson import ObjectId
from gridfs import GridFSBucket
from gridfs.errors import NoFile
from pymongo.errors import PyMongoError

from mongo_dal.integrations.db.base.errors import DALErrorKind, DALException
from mongo_dal.integrations.db.base.models import Blob
from mongo_dal.integrations.db.engines.mongodb.connection import (
    MongoConnection,
    MongoConnectionPool,
)
from mongo_dal.shared.const import DBConst
from mongo_dal.shared.logging import LogContext, Logger, create_default_logger


class MongoBlobStore:
    """GridFS Blob 저장소.

    Args:
        pool: 엔진과 공유하는 커넥션 풀.
        prefix: GridFS 버킷 접두사(`<prefix>.files`, `<prefix>.chunks`).
        logger: 주입 가능한 로거.
        bucket_cls: 버킷 생성자. 기본은 GridFSBucket.
    """

    def __init__(
        self,
        pool: MongoConnectionPool,
        prefix: str = DBConst.DEFAULT_GRIDFS_PREFIX,
        logger: Optional[Logger] = None,
        bucket_cls: Any = None,
    ) -> None:
        if not prefix:
            raise ValueError("GridFS 접두사가 필요합니다.")
        self._pool = pool
        self._prefix = prefix
        self._logger = logger or create_default_logger("MongoBlobStore")
        self._bucket_cls = bucket_cls or GridFSBucket

    @property
    def prefix(self) -> str:
        return self._prefix

    def put(self, name: str, data: Union[bytes, bytearray, memoryview]) -> ObjectId:
        """바이트 페이로드를 저장하고 생성된 식별자를 반환한다.

        식별자 생성 이후 단계가 실패하면 STORAGE_OPERATION_FAILED를 발생시키며,
        예외 메타데이터의 `blob_id`에 생성된 식별자(닫기 실패 시 빈 문자열)를 담는다.
        쓰기 실패 시에는 이미 기록된 청크를 스트림 중단으로 정리한다.
        """

        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise ValueError("Blob 데이터는 바이트여야 합니다.")
        blob_id = ObjectId()
        with self._pool.checkout() as connection:
            bucket = self._bucket(connection)
            try:
                stream = bucket.open_upload_stream_with_id(
                    blob_id, name, session=connection.session
                )
            except PyMongoError as exc:
                raise self._storage_error("Blob 쓰기 스트림 생성에 실패했습니다.", exc, str(blob_id)) from exc
            try:
                stream.write(bytes(data))
            except PyMongoError as exc:
                self._abort(stream, blob_id)
                raise self._storage_error("Blob 쓰기에 실패했습니다.", exc, str(blob_id)) from exc
            try:
                stream.close()
            except PyMongoError as exc:
                raise self._storage_error("Blob 스트림 닫기에 실패했습니다.", exc, "") from exc
        self._logger.info(
            f"Blob 저장 완료: {blob_id}",
            LogContext(collection=self._prefix, operation="blob_put"),
            metadata={"name": name, "size": len(data)},
        )
        return blob_id

    def get(self, blob_id: Union[ObjectId, str]) -> bytes:
        """식별자로 저장된 바이트를 반환한다."""

        return self.get_blob(blob_id).data

    def get_blob(self, blob_id: Union[ObjectId, str]) -> Blob:
        """식별자로 저장된 Blob(식별자, 이름, 데이터)을 반환한다."""

        object_id = self._coerce_id(blob_id)
        with self._pool.checkout() as connection:
            bucket = self._bucket(connection)
            try:
                stream = bucket.open_download_stream(object_id, session=connection.session)
            except NoFile as exc:
                raise DALException(
                    DALErrorKind.NOT_FOUND,
                    "식별자에 해당하는 Blob이 없습니다.",
                    metadata={"blob_id": str(object_id)},
                    original=exc,
                ) from exc
            except PyMongoError as exc:
                raise self._storage_error("Blob 읽기 스트림 생성에 실패했습니다.", exc, str(object_id)) from exc
            try:
                try:
                    data = stream.read()
                finally:
                    stream.close()
            except PyMongoError as exc:
                raise self._storage_error("Blob 읽기에 실패했습니다.", exc, str(object_id)) from exc
        return Blob(id=object_id, name=stream.filename or "", data=data)

    def _bucket(self, connection: MongoConnection) -> Any:
        return self._bucket_cls(connection.database, bucket_name=self._prefix)

    def _abort(self, stream: Any, blob_id: ObjectId) -> None:
        """실패한 업로드의 청크를 정리한다. 정리 실패는 경고로만 남긴다."""

        try:
            stream.abort()
        except PyMongoError as exc:
            self._logger.warning(
                f"Blob 업로드 정리에 실패했습니다: {blob_id}",
                LogContext(collection=self._prefix, operation="blob_put"),
                metadata={"error": str(exc)},
            )
    def _coerce_id(self, blob_id: Union[ObjectId, str]) -> ObjectId:
        if isinstance(blob_id, ObjectId):
            return blob_id
        if isinstance(blob_id, str) and len(blob_id) == 24 and ObjectId.is_valid(blob_id):
            return ObjectId(blob_id)
        raise DALException(
            DALErrorKind.INVALID_IDENTIFIER_FORMAT,
            "Blob 식별자 형식이 올바르지 않습니다.",
            metadata={"blob_id": repr(blob_id)},
        )

    def _storage_error(self, message: str, exc: PyMongoError, blob_id: str) -> DALException:
        return DALException(
            DALErrorKind.STORAGE_OPERATION_FAILED,
            message,
            metadata={"blob_id": blob_id, "bucket": self._prefix},
            original=exc,
        )
