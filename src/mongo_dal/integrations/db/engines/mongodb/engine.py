"""
목적: MongoDB 기반 문서 DB 엔진을 제공한다.
설명: 셀렉터 다형 CRUD, 업서트/원자적 변경, 소프트 삭제, 페이지 조회, 집계 파이프라인을 지원한다.
디자인 패턴: 어댑터 패턴
참조: src/mongo_dal/integrations/db/base/engine.py, src/mongo_dal/integrations/db/engines/mongodb/connection.py
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from mongo_dal.integrations.db.base.engine import BaseDocumentEngine
from mongo_dal.integrations.db.base.errors import DALErrorKind, DALException, driver_errors
from mongo_dal.integrations.db.base.models import (
    AtomicChange,
    ChangeInfo,
    IndexSpec,
    Page,
    SoftDeleteMetadata,
    UpsertResult,
)
from mongo_dal.integrations.db.base.selector import FilterMap, resolve_selector
from mongo_dal.integrations.db.engines.mongodb.connection import (
    MongoConnection,
    MongoConnectionPool,
)
from mongo_dal.integrations.db.engines.mongodb.index_manager import MongoIndexManager
from mongo_dal.integrations.db.engines.mongodb.key_builder import MongoKeyBuilder
from mongo_dal.integrations.db.engines.mongodb.result_mapper import MongoResultMapper
from mongo_dal.shared.config import MongoSettings
from mongo_dal.shared.const import DBConst
from mongo_dal.shared.logging import LogContext, Logger, create_default_logger

_IMMUTABLE_FIELDS = (DBConst.ID_FIELD, DBConst.CREATE_AT_FIELD)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _is_operator_document(update: Mapping[str, Any]) -> bool:
    return any(str(key).startswith("$") for key in update)


class MongoDBEngine(BaseDocumentEngine):
    """MongoDB 기반 엔진 구현체.

    모든 공개 작업은 풀에서 세션을 체크아웃해 한 번의 왕복으로 실행하고,
    반환 전에 세션을 돌려준다.
    """

    def __init__(
        self,
        uri: Optional[str] = None,
        database: str = "admin",
        host: str = "127.0.0.1",
        port: int = 27017,
        user: Optional[str] = None,
        password: Optional[str] = None,
        auth_source: Optional[str] = None,
        scheme: str = "mongodb",
        operation_timeout: Optional[float] = None,
        logger: Optional[Logger] = None,
        mongo_client_cls: Any = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        settings = MongoSettings(
            database=database,
            uri=uri,
            host=host,
            port=port,
            user=user,
            password=password,
            auth_source=auth_source,
            scheme=scheme,
            operation_timeout=operation_timeout,
        )
        self._database_name = settings.database
        self._logger = logger or create_default_logger("MongoDBEngine")
        self._pool = MongoConnectionPool(
            uri=settings.build_uri(),
            database_name=settings.database,
            auth_source=settings.resolved_auth_source(),
            logger=self._logger,
            mongo_client_cls=mongo_client_cls,
            operation_timeout=settings.operation_timeout,
        )
        self._clock = clock or _utc_now
        self._key_builder = MongoKeyBuilder()
        self._index_manager = MongoIndexManager(self._key_builder, self._logger)
        self._result_mapper = MongoResultMapper()

    @classmethod
    def from_settings(
        cls,
        settings: MongoSettings,
        logger: Optional[Logger] = None,
        mongo_client_cls: Any = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> "MongoDBEngine":
        """설정 모델로 엔진을 생성한다."""

        return cls(
            uri=settings.uri,
            database=settings.database,
            host=settings.host,
            port=settings.port,
            user=settings.user,
            password=settings.password,
            auth_source=settings.auth_source,
            scheme=settings.scheme,
            operation_timeout=settings.operation_timeout,
            logger=logger,
            mongo_client_cls=mongo_client_cls,
            clock=clock,
        )

    @property
    def name(self) -> str:
        return "mongodb"

    @property
    def pool(self) -> MongoConnectionPool:
        """공유 커넥션 풀을 반환한다."""

        return self._pool

    @property
    def logger(self) -> Logger:
        return self._logger

    def connect(self) -> None:
        self._pool.connect()

    def close(self) -> None:
        self._pool.close()

    def drop_database(self) -> None:
        with self._pool.checkout() as connection:
            with driver_errors(
                DALErrorKind.STORAGE_OPERATION_FAILED,
                "데이터베이스 삭제에 실패했습니다.",
                database=self._database_name,
            ):
                connection.client.drop_database(self._database_name, session=connection.session)
        self._logger.info(
            f"MongoDB 데이터베이스 삭제 완료: {self._database_name}",
            LogContext(database=self._database_name, operation="drop_database"),
        )

    def create(
        self,
        collection: str,
        documents: Union[Mapping[str, Any], Sequence[Mapping[str, Any]]],
        index_keys: Optional[Sequence[str]] = None,
    ) -> List[Any]:
        payloads = self._insert_payloads(documents)
        spec = IndexSpec.from_keys(index_keys)
        with self._pool.checkout() as connection:
            coll = connection.collection(collection)
            self._index_manager.ensure(coll, spec, session=connection.session)
            with driver_errors(
                DALErrorKind.STORAGE_OPERATION_FAILED,
                "문서 삽입에 실패했습니다.",
                collection=coll.name,
            ):
                if len(payloads) == 1 and isinstance(documents, Mapping):
                    inserted = [coll.insert_one(payloads[0], session=connection.session).inserted_id]
                else:
                    inserted = list(
                        coll.insert_many(payloads, session=connection.session).inserted_ids
                    )
        self._logger.info(
            f"문서 삽입 완료: {len(inserted)}건",
            LogContext(collection=coll.name, operation="create"),
        )
        return inserted

    def upsert(
        self,
        collection: str,
        selector: Any,
        update: Union[Mapping[str, Any], AtomicChange],
    ) -> UpsertResult:
        target = resolve_selector(selector)
        if not isinstance(update, (AtomicChange, Mapping)):
            raise ValueError("update는 매핑 또는 AtomicChange여야 합니다.")
        with self._pool.checkout() as connection:
            coll = connection.collection(collection)
            if isinstance(update, AtomicChange):
                result = self._apply(connection, coll.name, target.to_filter(), update)
            else:
                result = UpsertResult(
                    change_info=self._plain_upsert(connection, coll, target.to_filter(), update)
                )
        self._logger.debug(
            "업서트 완료",
            LogContext(collection=coll.name, operation="upsert"),
            metadata=result.change_info.model_dump(),
        )
        return result

    def update(
        self,
        collection: str,
        selector: Any,
        fields: Mapping[str, Any],
        multi: bool = False,
    ) -> ChangeInfo:
        target = resolve_selector(selector)
        payload = self._strip_immutable(fields)
        if not payload:
            self._logger.debug(
                "변경할 필드가 없어 업데이트를 건너뜁니다.",
                LogContext(collection=collection, operation="update"),
            )
            return ChangeInfo()
        with self._pool.checkout() as connection:
            coll = connection.collection(collection)
            info = self._write_update(connection, coll, target.to_filter(), payload, multi)
        self._logger.debug(
            "업데이트 완료",
            LogContext(collection=coll.name, operation="update"),
            metadata=info.model_dump(),
        )
        return info

    def remove(self, collection: str, selector: Any, multi: bool = False) -> ChangeInfo:
        target = resolve_selector(selector)
        with self._pool.checkout() as connection:
            coll = connection.collection(collection)
            with driver_errors(
                DALErrorKind.STORAGE_OPERATION_FAILED,
                "문서 삭제에 실패했습니다.",
                collection=coll.name,
            ):
                if multi:
                    result = coll.delete_many(target.to_filter(), session=connection.session)
                else:
                    result = coll.delete_one(target.to_filter(), session=connection.session)
        info = self._result_mapper.from_delete(result)
        self._logger.info(
            f"문서 삭제 완료: {info.removed}건",
            LogContext(collection=coll.name, operation="remove"),
        )
        return info

    def soft_remove(self, collection: str, selector: Any, multi: bool = False) -> ChangeInfo:
        target = resolve_selector(selector)
        update = SoftDeleteMetadata.at(self._clock()).to_update()
        with self._pool.checkout() as connection:
            coll = connection.collection(collection)
            info = self._write_update(connection, coll, target.to_filter(), update, multi)
        self._logger.info(
            f"소프트 삭제 완료: {info.updated}건",
            LogContext(collection=coll.name, operation="soft_remove"),
        )
        return info

    def find(
        self,
        collection: str,
        query: Any,
        page: Optional[Page] = None,
        sort_keys: Optional[Sequence[str]] = None,
    ) -> Any:
        """pymongo 커서를 반환한다.

        커서는 반복할 때 서버에 요청하며, 체크아웃한 세션에 묶이지 않으므로
        이 메서드가 반환된 뒤에도 사용할 수 있다.

        반복은 세션이 반환된 뒤에 일어나므로 그 시점의 드라이버 오류는
        DALException으로 감싸지지 않고 `PyMongoError` 그대로 전달되며,
        `operation_timeout`도 적용되지 않는다. 오류 변환과 시간 제한이 필요하면
        `find_many`를 사용한다.
        """

        target = resolve_selector(query)
        sort = self._key_builder.build_sort(sort_keys)
        with self._pool.checkout() as connection:
            coll = connection.collection(collection)
            cursor = coll.find(target.to_filter()).sort(sort)
            if page is not None and page.valid:
                cursor = cursor.skip(page.offset).limit(page.limit)
        return cursor

    def find_many(
        self,
        collection: str,
        query: Any,
        page: Optional[Page] = None,
        sort_keys: Optional[Sequence[str]] = None,
    ) -> List[Dict[str, Any]]:
        target = resolve_selector(query)
        sort = self._key_builder.build_sort(sort_keys)
        with self._pool.checkout() as connection:
            coll = connection.collection(collection)
            with driver_errors(
                DALErrorKind.STORAGE_OPERATION_FAILED,
                "문서 조회에 실패했습니다.",
                collection=coll.name,
            ):
                cursor = coll.find(target.to_filter(), session=connection.session).sort(sort)
                if page is not None and page.valid:
                    cursor = cursor.skip(page.offset).limit(page.limit)
                return list(cursor)

    def find_one(self, collection: str, selector: Any) -> Dict[str, Any]:
        target = resolve_selector(selector)
        query = target.to_filter()
        with self._pool.checkout() as connection:
            coll = connection.collection(collection)
            with driver_errors(
                DALErrorKind.STORAGE_OPERATION_FAILED,
                "문서 조회에 실패했습니다.",
                collection=coll.name,
            ):
                if isinstance(target, FilterMap):
                    count = coll.count_documents(query, session=connection.session)
                    if count > 1:
                        raise DALException(
                            DALErrorKind.AMBIGUOUS_MATCH,
                            "조건에 일치하는 문서가 둘 이상입니다.",
                            metadata={"collection": coll.name, "count": count},
                            hint="고유 키를 포함한 조건을 사용하세요.",
                        )
                document = coll.find_one(query, session=connection.session)
        if document is None:
            raise DALException(
                DALErrorKind.NOT_FOUND,
                "조건에 일치하는 문서가 없습니다.",
                metadata={"collection": coll.name},
            )
        return document

    def pipeline(
        self,
        collection: str,
        stages: Sequence[Mapping[str, Any]],
    ) -> List[Dict[str, Any]]:
        with self._pool.checkout() as connection:
            coll = connection.collection(collection)
            with driver_errors(
                DALErrorKind.STORAGE_OPERATION_FAILED,
                "집계 파이프라인 실행에 실패했습니다.",
                collection=coll.name,
                stages=len(stages),
            ):
                return list(coll.aggregate(list(stages), session=connection.session))

    def _apply(
        self,
        connection: MongoConnection,
        collection_name: str,
        query: Dict[str, Any],
        change: AtomicChange,
    ) -> UpsertResult:
        options: Dict[str, Any] = {"query": query}
        if change.remove:
            options["remove"] = True
        else:
            options["update"] = change.update
            options["new"] = change.return_new
            options["upsert"] = change.upsert
        with driver_errors(
            DALErrorKind.STORAGE_OPERATION_FAILED,
            "원자적 변경(findAndModify)에 실패했습니다.",
            collection=collection_name,
        ):
            reply = connection.database.command(
                "findAndModify",
                collection_name,
                session=connection.session,
                **options,
            )
        last_error = reply.get("lastErrorObject") or {}
        if int(last_error.get("n", 0)) == 0:
            raise DALException(
                DALErrorKind.NOT_FOUND,
                "원자적 변경 대상 문서가 없습니다.",
                metadata={"collection": collection_name},
            )
        return UpsertResult(
            document=reply.get("value"),
            change_info=self._result_mapper.from_find_and_modify(reply, change),
        )

    def _plain_upsert(
        self,
        connection: MongoConnection,
        coll: Any,
        query: Dict[str, Any],
        update: Mapping[str, Any],
    ) -> ChangeInfo:
        with driver_errors(
            DALErrorKind.STORAGE_OPERATION_FAILED,
            "업서트에 실패했습니다.",
            collection=coll.name,
        ):
            if _is_operator_document(update):
                result = coll.update_one(query, dict(update), upsert=True, session=connection.session)
            else:
                result = coll.replace_one(query, dict(update), upsert=True, session=connection.session)
        return self._result_mapper.from_update(result)

    def _write_update(
        self,
        connection: MongoConnection,
        coll: Any,
        query: Dict[str, Any],
        update: Dict[str, Any],
        multi: bool,
    ) -> ChangeInfo:
        with driver_errors(
            DALErrorKind.STORAGE_OPERATION_FAILED,
            "문서 업데이트에 실패했습니다.",
            collection=coll.name,
        ):
            if multi:
                result = coll.update_many(query, update, session=connection.session)
            else:
                result = coll.update_one(query, update, session=connection.session)
        return self._result_mapper.from_update(result)

    def _strip_immutable(self, fields: Mapping[str, Any]) -> Dict[str, Any]:
        """식별자/생성 시각 변경을 제거한 업데이트 문서를 반환한다.

        연산자가 없는 입력은 필드 단위 `$set`으로 취급한다. `$rename`은
        불변 필드를 원본과 대상 어느 쪽으로도 지정할 수 없다.
        """

        if not isinstance(fields, Mapping):
            raise ValueError("업데이트 필드는 매핑이어야 합니다.")
        if not _is_operator_document(fields):
            fields = {"$set": dict(fields)}
        stripped: Dict[str, Any] = {}
        for operator, operand in fields.items():
            if operator in _IMMUTABLE_FIELDS:
                continue
            if isinstance(operand, Mapping):
                operand = {
                    key: value
                    for key, value in operand.items()
                    if key not in _IMMUTABLE_FIELDS
                    and not (operator == "$rename" and value in _IMMUTABLE_FIELDS)
                }
                if not operand:
                    continue
            stripped[operator] = operand
        return stripped

    def _insert_payloads(
        self,
        documents: Union[Mapping[str, Any], Sequence[Mapping[str, Any]]],
    ) -> List[Dict[str, Any]]:
        if isinstance(documents, Mapping):
            return [dict(documents)]
        if isinstance(documents, (str, bytes)) or not isinstance(documents, Sequence):
            raise ValueError("삽입할 문서는 매핑 또는 매핑 목록이어야 합니다.")
        if not documents:
            raise ValueError("삽입할 문서가 비어 있습니다.")
        payloads: List[Dict[str, Any]] = []
        for document in documents:
            if not isinstance(document, Mapping):
                raise ValueError("삽입할 문서는 매핑이어야 합니다.")
            payloads.append(dict(document))
        return payloads
