"""
목적: 테스트 공통 환경/픽스처/로깅 훅을 단일화해 제공한다.
설명: .env 로딩, MongoDB 드라이버 대역(클라이언트/세션/DB/컬렉션/커서/GridFS 버킷), 엔진 픽스처를 함께 제공한다.
디자인 패턴: 테스트 픽스처 + 테스트 더블 + 테스트 훅
참조: src/mongo_dal/integrations/db/engines/mongodb/connection.py, pyproject.toml
"""

from __future__ import annotations

import copy
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Iterator

import pytest
from bson import ObjectId
from dotenv import load_dotenv
from gridfs.errors import NoFile
from pymongo.errors import OperationFailure

from mongo_dal.integrations.db.engines.mongodb import MongoBlobStore, MongoDBEngine


_LOGGER = logging.getLogger("tests")
_PROJECT_ROOT = Path(__file__).resolve().parents[1]
_FIXED_NOW = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


def _load_env_files() -> None:
    """프로젝트 루트 .env가 있으면 로딩한다."""

    env_path = _PROJECT_ROOT / ".env"
    if env_path.exists():
        load_dotenv(env_path, override=False)


_load_env_files()


def _get_path(document: dict, dotted: str) -> Any:
    current: Any = document
    for part in dotted.split("."):
        if not isinstance(current, dict) or part not in current:
            return None
        current = current[part]
    return current


def _matches(document: dict, query: dict) -> bool:
    for key, condition in query.items():
        value = _get_path(document, key)
        if isinstance(condition, dict) and condition and all(
            str(op).startswith("$") for op in condition
        ):
            for op, operand in condition.items():
                if op == "$ne" and value == operand:
                    return False
                if op == "$gt" and not (value is not None and value > operand):
                    return False
                if op == "$gte" and not (value is not None and value >= operand):
                    return False
                if op == "$lt" and not (value is not None and value < operand):
                    return False
                if op == "$in" and value not in operand:
                    return False
        elif value != condition:
            return False
    return True


class _SessionStub:
    """ClientSession 대역."""

    def __init__(self) -> None:
        self.ended = False

    def end_session(self) -> None:
        self.ended = True


class _CursorStub:
    """Cursor 대역. 반복 시점에 skip/limit을 적용하고 `failures["iterate"]`를 발생시킨다."""

    def __init__(
        self,
        documents: list[dict],
        session: Any = None,
        failures: dict[str, Exception] | None = None,
    ) -> None:
        self._documents = documents
        self._failures = failures if failures is not None else {}
        self.session = session
        self.sort_spec: list | None = None
        self.skip_value: int | None = None
        self.limit_value: int | None = None

    def sort(self, keys: list) -> "_CursorStub":
        self.sort_spec = list(keys)
        for field, direction in reversed(self.sort_spec):
            self._documents.sort(
                key=lambda doc: (_get_path(doc, field) is not None, _get_path(doc, field)),
                reverse=direction < 0,
            )
        return self

    def skip(self, count: int) -> "_CursorStub":
        self.skip_value = count
        return self

    def limit(self, count: int) -> "_CursorStub":
        self.limit_value = count
        return self

    def __iter__(self) -> Iterator[dict]:
        if "iterate" in self._failures:
            raise self._failures["iterate"]
        documents = self._documents[self.skip_value or 0 :]
        if self.limit_value:
            documents = documents[: self.limit_value]
        return iter(copy.deepcopy(documents))


class _CollectionStub:
    """Collection 대역. 실패 주입은 `failures[메서드명] = 예외`로 한다."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.documents: list[dict] = []
        self.indexes: list[tuple[list, dict]] = []
        self.aggregations: list[list] = []
        self.failures: dict[str, Exception] = {}
        self.calls: list[str] = []
        self.updates: list[dict] = []

    def _record(self, method: str) -> None:
        self.calls.append(method)
        if method in self.failures:
            raise self.failures[method]

    def _match_all(self, query: dict) -> list[dict]:
        return [doc for doc in self.documents if _matches(doc, query or {})]

    def apply_update(self, document: dict, update: dict) -> None:
        if not any(str(key).startswith("$") for key in update):
            doc_id = document.get("_id")
            document.clear()
            document.update(copy.deepcopy(update))
            document["_id"] = doc_id
            return
        for field, value in update.get("$set", {}).items():
            document[field] = copy.deepcopy(value)
        for field in update.get("$unset", {}):
            document.pop(field, None)
        for field, value in update.get("$inc", {}).items():
            document[field] = document.get(field, 0) + value

    def upsert_document(self, query: dict, update: dict) -> dict:
        document = {
            key: value
            for key, value in query.items()
            if not str(key).startswith("$") and not isinstance(value, dict)
        }
        self.apply_update(document, update)
        document.setdefault("_id", query.get("_id") or ObjectId())
        if document["_id"] is None:
            document["_id"] = ObjectId()
        self.documents.append(document)
        return document

    def create_index(self, keys: list, session: Any = None, **options: Any) -> str:
        self._record("create_index")
        self.indexes.append((list(keys), dict(options)))
        return "_".join(f"{field}_{direction}" for field, direction in keys)

    def insert_one(self, document: dict, session: Any = None) -> SimpleNamespace:
        self._record("insert_one")
        document.setdefault("_id", ObjectId())
        self.documents.append(copy.deepcopy(document))
        return SimpleNamespace(inserted_id=document["_id"])

    def insert_many(self, documents: list[dict], session: Any = None) -> SimpleNamespace:
        self._record("insert_many")
        for document in documents:
            document.setdefault("_id", ObjectId())
            self.documents.append(copy.deepcopy(document))
        return SimpleNamespace(inserted_ids=[document["_id"] for document in documents])

    def find(self, query: dict | None = None, session: Any = None) -> _CursorStub:
        self._record("find")
        return _CursorStub(self._match_all(query or {}), session=session, failures=self.failures)

    def find_one(self, query: dict, session: Any = None) -> dict | None:
        self._record("find_one")
        matches = self._match_all(query)
        return copy.deepcopy(matches[0]) if matches else None

    def count_documents(self, query: dict, session: Any = None) -> int:
        self._record("count_documents")
        return len(self._match_all(query))

    def _update(self, query: dict, update: dict, upsert: bool, many: bool) -> SimpleNamespace:
        self.updates.append(copy.deepcopy(update))
        matches = self._match_all(query)
        if not many:
            matches = matches[:1]
        if not matches and upsert:
            document = self.upsert_document(query, update)
            return SimpleNamespace(matched_count=0, modified_count=0, upserted_id=document["_id"])
        for document in matches:
            self.apply_update(document, update)
        return SimpleNamespace(
            matched_count=len(matches),
            modified_count=len(matches),
            upserted_id=None,
        )

    def update_one(
        self, query: dict, update: dict, upsert: bool = False, session: Any = None
    ) -> SimpleNamespace:
        self._record("update_one")
        return self._update(query, update, upsert, many=False)

    def update_many(
        self, query: dict, update: dict, upsert: bool = False, session: Any = None
    ) -> SimpleNamespace:
        self._record("update_many")
        return self._update(query, update, upsert, many=True)

    def replace_one(
        self, query: dict, replacement: dict, upsert: bool = False, session: Any = None
    ) -> SimpleNamespace:
        self._record("replace_one")
        return self._update(query, replacement, upsert, many=False)

    def _delete(self, query: dict, many: bool) -> SimpleNamespace:
        matches = self._match_all(query)
        if not many:
            matches = matches[:1]
        for document in matches:
            self.documents.remove(document)
        return SimpleNamespace(deleted_count=len(matches))

    def delete_one(self, query: dict, session: Any = None) -> SimpleNamespace:
        self._record("delete_one")
        return self._delete(query, many=False)

    def delete_many(self, query: dict, session: Any = None) -> SimpleNamespace:
        self._record("delete_many")
        return self._delete(query, many=True)

    def aggregate(self, stages: list, session: Any = None) -> Iterator[dict]:
        self._record("aggregate")
        self.aggregations.append(stages)
        documents = copy.deepcopy(self.documents)
        for stage in stages:
            if "$match" in stage:
                documents = [doc for doc in documents if _matches(doc, stage["$match"])]
            elif "$count" in stage:
                documents = [{stage["$count"]: len(documents)}]
            else:
                raise OperationFailure(f"unsupported stage: {stage}")
        return iter(documents)


class _DatabaseStub:
    """Database 대역. findAndModify 명령을 지원한다."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.collections: dict[str, _CollectionStub] = {}
        self.commands: list[tuple[str, Any, dict]] = []
        self.files: dict[str, dict[ObjectId, tuple[str, bytes]]] = {}
        self.blob_failures: dict[str, Exception] = {}
        self.aborted: list[ObjectId] = []
        self.downloads: list[Any] = []

    def __getitem__(self, name: str) -> _CollectionStub:
        if name not in self.collections:
            self.collections[name] = _CollectionStub(name)
        return self.collections[name]

    def command(self, name: str, value: Any = 1, session: Any = None, **kwargs: Any) -> dict:
        self.commands.append((name, value, kwargs))
        if name != "findAndModify":
            raise OperationFailure(f"no such command: {name}")
        coll = self[value]
        matches = coll._match_all(kwargs["query"])
        if kwargs.get("remove"):
            if not matches:
                return {"ok": 1, "value": None, "lastErrorObject": {"n": 0}}
            coll.documents.remove(matches[0])
            return {"ok": 1, "value": copy.deepcopy(matches[0]), "lastErrorObject": {"n": 1}}
        update = kwargs["update"]
        if matches:
            before = copy.deepcopy(matches[0])
            coll.apply_update(matches[0], update)
            value_doc = copy.deepcopy(matches[0]) if kwargs.get("new") else before
            return {
                "ok": 1,
                "value": value_doc,
                "lastErrorObject": {"n": 1, "updatedExisting": True},
            }
        if kwargs.get("upsert"):
            document = coll.upsert_document(kwargs["query"], update)
            return {
                "ok": 1,
                "value": copy.deepcopy(document) if kwargs.get("new") else None,
                "lastErrorObject": {"n": 1, "updatedExisting": False, "upserted": document["_id"]},
            }
        return {"ok": 1, "value": None, "lastErrorObject": {"n": 0, "updatedExisting": False}}


class _MongoClientStub:
    """MongoClient 대역. 체크아웃된 세션을 모두 기록한다."""

    def __init__(self, uri: str, **kwargs: Any) -> None:
        self.uri = uri
        self.kwargs = kwargs
        self.closed = False
        self.sessions: list[_SessionStub] = []
        self.databases: dict[str, _DatabaseStub] = {}
        self.dropped: list[str] = []

    def __getitem__(self, name: str) -> _DatabaseStub:
        if name not in self.databases:
            self.databases[name] = _DatabaseStub(name)
        return self.databases[name]

    def start_session(self) -> _SessionStub:
        session = _SessionStub()
        self.sessions.append(session)
        return session

    def drop_database(self, name: str, session: Any = None) -> None:
        self.databases.pop(name, None)
        self.dropped.append(name)

    def close(self) -> None:
        self.closed = True


class _GridInStub:
    def __init__(self, database: _DatabaseStub, bucket: str, file_id: ObjectId, filename: str) -> None:
        self._database = database
        self._bucket = bucket
        self._file_id = file_id
        self._filename = filename
        self._chunks: list[bytes] = []
        self.aborted = False

    def write(self, data: bytes) -> None:
        if "write" in self._database.blob_failures:
            raise self._database.blob_failures["write"]
        self._chunks.append(data)

    def close(self) -> None:
        if "close" in self._database.blob_failures:
            raise self._database.blob_failures["close"]
        files = self._database.files.setdefault(self._bucket, {})
        files[self._file_id] = (self._filename, b"".join(self._chunks))

    def abort(self) -> None:
        self.aborted = True
        self._database.aborted.append(self._file_id)
        if "abort" in self._database.blob_failures:
            raise self._database.blob_failures["abort"]
        self._chunks = []


class _GridOutStub:
    def __init__(self, database: _DatabaseStub, filename: str, data: bytes) -> None:
        self._database = database
        self.filename = filename
        self._data = data
        self.closed = False
        database.downloads.append(self)

    def read(self) -> bytes:
        if "read" in self._database.blob_failures:
            raise self._database.blob_failures["read"]
        return self._data

    def close(self) -> None:
        self.closed = True


class _GridFSBucketStub:
    """GridFSBucket 대역."""

    def __init__(self, database: _DatabaseStub, bucket_name: str = "fs") -> None:
        self._database = database
        self.bucket_name = bucket_name

    def open_upload_stream_with_id(
        self, file_id: ObjectId, filename: str, session: Any = None
    ) -> _GridInStub:
        if "open" in self._database.blob_failures:
            raise self._database.blob_failures["open"]
        return _GridInStub(self._database, self.bucket_name, file_id, filename)

    def open_download_stream(self, file_id: ObjectId, session: Any = None) -> _GridOutStub:
        files = self._database.files.get(self.bucket_name, {})
        if file_id not in files:
            raise NoFile(f"no file in gridfs collection with _id {file_id!r}")
        filename, data = files[file_id]
        return _GridOutStub(self._database, filename, data)


@pytest.fixture
def fake_client_cls() -> type[_MongoClientStub]:
    """MongoClient 대역 클래스를 반환한다."""

    return _MongoClientStub


@pytest.fixture
def fake_bucket_cls() -> type[_GridFSBucketStub]:
    """GridFSBucket 대역 클래스를 반환한다."""

    return _GridFSBucketStub


@pytest.fixture
def fixed_now() -> datetime:
    """소프트 삭제 시각 검증용 고정 시각을 반환한다."""

    return _FIXED_NOW


@pytest.fixture
def engine(fixed_now: datetime) -> Iterator[MongoDBEngine]:
    """드라이버 대역으로 연결된 엔진을 반환한다."""

    instance = MongoDBEngine(
        database="dal_test",
        mongo_client_cls=_MongoClientStub,
        clock=lambda: fixed_now,
    )
    instance.connect()
    yield instance
    instance.close()


@pytest.fixture
def fake_client(engine: MongoDBEngine) -> _MongoClientStub:
    """엔진이 생성한 MongoClient 대역을 반환한다."""

    return engine.pool.ensure_client()


@pytest.fixture
def fake_db(fake_client: _MongoClientStub) -> _DatabaseStub:
    """테스트 데이터베이스 대역을 반환한다."""

    return fake_client["dal_test"]


@pytest.fixture
def blob_store(engine: MongoDBEngine) -> MongoBlobStore:
    """GridFS 버킷 대역을 사용하는 Blob 저장소를 반환한다."""

    return MongoBlobStore(engine.pool, bucket_cls=_GridFSBucketStub)


@pytest.fixture
def seed_documents(fake_db: _DatabaseStub) -> list[dict]:
    """생성 시각이 서로 다른 문서 20건을 users 컬렉션에 넣는다."""

    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    documents = [
        {
            "_id": ObjectId(),
            "name": f"user-{index:02d}",
            "group": "even" if index % 2 == 0 else "odd",
            "create_at": base + timedelta(minutes=index),
        }
        for index in range(20)
    ]
    fake_db["users"].documents.extend(copy.deepcopy(documents))
    return documents


def pytest_sessionstart(session) -> None:  # noqa: D401 - pytest 훅 시그니처 유지
    """테스트 세션 시작을 로깅한다."""

    _LOGGER.info("테스트 세션 시작")


def pytest_sessionfinish(session, exitstatus: int) -> None:  # noqa: D401 - pytest 훅 시그니처 유지
    """테스트 세션 종료를 로깅한다."""

    _LOGGER.info("테스트 세션 종료 (exitstatus=%s)", exitstatus)


def pytest_runtest_logstart(nodeid: str, location) -> None:  # noqa: D401 - pytest 훅 시그니처 유지
    """각 테스트 시작을 로깅한다."""

    _LOGGER.info("테스트 시작: %s", nodeid)


def pytest_runtest_logreport(report) -> None:  # noqa: D401 - pytest 훅 시그니처 유지
    """테스트 결과를 로깅한다."""

    if report.when != "call":
        return
    if report.passed:
        _LOGGER.info("테스트 완료: %s", report.nodeid)
        return
    if report.skipped:
        _LOGGER.warning("테스트 스킵: %s", report.nodeid)
        return
    _LOGGER.error("테스트 실패: %s", report.nodeid)
