"""
목적: MongoDB 접속 설정 모델을 제공한다.
설명: 접속 URI 조합, GridFS 접두사, 작업 타임아웃을 하나의 Pydantic 모델로 표현하고 환경 변수에서 생성한다.
디자인 패턴: 설정 객체, 팩토리 메서드
참조: src/mongo_dal/shared/config/loader.py, src/mongo_dal/integrations/db/engines/mongodb/connection.py
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator

from mongo_dal.shared.config.loader import ConfigLoader
from mongo_dal.shared.const import DBConst


class MongoSettings(BaseModel):
    """MongoDB 접속 설정이다.

    Args:
        database: 작업 대상 데이터베이스 이름.
        uri: 완성된 접속 URI. 지정되면 host/port/user/password는 무시된다.
        host: 접속 호스트.
        port: 접속 포트.
        user: 인증 사용자.
        password: 인증 비밀번호.
        auth_source: 인증 데이터베이스.
        scheme: URI 스킴(`mongodb` 또는 `mongodb+srv`).
        gridfs_prefix: GridFS 버킷 접두사.
        operation_timeout: 작업당 제한 시간(초). None이면 제한하지 않는다.
    """

    database: str
    uri: Optional[str] = None
    host: str = "127.0.0.1"
    port: int = 27017
    user: Optional[str] = None
    password: Optional[str] = None
    auth_source: Optional[str] = None
    scheme: str = "mongodb"
    gridfs_prefix: str = DBConst.DEFAULT_GRIDFS_PREFIX
    operation_timeout: Optional[float] = Field(default=None, gt=0)

    @field_validator("database")
    @classmethod
    def _require_database(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("database 설정이 필요합니다.")
        return value.strip()

    @field_validator("auth_source", "uri", "user", "password")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        trimmed = value.strip()
        return trimmed or None

    def resolved_auth_source(self) -> Optional[str]:
        """인증 데이터베이스를 확정한다. 자격 증명만 있으면 대상 DB를 사용한다."""

        if self.auth_source:
            return self.auth_source
        if self.user or self.password:
            return self.database
        return None

    def build_uri(self) -> str:
        """접속 URI를 반환한다."""

        if self.uri:
            return self.uri
        auth = ""
        if self.user and self.password:
            auth = f"{self.user}:{self.password}@"
        elif self.user:
            auth = f"{self.user}@"
        elif self.password:
            auth = f":{self.password}@"
        uri = f"{self.scheme}://{auth}{self.host}:{self.port}"
        auth_source = self.resolved_auth_source()
        if auth_source and (self.user or self.password):
            uri = f"{uri}/?authSource={auth_source}"
        return uri

    @classmethod
    def from_env(
        cls,
        prefix: str = "MONGODB_",
        loader: Optional[ConfigLoader] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> "MongoSettings":
        """환경 변수(`MONGODB_DB`, `MONGODB_URI`, `MONGODB_HOST` 등)에서 설정을 생성한다."""

        raw = (loader or ConfigLoader()).add_env(prefix=prefix).build(overrides)
        data: Dict[str, Any] = {
            "database": raw.get("db") or raw.get("database"),
            "uri": raw.get("uri"),
            "host": raw.get("host"),
            "port": raw.get("port"),
            "user": raw.get("user"),
            "password": raw.get("pw") or raw.get("password"),
            "auth_source": raw.get("auth_db") or raw.get("auth_source"),
            "scheme": raw.get("scheme"),
            "gridfs_prefix": raw.get("gridfs_prefix"),
            "operation_timeout": raw.get("operation_timeout"),
        }
        for key in ("database", "uri", "host", "user", "password", "auth_source", "scheme"):
            if data[key] is not None:
                data[key] = str(data[key])
        return cls(**{key: value for key, value in data.items() if value is not None})
