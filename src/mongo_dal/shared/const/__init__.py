"""
목적: 공통 상수 집합을 제공한다.
설명: 설정 로더와 DB 접근 계층에서 공유하는 기본 상수 값을 정의한다.
디자인 패턴: 상수 객체
참조: src/mongo_dal/shared/config/loader.py, src/mongo_dal/integrations/db/engines/mongodb/engine.py
"""


class SharedConst:
    """공통 상수 집합이다.

    Attributes:
        DEFAULT_ENCODING: 기본 파일 인코딩.
        ENV_NESTED_DELIMITER: 환경 변수 키를 중첩 경로로 해석하는 구분자.
    """

    DEFAULT_ENCODING = "utf-8"
    ENV_NESTED_DELIMITER = "__"


class DBConst:
    """문서 DB 접근 계층 상수 집합이다.

    Attributes:
        ID_FIELD: 문서 식별자 필드명.
        CREATE_AT_FIELD: 생성 시각 필드명.
        MODIFY_AT_FIELD: 수정 시각 필드명.
        DELETE_AT_FIELD: 삭제 시각 필드명.
        IS_DELETE_FIELD: 소프트 삭제 여부 필드명.
        DEFAULT_COLLECTION: 컬렉션 이름이 비어 있을 때 사용하는 컬렉션.
        DEFAULT_GRIDFS_PREFIX: GridFS 버킷 접두사.
        DEFAULT_SORT_KEY: 정렬 키 미지정 시 사용하는 정렬 키.
        REFERENCE_SUFFIX: 참조 필드에 붙는 접미사.
        REFERENCE_ID_KEY: 참조 식별자 하위 키.
    """

    ID_FIELD = "_id"
    CREATE_AT_FIELD = "create_at"
    MODIFY_AT_FIELD = "modify_at"
    DELETE_AT_FIELD = "delete_at"
    IS_DELETE_FIELD = "is_delete"
    DEFAULT_COLLECTION = "mongos"
    DEFAULT_GRIDFS_PREFIX = "fs"
    DEFAULT_SORT_KEY = "-create_at"
    REFERENCE_SUFFIX = "_ref"
    REFERENCE_ID_KEY = "$id"


__all__ = ["SharedConst", "DBConst"]
