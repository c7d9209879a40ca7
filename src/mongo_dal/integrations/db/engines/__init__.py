"""
목적: DB 엔진 구현체 모음을 제공한다.
설명: 문서 DB 엔진 구현체를 외부에 노출한다.
디자인 패턴: 퍼사드
참조: src/mongo_dal/integrations/db/engines/mongodb
"""

from mongo_dal.integrations.db.engines.mongodb import MongoDBEngine

__all__ = ["MongoDBEngine"]
