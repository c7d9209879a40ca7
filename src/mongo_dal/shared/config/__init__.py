"""
목적: 설정 모듈 공개 API를 제공한다.
설명: 설정 병합 로더와 MongoDB 접속 설정 모델을 외부에 노출한다.
디자인 패턴: 퍼사드
참조: src/mongo_dal/shared/config/loader.py, src/mongo_dal/shared/config/settings.py
"""

from mongo_dal.shared.config.loader import ConfigLoader
from mongo_dal.shared.config.settings import MongoSettings

__all__ = ["ConfigLoader", "MongoSettings"]
