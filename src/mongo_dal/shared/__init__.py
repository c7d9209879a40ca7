"""
목적: 공통(shared) 모듈 패키지를 정의한다.
설명: 상수, 설정, 로깅, 예외 모듈을 하위 패키지로 제공한다.
디자인 패턴: 패키지 구성
참조: src/mongo_dal/shared/config, src/mongo_dal/shared/logging, src/mongo_dal/shared/exceptions
"""
