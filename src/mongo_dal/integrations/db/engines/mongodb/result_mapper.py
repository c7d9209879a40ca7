"""
목적: pymongo 쓰기 결과를 ChangeInfo 모델로 변환한다.
설명: update/delete 결과와 findAndModify 응답의 lastErrorObject를 공통 변경 요약으로 매핑한다.
디자인 패턴: 매퍼 패턴
참조: src/mongo_dal/integrations/db/base/models.py
"""

from __future__ import annotations

from typing import Any, Dict, Mapping

from mongo_dal.integrations.db.base.models import AtomicChange, ChangeInfo


class MongoResultMapper:
    """MongoDB 결과 매퍼."""

    def from_update(self, result: Any) -> ChangeInfo:
        """UpdateResult를 변환한다."""

        return ChangeInfo(
            matched=result.matched_count,
            updated=result.modified_count,
            upserted_id=result.upserted_id,
        )

    def from_delete(self, result: Any) -> ChangeInfo:
        """DeleteResult를 변환한다."""

        return ChangeInfo(matched=result.deleted_count, removed=result.deleted_count)

    def from_find_and_modify(
        self,
        reply: Mapping[str, Any],
        change: AtomicChange,
    ) -> ChangeInfo:
        """findAndModify 명령 응답을 변환한다."""

        last_error: Dict[str, Any] = dict(reply.get("lastErrorObject") or {})
        count = int(last_error.get("n", 0))
        if last_error.get("updatedExisting"):
            return ChangeInfo(matched=count, updated=count)
        if change.remove:
            return ChangeInfo(matched=count, removed=count)
        if change.upsert:
            return ChangeInfo(upserted_id=last_error.get("upserted"))
        return ChangeInfo(matched=count, updated=count)
