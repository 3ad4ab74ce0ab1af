# campaign_service/crud/crud_optimal_time.py

from typing import List, Optional, Sequence

from sqlalchemy import or_
from sqlalchemy.orm import Session

from campaign_service.models.enums import Platform
from campaign_service.models.optimal_time_slot import OptimalTimeSlot


class CRUDOptimalTime:
    """Ranked posting-time slots per user."""

    def list_ranked(
        self,
        db: Session,
        *,
        user_id: str,
        platform: Optional[Platform] = None,
        limit: Optional[int] = None,
    ) -> List[OptimalTimeSlot]:
        """
        Slots ordered best rank first. With a platform, slots for that
        platform and platform-agnostic slots are returned.
        """
        query = db.query(OptimalTimeSlot).filter(OptimalTimeSlot.user_id == user_id)
        if platform:
            query = query.filter(
                or_(OptimalTimeSlot.platform == platform, OptimalTimeSlot.platform.is_(None))
            )
        query = query.order_by(OptimalTimeSlot.rank.asc())
        if limit:
            query = query.limit(limit)
        return query.all()

    def replace_for_user(
        self, db: Session, *, user_id: str, slots: Sequence[OptimalTimeSlot]
    ) -> int:
        """Swap the user's slots for `slots` in one transaction."""
        try:
            db.query(OptimalTimeSlot).filter(OptimalTimeSlot.user_id == user_id).delete(
                synchronize_session=False
            )
            db.add_all(list(slots))
            db.commit()
        except Exception:
            db.rollback()
            raise
        return len(slots)


optimal_time = CRUDOptimalTime()
