# campaign_service/crud/crud_scheduling_preferences.py

from typing import Optional

from sqlalchemy.orm import Session

from campaign_service.models.scheduling_preferences import SchedulingPreferences


class CRUDSchedulingPreferences:
    def get_for_user(self, db: Session, *, user_id: str) -> Optional[SchedulingPreferences]:
        return (
            db.query(SchedulingPreferences)
            .filter(SchedulingPreferences.user_id == user_id)
            .first()
        )


scheduling_preferences = CRUDSchedulingPreferences()
