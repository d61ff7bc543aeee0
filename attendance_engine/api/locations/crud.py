from typing import Optional

from sqlalchemy.orm import Session

from attendance_engine.api.base_crud import CRUDBase
from attendance_engine.api.locations import models, schemas


class CRUDLocationProfile(
    CRUDBase[models.LocationProfile, schemas.LocationProfileCreate]
):
    def get_profile(
        self, db: Session, location_id: int
    ) -> Optional[models.LocationProfile]:
        return self.get(db, location_id)

    def get_by_name(self, db: Session, name: str) -> Optional[models.LocationProfile]:
        return db.query(self.model).filter(self.model.name == name).first()


location = CRUDLocationProfile(models.LocationProfile)
