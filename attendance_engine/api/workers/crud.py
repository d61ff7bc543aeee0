from typing import Optional

from sqlalchemy.orm import Session

from attendance_engine.api.base_crud import CRUDBase
from attendance_engine.api.workers import models, schemas


class CRUDWorker(CRUDBase[models.Worker, schemas.WorkerCreate]):
    def get_worker(self, db: Session, worker_id: int) -> Optional[models.Worker]:
        return (
            db.query(self.model)
            .filter(self.model.id == worker_id, self.model.is_active.is_(True))
            .first()
        )

    def get_assigned_location(self, db: Session, worker_id: int) -> Optional[int]:
        worker = self.get_worker(db, worker_id)
        if not worker:
            return None
        return worker.assigned_location_id

    def get_by_email(self, db: Session, email: str) -> Optional[models.Worker]:
        return db.query(self.model).filter(self.model.email == email.lower()).first()


worker = CRUDWorker(models.Worker)
