from typing import Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.declarative import DeclarativeMeta
from sqlalchemy.orm import Query, Session

from attendance_engine.core.exceptions.checkin_exceptions import (
    CheckInValidationError,
    StoreError,
)
from attendance_engine.core.logger import logger

ModelType = TypeVar('ModelType', bound=DeclarativeMeta)
CreateSchemaType = TypeVar('CreateSchemaType', bound=BaseModel)


class CRUDBase(Generic[ModelType, CreateSchemaType]):
    def __init__(self, model: Type[ModelType]):
        self.model = model

    def _apply_filters(
        self, query: Query, filters: Optional[BaseModel] = None
    ) -> Query:
        if not filters:
            return query

        for field, value in filters.model_dump(exclude_none=True).items():
            if hasattr(self.model, field):
                query = query.filter(getattr(self.model, field) == value)
        return query

    def create(self, db: Session, obj: CreateSchemaType) -> ModelType:
        """Create a new record."""
        try:
            obj_data = obj.model_dump()
            model_columns = self.model.__table__.columns.keys()
            filtered_data = {k: v for k, v in obj_data.items() if k in model_columns}

            db_obj = self.model(**filtered_data)
            db.add(db_obj)
            db.commit()
            db.refresh(db_obj)
            return db_obj
        except IntegrityError as e:
            logger.error('Error creating %s: %s', self.model.__name__, str(e))
            db.rollback()
            raise StoreError(f'{self.model.__name__} violates a constraint')
        except SQLAlchemyError as e:
            logger.error('SQL error creating %s: %s', self.model.__name__, str(e))
            db.rollback()
            raise StoreError(str(e))

    def get(self, db: Session, id: int) -> Optional[ModelType]:
        return db.query(self.model).filter(self.model.id == id).first()

    def find(
        self,
        db: Session,
        skip: int = 0,
        limit: int = 100,
        filters: Optional[BaseModel] = None,
        sort_by: str = 'created_at',
        sort_order: str = 'desc',
    ) -> List[ModelType]:
        """Get multiple records with pagination, filters and sorting."""
        query = db.query(self.model)
        query = self._apply_filters(query, filters)

        if not hasattr(self.model, sort_by):
            raise CheckInValidationError(f'Invalid sort field: {sort_by}')

        order_by = getattr(self.model, sort_by)
        if sort_order == 'desc':
            order_by = order_by.desc()

        query = query.order_by(order_by)
        return query.offset(skip).limit(limit).all()
