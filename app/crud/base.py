from typing import Any, Dict, Generic, List, Optional, Tuple, Type, TypeVar
from sqlalchemy.orm import Query, Session
from pydantic import BaseModel
from utils.errors import NotFoundError

ModelType = TypeVar("ModelType")
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)

class CRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    def __init__(self, model: Type[ModelType], id_field: str = "id", label: Optional[str] = None):
        self.model = model
        self.id_field = id_field
        self.label = label or model.__name__

    # ---------------- GET ----------------
    def get(self, db: Session, id: int) -> ModelType:
        obj = self.get_or_none(db, id)
        if not obj:
            raise NotFoundError(f"{self.label} not found")
        return obj

    def get_or_none(self, db: Session, id: int) -> Optional[ModelType]:
        pk_column = getattr(self.model, self.id_field)
        return db.query(self.model).filter(pk_column == id).first()

    # ---------------- GET ALL ----------------
    def apply_filters(self, query: Query, filters: Optional[Dict[str, Any]] = None) -> Query:
        if filters:
            for key, value in filters.items():
                if value is not None:
                    query = query.filter(getattr(self.model, key) == value)
        return query

    def get_all(self, db: Session, skip=0, limit=10, filters=None):
        query = self.apply_filters(db.query(self.model), filters)
        return query.offset(skip).limit(limit).all()

    def get_page(self, db: Session, skip=0, limit=10, filters=None, order_by=None) -> Tuple[List[ModelType], int]:
        query = self.apply_filters(db.query(self.model), filters)
        total = query.count()
        if order_by is not None:
            query = query.order_by(order_by)
        return query.offset(skip).limit(limit).all(), total

    # ---------------- CREATE ----------------
    def create(self, db: Session, obj_in: CreateSchemaType, **extra):
        obj = self.model(**obj_in.model_dump(), **extra)
        db.add(obj)
        db.commit()
        db.refresh(obj)
        return obj

    # ---------------- UPDATE ----------------
    def update(self, db: Session, db_obj: ModelType, obj_in: UpdateSchemaType):
        update_data = obj_in.model_dump(exclude_unset=True)
        for key, value in update_data.items():
            setattr(db_obj, key, value)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    # ---------------- DELETE ----------------
    def remove(self, db: Session, id: int):
        obj = self.get(db, id)
        db.delete(obj)
        db.commit()
        return {"deleted_id": id}
