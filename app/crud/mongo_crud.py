from typing import Generic, TypeVar, Type, Optional, Dict, Any, List, Tuple
from beanie import Document, PydanticObjectId
from pydantic import BaseModel
from utils.errors import NotFoundError

ModelType = TypeVar("ModelType", bound=Document)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)

class MongoCRUD(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    def __init__(self, model: Type[ModelType], label: Optional[str] = None):
        self.model = model
        self.label = label or model.__name__

    # -------- GET BY ID --------
    async def get(self, id: str, filters: Optional[Dict[str, Any]] = None) -> ModelType:
        try:
            oid = PydanticObjectId(id)
        except Exception:
            raise NotFoundError(f"{self.label} not found")
        obj = await self.model.find_one({"_id": oid, **(filters or {})})
        if not obj:
            raise NotFoundError(f"{self.label} not found")
        return obj

    # -------- GET PAGE with filters --------
    async def get_page(
        self,
        skip: int = 0,
        limit: int = 10,
        filters: Optional[Dict[str, Any]] = None,
        sort: str = "-created_at",
    ) -> Tuple[List[ModelType], int]:
        query = self.model.find(filters or {})
        total = await query.count()
        items = await self.model.find(filters or {}).sort(sort).skip(skip).limit(limit).to_list()
        return items, total

    async def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        return await self.model.find(filters or {}).count()

    # -------- CREATE --------
    async def create(self, obj_in: CreateSchemaType) -> ModelType:
        obj = self.model(**obj_in.model_dump())
        await obj.insert()
        return obj

    # -------- UPDATE --------
    async def update(self, obj: ModelType, obj_in: UpdateSchemaType) -> ModelType:
        await obj.set(obj_in.model_dump(exclude_unset=True))
        return obj

    # -------- DELETE --------
    async def remove(self, obj: ModelType):
        await obj.delete()
        return {"deleted_id": str(obj.id)}
