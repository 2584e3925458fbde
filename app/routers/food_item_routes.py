from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session
from typing import Optional
from database import get_db
from crud.food_item_crud import food_item_crud
from schemas.food_schema import FoodItemCreate, FoodItemUpdate, FoodAvailabilityUpdate, FoodItemOut as FoodItemResponse
from utils.auth.jwt_bearer import Principal, require_role
from utils.helper import paginate
from utils.response import paginated_response, success_response
from schemas import UserRole

router = APIRouter(prefix="/api/food", tags=["Food Items"])


# Get all food items with optional filters and pagination
@router.get("")
def get_all_food_items(
    db: Session = Depends(get_db),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    category: Optional[str] = Query(None, description="Filter by category"),
    available: Optional[bool] = Query(None, description="Filter by availability"),
    vegetarian: Optional[bool] = Query(None, description="Only vegetarian items"),
    min_price: Optional[float] = Query(None, ge=0, alias="minPrice"),
    max_price: Optional[float] = Query(None, ge=0, alias="maxPrice"),
    search: str = Query("", description="Search name and description"),
    sort: str = Query("newest", description="price, -price, rating, -rating or newest"),
):
    page, limit, skip = paginate(page, limit)
    filters = {"category": category, "is_available": available, "is_vegetarian": vegetarian}
    items, total = food_item_crud.search(
        db, skip=skip, limit=limit, filters=filters, search=search,
        min_price=min_price, max_price=max_price, sort=sort,
    )
    return paginated_response(
        "Food items retrieved successfully",
        [FoodItemResponse.model_validate(i) for i in items],
        page, limit, total,
    )


@router.get("/categories")
def get_categories(db: Session = Depends(get_db)):
    return success_response("Categories retrieved successfully", food_item_crud.categories(db))


@router.get("/top-rated")
def get_top_rated(limit: int = Query(10, ge=1, le=50), db: Session = Depends(get_db)):
    items = food_item_crud.top_rated(db, limit=limit)
    return success_response("Top rated items retrieved successfully", [FoodItemResponse.model_validate(i) for i in items])


# Get single food item
@router.get("/{food_id}")
def get_food_item(food_id: int, db: Session = Depends(get_db)):
    item = food_item_crud.get(db, food_id)
    return success_response("Food item retrieved successfully", FoodItemResponse.model_validate(item))


# Create new food item
@router.post("", status_code=status.HTTP_201_CREATED)
def create_food_item(
    obj_in: FoodItemCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role(UserRole.ADMIN)),
):
    item = food_item_crud.create(db=db, obj_in=obj_in)
    return success_response("Food item created successfully", FoodItemResponse.model_validate(item))


# Update existing food item
@router.put("/{food_id}")
def update_food_item(
    food_id: int,
    obj_in: FoodItemUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role(UserRole.ADMIN)),
):
    db_obj = food_item_crud.get(db, food_id)
    item = food_item_crud.update(db, db_obj, obj_in)
    return success_response("Food item updated successfully", FoodItemResponse.model_validate(item))


@router.patch("/{food_id}/availability")
def update_availability(
    food_id: int,
    obj_in: FoodAvailabilityUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role(UserRole.ADMIN)),
):
    item = food_item_crud.set_availability(db, food_id, obj_in.is_available)
    state = "available" if item.is_available else "unavailable"
    return success_response(f"Food item marked {state}", FoodItemResponse.model_validate(item))


# Delete a food item
@router.delete("/{food_id}")
def delete_food_item(
    food_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role(UserRole.ADMIN)),
):
    return success_response("Food item deleted successfully", food_item_crud.remove(db, food_id))
