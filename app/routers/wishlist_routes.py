from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from crud.wishlist_crud import wishlist_crud
from database import get_db
from schemas.food_schema import FoodItemOut
from schemas.wishlist_schema import WishlistEntry, WishlistOut
from utils.auth.jwt_bearer import Principal, get_principal
from utils.response import success_response

router = APIRouter(prefix="/api/wishlist", tags=["Wishlist"])


def _wishlist(db: Session, user_id: int) -> WishlistOut:
    items = [
        WishlistEntry(**FoodItemOut.model_validate(food).model_dump(), added_at=entry.added_at)
        for food, entry in wishlist_crud.get_wishlist(db, user_id)
    ]
    return WishlistOut(items=items, count=len(items))


@router.get("")
def get_wishlist(db: Session = Depends(get_db), principal: Principal = Depends(get_principal)):
    return success_response("Wishlist retrieved successfully", _wishlist(db, principal.user_id))


@router.post("/{food_id}")
def add_to_wishlist(food_id: int, db: Session = Depends(get_db), principal: Principal = Depends(get_principal)):
    added = wishlist_crud.add(db, principal.user_id, food_id)
    message = "Added to wishlist" if added else "Already in wishlist"
    return success_response(message, _wishlist(db, principal.user_id))


@router.delete("/{food_id}")
def remove_from_wishlist(food_id: int, db: Session = Depends(get_db), principal: Principal = Depends(get_principal)):
    wishlist_crud.remove(db, principal.user_id, food_id)
    return success_response("Removed from wishlist", _wishlist(db, principal.user_id))


@router.delete("")
def clear_wishlist(db: Session = Depends(get_db), principal: Principal = Depends(get_principal)):
    removed = wishlist_crud.clear(db, principal.user_id)
    return success_response("Wishlist cleared", {"items": [], "count": 0, "removed": removed})
