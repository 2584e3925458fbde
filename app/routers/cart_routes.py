from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from crud.cart_crud import cart_crud
from database import get_db
from schemas.cart_schema import CartAdd, CartLineSummary, CartOut, CartQuantityUpdate
from utils.auth.jwt_bearer import Principal, get_principal
from utils.response import success_response

router = APIRouter(prefix="/api/cart", tags=["Cart"])


@router.get("")
def get_cart(db: Session = Depends(get_db), principal: Principal = Depends(get_principal)):
    cart = cart_crud.get_cart(db, principal.user_id)
    return success_response("Cart retrieved successfully", CartOut(**cart))


@router.get("/summary")
def get_cart_summary(db: Session = Depends(get_db), principal: Principal = Depends(get_principal)):
    return success_response("Cart summary retrieved successfully", cart_crud.summary(db, principal.user_id))


@router.post("/add")
def add_to_cart(data: CartAdd, db: Session = Depends(get_db), principal: Principal = Depends(get_principal)):
    line = cart_crud.add_item(db, principal.user_id, data.food_id, data.quantity)
    return success_response("Item added to cart", CartLineSummary(**line))


@router.put("/{food_id}")
def update_cart_item(
    food_id: int,
    data: CartQuantityUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    line = cart_crud.set_quantity(db, principal.user_id, food_id, data.quantity)
    message = "Item removed from cart" if data.quantity == 0 else "Cart updated"
    return success_response(message, CartLineSummary(**line))


@router.delete("/{food_id}")
def remove_from_cart(food_id: int, db: Session = Depends(get_db), principal: Principal = Depends(get_principal)):
    line = cart_crud.remove_item(db, principal.user_id, food_id)
    return success_response("Item removed from cart", CartLineSummary(**line))


@router.delete("")
def clear_cart(db: Session = Depends(get_db), principal: Principal = Depends(get_principal)):
    removed = cart_crud.clear(db, principal.user_id)
    return success_response("Cart cleared", {"removed": removed})
