from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from crud.promo_crud import promo_crud
from database import get_db
from schemas import UserRole
from schemas.promo_schema import (
    PromoApplyRequest,
    PromoCodeCreate,
    PromoCodeOut,
    PromoCodePublic,
    PromoCodeUpdate,
    PromoValidateRequest,
)
from utils.auth.jwt_bearer import Principal, get_principal, require_role
from utils.helper import paginate
from utils.response import paginated_response, success_response

router = APIRouter(prefix="/api/promo", tags=["Promo Codes"])


@router.post("/validate")
def validate_promo(
    data: PromoValidateRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    quote = promo_crud.validate(db, data.code, principal.user_id, data.order_amount)
    return success_response("Promo code is valid", quote.as_dict())


@router.post("/apply")
def apply_promo(
    data: PromoApplyRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    promo, newly_applied = promo_crud.apply(db, data.code, principal.user_id, order_id=data.order_id)
    message = "Promo code redeemed" if newly_applied else "Promo code already redeemed"
    return success_response(message, {"code": promo.code, "usage_count": promo.usage_count, "newly_applied": newly_applied})


@router.get("/active")
def get_active_promos(db: Session = Depends(get_db)):
    promos = promo_crud.active_codes(db)
    return success_response("Active promo codes retrieved", [PromoCodePublic.model_validate(p) for p in promos])


# ---------------- admin ----------------
@router.post("", status_code=status.HTTP_201_CREATED)
def create_promo(
    data: PromoCodeCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role(UserRole.ADMIN)),
):
    promo = promo_crud.create(db, data, created_by=principal.user_id)
    return success_response("Promo code created successfully", PromoCodeOut.model_validate(promo))


@router.get("")
def list_promos(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    active: Optional[bool] = Query(None),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role(UserRole.ADMIN)),
):
    page, limit, skip = paginate(page, limit)
    promos, total = promo_crud.get_page(
        db, skip=skip, limit=limit, filters={"active": active},
        order_by=promo_crud.model.created_at.desc(),
    )
    return paginated_response(
        "Promo codes retrieved successfully",
        [PromoCodeOut.model_validate(p) for p in promos],
        page, limit, total,
    )


@router.put("/{promo_id}")
def update_promo(
    promo_id: int,
    data: PromoCodeUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role(UserRole.ADMIN)),
):
    promo = promo_crud.update(db, promo_crud.get(db, promo_id), data)
    return success_response("Promo code updated successfully", PromoCodeOut.model_validate(promo))


@router.delete("/{promo_id}")
def delete_promo(
    promo_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role(UserRole.ADMIN)),
):
    return success_response("Promo code deleted successfully", promo_crud.remove(db, promo_id))


@router.get("/{promo_id}/stats")
def promo_stats(
    promo_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role(UserRole.ADMIN)),
):
    return success_response("Promo code statistics retrieved", promo_crud.stats(db, promo_id))
