import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from crud.base import CRUDBase
from model.promo import DiscountTypeEnum, PromoCode, PromoRedemption
from schemas.promo_schema import PromoCodeCreate, PromoCodeUpdate
from utils.errors import ConflictError, PromoRejectedError, PromoRejection
from utils.helper import utcnow
from utils.pricing import floor2, round2, to_decimal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PromoQuote:
    code: str
    discount_amount: Decimal
    final_amount: Decimal

    def as_dict(self) -> dict:
        return {
            "code": self.code,
            "discount_amount": float(self.discount_amount),
            "final_amount": float(self.final_amount),
            "message": f"You saved Rs. {self.discount_amount}!",
        }


def compute_discount(promo: PromoCode, order_amount) -> Decimal:
    amount = to_decimal(order_amount)
    if DiscountTypeEnum(promo.discount_type) == DiscountTypeEnum.PERCENTAGE:
        discount = amount * to_decimal(promo.discount_value) / 100
        if promo.max_discount is not None:
            discount = min(discount, to_decimal(promo.max_discount))
    else:
        discount = to_decimal(promo.discount_value)
    return floor2(discount)


def evaluate(promo: PromoCode, order_amount, already_used: bool, now: Optional[datetime] = None) -> PromoQuote:
    """
    Run the eligibility checks in order; the first failing one wins.

    ``promo`` must already be known to exist and be active.
    """
    now = now or utcnow()
    amount = to_decimal(order_amount)
    if promo.valid_from is not None and now < promo.valid_from:
        raise PromoRejectedError(PromoRejection.NOT_YET_VALID, "Promo code is not yet valid")
    if promo.valid_until is not None and now > promo.valid_until:
        raise PromoRejectedError(PromoRejection.EXPIRED, "Promo code has expired")
    if amount < to_decimal(promo.min_order_amount or 0):
        raise PromoRejectedError(
            PromoRejection.BELOW_MINIMUM,
            f"Minimum order amount of Rs. {round2(promo.min_order_amount)} required",
        )
    # a user who holds one of the counted redemptions is told so, not that the code ran out
    if already_used:
        raise PromoRejectedError(PromoRejection.ALREADY_USED, "You have already used this promo code")
    if promo.usage_limit is not None and (promo.usage_count or 0) >= promo.usage_limit:
        raise PromoRejectedError(PromoRejection.LIMIT_EXCEEDED, "Promo code usage limit exceeded")

    discount = compute_discount(promo, amount)
    final = max(Decimal("0"), round2(amount - discount))
    return PromoQuote(code=promo.code, discount_amount=discount, final_amount=final)


class PromoCRUD(CRUDBase[PromoCode, PromoCodeCreate, PromoCodeUpdate]):
    def get_by_code(self, db: Session, code: str, active_only: bool = False) -> Optional[PromoCode]:
        query = db.query(PromoCode).filter(PromoCode.code == code.strip().upper())
        if active_only:
            query = query.filter(PromoCode.active.is_(True))
        return query.first()

    def has_redeemed(self, db: Session, promo_id: int, user_id: int) -> bool:
        return (
            db.query(PromoRedemption.redemption_id)
            .filter(PromoRedemption.promo_id == promo_id, PromoRedemption.user_id == user_id)
            .first()
            is not None
        )

    def validate(self, db: Session, code: str, user_id: int, order_amount) -> PromoQuote:
        promo = self.get_by_code(db, code, active_only=True)
        if not promo:
            raise PromoRejectedError(PromoRejection.NOT_FOUND, "Invalid or expired promo code")
        return evaluate(promo, order_amount, already_used=self.has_redeemed(db, promo.promo_id, user_id))

    def apply(self, db: Session, code: str, user_id: int, order_id: Optional[int] = None, commit: bool = True) -> Tuple[PromoCode, bool]:
        """
        Record a redemption. Returns ``(promo, newly_applied)``.

        Re-applying for a user who already redeemed the code is a no-op. The
        usage counter is bumped with a compare-and-increment against the limit.
        With ``commit=False`` the work joins the caller's transaction.
        """
        promo = self.get_by_code(db, code)
        if not promo:
            raise PromoRejectedError(PromoRejection.NOT_FOUND, "Promo code not found")
        if self.has_redeemed(db, promo.promo_id, user_id):
            return promo, False

        try:
            db.add(PromoRedemption(promo_id=promo.promo_id, user_id=user_id, order_id=order_id))
            db.flush()
        except IntegrityError:
            db.rollback()
            if commit:
                # lost a race with the same user's other request: already applied
                return self.get_by_code(db, code), False
            raise ConflictError("Promo code is being redeemed by another request")

        updated = (
            db.query(PromoCode)
            .filter(
                PromoCode.promo_id == promo.promo_id,
                or_(PromoCode.usage_limit.is_(None), PromoCode.usage_count < PromoCode.usage_limit),
            )
            .update({PromoCode.usage_count: PromoCode.usage_count + 1}, synchronize_session=False)
        )
        if not updated:
            db.rollback()
            raise PromoRejectedError(PromoRejection.LIMIT_EXCEEDED, "Promo code usage limit exceeded")

        if commit:
            db.commit()
        db.refresh(promo)
        logger.info("promo.applied code=%s user=%s order=%s usage=%s", promo.code, user_id, order_id, promo.usage_count)
        return promo, True

    # ---------------- admin ----------------
    def create(self, db: Session, obj_in: PromoCodeCreate, created_by: Optional[int] = None) -> PromoCode:
        if self.get_by_code(db, obj_in.code):
            raise ConflictError("Promo code already exists")
        promo = PromoCode(**obj_in.model_dump(), created_by=created_by)
        db.add(promo)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ConflictError("Promo code already exists")
        db.refresh(promo)
        return promo

    def active_codes(self, db: Session) -> List[PromoCode]:
        now = utcnow()
        return (
            db.query(PromoCode)
            .filter(
                PromoCode.active.is_(True),
                or_(PromoCode.valid_from.is_(None), PromoCode.valid_from <= now),
                or_(PromoCode.valid_until.is_(None), PromoCode.valid_until >= now),
            )
            .order_by(PromoCode.created_at.desc())
            .all()
        )

    def stats(self, db: Session, promo_id: int) -> dict:
        promo = self.get(db, promo_id)
        used = promo.usage_count or 0
        users = db.query(PromoRedemption).filter(PromoRedemption.promo_id == promo_id).count()
        return {
            "code": promo.code,
            "usage_count": used,
            "usage_limit": promo.usage_limit,
            "remaining_usage": promo.usage_limit - used if promo.usage_limit else "Unlimited",
            "usage_percentage": round(used / promo.usage_limit * 100) if promo.usage_limit else 0,
            "user_count": users,
            "active": promo.active,
            "valid_from": promo.valid_from,
            "valid_until": promo.valid_until,
        }


promo_crud = PromoCRUD(PromoCode, id_field="promo_id", label="Promo code")
