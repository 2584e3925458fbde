from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from crud.review_crud import review_crud
from database import get_db
from schemas.review_schema import ReviewCreate, ReviewHelpful, ReviewOut, ReviewUpdate
from utils.auth.jwt_bearer import Principal, get_principal
from utils.helper import paginate
from utils.response import paginated_response, success_response

router = APIRouter(prefix="/api/review", tags=["Reviews"])


@router.post("", status_code=status.HTTP_201_CREATED)
def create_review(data: ReviewCreate, db: Session = Depends(get_db), principal: Principal = Depends(get_principal)):
    review = review_crud.create_review(db, principal.user_id, data)
    return success_response("Review added successfully", ReviewOut.model_validate(review))


@router.get("/food/{food_id}")
def get_food_reviews(
    food_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    page, limit, skip = paginate(page, limit)
    reviews, total = review_crud.list_for_food(db, food_id, skip=skip, limit=limit)
    return paginated_response("Reviews retrieved successfully", [ReviewOut.model_validate(r) for r in reviews], page, limit, total)


@router.get("/my")
def get_my_reviews(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    page, limit, skip = paginate(page, limit)
    reviews, total = review_crud.list_for_user(db, principal.user_id, skip=skip, limit=limit)
    return paginated_response("Reviews retrieved successfully", [ReviewOut.model_validate(r) for r in reviews], page, limit, total)


@router.get("/{review_id}")
def get_review(review_id: int, db: Session = Depends(get_db)):
    return success_response("Review retrieved successfully", ReviewOut.model_validate(review_crud.get(db, review_id)))


@router.put("/{review_id}")
def update_review(
    review_id: int,
    data: ReviewUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    review = review_crud.update_review(db, review_id, principal.user_id, data)
    return success_response("Review updated successfully", ReviewOut.model_validate(review))


@router.delete("/{review_id}")
def delete_review(review_id: int, db: Session = Depends(get_db), principal: Principal = Depends(get_principal)):
    deleted = review_crud.delete_review(db, review_id, principal.user_id)
    return success_response("Review deleted successfully", {"deleted_id": deleted})


@router.post("/{review_id}/helpful")
def mark_helpful(
    review_id: int,
    data: ReviewHelpful = ReviewHelpful(),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    review = review_crud.mark_helpful(db, review_id, data.helpful)
    return success_response("Thank you for your feedback", {"helpful": review.helpful, "unhelpful": review.unhelpful})
