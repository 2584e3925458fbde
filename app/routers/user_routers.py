from fastapi import APIRouter, HTTPException, Depends, Request, Response, status
from schemas.user_schema import UserCreate, UserUpdate, UserLogin, UserOut, ChangePasswordRequest
from crud.user_crud import user_crud
from sqlalchemy.orm import Session
from utils.auth.jwt_handler import create_access_token, verify_refresh_token, verify_access_token
from utils.auth.jwt_bearer import Principal, get_principal
from utils.errors import UnauthorizedError
from utils.response import success_response
from database import get_db
from crud.token_crud import revoke_token, is_token_revoked

router = APIRouter(prefix="/api/user", tags=["users"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(user: UserCreate, db: Session = Depends(get_db)):
    new_user = user_crud.create(db=db, obj_in=user)
    return success_response("User registered successfully", UserOut.model_validate(new_user))


@router.post("/login")
def login(response: Response, credentials: UserLogin, db: Session = Depends(get_db)):
    tokens = user_crud.login(response=response, db=db, email=credentials.email, password=credentials.password)
    return success_response("Login successful", tokens)


@router.get("/me")
def get_me(db: Session = Depends(get_db), principal: Principal = Depends(get_principal)):
    user = user_crud.get(db=db, id=principal.user_id)
    return success_response("Profile retrieved successfully", UserOut.model_validate(user))


@router.put("/me")
def update_me(
    user_update: UserUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    user = user_crud.update_profile(db=db, user_id=principal.user_id, obj_in=user_update)
    return success_response("Profile updated successfully", UserOut.model_validate(user))


@router.post("/refresh")
def generate_new_access_token(request: Request, db: Session = Depends(get_db)):
    # Refresh token could be in Authorization header or cookie
    header = request.headers.get("Authorization")
    token = None
    if header and header.lower().startswith("bearer "):
        token = header.split(" ", 1)[1].strip()
    elif request.cookies.get("refresh_token"):
        token = request.cookies.get("refresh_token")

    if not token:
        raise UnauthorizedError("Refresh token missing")

    payload = verify_refresh_token(token)
    if not payload:
        raise UnauthorizedError("Invalid or expired refresh token")

    jti = payload.get("jti")
    if jti and is_token_revoked(db, jti):
        raise UnauthorizedError("Refresh token has been revoked")

    user_id = payload.get("user_id")
    if not user_id:
        raise UnauthorizedError("Invalid token payload")

    access_token = create_access_token({"user_id": user_id, "role": payload.get("role"), "email": payload.get("email")})
    return success_response("Token refreshed", {"access_token": access_token, "token_type": "bearer"})


@router.post("/logout")
def logout(request: Request, response: Response, db: Session = Depends(get_db)):
    header = request.headers.get("Authorization")

    # Try revoke access token if provided
    if header and header.lower().startswith("bearer "):
        access_token = header.split(" ", 1)[1].strip()
        try:
            access_payload = verify_access_token(access_token)
        except HTTPException:
            access_payload = None
        if access_payload:
            revoke_token(db, access_payload)

    refresh_token = request.cookies.get("refresh_token")
    if refresh_token:
        try:
            refresh_payload = verify_refresh_token(refresh_token)
        except HTTPException:
            refresh_payload = None
        if refresh_payload:
            revoke_token(db, refresh_payload)

    # clear refresh cookie in browser
    response.delete_cookie("refresh_token")
    return success_response("Logged out")


@router.post("/change-password")
def change_password(
    data: ChangePasswordRequest,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
):
    """Change password (requires current password)"""
    user_crud.change_password(
        db=db,
        user_id=principal.user_id,
        current_password=data.current_password,
        new_password=data.new_password,
    )
    return success_response("Password changed successfully")
