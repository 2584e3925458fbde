from crud.base import CRUDBase
from model.user import User
from schemas import UserRole
from schemas.user_schema import UserCreate, UserUpdate
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from utils.auth.jwt_handler import (
    verify_password,
    hash_password,
    create_access_token,
    create_refresh_token,
)
from utils.errors import ConflictError, InvalidInputError, UnauthorizedError
from utils.helper import utcnow
from fastapi import Response


class CRUDUser(CRUDBase[User, UserCreate, UserUpdate]):
    def create(self, db: Session, obj_in: UserCreate, role: UserRole = UserRole.USER) -> User:
        email = obj_in.email.lower()
        if db.query(User).filter(User.email == email).first():
            raise ConflictError("User already exists")
        new_user = User(
            email=email,
            phone=obj_in.phone,
            name=obj_in.name.strip(),
            role=role.value,
            password=hash_password(obj_in.password),
        )
        db.add(new_user)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ConflictError("User already exists")
        db.refresh(new_user)
        return new_user

    def login(self, response: Response, db: Session, email: str, password: str) -> dict:
        user = db.query(User).filter(User.email == email.lower()).first()
        if not user or not verify_password(password, user.password):
            raise UnauthorizedError("Invalid email or password")
        token_data = {
            "user_id": user.user_id,
            "email": user.email,
            "role": user.role,
        }
        access_token = create_access_token(token_data)
        refresh_token = create_refresh_token(token_data)
        response.set_cookie(
            key="refresh_token",
            value=refresh_token,
            httponly=True,
            samesite="lax",
            secure=False,  # set to True in production behind HTTPS
        )
        user.last_login = utcnow()
        db.commit()
        return {
            "access_token": access_token,
            "token_type": "bearer",
            "user": {"user_id": user.user_id, "name": user.name, "email": user.email, "role": user.role},
        }

    def update_profile(self, db: Session, user_id: int, obj_in: UserUpdate) -> User:
        user = self.get(db, user_id)
        data = obj_in.model_dump(exclude_unset=True)
        if data.get("name"):
            user.name = data["name"].strip()
        if "phone" in data:
            user.phone = data["phone"]
        if data.get("address") is not None:
            user.address = data["address"]
        db.commit()
        db.refresh(user)
        return user

    def change_password(self, db: Session, user_id: int, current_password: str, new_password: str) -> None:
        user = self.get(db, user_id)
        if not verify_password(current_password, user.password):
            raise UnauthorizedError("Current password is incorrect")
        if verify_password(new_password, user.password):
            raise InvalidInputError("New password must be different from current password")
        user.password = hash_password(new_password)
        db.commit()


user_crud = CRUDUser(User, id_field="user_id", label="User")
