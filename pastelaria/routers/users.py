from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from pastelaria.database import get_db
from pastelaria.errors import NotFoundError, PreconditionError
from pastelaria.models import User
from pastelaria.schemas.users import UserCreate, UserRead
from pastelaria.security import get_current_user, require_admin
from pastelaria.crud import users as crud_users

router = APIRouter()


@router.get("/", response_model=List[UserRead])
def read_users(
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    return db.query(User).order_by(User.id).offset(skip).limit(limit).all()


@router.get("/me", response_model=UserRead)
def read_user_me(current_user: User = Depends(get_current_user)):
    return current_user


@router.post("/", response_model=UserRead)
def create_user(
    user: UserCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    return crud_users.create_user(
        db,
        username=user.username,
        password=user.password,
        role=user.role,
        full_name=user.full_name,
        email=user.email,
    )


@router.delete("/{user_id}", response_model=UserRead)
def deactivate_user(
    user_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """Desativa o usuário (soft delete); o histórico de turnos continua ligado a ele."""
    user_db = db.query(User).filter(User.id == user_id).first()
    if not user_db:
        raise NotFoundError("Usuário não encontrado.")
    if not user_db.is_active:
        raise PreconditionError("Este usuário já estava desativado.")

    user_db.is_active = False
    db.commit()
    db.refresh(user_db)
    return user_db
