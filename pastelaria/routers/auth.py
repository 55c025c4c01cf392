from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session
from datetime import timedelta

from pastelaria.config import get_settings
from pastelaria.database import get_db
from pastelaria.errors import UnauthenticatedError
from pastelaria.security import verify_password, create_access_token
from pastelaria.schemas.auth import Token
from pastelaria.crud.users import get_user_by_username

router = APIRouter()


@router.post("/login", response_model=Token)
async def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db)
):
    # 1. Buscar usuário
    user = get_user_by_username(db, username=form_data.username)
    if not user or not verify_password(form_data.password, user.password_hash):
        raise UnauthenticatedError("Usuário ou senha incorretos")

    # 2. Gerar token
    access_token = create_access_token(
        data={"sub": user.username, "role": user.role.value},
        expires_delta=timedelta(minutes=get_settings().access_token_expire_minutes),
    )
    return {"access_token": access_token, "token_type": "bearer"}
