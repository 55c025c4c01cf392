from typing import Optional

from sqlalchemy.orm import Session

from pastelaria.errors import ValidationError
from pastelaria.models import Role, User
from pastelaria.security import get_password_hash


def get_user_by_username(db: Session, username: str) -> Optional[User]:
    """Busca um usuário ativo pelo username."""
    return db.query(User).filter(User.username == username, User.is_active == True).first()


def create_user(
    db: Session,
    username: str,
    password: str,
    role: Role = Role.EMPLOYEE,
    full_name: Optional[str] = None,
    email: Optional[str] = None,
) -> User:
    if db.query(User).filter(User.username == username).first():
        raise ValidationError("O nome de usuário já existe.")
    user = User(
        username=username,
        full_name=full_name,
        email=email,
        role=role,
        is_active=True,
        password_hash=get_password_hash(password),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user
