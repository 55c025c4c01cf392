from sqlalchemy.orm import Session

from pastelaria.errors import NotFoundError, PermissionDeniedError
from pastelaria.models import Shift, TeamMember, User


def get_shift(db: Session, shift_id: str, lock: bool = False) -> Shift:
    """Busca o turno; com lock=True faz SELECT ... FOR UPDATE e relê a linha."""
    query = db.query(Shift).filter(Shift.id == shift_id)
    if lock:
        query = query.with_for_update().populate_existing()
    shift = query.first()
    if not shift:
        raise NotFoundError("Turno não encontrado.")
    return shift


def works_on_shift(db: Session, shift: Shift, actor: User) -> bool:
    """Operador do turno ou colaborador da equipe."""
    if shift.user_id == actor.id:
        return True
    member = db.query(TeamMember).filter(
        TeamMember.shift_id == shift.id,
        TeamMember.user_id == actor.id,
    ).first()
    return member is not None


def ensure_can_view(db: Session, shift: Shift, actor: User) -> None:
    if actor.is_admin or works_on_shift(db, shift, actor):
        return
    raise PermissionDeniedError("Você não tem acesso a este turno.")


def ensure_can_operate(db: Session, shift: Shift, actor: User) -> None:
    """Acesso para mutar sub-registros: admin ou quem trabalha no turno. O estado do turno fica com o chamador."""
    if actor.is_admin:
        return
    if not works_on_shift(db, shift, actor):
        raise PermissionDeniedError("Você não tem acesso a este turno.")
