from typing import Generator, Optional

from fastapi import Depends, Path, Request
from sqlalchemy.orm import Session

from helpdesk.backend.core.errors import AuthenticatedUserNotFound, NoCookie, ValidationFailed
from helpdesk.backend.core.settings import Settings
from helpdesk.backend.repositories.user_repository import UserRepository
from helpdesk.backend.services.auth_service import SessionClaims, decode_session_token
from helpdesk.shared.schemas import InvalidIdError, Success, parse_id


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_db_dep(request: Request) -> Generator[Session, None, None]:
    """FastAPI dependency для доступа к БД."""
    with request.app.state.database.get_db() as db:
        yield db


def path_id(id: str = Path(...)) -> str:
    """id сущности из пути, проверенный по формату Base58."""
    try:
        return parse_id(id)
    except InvalidIdError as e:
        raise ValidationFailed(str(e)) from e


def get_session(request: Request, settings: Settings = Depends(get_settings)) -> SessionClaims:
    token: Optional[str] = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token:
        raise NoCookie()
    return decode_session_token(settings, token)


def require_user(
    claims: SessionClaims = Depends(get_session),
    db: Session = Depends(get_db_dep),
) -> str:
    """id текущего пользователя; пользователь обязан существовать."""
    if not UserRepository(db).exists(claims.user_id):
        raise AuthenticatedUserNotFound(claims.user_id)
    return claims.user_id


def ok(payload=None) -> Success:
    return Success(payload=payload)
