"""
Внутренние маршруты: прямое управление пользователями и fake-login.

Подключаются только при EXPOSE_INTERNAL_ROUTES=true (dev / тесты).
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from helpdesk.backend.api.deps import get_db_dep, get_settings, ok, path_id
from helpdesk.backend.api.routes.login import set_session_cookie
from helpdesk.backend.core.settings import Settings
from helpdesk.backend.services import auth_service, user_service
from helpdesk.shared.schemas import IdentityView, Success, UserCommand, UserProfileView, UserView


router = APIRouter(tags=["internal"])


@router.post("/users/{id}", response_model=Success[None], summary="Команда над пользователем")
def user_command(
    command: UserCommand,
    user_id: str = Depends(path_id),
    db: Session = Depends(get_db_dep),
) -> Success:
    user_service.handle_user_command(db, user_id, command)
    return ok()


@router.get("/users/{id}", response_model=Success[UserView], summary="Полное представление пользователя")
def get_user(user_id: str = Depends(path_id), db: Session = Depends(get_db_dep)) -> Success:
    return ok(user_service.get_user_view(db, user_id))


@router.get(
    "/user-identities/{identity}",
    response_model=Success[IdentityView],
    summary="Найти пользователя по внешней учётной записи",
)
def get_identity(identity: str, db: Session = Depends(get_db_dep)) -> Success:
    return ok(user_service.get_identity(db, identity))


@router.post("/fake-login/{id}", response_model=Success[UserProfileView], summary="Войти как пользователь (dev)")
def fake_login(
    response: Response,
    user_id: str = Depends(path_id),
    db: Session = Depends(get_db_dep),
    settings: Settings = Depends(get_settings),
) -> Success:
    claims = auth_service.fake_login(db, user_id)
    set_session_cookie(response, settings, claims)
    return ok(UserProfileView(id=claims.user_id, name=claims.name))
