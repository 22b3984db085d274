from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from helpdesk.backend.api.deps import get_db_dep, get_settings, ok
from helpdesk.backend.core.settings import Settings
from helpdesk.backend.services import auth_service
from helpdesk.backend.services.auth_service import SessionClaims
from helpdesk.shared.logging_config import logger
from helpdesk.shared.schemas import Success, TelegramLoginData, UserProfileView


router = APIRouter(prefix="/login", tags=["auth"])


def set_session_cookie(response: Response, settings: Settings, claims: SessionClaims) -> None:
    token = auth_service.create_session_token(settings, claims)
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.SESSION_TTL_HOURS * 3600,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.SESSION_COOKIE_SECURE,
    )


@router.post("/telegram", response_model=Success[UserProfileView], summary="Вход через Telegram Login Widget")
def login_telegram(
    data: TelegramLoginData,
    response: Response,
    db: Session = Depends(get_db_dep),
    settings: Settings = Depends(get_settings),
) -> Success:
    claims = auth_service.telegram_login(db, settings, data)
    set_session_cookie(response, settings, claims)
    logger.info("Вход через Telegram: пользователь %s", claims.user_id)
    return ok(UserProfileView(id=claims.user_id, name=claims.name))
