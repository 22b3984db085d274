"""
Сессии (JWT в cookie) и проверка данных Telegram Login Widget.

Проверка подписи Telegram:
  secret = sha256(bot_token)
  hash   = hex(hmac_sha256(secret, "\\n".join(sorted("key=value" для непустых полей, кроме hash))))
"""

import hashlib
import hmac
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from sqlalchemy.orm import Session

from helpdesk.backend.core.database import transaction
from helpdesk.backend.core.errors import InvalidAuthData, InvalidToken, LoginOptionNotAvailable, NotFound
from helpdesk.backend.core.settings import Settings
from helpdesk.backend.repositories.user_repository import UserRepository
from helpdesk.backend.services.user_service import create_user
from helpdesk.shared.logging_config import logger
from helpdesk.shared.schemas import CreateUser, TelegramLoginData, generate_id

ALGORITHM = "HS256"


@dataclass(frozen=True)
class SessionClaims:
    user_id: str
    name: str


def create_session_token(settings: Settings, claims: SessionClaims, now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    expire = now + timedelta(hours=settings.SESSION_TTL_HOURS)
    payload = {"sub": claims.user_id, "name": claims.name, "exp": int(expire.timestamp())}
    return jwt.encode(payload, settings.SESSION_SECRET, algorithm=ALGORITHM)


def decode_session_token(settings: Settings, token: str) -> SessionClaims:
    try:
        payload = jwt.decode(token, settings.SESSION_SECRET, algorithms=[ALGORITHM])
    except JWTError as e:
        raise InvalidToken(str(e)) from e
    user_id = payload.get("sub")
    if not user_id:
        raise InvalidToken("token has no subject")
    return SessionClaims(user_id=user_id, name=payload.get("name", ""))


# === Telegram Login ===


def telegram_check_string(data: TelegramLoginData) -> str:
    fields = data.model_dump(exclude={"hash"}, exclude_none=True)
    return "\n".join(f"{key}={fields[key]}" for key in sorted(fields))


def telegram_hash(bot_token: str, check_string: str) -> str:
    secret = hashlib.sha256(bot_token.encode("utf-8")).digest()
    return hmac.new(secret, check_string.encode("utf-8"), hashlib.sha256).hexdigest()


def verify_telegram_login(
    data: TelegramLoginData,
    bot_token: str,
    max_age: int,
    now: Optional[float] = None,
) -> None:
    """Бросает InvalidAuthData, если подпись не сходится или данные устарели."""
    expected = telegram_hash(bot_token, telegram_check_string(data))
    if not hmac.compare_digest(expected, data.hash.lower()):
        raise InvalidAuthData("signature mismatch")
    now = time.time() if now is None else now
    if now - data.auth_date > max_age:
        raise InvalidAuthData(f"auth_date is older than {max_age} seconds")


def telegram_login(db: Session, settings: Settings, data: TelegramLoginData) -> SessionClaims:
    if not settings.TELEGRAM_BOT_TOKEN:
        raise LoginOptionNotAvailable("telegram login is not configured")
    verify_telegram_login(data, settings.TELEGRAM_BOT_TOKEN, settings.TELEGRAM_LOGIN_MAX_AGE)

    profile = data.profile()
    users = UserRepository(db)
    with transaction(db):
        user_id = users.find_by_identity(profile.identity_key)
        if user_id is None:
            user_id = generate_id()
            create_user(db, user_id, CreateUser(profile=profile))
            logger.info("Новый пользователь через Telegram: %s", profile.identity_key)
    user = users.get(user_id)
    return SessionClaims(user_id=user.id, name=user.name)


def fake_login(db: Session, user_id: str) -> SessionClaims:
    user = UserRepository(db).get(user_id)
    if user is None:
        raise NotFound(f"user {user_id}")
    logger.warning("Fake-login как пользователь %s", user_id)
    return SessionClaims(user_id=user.id, name=user.name)
