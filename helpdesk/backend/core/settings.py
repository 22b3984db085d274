from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Глобальные настройки backend-сервиса helpdesk.

    Все чувствительные значения берутся из переменных окружения / .env.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        # Чужие переменные окружения игнорируем, чтобы не было ValidationError при старте
        extra="ignore",
    )

    # Общие
    APP_NAME: str = "Helpdesk Backend"
    API_PREFIX: str = "/api"

    # БД
    DATABASE_URL: str = "sqlite:///./helpdesk.db"

    # Внутренние маршруты (создание пользователей, fake-login) только для dev/тестов
    EXPOSE_INTERNAL_ROUTES: bool = False

    # Вход через Telegram Login Widget; без токена вход недоступен
    TELEGRAM_BOT_TOKEN: Optional[str] = None
    TELEGRAM_LOGIN_MAX_AGE: int = 60

    # Сессии (JWT в cookie)
    SESSION_SECRET: str = "change-me"
    SESSION_COOKIE_NAME: str = "helpdesk_session"
    SESSION_TTL_HOURS: int = 3
    SESSION_COOKIE_SECURE: bool = False

    # Загрузка файлов
    UPLOAD_DIR: str = "data/uploads"
    UPLOAD_MAX_SIZE: int = 10 * 1024 * 1024
    UPLOAD_ALLOWED_EXTENSIONS: List[str] = ["png", "jpg", "jpeg", "gif", "pdf", "txt"]
    UPLOAD_ALLOWED_CONTENT_TYPES: List[str] = [
        "image/png",
        "image/jpeg",
        "image/gif",
        "application/pdf",
        "text/plain",
    ]
    UPLOAD_EXPIRATION_SECONDS: int = 1800

    # Поиск
    SEARCH_LIMIT: int = 20


settings = Settings()
