"""
Конфигурация клиентской стороны (frontend / скрипты) из переменных окружения.

Настройки backend-сервиса живут отдельно: helpdesk.backend.core.settings.
"""
import os
from dotenv import load_dotenv

# load_dotenv() не выдает ошибку, если файл не найден
load_dotenv()

# Адрес backend-сервиса и общий префикс API
BACKEND_BASE_URL = os.getenv("BACKEND_BASE_URL", "http://localhost:8000")
BACKEND_API_PREFIX = os.getenv("BACKEND_API_PREFIX", "/api")

# Таймаут HTTP-запросов к backend (секунды)
BACKEND_TIMEOUT = float(os.getenv("BACKEND_TIMEOUT", "20"))

# Сколько запросов профилей выполнять параллельно при обогащении страниц
LOADER_MAX_WORKERS = int(os.getenv("LOADER_MAX_WORKERS", "8"))
