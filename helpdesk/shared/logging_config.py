"""
Единая конфигурация логирования для helpdesk (backend и клиент).

Логи пишутся:
- в консоль (для docker-логов),
- в файл на диске (для просмотра с хоста), если HELPDESK_LOG_TO_FILE не равен "false".

Файл логов по умолчанию: data/logs/helpdesk.log

Параметры ротации настраиваются через переменные окружения:
- LOG_MAX_BYTES - максимальный размер файла в байтах (по умолчанию 10MB)
- LOG_BACKUP_COUNT - количество резервных файлов (по умолчанию 5)
"""

import logging
import os
from logging.handlers import RotatingFileHandler


LOG_DIR = os.getenv("HELPDESK_LOG_DIR", "data/logs")
LOG_FILE = os.path.join(LOG_DIR, "helpdesk.log")
LOG_TO_FILE = os.getenv("HELPDESK_LOG_TO_FILE", "true").lower() == "true"
LOG_LEVEL = os.getenv("HELPDESK_LOG_LEVEL", "INFO").upper()

# Параметры ротации из переменных окружения
LOG_MAX_BYTES = int(os.getenv("LOG_MAX_BYTES", "10485760"))  # 10 MB по умолчанию
LOG_BACKUP_COUNT = int(os.getenv("LOG_BACKUP_COUNT", "5"))  # 5 файлов по умолчанию


def setup_logging() -> logging.Logger:
    root_logger = logging.getLogger()
    root_logger.setLevel(LOG_LEVEL)

    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Повторный импорт (uvicorn reload) не должен дублировать хендлеры
    if not getattr(root_logger, "_helpdesk_configured", False):
        # Консольный хендлер (docker logs)
        console_handler = logging.StreamHandler()
        console_handler.setLevel(LOG_LEVEL)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

        if LOG_TO_FILE:
            os.makedirs(LOG_DIR, exist_ok=True)
            # Файловый хендлер (ротируемый с настраиваемыми параметрами)
            file_handler = RotatingFileHandler(
                LOG_FILE,
                maxBytes=LOG_MAX_BYTES,
                backupCount=LOG_BACKUP_COUNT,
                encoding="utf-8",
            )
            file_handler.setLevel(LOG_LEVEL)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)

        root_logger._helpdesk_configured = True  # type: ignore[attr-defined]

    # Отключить избыточное логирование от сторонних библиотек
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    logger = logging.getLogger("helpdesk")
    logger.info(
        "Логирование инициализировано. Файл логов: %s (включен=%s, maxBytes=%s, backupCount=%s)",
        LOG_FILE,
        LOG_TO_FILE,
        LOG_MAX_BYTES,
        LOG_BACKUP_COUNT,
    )
    return logger


# Глобальный логгер
logger = setup_logging()
