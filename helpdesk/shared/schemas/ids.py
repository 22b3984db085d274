"""
Идентификаторы сущностей: случайные 128 бит (UUIDv4) в алфавите Base58 (Bitcoin).

Один и тот же формат используется для пользователей, групп, тикетов и загрузок.
Клиент может сам сгенерировать id и использовать его в команде Create.
"""

import uuid
from typing import Annotated

import base58
from pydantic import AfterValidator

ID_BYTES = 16
ID_LENGTH = 22


class InvalidIdError(ValueError):
    """Строка не является корректным идентификатором."""


def generate_id() -> str:
    # Значения с ведущими нулями кодируются короче 22 символов, их перебрасываем
    while True:
        encoded = base58.b58encode(uuid.uuid4().bytes).decode("ascii")
        if len(encoded) == ID_LENGTH:
            return encoded


def parse_id(value: str) -> str:
    """Проверить строку-идентификатор и вернуть её без изменений."""
    if not isinstance(value, str) or not value or value != value.strip():
        raise InvalidIdError("id must be a non-empty string without surrounding whitespace")
    try:
        raw = base58.b58decode(value)
    except ValueError as e:
        raise InvalidIdError(f"id contains characters outside of the Base58 alphabet: {value!r}") from e
    if len(raw) != ID_BYTES:
        raise InvalidIdError(f"id must decode to {ID_BYTES} bytes, got {len(raw)}")
    return value


def is_valid_id(value: str) -> bool:
    try:
        parse_id(value)
    except InvalidIdError:
        return False
    return True


# Типы для pydantic-моделей и path-параметров FastAPI
Id = Annotated[str, AfterValidator(parse_id)]
UserId = Id
GroupId = Id
TicketId = Id
UploadId = Id
