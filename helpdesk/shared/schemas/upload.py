"""Контракт загрузки файлов: метаданные, политика и результат инициации."""

import os
from datetime import datetime
from enum import Enum
from typing import Dict, List

from pydantic import BaseModel, Field

from helpdesk.shared.schemas.ids import UploadId

FORBIDDEN_FILENAME_CHARS = set('/\\?%*:|"<>')


class UploadMetadata(BaseModel):
    filename: str
    content_type: str
    size: int = Field(..., ge=0)

    @property
    def extension(self) -> str:
        return os.path.splitext(self.filename)[1].lstrip(".").lower()


class PolicyViolation(str, Enum):
    INVALID_FILENAME = "InvalidFilename"
    FILE_EXTENSION_NOT_ALLOWED = "FileExtensionNotAllowed"
    CONTENT_TYPE_NOT_ALLOWED = "ContentTypeNotAllowed"
    FILE_TOO_LARGE = "FileTooLarge"


class UploadPolicy(BaseModel):
    allowed_file_extensions: List[str]
    allowed_content_types: List[str]
    max_size: int

    def check(self, metadata: UploadMetadata) -> List[PolicyViolation]:
        """Вернуть список нарушений политики (пустой, если файл допустим)."""
        violations: List[PolicyViolation] = []
        name = metadata.filename
        if not name or FORBIDDEN_FILENAME_CHARS.intersection(name) or not metadata.extension:
            violations.append(PolicyViolation.INVALID_FILENAME)
        elif metadata.extension not in {e.lower() for e in self.allowed_file_extensions}:
            violations.append(PolicyViolation.FILE_EXTENSION_NOT_ALLOWED)
        if metadata.content_type not in self.allowed_content_types:
            violations.append(PolicyViolation.CONTENT_TYPE_NOT_ALLOWED)
        if metadata.size > self.max_size:
            violations.append(PolicyViolation.FILE_TOO_LARGE)
        return violations


class InitiatedUpload(BaseModel):
    id: UploadId
    url: str
    fields: Dict[str, str] = {}
    expiration: datetime
