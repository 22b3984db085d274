"""
Загрузка файлов: инициация по политике, приём содержимого, финализация.

Состояния: NotInitiated -> Initiated -> Finalized; просроченная инициированная
загрузка становится Dropped. Файл хранится как UPLOAD_DIR/<owner>/<upload>/<filename>.
"""

import os
from datetime import timedelta
from typing import BinaryIO, Tuple

from sqlalchemy.orm import Session

from helpdesk.backend.core.database import Upload, as_utc, transaction, utcnow
from helpdesk.backend.core.errors import Forbidden, NotFound, UploadPolicyViolated, UploadStateError
from helpdesk.backend.core.settings import Settings
from helpdesk.backend.repositories.upload_repository import UploadRepository
from helpdesk.shared.logging_config import logger
from helpdesk.shared.schemas import InitiatedUpload, PolicyViolation, UploadMetadata, UploadPolicy, generate_id

INITIATED = "Initiated"
FINALIZED = "Finalized"
DROPPED = "Dropped"

CHUNK_SIZE = 1024 * 1024


def upload_policy(settings: Settings) -> UploadPolicy:
    return UploadPolicy(
        allowed_file_extensions=settings.UPLOAD_ALLOWED_EXTENSIONS,
        allowed_content_types=settings.UPLOAD_ALLOWED_CONTENT_TYPES,
        max_size=settings.UPLOAD_MAX_SIZE,
    )


def _not_initiated(upload_id: str) -> UploadStateError:
    return UploadStateError("NotInitiated", "The upload was not initiated", f"upload {upload_id}")


def _state_error(upload: Upload) -> UploadStateError:
    if upload.state == FINALIZED:
        return UploadStateError("AlreadyFinalized", "The upload is already finalized", f"upload {upload.id}")
    if upload.state == DROPPED:
        return UploadStateError("AlreadyDropped", "The upload was dropped", f"upload {upload.id}")
    return UploadStateError("AlreadyInitiated", "The upload is already initiated", f"upload {upload.id}")


def _load_initiated(db: Session, performer: str, upload_id: str) -> Upload:
    upload = UploadRepository(db).get(upload_id)
    if upload is None:
        raise _not_initiated(upload_id)
    if upload.owner != performer:
        raise Forbidden(f"upload {upload_id} belongs to another user")
    if upload.state != INITIATED:
        raise _state_error(upload)
    if as_utc(upload.expires_at) < utcnow():
        upload.state = DROPPED
        db.commit()
        logger.info("Загрузка %s просрочена и отброшена", upload_id)
        raise _state_error(upload)
    return upload


def initiate_upload(db: Session, settings: Settings, owner: str, metadata: UploadMetadata) -> InitiatedUpload:
    violations = upload_policy(settings).check(metadata)
    if violations:
        raise UploadPolicyViolated(", ".join(v.value for v in violations))

    upload_id = generate_id()
    expires_at = utcnow() + timedelta(seconds=settings.UPLOAD_EXPIRATION_SECONDS)
    with transaction(db):
        UploadRepository(db).add(
            Upload(
                id=upload_id,
                owner=owner,
                filename=metadata.filename,
                content_type=metadata.content_type,
                size=metadata.size,
                state=INITIATED,
                expires_at=expires_at,
            )
        )
    logger.info("Пользователь %s инициировал загрузку %s (%s)", owner, upload_id, metadata.filename)
    return InitiatedUpload(
        id=upload_id,
        url=f"{settings.API_PREFIX}/upload/{upload_id}/content",
        fields={},
        expiration=expires_at,
    )


def store_content(db: Session, settings: Settings, performer: str, upload_id: str, stream: BinaryIO) -> int:
    """Записать содержимое порциями; превышение объявленного размера прерывает запись."""
    upload = _load_initiated(db, performer, upload_id)
    limit = min(upload.size, settings.UPLOAD_MAX_SIZE)

    directory = os.path.join(settings.UPLOAD_DIR, upload.owner, upload.id)
    os.makedirs(directory, exist_ok=True)
    path = os.path.join(directory, upload.filename)
    total = 0
    with open(path, "wb") as f:
        while True:
            chunk = stream.read(CHUNK_SIZE)
            if not chunk:
                break
            total += len(chunk)
            if total > limit:
                break
            f.write(chunk)
    if total > limit:
        os.remove(path)
        logger.warning("Загрузка %s: содержимое больше %s байт, запись прервана", upload_id, limit)
        raise UploadPolicyViolated(PolicyViolation.FILE_TOO_LARGE.value)

    with transaction(db):
        upload.stored_path = path
    return total


def finalize_upload(db: Session, performer: str, upload_id: str) -> None:
    upload = _load_initiated(db, performer, upload_id)
    if not upload.stored_path or not os.path.exists(upload.stored_path):
        raise UploadStateError("ContentMissing", "The file content was not uploaded", f"upload {upload_id}")
    with transaction(db):
        upload.state = FINALIZED
    logger.info("Загрузка %s финализирована", upload_id)


def get_upload_file(db: Session, upload_id: str) -> Tuple[str, str, str]:
    """Путь, имя файла и content-type финализированной загрузки."""
    upload = UploadRepository(db).get(upload_id)
    if upload is None or upload.state != FINALIZED:
        raise NotFound(f"finalized upload {upload_id}")
    return upload.stored_path, upload.filename, upload.content_type
