from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from helpdesk.backend.api.deps import get_db_dep, get_settings, ok, path_id, require_user
from helpdesk.backend.core.settings import Settings
from helpdesk.backend.services import upload_service
from helpdesk.shared.schemas import InitiatedUpload, Success, UploadMetadata


router = APIRouter(prefix="/upload", tags=["upload"])


@router.post("/initiate", response_model=Success[InitiatedUpload], summary="Начать загрузку файла")
def initiate_upload(
    metadata: UploadMetadata,
    owner: str = Depends(require_user),
    db: Session = Depends(get_db_dep),
    settings: Settings = Depends(get_settings),
) -> Success:
    return ok(upload_service.initiate_upload(db, settings, owner, metadata))


@router.post("/{id}/content", response_model=Success[None], summary="Передать содержимое файла")
def upload_content(
    file: UploadFile = File(...),
    upload_id: str = Depends(path_id),
    performer: str = Depends(require_user),
    db: Session = Depends(get_db_dep),
    settings: Settings = Depends(get_settings),
) -> Success:
    # Синхронный обработчик: FastAPI выполняет его в пуле потоков
    upload_service.store_content(db, settings, performer, upload_id, file.file)
    return ok()


@router.post("/{id}/finalize", response_model=Success[None], summary="Завершить загрузку")
def finalize_upload(
    upload_id: str = Depends(path_id),
    performer: str = Depends(require_user),
    db: Session = Depends(get_db_dep),
) -> Success:
    upload_service.finalize_upload(db, performer, upload_id)
    return ok()


@router.get("/{id}/file", summary="Скачать загруженный файл")
def get_upload_file(upload_id: str = Depends(path_id), db: Session = Depends(get_db_dep)) -> FileResponse:
    path, filename, content_type = upload_service.get_upload_file(db, upload_id)
    return FileResponse(path, media_type=content_type, filename=filename)
