from fastapi import APIRouter, Depends

from helpdesk.backend.api.deps import get_settings
from helpdesk.backend.core.settings import Settings
from helpdesk.shared.schemas import CONTRACT_VERSION


router = APIRouter(tags=["health"])


@router.get("/health", summary="Проверка состояния сервиса")
def health_check(settings: Settings = Depends(get_settings)) -> dict:
    return {
        "status": "ok",
        "app": settings.APP_NAME,
        "contract_version": CONTRACT_VERSION,
    }
