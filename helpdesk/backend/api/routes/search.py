from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from helpdesk.backend.api.deps import get_db_dep, get_settings, ok
from helpdesk.backend.core.settings import Settings
from helpdesk.backend.services import search_service
from helpdesk.shared.schemas import GroupView, SearchResults, Success, TicketView, UserView


router = APIRouter(prefix="/search", tags=["search"])


@router.get("/users", response_model=Success[SearchResults[UserView]], summary="Поиск пользователей")
def search_users(
    q: str = Query(..., min_length=1),
    db: Session = Depends(get_db_dep),
    settings: Settings = Depends(get_settings),
) -> Success:
    return ok(search_service.search_users(db, q, settings.SEARCH_LIMIT))


@router.get("/groups", response_model=Success[SearchResults[GroupView]], summary="Поиск групп")
def search_groups(
    q: str = Query(..., min_length=1),
    db: Session = Depends(get_db_dep),
    settings: Settings = Depends(get_settings),
) -> Success:
    return ok(search_service.search_groups(db, q, settings.SEARCH_LIMIT))


@router.get("/tickets", response_model=Success[SearchResults[TicketView]], summary="Поиск тикетов")
def search_tickets(
    q: str = Query(..., min_length=1),
    db: Session = Depends(get_db_dep),
    settings: Settings = Depends(get_settings),
) -> Success:
    return ok(search_service.search_tickets(db, q, settings.SEARCH_LIMIT))
