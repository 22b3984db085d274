from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from helpdesk.backend.api.deps import get_db_dep, ok, path_id, require_user
from helpdesk.backend.services import ticket_service
from helpdesk.shared.schemas import (
    Success,
    TicketCommand,
    TicketListingViewExpandedItem,
    TicketView,
    WithGroupsAndUsers,
)


router = APIRouter(prefix="/tickets", tags=["tickets"])

Listing = Success[WithGroupsAndUsers[List[TicketListingViewExpandedItem]]]


# Статические пути объявлены раньше /{id}
@router.get("/owned", response_model=Listing, summary="Тикеты, созданные текущим пользователем")
def get_owned_tickets(user_id: str = Depends(require_user), db: Session = Depends(get_db_dep)) -> Success:
    return ok(ticket_service.get_owned_tickets(db, user_id))


@router.get("/assigned", response_model=Listing, summary="Тикеты, назначенные текущему пользователю")
def get_assigned_tickets(user_id: str = Depends(require_user), db: Session = Depends(get_db_dep)) -> Success:
    return ok(ticket_service.get_assigned_tickets(db, user_id))


@router.post("/{id}", response_model=Success[None], summary="Команда над тикетом (Create / SendTicketMessage / ...)")
def ticket_command(
    command: TicketCommand,
    ticket_id: str = Depends(path_id),
    performer: str = Depends(require_user),
    db: Session = Depends(get_db_dep),
) -> Success:
    ticket_service.handle_ticket_command(db, performer, ticket_id, command)
    return ok()


@router.get("/{id}", response_model=Success[WithGroupsAndUsers[TicketView]], summary="Тикет с лентой событий")
def get_ticket(ticket_id: str = Depends(path_id), db: Session = Depends(get_db_dep)) -> Success:
    return ok(ticket_service.get_ticket(db, ticket_id))
