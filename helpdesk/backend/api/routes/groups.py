from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from helpdesk.backend.api.deps import get_db_dep, ok, path_id, require_user
from helpdesk.backend.services import group_service
from helpdesk.shared.schemas import (
    GroupCommand,
    GroupView,
    Success,
    TicketListingViewExpandedItem,
    WithGroupsAndUsers,
    WithUsers,
)


router = APIRouter(prefix="/groups", tags=["groups"])


@router.post("/{id}", response_model=Success[None], summary="Команда над группой (Create / AddMember / ...)")
def group_command(
    command: GroupCommand,
    group_id: str = Depends(path_id),
    performer: str = Depends(require_user),
    db: Session = Depends(get_db_dep),
) -> Success:
    group_service.handle_group_command(db, performer, group_id, command)
    return ok()


@router.get("/{id}", response_model=Success[WithUsers[GroupView]], summary="Группа с профилями участников")
def get_group(group_id: str = Depends(path_id), db: Session = Depends(get_db_dep)) -> Success:
    return ok(group_service.get_group(db, group_id))


@router.get(
    "/{id}/tickets",
    response_model=Success[WithGroupsAndUsers[List[TicketListingViewExpandedItem]]],
    summary="Тикеты, адресованные группе",
)
def get_group_tickets(group_id: str = Depends(path_id), db: Session = Depends(get_db_dep)) -> Success:
    return ok(group_service.get_group_tickets(db, group_id))
