from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from helpdesk.backend.api.deps import get_db_dep, ok, path_id, require_user
from helpdesk.backend.services import group_service, user_service
from helpdesk.shared.schemas import GroupView, Success, UserProfileView, UserView, WithUsers


router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=Success[UserView], summary="Текущий пользователь")
def get_me(user_id: str = Depends(require_user), db: Session = Depends(get_db_dep)) -> Success:
    return ok(user_service.get_user_view(db, user_id))


@router.get("/{id}/profile", response_model=Success[UserProfileView], summary="Публичный профиль пользователя")
def get_user_profile(user_id: str = Depends(path_id), db: Session = Depends(get_db_dep)) -> Success:
    return ok(user_service.get_user_profile(db, user_id))


@router.get(
    "/{id}/groups",
    response_model=Success[WithUsers[List[GroupView]]],
    summary="Группы пользователя (с профилями участников)",
)
def get_user_groups(user_id: str = Depends(path_id), db: Session = Depends(get_db_dep)) -> Success:
    return ok(group_service.get_user_groups(db, user_id))
