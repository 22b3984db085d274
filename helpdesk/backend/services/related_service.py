"""
Обогащение представлений профилями упомянутых пользователей и групп.

Каждый словарь загружается одним запросом. Ссылка на несуществующую
сущность означает рассогласование данных на сервере.
"""

from typing import Any, Dict

from sqlalchemy.orm import Session

from helpdesk.backend.core.errors import ViewRelatedItemNotFound
from helpdesk.backend.repositories.group_repository import GroupRepository
from helpdesk.backend.repositories.user_repository import UserRepository
from helpdesk.shared.logging_config import logger
from helpdesk.shared.schemas import (
    GroupProfileView,
    UserProfileView,
    WithGroupsAndUsers,
    WithUsers,
    collect_group_ids,
    collect_user_ids,
)


def load_user_profiles(db: Session, payload: Any) -> Dict[str, UserProfileView]:
    ids = collect_user_ids(payload)
    users = UserRepository(db).profiles(ids)
    missing = [i for i in ids if i not in users]
    if missing:
        logger.error("Представление ссылается на несуществующих пользователей: %s", missing)
        raise ViewRelatedItemNotFound(f"users {', '.join(missing)}")
    return users


def load_group_profiles(db: Session, payload: Any) -> Dict[str, GroupProfileView]:
    ids = collect_group_ids(payload)
    groups = GroupRepository(db).profiles(ids)
    missing = [i for i in ids if i not in groups]
    if missing:
        logger.error("Представление ссылается на несуществующие группы: %s", missing)
        raise ViewRelatedItemNotFound(f"groups {', '.join(missing)}")
    return groups


def with_users(db: Session, payload: Any) -> WithUsers:
    return WithUsers(users=load_user_profiles(db, payload), payload=payload)


def with_groups_and_users(db: Session, payload: Any) -> WithGroupsAndUsers:
    return WithGroupsAndUsers(
        groups=load_group_profiles(db, payload),
        users=load_user_profiles(db, payload),
        payload=payload,
    )
