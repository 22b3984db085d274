"""
Обогащённые представления: payload плюс словари профилей упомянутых сущностей.

Ключи словарей ровно совпадают с множеством id, на которые ссылается payload
(владелец, исполнитель, адресат, авторы сообщений, участники групп).
"""

from typing import Any, Dict, Generic, List, TypeVar

from pydantic import BaseModel

from helpdesk.shared.schemas.group import GroupProfileView
from helpdesk.shared.schemas.user import UserProfileView

T = TypeVar("T")


def _collect(payload: Any, method: str) -> List[str]:
    if payload is None:
        return []
    if isinstance(payload, (list, tuple)):
        items: List[str] = []
        for item in payload:
            items.extend(_collect(item, method))
        return items
    getter = getattr(payload, method, None)
    return list(getter()) if getter is not None else []


def _unique(ids: List[str]) -> List[str]:
    # dict сохраняет порядок первого упоминания
    return list(dict.fromkeys(ids))


def collect_user_ids(payload: Any) -> List[str]:
    """Все id пользователей, на которые ссылается payload (без повторов, по порядку)."""
    return _unique(_collect(payload, "referenced_user_ids"))


def collect_group_ids(payload: Any) -> List[str]:
    return _unique(_collect(payload, "referenced_group_ids"))


class WithUsers(BaseModel, Generic[T]):
    users: Dict[str, UserProfileView]
    payload: T

    def missing_user_ids(self) -> List[str]:
        return [i for i in collect_user_ids(self.payload) if i not in self.users]


class WithGroups(BaseModel, Generic[T]):
    groups: Dict[str, GroupProfileView]
    payload: T

    def missing_group_ids(self) -> List[str]:
        return [i for i in collect_group_ids(self.payload) if i not in self.groups]


class WithGroupsAndUsers(BaseModel, Generic[T]):
    groups: Dict[str, GroupProfileView]
    users: Dict[str, UserProfileView]
    payload: T

    def missing_user_ids(self) -> List[str]:
        return [i for i in collect_user_ids(self.payload) if i not in self.users]

    def missing_group_ids(self) -> List[str]:
        return [i for i in collect_group_ids(self.payload) if i not in self.groups]
