"""
Загрузчики данных для страниц клиента.

Каждый загрузчик возвращает Loaded: либо данные, либо явный запасной вариант
(пустой список, None) вместе с текстом ошибки. Ошибки не проглатываются:
они логируются и передаются странице для отображения.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Dict, Generic, Iterable, List, Optional, TypeVar

from helpdesk.frontend.backend_client import BackendClient, BackendTransportError
from helpdesk.frontend.error_handlers import describe_error, describe_transport_error
from helpdesk.shared.config import LOADER_MAX_WORKERS
from helpdesk.shared.logging_config import logger
from helpdesk.shared.schemas import (
    Failure,
    GroupView,
    TicketListingViewExpandedItem,
    TicketView,
    UserProfileView,
    UserView,
    WithGroupsAndUsers,
    WithUsers,
)

T = TypeVar("T")


@dataclass(frozen=True)
class Loaded(Generic[T]):
    value: T
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class ProfileFanOut:
    """Результат параллельной загрузки профилей: удачные и неудачные отдельно."""

    profiles: Dict[str, UserProfileView] = field(default_factory=dict)
    errors: Dict[str, str] = field(default_factory=dict)


def _load(what: str, call: Callable[[], object], fallback: T) -> Loaded[T]:
    try:
        result = call()
    except BackendTransportError as e:
        logger.error("Не удалось загрузить %s: %s", what, e)
        return Loaded(value=fallback, error=describe_transport_error(e))
    if isinstance(result, Failure):
        message = describe_error(result.payload)
        logger.warning("Не удалось загрузить %s: %s", what, message)
        return Loaded(value=fallback, error=message)
    return Loaded(value=result.payload)


def _empty_listing() -> WithGroupsAndUsers[List[TicketListingViewExpandedItem]]:
    return WithGroupsAndUsers[List[TicketListingViewExpandedItem]](groups={}, users={}, payload=[])


def load_me(client: BackendClient) -> Loaded[Optional[UserView]]:
    return _load("текущего пользователя", client.get_me, None)


def load_ticket_page(client: BackendClient, ticket_id: str) -> Loaded[Optional[WithGroupsAndUsers[TicketView]]]:
    return _load(f"тикет {ticket_id}", lambda: client.get_ticket(ticket_id), None)


def load_owned_tickets(client: BackendClient) -> Loaded[WithGroupsAndUsers[List[TicketListingViewExpandedItem]]]:
    return _load("созданные тикеты", client.get_owned_tickets, _empty_listing())


def load_assigned_tickets(client: BackendClient) -> Loaded[WithGroupsAndUsers[List[TicketListingViewExpandedItem]]]:
    return _load("назначенные тикеты", client.get_assigned_tickets, _empty_listing())


def load_group_page(client: BackendClient, group_id: str) -> Loaded[Optional[WithUsers[GroupView]]]:
    return _load(f"группу {group_id}", lambda: client.get_group(group_id), None)


def load_group_tickets(
    client: BackendClient, group_id: str
) -> Loaded[WithGroupsAndUsers[List[TicketListingViewExpandedItem]]]:
    return _load(f"тикеты группы {group_id}", lambda: client.get_group_tickets(group_id), _empty_listing())


def fetch_profiles(
    client: BackendClient,
    user_ids: Iterable[str],
    max_workers: int = LOADER_MAX_WORKERS,
) -> ProfileFanOut:
    """Параллельно загрузить профили; сбой одного профиля не отменяет остальные."""
    ids = list(dict.fromkeys(user_ids))
    if not ids:
        return ProfileFanOut()

    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(ids)))) as pool:
        loaded = list(pool.map(lambda uid: _load(f"профиль {uid}", lambda: client.get_user_profile(uid), None), ids))

    result = ProfileFanOut()
    for uid, item in zip(ids, loaded):
        if item.ok:
            result.profiles[uid] = item.value
        else:
            result.errors[uid] = item.error
    return result
