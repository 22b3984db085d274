"""
Типизированный клиент helpdesk API поверх httpx.

Каждый метод возвращает конверт: Success[T] или Failure (структурированная
ошибка сервера с trace_id). Сетевые сбои и ответы, не являющиеся конвертом,
поднимаются как BackendTransportError: их нельзя спутать с ошибкой API.

Сессия (cookie) хранится в httpx.Client конкретного экземпляра, поэтому
два клиента с разными пользователями не мешают друг другу.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

import httpx
from pydantic import ValidationError

from helpdesk.shared.config import BACKEND_API_PREFIX, BACKEND_BASE_URL, BACKEND_TIMEOUT
from helpdesk.shared.logging_config import logger
from helpdesk.shared.schemas import (
    CONTRACT_VERSION,
    CONTRACT_VERSION_HEADER,
    AddGroupMember,
    ApiResult,
    AddUserIdentity,
    ChangeGroupTitle,
    ChangeTicketAssignee,
    ChangeTicketStatus,
    CreateGroup,
    CreateTicket,
    CreateUser,
    Failure,
    GroupDestination,
    GroupView,
    IdentityView,
    InitiatedUpload,
    RemoveGroupMember,
    SearchResults,
    SendTicketMessage,
    Success,
    TelegramLoginData,
    TelegramUserProfile,
    TicketListingViewExpandedItem,
    TicketStatus,
    TicketView,
    UniversityUserProfile,
    UploadMetadata,
    UserDestination,
    UserProfileView,
    UserView,
    WithGroupsAndUsers,
    WithUsers,
    result_adapter,
)

ExternalProfile = Union[TelegramUserProfile, UniversityUserProfile]
Destination = Union[UserDestination, GroupDestination]


class BackendTransportError(Exception):
    """Backend недоступен или вернул ответ, не являющийся конвертом API."""


class BackendClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        api_prefix: Optional[str] = None,
        timeout: Optional[float] = None,
        http: Optional[httpx.Client] = None,
    ) -> None:
        self.base_url = (base_url or BACKEND_BASE_URL).rstrip("/")
        self.api_prefix = BACKEND_API_PREFIX if api_prefix is None else api_prefix
        self.timeout = timeout or BACKEND_TIMEOUT
        # Собственный cookie jar на экземпляр клиента
        self.http = http or httpx.Client(timeout=self.timeout)
        self._version_warned = False

    def close(self) -> None:
        self.http.close()

    def __enter__(self) -> "BackendClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _url(self, path: str) -> str:
        return f"{self.base_url}{self.api_prefix}{path}"

    def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        url = self._url(path)
        try:
            resp = self.http.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error("Backend недоступен: %s %s: %s", method, url, e)
            raise BackendTransportError(f"{method} {url}: {e}") from e

        version = resp.headers.get(CONTRACT_VERSION_HEADER)
        if version and version != CONTRACT_VERSION and not self._version_warned:
            logger.warning("Версия контракта backend %s, клиент ожидает %s", version, CONTRACT_VERSION)
            self._version_warned = True
        return resp

    def _call(self, method: str, path: str, payload_type: Any, **kwargs: Any) -> Union[Success, Failure]:
        resp = self._send(method, path, **kwargs)
        return self._parse(method, path, resp, payload_type)

    def _parse(self, method: str, path: str, resp: httpx.Response, payload_type: Any) -> Union[Success, Failure]:
        try:
            body = resp.json()
        except ValueError as e:
            raise BackendTransportError(
                f"{method} {path}: response is not JSON (HTTP {resp.status_code})"
            ) from e
        try:
            result = result_adapter(payload_type).validate_python(body)
        except ValidationError as e:
            raise BackendTransportError(
                f"{method} {path}: response is not an API envelope (HTTP {resp.status_code})"
            ) from e

        if isinstance(result, Failure):
            err = result.payload
            logger.warning(
                "API %s %s -> %s: %s (trace_id=%s, span_id=%s)",
                method,
                path,
                err.underlying_error,
                err.report,
                err.trace_id,
                err.span_id,
            )
        return result

    # === Вход / пользователи ===

    def internal_create_user(self, user_id: str, profile: ExternalProfile) -> ApiResult[None]:
        command = CreateUser(profile=profile)
        return self._call("POST", f"/users/{user_id}", None, json=command.model_dump(mode="json"))

    def internal_add_identity(self, user_id: str, profile: ExternalProfile) -> ApiResult[None]:
        command = AddUserIdentity(profile=profile)
        return self._call("POST", f"/users/{user_id}", None, json=command.model_dump(mode="json"))

    def internal_get_user(self, user_id: str) -> ApiResult[UserView]:
        return self._call("GET", f"/users/{user_id}", UserView)

    def internal_get_identity(self, identity: str) -> ApiResult[IdentityView]:
        return self._call("GET", f"/user-identities/{identity}", IdentityView)

    def internal_fake_login(self, user_id: str) -> ApiResult[UserProfileView]:
        return self._call("POST", f"/fake-login/{user_id}", UserProfileView)

    def telegram_login(self, data: TelegramLoginData) -> ApiResult[UserProfileView]:
        return self._call("POST", "/login/telegram", UserProfileView, json=data.model_dump(mode="json"))

    def get_me(self) -> ApiResult[UserView]:
        return self._call("GET", "/users/me", UserView)

    def get_user_profile(self, user_id: str) -> ApiResult[UserProfileView]:
        return self._call("GET", f"/users/{user_id}/profile", UserProfileView)

    def get_user_groups(self, user_id: str) -> ApiResult[WithUsers[List[GroupView]]]:
        return self._call("GET", f"/users/{user_id}/groups", WithUsers[List[GroupView]])

    # === Группы ===

    def _group_command(self, group_id: str, command: Any) -> ApiResult[None]:
        return self._call("POST", f"/groups/{group_id}", None, json=command.model_dump(mode="json"))

    def create_group(self, group_id: str, title: str) -> ApiResult[None]:
        return self._group_command(group_id, CreateGroup(title=title))

    def add_group_member(self, group_id: str, new_member: str) -> ApiResult[None]:
        return self._group_command(group_id, AddGroupMember(new_member=new_member))

    def remove_group_member(self, group_id: str, removed_member: str) -> ApiResult[None]:
        return self._group_command(group_id, RemoveGroupMember(removed_member=removed_member))

    def change_group_title(self, group_id: str, new_title: str) -> ApiResult[None]:
        return self._group_command(group_id, ChangeGroupTitle(new_title=new_title))

    def get_group(self, group_id: str) -> ApiResult[WithUsers[GroupView]]:
        return self._call("GET", f"/groups/{group_id}", WithUsers[GroupView])

    def get_group_tickets(
        self, group_id: str
    ) -> ApiResult[WithGroupsAndUsers[List[TicketListingViewExpandedItem]]]:
        return self._call(
            "GET", f"/groups/{group_id}/tickets", WithGroupsAndUsers[List[TicketListingViewExpandedItem]]
        )

    # === Тикеты ===

    def _ticket_command(self, ticket_id: str, command: Any) -> ApiResult[None]:
        return self._call(
            "POST", f"/tickets/{ticket_id}", None, json=command.model_dump(mode="json", by_alias=True)
        )

    def create_ticket(
        self, ticket_id: str, destination: Destination, title: str, body: str
    ) -> ApiResult[None]:
        return self._ticket_command(ticket_id, CreateTicket(destination=destination, title=title, body=body))

    def send_ticket_message(self, ticket_id: str, body: str) -> ApiResult[None]:
        return self._ticket_command(ticket_id, SendTicketMessage(body=body))

    def change_ticket_status(self, ticket_id: str, new_status: TicketStatus) -> ApiResult[None]:
        return self._ticket_command(ticket_id, ChangeTicketStatus(new_status=new_status))

    def change_ticket_assignee(
        self, ticket_id: str, new_assignee: Optional[str]
    ) -> ApiResult[None]:
        return self._ticket_command(ticket_id, ChangeTicketAssignee(new_assignee=new_assignee))

    def get_ticket(self, ticket_id: str) -> ApiResult[WithGroupsAndUsers[TicketView]]:
        return self._call("GET", f"/tickets/{ticket_id}", WithGroupsAndUsers[TicketView])

    def get_owned_tickets(self) -> ApiResult[WithGroupsAndUsers[List[TicketListingViewExpandedItem]]]:
        return self._call("GET", "/tickets/owned", WithGroupsAndUsers[List[TicketListingViewExpandedItem]])

    def get_assigned_tickets(
        self,
    ) -> ApiResult[WithGroupsAndUsers[List[TicketListingViewExpandedItem]]]:
        return self._call("GET", "/tickets/assigned", WithGroupsAndUsers[List[TicketListingViewExpandedItem]])

    # === Поиск ===

    def search_users(self, query: str) -> ApiResult[SearchResults[UserView]]:
        return self._call("GET", "/search/users", SearchResults[UserView], params={"q": query})

    def search_groups(self, query: str) -> ApiResult[SearchResults[GroupView]]:
        return self._call("GET", "/search/groups", SearchResults[GroupView], params={"q": query})

    def search_tickets(self, query: str) -> ApiResult[SearchResults[TicketView]]:
        return self._call("GET", "/search/tickets", SearchResults[TicketView], params={"q": query})

    # === Загрузка файлов ===

    def initiate_upload(self, metadata: UploadMetadata) -> ApiResult[InitiatedUpload]:
        return self._call("POST", "/upload/initiate", InitiatedUpload, json=metadata.model_dump(mode="json"))

    def send_upload_content(
        self, upload: InitiatedUpload, filename: str, content: bytes, content_type: str
    ) -> ApiResult[None]:
        files: Dict[str, Any] = {"file": (filename, content, content_type)}
        url = self._url(upload.url[len(self.api_prefix):]) if upload.url.startswith(self.api_prefix) else upload.url
        try:
            resp = self.http.post(url, data=upload.fields, files=files)
        except httpx.HTTPError as e:
            logger.error("Не удалось передать файл %s: %s", upload.id, e)
            raise BackendTransportError(f"POST {url}: {e}") from e
        return self._parse("POST", url, resp, None)

    def finalize_upload(self, upload_id: str) -> ApiResult[None]:
        return self._call("POST", f"/upload/{upload_id}/finalize", None)

    def download_upload(self, upload_id: str) -> ApiResult[bytes]:
        """Содержимое финализированного файла (ответ не является конвертом при успехе)."""
        path = f"/upload/{upload_id}/file"
        resp = self._send("GET", path)
        if resp.status_code == 200:
            return Success[bytes](payload=resp.content)
        return self._parse("GET", path, resp, bytes)
