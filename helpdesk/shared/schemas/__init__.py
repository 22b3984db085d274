"""Контракт API helpdesk: общий для backend и клиента."""

from .envelope import ApiCallFailed, ApiError, ApiResult, Failure, Success, result_adapter
from .group import (
    AddGroupMember,
    ChangeGroupTitle,
    CreateGroup,
    GroupCommand,
    GroupProfileView,
    GroupView,
    RemoveGroupMember,
)
from .ids import Id, InvalidIdError, generate_id, is_valid_id, parse_id
from .related import WithGroups, WithGroupsAndUsers, WithUsers, collect_group_ids, collect_user_ids
from .search import SearchResultItem, SearchResults
from .ticket import (
    AssigneeChangeContent,
    ChangeTicketAssignee,
    ChangeTicketStatus,
    CreateTicket,
    GroupDestination,
    MessageContent,
    SendTicketMessage,
    StatusChangeContent,
    TicketCommand,
    TicketListingViewExpandedItem,
    TicketStatus,
    TicketTimelineItem,
    TicketView,
    UserDestination,
)
from .upload import InitiatedUpload, PolicyViolation, UploadMetadata, UploadPolicy
from .user import (
    AddUserIdentity,
    CreateUser,
    IdentityView,
    TelegramLoginData,
    TelegramProfile,
    TelegramUserProfile,
    UniversityProfile,
    UniversityUserProfile,
    UserCommand,
    UserIdentities,
    UserProfileView,
    UserView,
)

# Версия контракта; сервер отдаёт её в заголовке X-Contract-Version
CONTRACT_VERSION = "1"
CONTRACT_VERSION_HEADER = "X-Contract-Version"

__all__ = [
    "CONTRACT_VERSION",
    "CONTRACT_VERSION_HEADER",
    "AddGroupMember",
    "AddUserIdentity",
    "ApiCallFailed",
    "ApiError",
    "ApiResult",
    "AssigneeChangeContent",
    "ChangeGroupTitle",
    "ChangeTicketAssignee",
    "ChangeTicketStatus",
    "CreateGroup",
    "CreateTicket",
    "CreateUser",
    "Failure",
    "GroupCommand",
    "GroupDestination",
    "GroupProfileView",
    "GroupView",
    "Id",
    "IdentityView",
    "InitiatedUpload",
    "InvalidIdError",
    "MessageContent",
    "PolicyViolation",
    "RemoveGroupMember",
    "SearchResultItem",
    "SearchResults",
    "SendTicketMessage",
    "StatusChangeContent",
    "Success",
    "TelegramLoginData",
    "TelegramProfile",
    "TelegramUserProfile",
    "TicketCommand",
    "TicketListingViewExpandedItem",
    "TicketStatus",
    "TicketTimelineItem",
    "TicketView",
    "UniversityProfile",
    "UniversityUserProfile",
    "UploadMetadata",
    "UploadPolicy",
    "UserCommand",
    "UserDestination",
    "UserIdentities",
    "UserProfileView",
    "UserView",
    "WithGroups",
    "WithGroupsAndUsers",
    "WithUsers",
    "collect_group_ids",
    "collect_user_ids",
    "generate_id",
    "is_valid_id",
    "parse_id",
    "result_adapter",
]
