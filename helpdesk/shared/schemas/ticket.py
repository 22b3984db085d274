"""
Контракт тикетов: адресат, статусы, команды, лента событий и представления.

Адресат тикета кодируется только в виде {"type": "User"|"Group", "id": ...}.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, RootModel

from helpdesk.shared.schemas.ids import GroupId, TicketId, UserId


class TicketStatus(str, Enum):
    PENDING = "Pending"
    IN_PROGRESS = "InProgress"
    RESOLVED = "Resolved"


class UserDestination(BaseModel):
    model_config = ConfigDict(extra="forbid")

    type: Literal["User"] = "User"
    id: UserId


class GroupDestination(BaseModel):
    model_config = ConfigDict(extra="forbid")

    type: Literal["Group"] = "Group"
    id: GroupId


TicketDestination = Annotated[
    Union[UserDestination, GroupDestination],
    Field(discriminator="type"),
]


# === Команды ===


class CreateTicket(BaseModel):
    type: Literal["Create"] = "Create"
    destination: TicketDestination
    title: str = Field(..., min_length=1)
    body: str = Field(..., min_length=1)


class SendTicketMessage(BaseModel):
    type: Literal["SendTicketMessage"] = "SendTicketMessage"
    body: str = Field(..., min_length=1)


class ChangeTicketStatus(BaseModel):
    type: Literal["ChangeStatus"] = "ChangeStatus"
    new_status: TicketStatus


class ChangeTicketAssignee(BaseModel):
    type: Literal["ChangeAssignee"] = "ChangeAssignee"
    new_assignee: Optional[UserId] = None


class TicketCommand(RootModel):
    root: Annotated[
        Union[CreateTicket, SendTicketMessage, ChangeTicketStatus, ChangeTicketAssignee],
        Field(discriminator="type"),
    ]


# === Лента событий ===


class MessageContent(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["Message"] = "Message"
    from_: UserId = Field(..., alias="from")
    text: str


class StatusChangeContent(BaseModel):
    type: Literal["StatusChange"] = "StatusChange"
    old: TicketStatus
    new: TicketStatus


class AssigneeChangeContent(BaseModel):
    type: Literal["AssigneeChange"] = "AssigneeChange"
    old: Optional[UserId] = None
    new: Optional[UserId] = None


TimelineContent = Annotated[
    Union[MessageContent, StatusChangeContent, AssigneeChangeContent],
    Field(discriminator="type"),
]


class TicketTimelineItem(BaseModel):
    date: datetime
    content: TimelineContent


# === Представления ===


def _destination_users(destination: Union[UserDestination, GroupDestination]) -> List[str]:
    return [destination.id] if isinstance(destination, UserDestination) else []


def _destination_groups(destination: Union[UserDestination, GroupDestination]) -> List[str]:
    return [destination.id] if isinstance(destination, GroupDestination) else []


class TicketView(BaseModel):
    id: TicketId
    destination: TicketDestination
    owner: UserId
    assignee: Optional[UserId] = None
    title: str
    status: TicketStatus
    timeline: List[TicketTimelineItem]

    def referenced_user_ids(self) -> List[str]:
        ids = [self.owner, *_destination_users(self.destination)]
        if self.assignee is not None:
            ids.append(self.assignee)
        for item in self.timeline:
            content = item.content
            if isinstance(content, MessageContent):
                ids.append(content.from_)
            elif isinstance(content, AssigneeChangeContent):
                ids.extend(u for u in (content.old, content.new) if u is not None)
        return ids

    def referenced_group_ids(self) -> List[str]:
        return _destination_groups(self.destination)


class TicketListingViewExpandedItem(BaseModel):
    id: TicketId
    destination: TicketDestination
    owner: UserId
    assignee: Optional[UserId] = None
    title: str
    status: TicketStatus
    latest_update: datetime

    def referenced_user_ids(self) -> List[str]:
        ids = [self.owner, *_destination_users(self.destination)]
        if self.assignee is not None:
            ids.append(self.assignee)
        return ids

    def referenced_group_ids(self) -> List[str]:
        return _destination_groups(self.destination)
