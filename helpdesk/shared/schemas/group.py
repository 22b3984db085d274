"""Контракт групп: команды и представления."""

from typing import Annotated, List, Literal, Union

from pydantic import BaseModel, Field, RootModel

from helpdesk.shared.schemas.ids import GroupId, UserId


class CreateGroup(BaseModel):
    type: Literal["Create"] = "Create"
    title: str = Field(..., min_length=1)


class AddGroupMember(BaseModel):
    type: Literal["AddMember"] = "AddMember"
    new_member: UserId


class RemoveGroupMember(BaseModel):
    type: Literal["RemoveMember"] = "RemoveMember"
    removed_member: UserId


class ChangeGroupTitle(BaseModel):
    type: Literal["ChangeTitle"] = "ChangeTitle"
    new_title: str = Field(..., min_length=1)


class GroupCommand(RootModel):
    root: Annotated[
        Union[CreateGroup, AddGroupMember, RemoveGroupMember, ChangeGroupTitle],
        Field(discriminator="type"),
    ]


class GroupProfileView(BaseModel):
    id: GroupId
    title: str


class GroupView(BaseModel):
    id: GroupId
    title: str
    # Порядок вступления: создатель первый
    members: List[UserId]

    def profile(self) -> GroupProfileView:
        return GroupProfileView(id=self.id, title=self.title)

    def referenced_user_ids(self) -> List[str]:
        return list(self.members)

    def referenced_group_ids(self) -> List[str]:
        return [self.id]
