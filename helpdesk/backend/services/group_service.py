"""
Команды и представления групп.

Любое изменение группы разрешено только её участникам. Повторное добавление
участника, удаление не-участника и установка того же названия ничего не меняют.
"""

from typing import List

from sqlalchemy.orm import Session

from helpdesk.backend.core.database import transaction
from helpdesk.backend.core.errors import AlreadyExists, CommandRelatedItemNotFound, Forbidden, NotFound
from helpdesk.backend.repositories.group_repository import GroupRepository
from helpdesk.backend.repositories.ticket_repository import TicketRepository
from helpdesk.backend.repositories.user_repository import UserRepository
from helpdesk.backend.services.related_service import with_groups_and_users, with_users
from helpdesk.shared.logging_config import logger
from helpdesk.shared.schemas import (
    AddGroupMember,
    ChangeGroupTitle,
    CreateGroup,
    GroupCommand,
    GroupView,
    RemoveGroupMember,
    TicketListingViewExpandedItem,
    WithGroupsAndUsers,
    WithUsers,
)


def handle_group_command(db: Session, performer: str, group_id: str, command: GroupCommand) -> None:
    groups = GroupRepository(db)
    inner = command.root
    with transaction(db):
        if isinstance(inner, CreateGroup):
            if groups.exists(group_id):
                raise AlreadyExists(f"group {group_id}")
            groups.add(group_id, inner.title)
            groups.add_member(group_id, performer)
            logger.info("Пользователь %s создал группу %s (%s)", performer, group_id, inner.title)
            return

        group = groups.get(group_id)
        if group is None:
            raise NotFound(f"group {group_id}")
        if not groups.is_member(group_id, performer):
            raise Forbidden(f"user {performer} is not a member of group {group_id}")

        if isinstance(inner, AddGroupMember):
            if not UserRepository(db).exists(inner.new_member):
                raise CommandRelatedItemNotFound(f"user {inner.new_member}")
            if not groups.is_member(group_id, inner.new_member):
                groups.add_member(group_id, inner.new_member)
                logger.info("В группу %s добавлен %s", group_id, inner.new_member)
        elif isinstance(inner, RemoveGroupMember):
            if groups.is_member(group_id, inner.removed_member):
                groups.remove_member(group_id, inner.removed_member)
                logger.info("Из группы %s удалён %s", group_id, inner.removed_member)
        elif isinstance(inner, ChangeGroupTitle):
            if group.title != inner.new_title:
                group.title = inner.new_title


def get_group(db: Session, group_id: str) -> WithUsers:
    groups = GroupRepository(db)
    group = groups.get(group_id)
    if group is None:
        raise NotFound(f"group {group_id}")
    return with_users(db, groups.to_view(group))


def get_user_groups(db: Session, user_id: str) -> WithUsers:
    if not UserRepository(db).exists(user_id):
        raise NotFound(f"user {user_id}")
    groups = GroupRepository(db)
    views: List[GroupView] = [groups.to_view(g) for g in groups.groups_of_user(user_id)]
    return with_users(db, views)


def get_group_tickets(db: Session, group_id: str) -> WithGroupsAndUsers:
    if not GroupRepository(db).exists(group_id):
        raise NotFound(f"group {group_id}")
    tickets = TicketRepository(db)
    items: List[TicketListingViewExpandedItem] = [
        tickets.to_listing_item(t) for t in tickets.sent_to_group(group_id)
    ]
    return with_groups_and_users(db, items)
