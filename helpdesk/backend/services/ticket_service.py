"""
Жизненный цикл тикета.

Create создаёт тикет со статусом Pending и первым сообщением в ленте.
Если адресат пользователь, он сразу становится исполнителем (без записи в ленте).
Статус и исполнителя может менять владелец, текущий исполнитель,
пользователь-адресат или участник группы-адресата.
"""

from typing import List

from sqlalchemy.orm import Session

from helpdesk.backend.core.database import Ticket, transaction, utcnow
from helpdesk.backend.core.errors import AlreadyExists, CommandRelatedItemNotFound, Forbidden, NotFound
from helpdesk.backend.repositories.group_repository import GroupRepository
from helpdesk.backend.repositories.ticket_repository import TicketRepository
from helpdesk.backend.repositories.user_repository import UserRepository
from helpdesk.backend.services.related_service import with_groups_and_users
from helpdesk.shared.logging_config import logger
from helpdesk.shared.schemas import (
    ChangeTicketAssignee,
    ChangeTicketStatus,
    CreateTicket,
    SendTicketMessage,
    TicketCommand,
    TicketListingViewExpandedItem,
    TicketStatus,
    UserDestination,
    WithGroupsAndUsers,
)


def _create(db: Session, performer: str, ticket_id: str, command: CreateTicket) -> None:
    tickets = TicketRepository(db)
    if tickets.exists(ticket_id):
        raise AlreadyExists(f"ticket {ticket_id}")

    destination = command.destination
    if isinstance(destination, UserDestination):
        if not UserRepository(db).exists(destination.id):
            raise CommandRelatedItemNotFound(f"user {destination.id}")
        assignee = destination.id
    else:
        if not GroupRepository(db).exists(destination.id):
            raise CommandRelatedItemNotFound(f"group {destination.id}")
        assignee = None

    now = utcnow()
    ticket = tickets.add(
        Ticket(
            id=ticket_id,
            destination_type=destination.type,
            destination_id=destination.id,
            owner=performer,
            assignee=assignee,
            title=command.title,
            status=TicketStatus.PENDING.value,
            created_at=now,
            latest_update=now,
        )
    )
    tickets.append(ticket, "Message", {"from": performer, "text": command.body}, date=now)
    logger.info("Пользователь %s создал тикет %s для %s %s", performer, ticket_id, destination.type, destination.id)


def _can_manage(db: Session, ticket: Ticket, performer: str) -> bool:
    if performer in (ticket.owner, ticket.assignee):
        return True
    if ticket.destination_type == "User":
        return ticket.destination_id == performer
    return GroupRepository(db).is_member(ticket.destination_id, performer)


def _change_assignee(db: Session, ticket: Ticket, command: ChangeTicketAssignee) -> None:
    new = command.new_assignee
    if new == ticket.assignee:
        return
    if new is not None:
        if not UserRepository(db).exists(new):
            raise CommandRelatedItemNotFound(f"user {new}")
        if ticket.destination_type == "Group" and not GroupRepository(db).is_member(ticket.destination_id, new):
            raise Forbidden(f"user {new} is not a member of group {ticket.destination_id}")
    TicketRepository(db).append(ticket, "AssigneeChange", {"old": ticket.assignee, "new": new})
    ticket.assignee = new


def handle_ticket_command(db: Session, performer: str, ticket_id: str, command: TicketCommand) -> None:
    inner = command.root
    with transaction(db):
        if isinstance(inner, CreateTicket):
            _create(db, performer, ticket_id, inner)
            return

        tickets = TicketRepository(db)
        ticket = tickets.get(ticket_id)
        if ticket is None:
            raise NotFound(f"ticket {ticket_id}")

        if isinstance(inner, SendTicketMessage):
            tickets.append(ticket, "Message", {"from": performer, "text": inner.body})
            return

        if not _can_manage(db, ticket, performer):
            raise Forbidden(f"user {performer} cannot manage ticket {ticket_id}")

        if isinstance(inner, ChangeTicketStatus):
            # Смена статуса попадает в историю, даже если статус не изменился
            old = TicketStatus(ticket.status)
            tickets.append(ticket, "StatusChange", {"old": old.value, "new": inner.new_status.value})
            ticket.status = inner.new_status.value
        elif isinstance(inner, ChangeTicketAssignee):
            _change_assignee(db, ticket, inner)


def get_ticket(db: Session, ticket_id: str) -> WithGroupsAndUsers:
    tickets = TicketRepository(db)
    ticket = tickets.get(ticket_id)
    if ticket is None:
        raise NotFound(f"ticket {ticket_id}")
    return with_groups_and_users(db, tickets.to_view(ticket))


def _listing(db: Session, rows: List[Ticket]) -> WithGroupsAndUsers:
    tickets = TicketRepository(db)
    items: List[TicketListingViewExpandedItem] = [tickets.to_listing_item(t) for t in rows]
    return with_groups_and_users(db, items)


def get_owned_tickets(db: Session, user_id: str) -> WithGroupsAndUsers:
    return _listing(db, TicketRepository(db).owned_by(user_id))


def get_assigned_tickets(db: Session, user_id: str) -> WithGroupsAndUsers:
    return _listing(db, TicketRepository(db).assigned_to(user_id))
