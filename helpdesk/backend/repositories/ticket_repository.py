"""
Репозиторий тикетов: строки тикетов, лента событий и выборки для списков.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from helpdesk.backend.core.database import Ticket, TicketTimelineEntry, as_utc, utcnow
from helpdesk.shared.schemas import (
    GroupDestination,
    TicketListingViewExpandedItem,
    TicketTimelineItem,
    TicketView,
    UserDestination,
)


class TicketRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get(self, ticket_id: str) -> Optional[Ticket]:
        return self.db.query(Ticket).filter_by(id=ticket_id).first()

    def exists(self, ticket_id: str) -> bool:
        return self.db.query(Ticket.id).filter_by(id=ticket_id).first() is not None

    def add(self, ticket: Ticket) -> Ticket:
        self.db.add(ticket)
        return ticket

    def append(self, ticket: Ticket, kind: str, data: Dict[str, Any], date: Optional[datetime] = None) -> None:
        """Добавить событие в конец ленты и сдвинуть latest_update."""
        date = date or utcnow()
        self.db.add(TicketTimelineEntry(ticket_id=ticket.id, date=date, kind=kind, data=data))
        ticket.latest_update = date

    def timeline(self, ticket_id: str) -> List[TicketTimelineItem]:
        entries = (
            self.db.query(TicketTimelineEntry)
            .filter_by(ticket_id=ticket_id)
            .order_by(TicketTimelineEntry.id)
            .all()
        )
        return [
            TicketTimelineItem.model_validate(
                {"date": as_utc(e.date), "content": {"type": e.kind, **e.data}}
            )
            for e in entries
        ]

    # === Выборки для списков (свежие сверху) ===

    def _listing(self, **filters: Any) -> List[Ticket]:
        return (
            self.db.query(Ticket)
            .filter_by(**filters)
            .order_by(Ticket.latest_update.desc(), Ticket.id)
            .all()
        )

    def owned_by(self, user_id: str) -> List[Ticket]:
        return self._listing(owner=user_id)

    def assigned_to(self, user_id: str) -> List[Ticket]:
        return self._listing(assignee=user_id)

    def sent_to_group(self, group_id: str) -> List[Ticket]:
        return self._listing(destination_type="Group", destination_id=group_id)

    def list_all(self) -> List[Ticket]:
        return self.db.query(Ticket).order_by(Ticket.created_at, Ticket.id).all()

    # === Представления ===

    @staticmethod
    def destination_of(ticket: Ticket):
        if ticket.destination_type == "Group":
            return GroupDestination(id=ticket.destination_id)
        return UserDestination(id=ticket.destination_id)

    def to_view(self, ticket: Ticket) -> TicketView:
        return TicketView(
            id=ticket.id,
            destination=self.destination_of(ticket),
            owner=ticket.owner,
            assignee=ticket.assignee,
            title=ticket.title,
            status=ticket.status,
            timeline=self.timeline(ticket.id),
        )

    def to_listing_item(self, ticket: Ticket) -> TicketListingViewExpandedItem:
        return TicketListingViewExpandedItem(
            id=ticket.id,
            destination=self.destination_of(ticket),
            owner=ticket.owner,
            assignee=ticket.assignee,
            title=ticket.title,
            status=ticket.status,
            latest_update=as_utc(ticket.latest_update),
        )
