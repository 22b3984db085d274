"""
Полнотекстовый поиск по пользователям, группам и тикетам.

Совпадение: подстрока без учёта регистра. Совпавшие фрагменты в highlights
оборачиваются в <em>…</em>.
"""

import re
from typing import Any, Callable, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from helpdesk.backend.core.errors import ValidationFailed
from helpdesk.backend.repositories.group_repository import GroupRepository
from helpdesk.backend.repositories.ticket_repository import TicketRepository
from helpdesk.backend.repositories.user_repository import UserRepository
from helpdesk.shared.schemas import GroupView, SearchResultItem, SearchResults, TicketView, UserView

HIGHLIGHT_PRE = "<em>"
HIGHLIGHT_POST = "</em>"


def highlight(text: str, query: str) -> Optional[str]:
    """Вернуть текст с подсвеченными совпадениями или None, если совпадений нет."""
    pattern = re.compile(re.escape(query), re.IGNORECASE)
    if not pattern.search(text):
        return None
    return pattern.sub(lambda m: f"{HIGHLIGHT_PRE}{m.group(0)}{HIGHLIGHT_POST}", text)


def _match_fields(fields: List[Tuple[str, Optional[str]]], query: str) -> Tuple[Dict[str, str], bool]:
    highlights: Dict[str, str] = {}
    exact = False
    for path, text in fields:
        if not text:
            continue
        marked = highlight(text, query)
        if marked is not None:
            highlights[path] = marked
            exact = exact or text.lower() == query.lower()
    return highlights, exact


def _search(
    candidates: List[Any],
    fields_of: Callable[[Any], List[Tuple[str, Optional[str]]]],
    query: str,
    limit: int,
) -> SearchResults:
    query = query.strip()
    if not query:
        raise ValidationFailed("search query must not be empty")
    scored = []
    for position, value in enumerate(candidates):
        highlights, exact = _match_fields(fields_of(value), query)
        if highlights:
            scored.append((-len(highlights), not exact, position, value, highlights))
    scored.sort(key=lambda row: row[:3])
    return SearchResults(
        top_hits=[SearchResultItem(value=row[3], highlights=row[4]) for row in scored[:limit]]
    )


def _user_fields(user: UserView) -> List[Tuple[str, Optional[str]]]:
    fields: List[Tuple[str, Optional[str]]] = [("name", user.name)]
    telegram = user.identities.telegram
    if telegram is not None:
        fields += [
            ("identities.telegram.first_name", telegram.first_name),
            ("identities.telegram.last_name", telegram.last_name),
            ("identities.telegram.username", telegram.username),
        ]
    university = user.identities.university
    if university is not None:
        fields += [
            ("identities.university.email", university.email),
            ("identities.university.commonname", university.commonname),
        ]
    return fields


def _ticket_fields(ticket: TicketView) -> List[Tuple[str, Optional[str]]]:
    fields: List[Tuple[str, Optional[str]]] = [("title", ticket.title)]
    for index, item in enumerate(ticket.timeline):
        text = getattr(item.content, "text", None)
        if text is not None:
            fields.append((f"timeline.{index}.content.text", text))
    return fields


def search_users(db: Session, query: str, limit: int) -> SearchResults:
    repo = UserRepository(db)
    return _search([repo.to_view(u) for u in repo.list_all()], _user_fields, query, limit)


def search_groups(db: Session, query: str, limit: int) -> SearchResults:
    repo = GroupRepository(db)
    views: List[GroupView] = [repo.to_view(g) for g in repo.list_all()]
    return _search(views, lambda g: [("title", g.title)], query, limit)


def search_tickets(db: Session, query: str, limit: int) -> SearchResults:
    repo = TicketRepository(db)
    return _search([repo.to_view(t) for t in repo.list_all()], _ticket_fields, query, limit)
