from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Generator, Optional

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from helpdesk.backend.core.errors import AlreadyExists
from helpdesk.shared.logging_config import logger

Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite теряет tzinfo: считаем сохранённые даты UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


class User(Base):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True)
    name = Column(String(200), nullable=False)
    # Профили внешних провайдеров (JSON или NULL)
    telegram = Column(JSON, nullable=True)
    university = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=utcnow)


class UserIdentity(Base):
    """Индекс внешних учётных записей: telegram-<id> / university-<email> -> пользователь."""

    __tablename__ = "user_identities"

    identity = Column(String(320), primary_key=True)
    user_id = Column(String(32), ForeignKey("users.id"), nullable=False)


class Group(Base):
    __tablename__ = "groups"

    id = Column(String(32), primary_key=True)
    title = Column(String(200), nullable=False)
    created_at = Column(DateTime, default=utcnow)


class GroupMember(Base):
    __tablename__ = "group_members"
    __table_args__ = (UniqueConstraint("group_id", "user_id"),)

    # Автоинкремент задаёт порядок вступления
    id = Column(Integer, primary_key=True, autoincrement=True)
    group_id = Column(String(32), ForeignKey("groups.id"), nullable=False, index=True)
    user_id = Column(String(32), ForeignKey("users.id"), nullable=False, index=True)


class Ticket(Base):
    __tablename__ = "tickets"

    id = Column(String(32), primary_key=True)
    destination_type = Column(String(10), nullable=False)  # User / Group
    destination_id = Column(String(32), nullable=False, index=True)
    owner = Column(String(32), ForeignKey("users.id"), nullable=False, index=True)
    assignee = Column(String(32), ForeignKey("users.id"), nullable=True, index=True)
    title = Column(String(300), nullable=False)
    status = Column(String(20), nullable=False)
    created_at = Column(DateTime, default=utcnow)
    latest_update = Column(DateTime, default=utcnow)


class TicketTimelineEntry(Base):
    """Лента тикета: только добавление, порядок по id."""

    __tablename__ = "ticket_timeline"

    id = Column(Integer, primary_key=True, autoincrement=True)
    ticket_id = Column(String(32), ForeignKey("tickets.id"), nullable=False, index=True)
    date = Column(DateTime, default=utcnow)
    kind = Column(String(20), nullable=False)  # Message / StatusChange / AssigneeChange
    data = Column(JSON, nullable=False)


class Upload(Base):
    __tablename__ = "uploads"

    id = Column(String(32), primary_key=True)
    owner = Column(String(32), ForeignKey("users.id"), nullable=False)
    filename = Column(String(255), nullable=False)
    content_type = Column(String(100), nullable=False)
    size = Column(Integer, nullable=False)
    state = Column(String(20), nullable=False)  # Initiated / Finalized / Dropped
    stored_path = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow)
    expires_at = Column(DateTime, nullable=False)


def build_engine(url: str) -> Engine:
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        # In-memory база живёт в одном соединении, общем для всех потоков
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)
    return create_engine(url, pool_pre_ping=True)


class Database:
    def __init__(self, url: str) -> None:
        self.url = url
        self.engine = build_engine(url)
        self.Session = sessionmaker(bind=self.engine, expire_on_commit=False)

    def create_all(self) -> None:
        Base.metadata.create_all(self.engine)
        logger.info("Схема БД готова: %s", self.engine.url.render_as_string(hide_password=True))

    @contextmanager
    def get_db(self) -> Generator[Session, None, None]:
        """Синхронная сессия БД на время одного запроса."""
        db: Session = self.Session()
        try:
            yield db
        finally:
            db.close()


@contextmanager
def transaction(db: Session) -> Generator[Session, None, None]:
    """Одна команда = одна транзакция: коммит при успехе, откат при любой ошибке."""
    try:
        yield db
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning("Конфликт при записи в БД: %s", e.orig)
        raise AlreadyExists() from e
    except Exception:
        db.rollback()
        raise
