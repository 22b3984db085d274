"""
Команды и представления пользователей.
"""

from sqlalchemy.orm import Session

from helpdesk.backend.core.database import transaction
from helpdesk.backend.core.errors import AlreadyExists, IdentityExists, IdentityUsed, NotFound
from helpdesk.backend.repositories.user_repository import UserRepository
from helpdesk.shared.logging_config import logger
from helpdesk.shared.schemas import (
    AddUserIdentity,
    CreateUser,
    IdentityView,
    UserCommand,
    UserIdentities,
    UserProfileView,
    UserView,
)


def create_user(db: Session, user_id: str, command: CreateUser) -> None:
    """Создать пользователя из внешнего профиля (без коммита)."""
    users = UserRepository(db)
    if users.exists(user_id):
        raise AlreadyExists(f"user {user_id}")
    identities = UserIdentities().with_identity(command.profile)
    users.add(user_id, identities)
    for key in identities.identity_keys():
        users.claim_identity(key, user_id)
    logger.info("Создан пользователь %s (%s)", user_id, identities.display_name())


def add_identity(db: Session, user_id: str, command: AddUserIdentity) -> None:
    users = UserRepository(db)
    user = users.get(user_id)
    if user is None:
        raise NotFound(f"user {user_id}")
    identities = users.identities_of(user)
    if not identities.can_add_identity(command.profile):
        raise IdentityExists(f"{identities.slot_for(command.profile)} identity of user {user_id}")
    key = command.profile.identity_key
    holder = users.find_by_identity(key)
    if holder is not None and holder != user_id:
        raise IdentityUsed(key)
    users.set_identities(user, identities.with_identity(command.profile))
    users.claim_identity(key, user_id)
    logger.info("Пользователю %s добавлена учётная запись %s", user_id, key)


def handle_user_command(db: Session, user_id: str, command: UserCommand) -> None:
    with transaction(db):
        inner = command.root
        if isinstance(inner, CreateUser):
            create_user(db, user_id, inner)
        else:
            add_identity(db, user_id, inner)


def get_user_view(db: Session, user_id: str) -> UserView:
    users = UserRepository(db)
    user = users.get(user_id)
    if user is None:
        raise NotFound(f"user {user_id}")
    return users.to_view(user)


def get_user_profile(db: Session, user_id: str) -> UserProfileView:
    return get_user_view(db, user_id).profile()


def get_identity(db: Session, identity: str) -> IdentityView:
    user_id = UserRepository(db).find_by_identity(identity)
    if user_id is None:
        raise NotFound(f"identity {identity}")
    return IdentityView(user_id=user_id)
