"""
Репозиторий пользователей и индекса внешних учётных записей.
"""

from typing import Dict, List, Optional, Sequence

from sqlalchemy.orm import Session

from helpdesk.backend.core.database import User, UserIdentity
from helpdesk.shared.logging_config import logger
from helpdesk.shared.schemas import UserIdentities, UserProfileView, UserView


class UserRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get(self, user_id: str) -> Optional[User]:
        return self.db.query(User).filter_by(id=user_id).first()

    def exists(self, user_id: str) -> bool:
        return self.db.query(User.id).filter_by(id=user_id).first() is not None

    def add(self, user_id: str, identities: UserIdentities) -> User:
        user = User(id=user_id, name=identities.display_name())
        self.set_identities(user, identities)
        self.db.add(user)
        return user

    def set_identities(self, user: User, identities: UserIdentities) -> None:
        # JSON-колонки перезаписываем целиком, чтобы SQLAlchemy увидел изменение
        user.telegram = identities.telegram.model_dump() if identities.telegram else None
        user.university = identities.university.model_dump() if identities.university else None
        user.name = identities.display_name()

    def list_all(self) -> List[User]:
        return self.db.query(User).order_by(User.created_at, User.id).all()

    # === Индекс учётных записей ===

    def find_by_identity(self, identity: str) -> Optional[str]:
        row = self.db.query(UserIdentity).filter_by(identity=identity).first()
        return row.user_id if row else None

    def claim_identity(self, identity: str, user_id: str) -> None:
        row = self.db.query(UserIdentity).filter_by(identity=identity).first()
        if row is None:
            self.db.add(UserIdentity(identity=identity, user_id=user_id))
            return
        if row.user_id != user_id:
            logger.warning(
                "Учётная запись %s переназначена: %s -> %s", identity, row.user_id, user_id
            )
            row.user_id = user_id

    # === Представления ===

    @staticmethod
    def identities_of(user: User) -> UserIdentities:
        return UserIdentities(telegram=user.telegram, university=user.university)

    def to_view(self, user: User) -> UserView:
        return UserView(id=user.id, name=user.name, identities=self.identities_of(user))

    def profiles(self, user_ids: Sequence[str]) -> Dict[str, UserProfileView]:
        """Профили одним запросом; отсутствующие id просто не попадут в словарь."""
        if not user_ids:
            return {}
        rows = self.db.query(User.id, User.name).filter(User.id.in_(list(user_ids))).all()
        found = {row.id: UserProfileView(id=row.id, name=row.name) for row in rows}
        return {uid: found[uid] for uid in user_ids if uid in found}
