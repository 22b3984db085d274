from typing import Dict, List, Optional, Sequence

from sqlalchemy.orm import Session

from helpdesk.backend.core.database import Group, GroupMember
from helpdesk.shared.schemas import GroupProfileView, GroupView


class GroupRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get(self, group_id: str) -> Optional[Group]:
        return self.db.query(Group).filter_by(id=group_id).first()

    def exists(self, group_id: str) -> bool:
        return self.db.query(Group.id).filter_by(id=group_id).first() is not None

    def add(self, group_id: str, title: str) -> Group:
        group = Group(id=group_id, title=title)
        self.db.add(group)
        return group

    def list_all(self) -> List[Group]:
        return self.db.query(Group).order_by(Group.created_at, Group.id).all()

    # === Участники ===

    def members(self, group_id: str) -> List[str]:
        rows = (
            self.db.query(GroupMember.user_id)
            .filter_by(group_id=group_id)
            .order_by(GroupMember.id)
            .all()
        )
        return [row.user_id for row in rows]

    def is_member(self, group_id: str, user_id: str) -> bool:
        return (
            self.db.query(GroupMember.id).filter_by(group_id=group_id, user_id=user_id).first()
            is not None
        )

    def add_member(self, group_id: str, user_id: str) -> None:
        self.db.add(GroupMember(group_id=group_id, user_id=user_id))
        # id автоинкремента нужен сразу: он задаёт порядок
        self.db.flush()

    def remove_member(self, group_id: str, user_id: str) -> None:
        self.db.query(GroupMember).filter_by(group_id=group_id, user_id=user_id).delete()

    def groups_of_user(self, user_id: str) -> List[Group]:
        return (
            self.db.query(Group)
            .join(GroupMember, GroupMember.group_id == Group.id)
            .filter(GroupMember.user_id == user_id)
            .order_by(GroupMember.id)
            .all()
        )

    # === Представления ===

    def to_view(self, group: Group) -> GroupView:
        return GroupView(id=group.id, title=group.title, members=self.members(group.id))

    def profiles(self, group_ids: Sequence[str]) -> Dict[str, GroupProfileView]:
        if not group_ids:
            return {}
        rows = self.db.query(Group.id, Group.title).filter(Group.id.in_(list(group_ids))).all()
        found = {row.id: GroupProfileView(id=row.id, title=row.title) for row in rows}
        return {gid: found[gid] for gid in group_ids if gid in found}
