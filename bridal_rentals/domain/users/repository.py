from typing import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from bridal_rentals.infrastructure.db.models import User
from bridal_rentals.domain.approval.entities import UserRef


class UserRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: str | None) -> User | None:
        if not user_id:
            return None
        return self.db.get(User, user_id)

    def refs(self, user_ids: Iterable[str | None]) -> dict[str, UserRef]:
        """Name/email references used to populate approval responses."""
        ids = {i for i in user_ids if i}
        if not ids:
            return {}
        rows = self.db.scalars(select(User).where(User.id.in_(ids)))
        return {u.id: UserRef(id=u.id, name=u.name, email=u.email) for u in rows}
