from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from .db import Client, Lane


@dataclass(frozen=True)
class PriorityRange:
    """Inclusive priority bounds; ``None`` leaves that side unbounded."""

    lower: Optional[int] = None
    upper: Optional[int] = None

    @classmethod
    def greater_than(cls, priority: int) -> "PriorityRange":
        return cls(lower=priority + 1)

    @classmethod
    def at_least(cls, priority: int) -> "PriorityRange":
        return cls(lower=priority)

    def clauses(self) -> list:
        out = []
        if self.lower is not None:
            out.append(Client.priority >= self.lower)
        if self.upper is not None:
            out.append(Client.priority <= self.upper)
        return out


class ClientRepository:
    """Access to the ``clients`` table through one session."""

    def __init__(self, session: Session) -> None:
        self.session = session

    # === Reads ===
    def list_all(self) -> List[Client]:
        return list(self.session.scalars(select(Client).order_by(Client.id)))

    def list_by_lane(self, status: Lane) -> List[Client]:
        stmt = select(Client).where(Client.status == status.value).order_by(Client.id)
        return list(self.session.scalars(stmt))

    def get_by_id(self, client_id: int, lock: bool = False) -> Optional[Client]:
        return self.session.get(Client, client_id, populate_existing=True, with_for_update=lock)

    def max_priority_in_lane(self, status: Lane) -> int:
        stmt = select(func.max(Client.priority)).where(Client.status == status.value)
        return self.session.scalar(stmt) or 0

    def lock_lanes(self, *statuses: Lane) -> None:
        # FOR UPDATE is dropped by the SQLite dialect; there BEGIN IMMEDIATE holds the lock.
        stmt = (
            select(Client.id)
            .where(Client.status.in_([s.value for s in statuses]))
            .with_for_update()
        )
        self.session.execute(stmt).all()

    # === Writes ===
    def shift_priorities(self, status: Lane, priorities: PriorityRange, delta: int) -> int:
        stmt = (
            update(Client)
            .where(Client.status == status.value, *priorities.clauses())
            .values(priority=Client.priority + delta)
            .execution_options(synchronize_session="fetch")
        )
        return self.session.execute(stmt).rowcount

    def set_placement(self, client_id: int, status: Lane, priority: int) -> None:
        stmt = (
            update(Client)
            .where(Client.id == client_id)
            .values(status=status.value, priority=priority)
            .execution_options(synchronize_session="fetch")
        )
        self.session.execute(stmt)
