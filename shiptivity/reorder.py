"""Re-ranking of clients within and across lanes.

Priorities in every lane form the run ``1..N``. A move is planned as a
sequence of shifts over neighbouring clients followed by the placement of
the moved client, and the whole plan is applied in one write transaction.

Requested priorities past the end of a lane are clamped: to ``tail + 1``
when entering a lane, to ``tail`` when re-ranking inside one.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy.orm import Session

from .db import Client, Lane, write_transaction
from .errors import ClientError, ErrorKind
from .repository import ClientRepository, PriorityRange

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Shift:
    status: Lane
    priorities: PriorityRange
    delta: int


@dataclass(frozen=True)
class Move:
    client_id: int
    status: Lane
    priority: int
    shifts: tuple[Shift, ...] = ()


def plan_move(
    client: Client,
    tail: int,
    status: Optional[Lane] = None,
    priority: Optional[int] = None,
) -> Optional[Move]:
    """Plan moving ``client`` to ``status``/``priority``.

    ``tail`` is the highest priority currently in the destination lane
    (``status`` when it differs from the client's lane, the client's own
    lane otherwise). Returns ``None`` when nothing would change.
    """
    current = Lane(client.status)

    if status is not None and status != current:
        leave = Shift(current, PriorityRange.greater_than(client.priority), -1)
        if priority is None or priority > tail:
            return Move(client.id, status, tail + 1, (leave,))
        enter = Shift(status, PriorityRange.at_least(priority), +1)
        return Move(client.id, status, priority, (leave, enter))

    if priority is None:
        return None
    target = min(priority, tail)
    if target == client.priority:
        return None
    if target > client.priority:
        # Moving down: the block below closes up behind the client.
        block = PriorityRange(client.priority + 1, target)
        return Move(client.id, current, target, (Shift(current, block, -1),))
    block = PriorityRange(target, client.priority - 1)
    return Move(client.id, current, target, (Shift(current, block, +1),))


def apply_move(repo: ClientRepository, move: Move) -> None:
    for shift in move.shifts:
        repo.shift_priorities(shift.status, shift.priorities, shift.delta)
    repo.set_placement(move.client_id, move.status, move.priority)


def reorder_client(
    session: Session,
    client_id: int,
    status: Optional[Lane] = None,
    priority: Optional[int] = None,
) -> List[Client]:
    """Move a client and return every client afterwards.

    Raises ``ClientError(NOT_FOUND)`` when ``client_id`` does not exist;
    nothing is written in that case.
    """
    repo = ClientRepository(session)
    with write_transaction(session):
        client = repo.get_by_id(client_id, lock=True)
        if client is None:
            raise ClientError(ErrorKind.NOT_FOUND)

        current = Lane(client.status)
        destination = status or current
        repo.lock_lanes(*{current, destination})
        tail = repo.max_priority_in_lane(destination)

        move = plan_move(client, tail, status, priority)
        if move is None:
            logger.debug("client %s unchanged (%s, %s)", client_id, client.status, client.priority)
        else:
            logger.info(
                "moving client %s from %s/%s to %s/%s",
                client_id,
                client.status,
                client.priority,
                move.status.value,
                move.priority,
            )
            apply_move(repo, move)

    return repo.list_all()
