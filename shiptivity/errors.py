from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    INVALID_ID = "invalid_id"
    NOT_FOUND = "not_found"
    INVALID_STATUS = "invalid_status"
    INVALID_PRIORITY = "invalid_priority"


MESSAGES: dict[ErrorKind, tuple[str, str]] = {
    ErrorKind.INVALID_ID: ("Invalid id provided.", "Id can only be integer."),
    ErrorKind.NOT_FOUND: ("Invalid id provided.", "Cannot find client with that id."),
    ErrorKind.INVALID_STATUS: (
        "Invalid status provided.",
        "Status can only be one of the following: [backlog | in-progress | complete].",
    ),
    ErrorKind.INVALID_PRIORITY: (
        "Invalid priority provided.",
        "Priority can only be positive integer.",
    ),
}


class ClientError(Exception):
    """A request the service refuses, reported to the caller as a 400."""

    status_code = 400

    def __init__(self, kind: ErrorKind) -> None:
        self.kind = kind
        self.message, self.long_message = MESSAGES[kind]
        super().__init__(self.long_message)

    def to_dict(self) -> dict[str, str]:
        return {"message": self.message, "long_message": self.long_message}
