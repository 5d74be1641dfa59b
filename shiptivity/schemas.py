from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, StrictInt


class ErrorMessage(BaseModel):
    message: str
    long_message: str


class Banner(BaseModel):
    message: str = "SHIPTIVITY API. Read documentation to see API docs"


class Health(BaseModel):
    status: str = "ok"


class Version(BaseModel):
    version: str = "1.0.0"


class ClientOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    status: str
    priority: int


class ClientUpdate(BaseModel):
    status: Optional[str] = None
    priority: Optional[StrictInt] = None
