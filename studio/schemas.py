from typing import Any, Literal

from pydantic import BaseModel, Field


class ReminderResultOut(BaseModel):
    student: str
    status: Literal['sent', 'failed']
    error: Any = None


class ReminderRunOut(BaseModel):
    ok: bool = True
    processed: int = Field(ge=0)
    results: list[ReminderResultOut]
