"""Flow results and transport models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from pydantic import BaseModel


class ResultCode(IntEnum):
    # Same values as the activity result codes reported to an invoker.
    OK = -1
    CANCELED = 0


@dataclass(slots=True)
class ApplyOutcome:
    result: ResultCode
    committed: bool
    text: str

    @property
    def ok(self) -> bool:
        return self.result is ResultCode.OK


class ApplyRequest(BaseModel):
    text: str


class PutValueRequest(BaseModel):
    value: str
