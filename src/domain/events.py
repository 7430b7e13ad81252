from __future__ import annotations

from pydantic import BaseModel

from .ledger import Line, LineId, ProfileId


class DomainEvent(BaseModel):
    profile_id: ProfileId


class ProfileCreated(DomainEvent):
    pass


class ProfileUpdated(DomainEvent):
    pass


class LineCreated(DomainEvent):
    line: Line


class LineUpdated(DomainEvent):
    line: Line


class LineDeleted(DomainEvent):
    line_id: LineId
