"""
Audit event payloads.

Each action has its own frozen dataclass with a fixed field set; the class
attribute ``action`` is the tag. ``AuditEvent`` pairs a payload with the
actor and resource it concerns, and is what the entry service hands back to
the HTTP layer alongside its result.
"""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import date
from typing import Any, ClassVar, Dict, Optional, Tuple, Union
from uuid import UUID

from .models import AuditAction


@dataclass(frozen=True)
class LoginDetails:
    action: ClassVar[str] = AuditAction.LOGIN
    email: str
    name: str


@dataclass(frozen=True)
class LoginFailedDetails:
    action: ClassVar[str] = AuditAction.LOGIN_FAILED
    reason: str
    email: Optional[str] = None


@dataclass(frozen=True)
class LogoutDetails:
    action: ClassVar[str] = AuditAction.LOGOUT


@dataclass(frozen=True)
class CreateEntryDetails:
    action: ClassVar[str] = AuditAction.CREATE_ENTRY
    entry_date: date
    fields_present: Tuple[str, ...] = ()


@dataclass(frozen=True)
class UpdateEntryDetails:
    action: ClassVar[str] = AuditAction.UPDATE_ENTRY
    entry_date: date
    changes: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DeleteEntryDetails:
    action: ClassVar[str] = AuditAction.DELETE_ENTRY
    entry_date: date


@dataclass(frozen=True)
class ViewEntryDetails:
    action: ClassVar[str] = AuditAction.VIEW_ENTRY
    entry_date: date


@dataclass(frozen=True)
class ViewEntriesDetails:
    action: ClassVar[str] = AuditAction.VIEW_ENTRIES
    limit: int
    offset: int
    total_returned: int


AuditDetails = Union[
    LoginDetails,
    LoginFailedDetails,
    LogoutDetails,
    CreateEntryDetails,
    UpdateEntryDetails,
    DeleteEntryDetails,
    ViewEntryDetails,
    ViewEntriesDetails,
]


def details_to_json(details: AuditDetails) -> Optional[Dict[str, Any]]:
    """Flatten a payload into the JSON stored in ``AuditLog.details``."""
    data = dataclasses.asdict(details)
    if not data:
        return None
    for key, value in data.items():
        if isinstance(value, date):
            data[key] = value.isoformat()
        elif isinstance(value, tuple):
            data[key] = list(value)
    return data


@dataclass(frozen=True)
class AuditEvent:
    details: AuditDetails
    actor_id: Optional[UUID] = None
    resource_id: Optional[str] = None

    @property
    def action(self) -> str:
        return self.details.action

    @classmethod
    def for_entry(cls, actor_id: UUID, details: AuditDetails) -> "AuditEvent":
        """Entry events use the ISO date as their resource id."""
        entry_date = getattr(details, "entry_date", None)
        resource_id = entry_date.isoformat() if entry_date is not None else None
        return cls(details=details, actor_id=actor_id, resource_id=resource_id)
