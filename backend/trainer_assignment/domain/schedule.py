"""Session descriptors produced by the schedule generator."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Optional

from ..core.enums import SessionType


@dataclass(frozen=True)
class SessionMetadata:
    """Booking flags carried by HYBRID sessions."""

    is_bookable: bool
    is_fixed_time: bool
    requires_booking: bool
    initial_time_slot: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "isBookable": self.is_bookable,
            "isFixedTime": self.is_fixed_time,
            "requiresBooking": self.requires_booking,
        }
        if self.initial_time_slot is not None:
            data["initialTimeSlot"] = self.initial_time_slot
        return data


# Online sessions can only be joined; the time is fixed by the purchase.
ONLINE_METADATA = SessionMetadata(is_bookable=False, is_fixed_time=True, requires_booking=False)


def offline_metadata(initial_time_slot: str) -> SessionMetadata:
    return SessionMetadata(
        is_bookable=True,
        is_fixed_time=False,
        requires_booking=True,
        initial_time_slot=initial_time_slot,
    )


@dataclass(frozen=True)
class SessionDescriptor:
    """One occurrence in a generated schedule, before it is persisted."""

    session_number: int
    session_date: date
    session_time: str
    session_type: SessionType
    metadata: Optional[SessionMetadata] = None

    @property
    def is_offline(self) -> bool:
        return self.session_type == SessionType.OFFLINE

    @property
    def slot_key(self) -> tuple[date, str]:
        return (self.session_date, self.session_time)

    def metadata_dict(self) -> Optional[Dict[str, Any]]:
        return self.metadata.to_dict() if self.metadata is not None else None
