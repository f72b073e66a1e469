"""
Session schedule generation.

Pure and deterministic: the only date input is ``start_date`` and nothing
here touches storage or the clock. Every generated schedule is checked
against the requested size before it is returned; a mismatch raises
``ScheduleInvariantError`` because it means the generator is wrong, not
the purchase.
"""

from datetime import date, timedelta
from typing import List, Union

from ..core.constants import (
    HYBRID_OFFLINE_SESSIONS,
    HYBRID_ONLINE_LEAD_IN,
    HYBRID_ONLINE_SESSIONS,
    HYBRID_TOTAL_SESSIONS,
    SUNDAY_SECOND_SESSION_OFFSET_MINUTES,
    SUNDAY_SESSIONS_PER_DAY,
)
from ..core.enums import ClassType, DeliveryMode, SessionType
from ..core.exceptions import ScheduleInvariantError
from ..domain.schedule import ONLINE_METADATA, SessionDescriptor, offline_metadata
from ..utils.time_helpers import add_minutes_to_time_slot, next_weekday_on_or_after, normalize_time_slot

SUNDAY = 6  # date.weekday()


def generate_schedule(
    class_type: Union[ClassType, str],
    delivery_mode: Union[DeliveryMode, str],
    total_sessions: int,
    start_date: date,
    preferred_time_slot: str,
) -> List[SessionDescriptor]:
    """
    Build the numbered session calendar a purchase implies.

    HYBRID is decided by class type before the delivery mode is looked at.

    Raises:
        ValueError: non-positive session count or malformed time slot
        ScheduleInvariantError: the generated schedule breaks its own rules
    """
    class_type = ClassType(class_type)
    delivery_mode = DeliveryMode(delivery_mode)
    if total_sessions <= 0:
        raise ValueError(f"total_sessions must be positive, got {total_sessions}")
    time_slot = normalize_time_slot(preferred_time_slot)

    if class_type == ClassType.HYBRID:
        sessions = _hybrid(total_sessions, start_date, time_slot)
    elif delivery_mode == DeliveryMode.WEEKDAY_DAILY:
        sessions = _weekday_daily(total_sessions, start_date, time_slot)
    else:
        sessions = _sunday_only(total_sessions, start_date, time_slot)

    if len(sessions) != total_sessions:
        raise ScheduleInvariantError(
            f"Generated {len(sessions)} sessions but {total_sessions} were requested",
            details={"class_type": class_type.value, "delivery_mode": delivery_mode.value},
        )
    return sessions


def _weekday_daily(total_sessions: int, start_date: date, time_slot: str) -> List[SessionDescriptor]:
    # Every calendar day counts, weekends included
    return [
        SessionDescriptor(
            session_number=index + 1,
            session_date=start_date + timedelta(days=index),
            session_time=time_slot,
            session_type=SessionType.OFFLINE,
        )
        for index in range(total_sessions)
    ]


def _sunday_only(total_sessions: int, start_date: date, time_slot: str) -> List[SessionDescriptor]:
    second_slot = add_minutes_to_time_slot(time_slot, SUNDAY_SECOND_SESSION_OFFSET_MINUTES)
    current = next_weekday_on_or_after(start_date, SUNDAY)
    sessions: List[SessionDescriptor] = []

    while len(sessions) < total_sessions:
        for slot in (time_slot, second_slot)[:SUNDAY_SESSIONS_PER_DAY]:
            if len(sessions) == total_sessions:
                break
            sessions.append(
                SessionDescriptor(
                    session_number=len(sessions) + 1,
                    session_date=current,
                    session_time=slot,
                    session_type=SessionType.OFFLINE,
                )
            )
        current += timedelta(days=7)

    return sessions


def _hybrid_types() -> List[SessionType]:
    types = [SessionType.ONLINE] * HYBRID_ONLINE_LEAD_IN
    online = HYBRID_ONLINE_LEAD_IN
    offline = 0
    next_online = True

    while len(types) < HYBRID_TOTAL_SESSIONS:
        if online >= HYBRID_ONLINE_SESSIONS:
            chosen = SessionType.OFFLINE
        elif offline >= HYBRID_OFFLINE_SESSIONS:
            chosen = SessionType.ONLINE
        else:
            chosen = SessionType.ONLINE if next_online else SessionType.OFFLINE
            next_online = not next_online

        types.append(chosen)
        if chosen == SessionType.ONLINE:
            online += 1
        else:
            offline += 1

    return types


def _hybrid(total_sessions: int, start_date: date, time_slot: str) -> List[SessionDescriptor]:
    if total_sessions != HYBRID_TOTAL_SESSIONS:
        raise ScheduleInvariantError(
            f"HYBRID mode requires exactly {HYBRID_TOTAL_SESSIONS} sessions",
            details={"total_sessions": total_sessions},
        )

    sessions = [
        SessionDescriptor(
            session_number=index + 1,
            session_date=start_date + timedelta(days=index),
            session_time=time_slot,
            session_type=session_type,
            metadata=(
                ONLINE_METADATA
                if session_type == SessionType.ONLINE
                else offline_metadata(time_slot)
            ),
        )
        for index, session_type in enumerate(_hybrid_types())
    ]

    online = sum(1 for s in sessions if s.session_type == SessionType.ONLINE)
    offline = len(sessions) - online
    if online != HYBRID_ONLINE_SESSIONS or offline != HYBRID_OFFLINE_SESSIONS:
        raise ScheduleInvariantError(
            f"HYBRID schedule must have {HYBRID_ONLINE_SESSIONS} online and "
            f"{HYBRID_OFFLINE_SESSIONS} offline sessions, got {online} and {offline}",
            details={"online": online, "offline": offline},
        )
    return sessions
