"""
HYBRID schedule auditor.

Checks a generated (or stored) HYBRID schedule against every business rule
and reports all violations at once. The generator has its own hard
assertions; this report is for tests and operators inspecting data.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence

from ..core.constants import (
    HYBRID_OFFLINE_SESSIONS,
    HYBRID_ONLINE_LEAD_IN,
    HYBRID_ONLINE_SESSIONS,
    HYBRID_TOTAL_SESSIONS,
)
from ..core.enums import SessionType
from ..domain.schedule import SessionDescriptor


@dataclass
class HybridScheduleStats:
    total_sessions: int = 0
    online_count: int = 0
    offline_count: int = 0
    first_six_are_online: bool = True
    alternates_after_six: bool = True
    consecutive_days: bool = True


@dataclass
class HybridScheduleReport:
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    stats: HybridScheduleStats = field(default_factory=HybridScheduleStats)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def validate_hybrid_schedule(sessions: Sequence[SessionDescriptor]) -> HybridScheduleReport:
    """Validate a HYBRID schedule against all business rules."""
    report = HybridScheduleReport()
    stats = report.stats
    stats.total_sessions = len(sessions)

    if len(sessions) != HYBRID_TOTAL_SESSIONS:
        report.errors.append(f"Expected {HYBRID_TOTAL_SESSIONS} sessions, but got {len(sessions)}")

    stats.online_count = sum(1 for s in sessions if s.session_type == SessionType.ONLINE)
    stats.offline_count = sum(1 for s in sessions if s.session_type == SessionType.OFFLINE)

    if stats.online_count != HYBRID_ONLINE_SESSIONS:
        report.errors.append(
            f"Expected {HYBRID_ONLINE_SESSIONS} online sessions, but got {stats.online_count}"
        )
    if stats.offline_count != HYBRID_OFFLINE_SESSIONS:
        report.errors.append(
            f"Expected {HYBRID_OFFLINE_SESSIONS} offline sessions, but got {stats.offline_count}"
        )

    for index, session in enumerate(sessions[:HYBRID_ONLINE_LEAD_IN]):
        if session.session_type != SessionType.ONLINE:
            stats.first_six_are_online = False
            report.errors.append(
                f"Session {index + 1} must be ONLINE, but is {session.session_type.value}"
            )

    # After the lead-in the pattern is ONLINE, OFFLINE, ... while both quotas are open
    lead_in = sessions[:HYBRID_ONLINE_LEAD_IN]
    online_so_far = sum(1 for s in lead_in if s.session_type == SessionType.ONLINE)
    offline_so_far = len(lead_in) - online_so_far
    expect_online = True
    for index in range(HYBRID_ONLINE_LEAD_IN, len(sessions)):
        session = sessions[index]
        is_online = session.session_type == SessionType.ONLINE
        if online_so_far >= HYBRID_ONLINE_SESSIONS:
            if is_online:
                report.errors.append(
                    f"Session {index + 1}: already have {HYBRID_ONLINE_SESSIONS} online sessions, but this is online"
                )
        elif offline_so_far >= HYBRID_OFFLINE_SESSIONS:
            if not is_online:
                report.errors.append(
                    f"Session {index + 1}: already have {HYBRID_OFFLINE_SESSIONS} offline sessions, but this is offline"
                )
        else:
            if is_online != expect_online:
                stats.alternates_after_six = False
                expected = "ONLINE" if expect_online else "OFFLINE"
                report.errors.append(
                    f"Session {index + 1}: expected {expected} (alternation), but got {session.session_type.value.upper()}"
                )
            expect_online = not expect_online

        if is_online:
            online_so_far += 1
        else:
            offline_so_far += 1

    for index in range(1, len(sessions)):
        gap = (sessions[index].session_date - sessions[index - 1].session_date).days
        if gap != 1:
            stats.consecutive_days = False
            report.errors.append(
                f"Sessions {index} and {index + 1} are not consecutive: {gap} days apart"
            )

    for index, session in enumerate(sessions):
        meta = session.metadata
        label = f"Session {index + 1} ({session.session_type.value})"
        if meta is None:
            report.warnings.append(f"{label}: missing booking metadata")
            continue
        if session.session_type == SessionType.ONLINE:
            if not meta.is_fixed_time:
                report.warnings.append(f"{label}: should have isFixedTime=true")
            if meta.is_bookable:
                report.warnings.append(f"{label}: should have isBookable=false")
        else:
            if meta.is_fixed_time:
                report.warnings.append(f"{label}: should have isFixedTime=false")
            if not meta.is_bookable:
                report.warnings.append(f"{label}: should have isBookable=true")

    return report
