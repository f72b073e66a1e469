"""Product rules for purchases and session schedules."""

from __future__ import annotations

# Purchase shape
ALLOWED_SESSION_COUNTS = (10, 20, 30)
HYBRID_TOTAL_SESSIONS = 30
HYBRID_ONLINE_SESSIONS = 18
HYBRID_OFFLINE_SESSIONS = 12
HYBRID_ONLINE_LEAD_IN = 6  # sessions 1-6 are always online

# Sunday-only cadence: two back-to-back sessions per Sunday
SUNDAY_SESSIONS_PER_DAY = 2
SUNDAY_SECOND_SESSION_OFFSET_MINUTES = 40

# Length of a single lesson, used by the calendar mirror
SESSION_DURATION_MINUTES = 40

# Trainer certification cap
MAX_CERTIFIED_COURSES = 3

# Earth's mean radius, shared by every distance computation
EARTH_RADIUS_KM = 6371.0

# Ledger statuses that make a slot unavailable
UNAVAILABLE_SLOT_STATUSES = ("booked", "blocked")

# Query limits
DEFAULT_QUERY_LIMIT = 100
MAX_QUERY_LIMIT = 1000
