from datetime import date, datetime, time, timedelta

MINUTES_PER_DAY = 24 * 60


def parse_time_slot(time_slot: str) -> time:
    """Parse an ``HH:MM`` (or ``H:MM``) slot string."""
    try:
        return datetime.strptime(time_slot.strip(), "%H:%M").time()
    except (AttributeError, ValueError) as exc:
        raise ValueError(f"Invalid time slot '{time_slot}', expected HH:MM") from exc


def format_time_slot(t: time) -> str:
    """Always return zero-padded HH:MM"""
    return t.strftime("%H:%M")


def normalize_time_slot(time_slot: str) -> str:
    return format_time_slot(parse_time_slot(time_slot))


def add_minutes_to_time_slot(time_slot: str, minutes: int) -> str:
    """Shift a slot by ``minutes``, wrapping around midnight."""
    parsed = parse_time_slot(time_slot)
    total = (parsed.hour * 60 + parsed.minute + minutes) % MINUTES_PER_DAY
    return f"{total // 60:02d}:{total % 60:02d}"


def next_weekday_on_or_after(start: date, weekday: int) -> date:
    """First date >= start whose ``date.weekday()`` equals ``weekday``."""
    return start + timedelta(days=(weekday - start.weekday()) % 7)
