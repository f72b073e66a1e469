"""
Purchase shape rules.

Checked in a fixed order; the first failing rule decides the message that
ends up on an INVALID_PURCHASE row.
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Union

from ..core.constants import ALLOWED_SESSION_COUNTS, HYBRID_TOTAL_SESSIONS
from ..core.enums import STUDENTS_PER_CLASS_TYPE, ClassType, DeliveryMode


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    message: Optional[str] = None


VALID = ValidationResult(valid=True)


def validate_purchase(
    class_type: Union[ClassType, str],
    total_sessions: int,
    delivery_mode: Union[DeliveryMode, str],
    students: Sequence[object],
) -> ValidationResult:
    """
    Validate the (class type, session count, cadence, students) combination.

    Args:
        class_type: ClassType or its string value
        total_sessions: Requested number of sessions
        delivery_mode: DeliveryMode or its string value
        students: Student records; only the length is inspected

    Returns:
        ValidationResult with the first failing rule's message
    """
    class_type = ClassType(class_type)
    delivery_mode = DeliveryMode(delivery_mode)

    if class_type == ClassType.HYBRID and total_sessions != HYBRID_TOTAL_SESSIONS:
        return ValidationResult(False, f"HYBRID class type requires exactly {HYBRID_TOTAL_SESSIONS} sessions")

    if delivery_mode == DeliveryMode.SUNDAY_ONLY and total_sessions % 2 != 0:
        return ValidationResult(False, "SUNDAY_ONLY delivery mode requires an even number of sessions")

    # ONE_ON_TWO, ONE_ON_THREE, then ONE_ON_ONE
    for checked in (ClassType.ONE_ON_TWO, ClassType.ONE_ON_THREE, ClassType.ONE_ON_ONE):
        expected = STUDENTS_PER_CLASS_TYPE[checked]
        if class_type == checked and len(students) != expected:
            noun = "student" if expected == 1 else "students"
            return ValidationResult(
                False, f"{checked.value} class type requires exactly {expected} {noun}"
            )

    if total_sessions not in ALLOWED_SESSION_COUNTS:
        return ValidationResult(False, "Total sessions must be 10, 20, or 30")

    return VALID
