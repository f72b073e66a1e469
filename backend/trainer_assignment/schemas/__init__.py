from .assignment import AssignmentOutcomeResponse, AutoAssignmentRequest, StudentRef

__all__ = ["AssignmentOutcomeResponse", "AutoAssignmentRequest", "StudentRef"]
