"""Domain errors for medication scheduling and logging."""


class InvalidScheduleError(ValueError):
    """Raised when a schedule violates its mode/field invariants."""


class InvalidRangeError(ValueError):
    """Raised when a resolution range is malformed."""


class MedicationNotFoundError(LookupError):
    """Raised when a medication id does not resolve to a record."""


class PermissionDeniedError(PermissionError):
    """Raised when an identity may not act on another identity's data."""


class MedicationLimitError(RuntimeError):
    """Raised when a free-tier owner exceeds the medication limit."""


class ShareTransitionError(ValueError):
    """Raised on an illegal share status change."""


class ShareNotFoundError(LookupError):
    """Raised when a share id does not resolve to a grant."""


class ProfileNotFoundError(LookupError):
    """Raised when a user has not completed onboarding."""
