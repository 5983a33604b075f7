class ReservationError(Exception):
    """Base class for reservation domain errors."""


class ConfigurationError(ReservationError):
    """Business hours or layout configuration is unusable."""


class AvailabilityCheckError(ReservationError):
    """An availability oracle failed; capacity is unknown, not exhausted."""


class WizardStateError(ReservationError):
    """An action was issued in a wizard state that does not allow it."""
