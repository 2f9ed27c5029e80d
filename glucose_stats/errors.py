class GlucoseStatsError(Exception):
    """Base class for tracker errors."""


class InvalidWindowError(GlucoseStatsError, KeyError):
    """Unknown window label."""

    def __init__(self, label: object):
        self.label = label
        super().__init__(f"Invalid period: {label!r}")

    def __str__(self) -> str:
        # KeyError would repr() the message
        return str(self.args[0])


class InvalidMeasurementError(GlucoseStatsError, ValueError):
    """Reading that cannot be recorded (non-finite level, unknown category)."""


class InvalidThresholdsError(GlucoseStatsError, ValueError):
    """Band thresholds that are reversed or leave a gap."""


class InvalidStateError(GlucoseStatsError):
    """State whose current period is missing or whose record is malformed."""
