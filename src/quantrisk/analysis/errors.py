"""Error taxonomy for the risk-analytics engine."""


class AnalyticsError(ValueError):
    """Base class for all engine failures."""

    code = "analytics_error"


class InputError(AnalyticsError):
    """Insufficient data points, non-positive prices or mismatched series."""

    code = "input_error"


class ParameterRangeError(AnalyticsError):
    """A model parameter lies outside its documented bound."""

    code = "parameter_range"


class SimulationCancelled(AnalyticsError):
    """The caller cancelled a simulation between path blocks."""

    code = "cancelled"


__all__ = ["AnalyticsError", "InputError", "ParameterRangeError", "SimulationCancelled"]
