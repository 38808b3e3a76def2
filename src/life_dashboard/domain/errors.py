"""Error taxonomy shared by services and routes."""


class DashboardError(Exception):
    """Base class for dashboard failures surfaced at the route boundary."""


class ConfigurationError(DashboardError):
    """Required tokens or data source identifiers are missing."""


class UpstreamCallError(DashboardError):
    """A third-party call failed or returned a malformed body."""
