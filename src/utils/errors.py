class DashboardError(Exception):
    """Base class for errors raised by the dashboard core."""


class InvalidInputError(DashboardError, ValueError):
    """User input rejected before it reaches the data model."""

    def __init__(self, message: str, fields: list[str] | None = None):
        super().__init__(message)
        self.fields = fields or []


class NotFoundError(DashboardError, LookupError):
    def __init__(self, collection: str, record_id: str):
        super().__init__(f"{collection} record not found: {record_id}")
        self.collection = collection
        self.record_id = record_id


class StoreClosedError(DashboardError):
    """Collection access on a store that is not open."""


class MarketDataError(DashboardError):
    """Market-data API returned something other than a quote list."""
