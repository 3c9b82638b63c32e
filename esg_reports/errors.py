class ReportError(Exception):
    """Base class for report generation and delivery errors."""


class RenderFailure(ReportError):
    """A canvas could not complete a drawing or serialization operation."""

    def __init__(self, operation: str, message: str = ""):
        self.operation = operation
        detail = f"{operation} failed"
        if message:
            detail = f"{detail}: {message}"
        super().__init__(detail)


class DeliveryFailure(ReportError):
    """A delivery target could not hand the artifact to the user."""
