"""Process health state."""

from datetime import datetime, UTC

from pydantic import BaseModel


class GatewayHealth(BaseModel):
    """Operational counters surfaced on ``/health``.

    Compensation failures never reach the caller of the failed request,
    so this is where they become visible for alerting.
    """

    compensation_failures: int = 0
    last_error: str | None = None
    last_error_at: datetime | None = None

    def record_compensation_failure(self, error: str) -> None:
        self.compensation_failures += 1
        self.last_error = error
        self.last_error_at = datetime.now(UTC)
