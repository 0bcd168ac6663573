"""LeaseInfo class for lease terms."""

from datetime import date
from typing import Optional

from .errors import InvalidLease
from .timeutil import days_between, parse_date

DEFAULT_START_DATE = "2025-07-09"
DEFAULT_END_DATE = "2028-07-09"
DEFAULT_ANNUAL_LIMIT = 15000
DEFAULT_TOTAL_LIMIT = 45000


class LeaseInfo:
    """Lease period and kilometer allowance. There is only ever one."""

    def __init__(
        self,
        start_date: str,
        end_date: str,
        total_limit: float,
        annual_limit: Optional[float] = None,
        overage_cost_per_km: Optional[float] = None,
        created_at: Optional[str] = None,
        updated_at: Optional[str] = None,
        id: str = "default",
    ):
        self.id = id
        self.start_date = start_date
        self.end_date = end_date
        self.total_limit = total_limit
        self.annual_limit = annual_limit
        self.overage_cost_per_km = overage_cost_per_km
        self.created_at = created_at
        self.updated_at = updated_at

    @property
    def start(self) -> date:
        return parse_date(self.start_date)

    @property
    def end(self) -> date:
        return parse_date(self.end_date)

    @property
    def total_days(self) -> int:
        """Length of the lease in days (end - start)."""
        return days_between(self.start_date, self.end_date)

    @property
    def daily_budget(self) -> float:
        """Kilometers per day under an even allowance."""
        return self.total_limit / self.total_days

    def validate(self) -> None:
        """Raise InvalidLease unless the limit is positive and the period non-empty."""
        try:
            start, end = self.start, self.end
        except (TypeError, ValueError):
            raise InvalidLease(
                "Lease dates must be YYYY-MM-DD", field="startDate",
                value=f"{self.start_date}..{self.end_date}",
            )
        if end <= start:
            raise InvalidLease("Lease end date must be after start date", field="endDate", value=self.end_date)
        if isinstance(self.total_limit, bool) or not isinstance(self.total_limit, (int, float)):
            raise InvalidLease("Total limit must be a number", field="totalLimit", value=self.total_limit)
        if self.total_limit <= 0:
            raise InvalidLease("Total limit must be positive", field="totalLimit", value=self.total_limit)
        if self.overage_cost_per_km is not None and self.overage_cost_per_km < 0:
            raise InvalidLease(
                "Overage cost cannot be negative", field="overageCostPerKm", value=self.overage_cost_per_km
            )
