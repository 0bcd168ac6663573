"""Lease statistics: budget status, projections and period breakdowns."""

import math
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import List, Optional, Sequence

from dateutil.relativedelta import MO, relativedelta

from .calculations import (
    average_rate,
    find_mileage_at_date,
    get_mileage_at_date,
    round_half_up,
    rounded_mileage_at_date,
)
from .lease_info import LeaseInfo
from .loader import camel_dict
from .reading import MileageReading
from .timeutil import days_between, parse_date, parse_instant, sort_readings


@dataclass
class MonthlyStats:
    """Budget against actual usage for one calendar month of the lease."""

    month: str
    year: int
    start_mileage: float
    end_mileage: float
    budget: int
    actual: float
    variance: float
    is_projected: bool

    def to_dict(self) -> dict:
        return camel_dict(self)


@dataclass
class CalculatedStats:
    """Derived budget status at a reference date. Never stored."""

    current_mileage: float
    budgeted_mileage: int
    remaining_budget: float
    current_rate: float
    projected_total: int
    projected_total_trend: int
    is_on_track: bool
    variance: float
    percentage_used: float
    optimal_percentage: float
    days_elapsed: int
    days_remaining: int
    total_days: int
    daily_budget: float
    remaining_daily_budget: float
    days_to_optimal: int
    reference_date: str
    projected_overage_km: Optional[float] = None
    projected_overage_cost: Optional[float] = None
    monthly_stats: List[MonthlyStats] = field(default_factory=list)

    def to_dict(self) -> dict:
        d = camel_dict(self)
        d["monthlyStats"] = [m.to_dict() for m in self.monthly_stats]
        return d


@dataclass
class WeeklyStats:
    """Usage for one Monday-Sunday week against the recommended rate."""

    week_start: str
    week_end: str
    weekly_budget: float
    used_this_week: float
    remaining_this_week: float
    daily_budget: float
    is_current_week: bool
    days_into_week: int
    projected_weekly_usage: float
    is_on_track: bool

    def to_dict(self) -> dict:
        return camel_dict(self)


def calculate_lease_stats(
    readings: Sequence[MileageReading],
    lease: LeaseInfo,
    reference_date: Optional[str] = None,
    *,
    now: datetime,
    include_monthly: bool = True,
) -> CalculatedStats:
    """
    Compute budget status as of a reference date (default: today).

    The budget is linear: total_limit spread evenly over the lease days.
    Positive variance means under budget. Pure function of its inputs.
    """
    lease.validate()
    ordered = sort_readings(readings)
    today = parse_instant(now).date()
    ref = parse_date(reference_date) if reference_date else today

    current_mileage = rounded_mileage_at_date(ordered, ref)

    total_days = lease.total_days
    days_elapsed = min(max(days_between(lease.start, ref), 0), total_days)
    days_remaining = total_days - days_elapsed

    daily_budget = lease.total_limit / total_days
    budgeted_mileage = round_half_up(daily_budget * days_elapsed)
    remaining_budget = lease.total_limit - current_mileage
    remaining_daily_budget = remaining_budget / days_remaining if days_remaining > 0 else 0

    current_rate = average_rate(current_mileage, days_elapsed)
    projected_total = round_half_up(current_rate * total_days)

    variance = budgeted_mileage - current_mileage
    days_to_optimal = 0
    if variance < 0:
        # zero-driving days until the optimal line catches up
        days_to_optimal = math.ceil(abs(variance) / daily_budget)

    overage_km = None
    overage_cost = None
    if lease.overage_cost_per_km is not None:
        overage_km = max(0, projected_total - lease.total_limit)
        overage_cost = overage_km * lease.overage_cost_per_km

    monthly = []
    if include_monthly:
        monthly = generate_monthly_stats(ordered, lease, today, current_rate)

    return CalculatedStats(
        current_mileage=current_mileage,
        budgeted_mileage=budgeted_mileage,
        remaining_budget=remaining_budget,
        current_rate=current_rate,
        projected_total=projected_total,
        projected_total_trend=projected_total,
        is_on_track=current_mileage <= budgeted_mileage,
        variance=variance,
        percentage_used=current_mileage / lease.total_limit * 100,
        optimal_percentage=budgeted_mileage / lease.total_limit * 100,
        days_elapsed=days_elapsed,
        days_remaining=days_remaining,
        total_days=total_days,
        daily_budget=daily_budget,
        remaining_daily_budget=remaining_daily_budget,
        days_to_optimal=days_to_optimal,
        reference_date=ref.isoformat(),
        projected_overage_km=overage_km,
        projected_overage_cost=overage_cost,
        monthly_stats=monthly,
    )


def generate_monthly_stats(
    readings: Sequence[MileageReading],
    lease: LeaseInfo,
    today: date,
    current_rate: float,
) -> List[MonthlyStats]:
    """
    Month-by-month budget and usage for every calendar month the lease touches.

    Months ending after today are projected from current_rate instead of
    read from the odometer.
    """
    ordered = sort_readings(readings)
    start, end = lease.start, lease.end
    daily_budget = lease.daily_budget

    stats: List[MonthlyStats] = []
    month_start = start.replace(day=1)
    while month_start <= end:
        month_end = month_start + relativedelta(months=1, days=-1)
        effective_start = max(month_start, start)
        effective_end = min(month_end, end)
        days_in_month = (effective_end - effective_start).days + 1
        budget = round_half_up(daily_budget * days_in_month)

        start_mileage = find_mileage_at_date(ordered, effective_start)
        end_mileage = find_mileage_at_date(ordered, effective_end)
        if start_mileage is None and end_mileage is not None:
            start_mileage = 0

        is_projected = effective_end > today
        actual = 0
        if not is_projected and start_mileage is not None and end_mileage is not None:
            actual = end_mileage - start_mileage
        elif is_projected and ordered:
            actual = round_half_up(current_rate * days_in_month)

        stats.append(
            MonthlyStats(
                month=month_start.strftime("%B"),
                year=month_start.year,
                start_mileage=start_mileage or 0,
                end_mileage=end_mileage or 0,
                budget=budget,
                actual=actual,
                variance=budget - actual,
                is_projected=is_projected,
            )
        )
        month_start += relativedelta(months=1)
    return stats


def calculate_weekly_stats(
    readings: Sequence[MileageReading],
    lease: LeaseInfo,
    week_date: date,
    *,
    now: datetime,
    stats: Optional[CalculatedStats] = None,
) -> WeeklyStats:
    """
    Usage for the Monday-Sunday week containing week_date.

    The weekly budget is the recommended daily rate (what is left divided by
    the days left) times seven, or the even daily budget if that is zero.
    """
    ordered = sort_readings(readings)
    today = parse_instant(now).date()
    week_date = parse_date(week_date)
    week_start = week_date + relativedelta(weekday=MO(-1))
    week_end = week_start + timedelta(days=6)
    is_current_week = week_start <= today <= week_end

    if stats is None:
        stats = calculate_lease_stats(ordered, lease, now=now, include_monthly=False)
    daily_budget = stats.remaining_daily_budget or lease.daily_budget
    weekly_budget = daily_budget * 7

    start_mileage = get_mileage_at_date(ordered, week_start, lease.start)
    end_mileage = get_mileage_at_date(ordered, today if is_current_week else week_end, lease.start)
    used = max(0, end_mileage - start_mileage)

    days_into_week = min((today - week_start).days + 1, 7) if is_current_week else 7
    if is_current_week and days_into_week > 0:
        projected = used / days_into_week * 7
    else:
        projected = used

    return WeeklyStats(
        week_start=week_start.isoformat(),
        week_end=week_end.isoformat(),
        weekly_budget=weekly_budget,
        used_this_week=used,
        remaining_this_week=max(0, weekly_budget - used),
        daily_budget=daily_budget,
        is_current_week=is_current_week,
        days_into_week=days_into_week,
        projected_weekly_usage=projected,
        is_on_track=projected <= weekly_budget,
    )
