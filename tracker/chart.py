"""Chart series for the remaining-kilometers graph.

Every series is expressed as kilometers remaining (total_limit - used) and
aligned to one shared axis of dates:

- actual: odometer-based, up to and including today
- preliminary: readings dated after today
- optimal: the even linear budget
- trend: the average rate so far, extended over the whole lease
- projected: the recommended path from the reference date to exactly
  using up the allowance at lease end
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional, Sequence, Tuple

from .calculations import (
    add_days,
    average_rate,
    interpolate,
    mileage_at_date,
    reading_on_date,
    round_half_up,
    rounded_mileage_at_date,
    split_around,
)
from .lease_info import LeaseInfo
from .loader import camel_dict
from .reading import MileageReading
from .timeutil import days_between, parse_date, parse_instant, sort_readings

VIEW_MODES = ("total", "year1", "year2", "year3")
VIEW_YEAR_DAYS = 365

# Cumulative usage marking the end of the first and second year's share
YEAR1_THRESHOLD_KM = 15000
YEAR2_THRESHOLD_KM = 30000


@dataclass
class ChartData:
    """Axis and parallel series consumed by the chart renderer."""

    labels: List[str] = field(default_factory=list)
    dates: List[str] = field(default_factory=list)
    actual_data: List[Optional[float]] = field(default_factory=list)
    preliminary_data: List[Optional[float]] = field(default_factory=list)
    trend_data: List[float] = field(default_factory=list)
    optimal_data: List[float] = field(default_factory=list)
    projected_data: List[Optional[float]] = field(default_factory=list)
    current_date_index: int = -1
    selected_date_index: Optional[int] = None
    zero_crossing_index: Optional[int] = None
    zero_crossing_date: Optional[str] = None
    year1_crossing_index: Optional[int] = None
    year1_crossing_date: Optional[str] = None
    year2_crossing_index: Optional[int] = None
    year2_crossing_date: Optional[str] = None
    view_mode: str = "total"
    year_offset: int = 0
    total_limit: float = 0

    def to_dict(self) -> dict:
        return camel_dict(self)


def view_window(lease: LeaseInfo, view_mode: str) -> Tuple[date, date, int]:
    """Start, end and zero-based year offset of a view."""
    if view_mode not in VIEW_MODES:
        raise ValueError(f"Unknown view mode: {view_mode!r}")
    if view_mode == "total":
        return lease.start, lease.end, 0
    year_offset = int(view_mode[len("year"):]) - 1
    start = add_days(lease.start, year_offset * VIEW_YEAR_DAYS)
    end = min(add_days(start, VIEW_YEAR_DAYS), lease.end)
    return start, end, year_offset


def reference_rate(
    readings: Sequence[MileageReading], lease: LeaseInfo, ref: date
) -> float:
    """
    Average km/day from lease start to the reference date.

    With no reading on the reference date the mileage is interpolated; with
    only earlier readings the rate runs to the last of them instead.
    """
    if not any(r.date <= ref.isoformat() for r in readings):
        return 0
    exact = reading_on_date(readings, ref)
    if exact is not None:
        return average_rate(exact.mileage, days_between(lease.start, ref))
    before, after = split_around(readings, ref)
    if before and after:
        mileage = interpolate(before[-1], after[0], ref)
        return average_rate(mileage, days_between(lease.start, ref))
    last = before[-1]
    return average_rate(last.mileage, days_between(lease.start, last.date))


def crossing_date(lease: LeaseInfo, threshold: float, rate: float) -> Optional[date]:
    """Date the trend reaches threshold km used, if that is before lease end."""
    if rate <= 0:
        return None
    crossing = add_days(lease.start, round_half_up(threshold / rate))
    return crossing if crossing < lease.end else None


def generate_chart_data(
    readings: Sequence[MileageReading],
    lease: LeaseInfo,
    selected_date: Optional[str] = None,
    include_preliminary: bool = True,
    view_mode: str = "total",
    *,
    now: datetime,
) -> ChartData:
    """
    Build the chart axis and all series for a view of the lease.

    The axis holds every reading date inside the view, the view bounds,
    today (when strictly inside the view) and any crossing dates inside the
    view. Readings dated after today are dropped entirely when
    include_preliminary is false.
    """
    lease.validate()
    today = parse_instant(now).date()
    view_start, view_end, year_offset = view_window(lease, view_mode)

    ordered = sort_readings(readings)
    if not include_preliminary:
        ordered = [r for r in ordered if r.date <= today.isoformat()]

    ref = parse_date(selected_date) if selected_date else today
    total_limit = lease.total_limit
    daily_budget = lease.daily_budget
    rate = reference_rate(ordered, lease, ref) if ordered else 0

    zero_crossing = crossing_date(lease, total_limit, rate)
    year1_crossing = crossing_date(lease, YEAR1_THRESHOLD_KM, rate)
    year2_crossing = crossing_date(lease, YEAR2_THRESHOLD_KM, rate)

    def in_view(day: Optional[date]) -> bool:
        return day is not None and view_start <= day <= view_end

    points = {parse_date(r.date) for r in ordered if in_view(parse_date(r.date))}
    points.update((view_start, view_end))
    if view_start < today < view_end:
        points.add(today)
    for crossing in (zero_crossing, year1_crossing, year2_crossing):
        if in_view(crossing):
            points.add(crossing)
    axis = sorted(points)

    if selected_date:
        ref_mileage = mileage_at_date(ordered, ref)
    else:
        past = [r for r in ordered if r.date <= today.isoformat()]
        ref_mileage = past[-1].mileage if past else 0
    days_left_from_ref = days_between(ref, lease.end)
    future_rate = (total_limit - ref_mileage) / days_left_from_ref if days_left_from_ref > 0 else 0

    chart = ChartData(view_mode=view_mode, year_offset=year_offset, total_limit=total_limit)
    for index, day in enumerate(axis):
        key = day.isoformat()
        chart.labels.append(day.strftime("%b %d, %Y"))
        chart.dates.append(key)
        if day == today:
            chart.current_date_index = index
        if selected_date and key == selected_date:
            chart.selected_date_index = index

        if day > today:
            chart.actual_data.append(None)
            exact = reading_on_date(ordered, day)
            chart.preliminary_data.append(total_limit - exact.mileage if exact else None)
        else:
            chart.actual_data.append(total_limit - rounded_mileage_at_date(ordered, day))
            chart.preliminary_data.append(None)

        days_from_start = days_between(lease.start, day)
        chart.optimal_data.append(total_limit - round_half_up(daily_budget * days_from_start))

        if ordered:
            chart.trend_data.append(max(0, total_limit - round_half_up(rate * days_from_start)))
        else:
            chart.trend_data.append(total_limit)

        if ordered and day >= ref:
            used = ref_mileage + future_rate * days_between(ref, day)
            chart.projected_data.append(round_half_up(total_limit - used))
        else:
            chart.projected_data.append(None)

    if zero_crossing:
        chart.zero_crossing_date = zero_crossing.isoformat()
        chart.zero_crossing_index = _index_of(axis, zero_crossing)
    if year1_crossing:
        chart.year1_crossing_date = year1_crossing.isoformat()
        chart.year1_crossing_index = _index_of(axis, year1_crossing)
    if year2_crossing:
        chart.year2_crossing_date = year2_crossing.isoformat()
        chart.year2_crossing_index = _index_of(axis, year2_crossing)
    return chart


def _index_of(axis: List[date], day: date) -> Optional[int]:
    try:
        return axis.index(day)
    except ValueError:
        return None
