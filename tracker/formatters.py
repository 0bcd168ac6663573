"""Swedish-locale display helpers.

Numbers use a space as thousands separator and a comma as decimal
separator; dates are shown as YYYY-MM-DD.
"""

from typing import Optional

from .calculations import round_half_up


def _swedish(value: float, decimals: int) -> str:
    text = f"{value:,.{decimals}f}"
    return text.replace(",", " ").replace(".", ",")


def format_mileage(km: Optional[float]) -> str:
    """Whole kilometers, e.g. '12 345'."""
    if km is None:
        return "-"
    return _swedish(round_half_up(km), 0)


def format_kilometers(km: float) -> str:
    """
    Kilometers with at most one decimal, e.g. '1 234 km' or '4 804,5 km'.
    """
    rounded = round_half_up(km * 10) / 10
    if rounded == int(rounded):
        return f"{_swedish(rounded, 0)} km"
    return f"{_swedish(rounded, 1)} km"


def parse_swedish_number(value: str) -> float:
    """
    Parse user input such as '1 234' or '4 804,5'.

    Raises ValueError if the text is not a number.
    """
    cleaned = "".join(value.split()).replace(",", ".", 1)
    return float(cleaned)


def format_cost(cost: Optional[float]) -> str:
    """Cost in kronor, e.g. '1 234,50 kr'."""
    if cost is None:
        return "-"
    return f"{_swedish(cost, 2)} kr"


def format_percent(value: float) -> str:
    return f"{_swedish(value, 1)} %"


def truncate(text: Optional[str], max_len: int = 30) -> str:
    """Truncate text with ellipsis if too long."""
    if not text:
        return "-"
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."
