from datetime import datetime, timezone
from typing import Optional, Union

from jobflow.schemas import parse_timestamp


def format_salary(amount: Union[int, float]) -> str:
    """USD with thousands separators and no decimals: 85000 -> "$85,000"."""
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.0f}"


def format_salary_range(salary_from: int, salary_to: int) -> str:
    return f"{format_salary(salary_from)} – {format_salary(salary_to)}"


def days_ago(created_at: str, now: Optional[datetime] = None) -> str:
    """Relative age label shown on job cards ("Today", "3d ago", "2mo ago")."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    diff = (now - parse_timestamp(created_at)).days
    if diff == 0:
        return "Today"
    if diff == 1:
        return "Yesterday"
    if diff < 30:
        return f"{diff}d ago"
    return f"{diff // 30}mo ago"
