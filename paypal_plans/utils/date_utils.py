"""Date manipulation utilities"""

from datetime import date, datetime, timedelta, timezone
from typing import Optional, Tuple


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_paypal_timestamp(moment: datetime) -> str:
    """Format a datetime the way PayPal expects (UTC, second precision, Z suffix)"""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%SZ")


def start_after(delay: timedelta, explicit: Optional[datetime] = None) -> str:
    """Agreement start: the explicit datetime if given, otherwise now + delay"""
    return to_paypal_timestamp(explicit or utc_now() + delay)


def sale_search_window(start: date, today: Optional[date] = None) -> Tuple[str, str]:
    """Fixed history window from ``start`` up to tomorrow, as YYYY-MM-DD strings"""
    end = (today or utc_now().date()) + timedelta(days=1)
    return start.isoformat(), end.isoformat()
