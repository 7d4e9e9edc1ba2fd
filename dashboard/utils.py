from datetime import datetime


def format_display_date(value: str | datetime | None) -> str:
    """
    Format a date as "Jan 01, 2020".

    Accepts a datetime or an ISO 8601 string (a trailing "Z" is accepted).
    Returns an empty string for None.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return value.strftime("%b %d, %Y")
