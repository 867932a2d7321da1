from datetime import date, datetime, timezone


def parse_date(value):
    """Parse a front matter date value."""
    if isinstance(value, datetime):
        return value
    elif isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        for fmt in ['%Y-%m-%dT%H:%M:%S', '%Y-%m-%d', '%b %d, %Y']:
            try:
                return datetime.strptime(value, fmt)
            except ValueError:
                continue
    return datetime.min


def as_utc(value):
    """Return an aware UTC datetime; naive values are taken to be UTC already."""
    value = parse_date(value)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
