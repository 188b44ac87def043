from datetime import datetime, timedelta, timezone

T0 = datetime(2024, 5, 1, 19, 0, 0, tzinfo=timezone.utc)


def at(seconds: float) -> datetime:
    return T0 + timedelta(seconds=seconds)
