from datetime import datetime, timedelta, timezone

import fantasy12.utils.dates
from fantasy12.utils.dates import as_utc


def test_module_is_documented():
    assert fantasy12.utils.dates.__doc__


def test_as_utc():
    assert as_utc(None) is None
    assert as_utc(datetime(2026, 5, 2, 16, 0)) == datetime(2026, 5, 2, 16, 0, tzinfo=timezone.utc)

    aware = datetime(2026, 5, 2, 13, 0, tzinfo=timezone(timedelta(hours=-3)))
    assert as_utc(aware) is aware
