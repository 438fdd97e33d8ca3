import re
import unittest
from datetime import datetime, timedelta, timezone

from hubsync.util.time import (
    format_clock,
    normalize_dt,
    now_iso,
    now_utc,
    parse_rfc3339,
    to_rfc3339,
)


class TestUtilTime(unittest.TestCase):
    def test_now_utc_is_tz_aware(self) -> None:
        dt = now_utc()
        self.assertIsNotNone(dt.tzinfo)
        self.assertEqual(dt.tzinfo, timezone.utc)

    def test_now_iso_parses_back(self) -> None:
        value = now_iso()
        self.assertTrue(value.endswith("Z"))
        self.assertEqual(parse_rfc3339(value).tzinfo, timezone.utc)

    def test_normalize_dt_rejects_naive(self) -> None:
        naive = datetime(2025, 1, 1, 12, 0, 0)
        with self.assertRaises(ValueError):
            normalize_dt(naive)

    def test_normalize_dt_rejects_non_datetime(self) -> None:
        with self.assertRaises(TypeError):
            normalize_dt("2025-01-01")  # type: ignore[arg-type]

    def test_parse_rfc3339_z(self) -> None:
        dt = parse_rfc3339("2025-01-01T12:34:56Z")
        self.assertEqual(dt, datetime(2025, 1, 1, 12, 34, 56, tzinfo=timezone.utc))

    def test_parse_rfc3339_fractional_z(self) -> None:
        dt = parse_rfc3339("2025-01-01T12:34:56.123456Z")
        self.assertEqual(
            dt, datetime(2025, 1, 1, 12, 34, 56, 123456, tzinfo=timezone.utc)
        )

    def test_parse_rfc3339_offset_converts_to_utc(self) -> None:
        dt = parse_rfc3339("2025-01-01T12:34:56+09:00")
        self.assertEqual(dt.tzinfo, timezone.utc)
        self.assertEqual(dt, datetime(2025, 1, 1, 3, 34, 56, tzinfo=timezone.utc))

    def test_parse_rfc3339_rejects_empty(self) -> None:
        with self.assertRaises(ValueError):
            parse_rfc3339("")

    def test_to_rfc3339_keeps_microseconds(self) -> None:
        dt = datetime(2025, 1, 1, 0, 0, 0, 42, tzinfo=timezone.utc)
        self.assertEqual(to_rfc3339(dt), "2025-01-01T00:00:00.000042Z")

    def test_to_rfc3339_converts_offsets(self) -> None:
        dt = datetime(2025, 1, 1, 9, 0, 0, tzinfo=timezone(timedelta(hours=9)))
        self.assertEqual(to_rfc3339(dt), "2025-01-01T00:00:00.000000Z")

    def test_format_clock_shape(self) -> None:
        value = format_clock(datetime(2025, 1, 1, 0, 0, 0, tzinfo=timezone.utc))
        self.assertRegex(value, re.compile(r"^\d{2}:\d{2}:\d{2}$"))


if __name__ == "__main__":
    unittest.main()
