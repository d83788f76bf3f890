import unittest
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from normalize.util import normalize_card
from timesheet.extract import day_bounds, extract_todays_reports, parse_timestamp

STOCKHOLM = ZoneInfo('Europe/Stockholm')
# 2025-03-10 12:00 Stockholm (UTC+1 in winter)
REFERENCE = datetime(2025, 3, 10, 11, 0, tzinfo=timezone.utc)


def _card(reports, field_id='cf-time'):
    return normalize_card({
        'cardCommonId': 'c1',
        'prefix': 'BOK',
        'sequentialId': 1,
        'customFields': [{'customFieldId': field_id, 'reports': reports}],
    })


class TestExtract(unittest.TestCase):
    def test_local_day_boundaries(self):
        reports = {'u1': [
            {'value': 60000, 'description': 'last second', 'createdAt': '2025-03-10T22:59:59.000Z'},  # 23:59:59 local
            {'value': 60000, 'description': 'next day', 'createdAt': '2025-03-10T23:00:00.000Z'},  # 00:00:00 next day
            {'value': 60000, 'description': 'first second', 'createdAt': '2025-03-09T23:00:00.000Z'},  # 00:00:00 local
            {'value': 60000, 'description': 'day before', 'createdAt': '2025-03-09T22:59:59.000Z'},
        ]}
        got = extract_todays_reports(_card(reports), 'u1', 'cf-time', 'Europe/Stockholm', REFERENCE)
        self.assertEqual([r.description for r in got], ['last second', 'first second'])

    def test_only_requested_user(self):
        reports = {
            'u1': [{'value': 1, 'description': 'mine', 'createdAt': '2025-03-10T08:00:00Z'}],
            'u2': [{'value': 2, 'description': 'theirs', 'createdAt': '2025-03-10T08:00:00Z'}],
        }
        got = extract_todays_reports(_card(reports), 'u1', 'cf-time', STOCKHOLM, REFERENCE)
        self.assertEqual([r.description for r in got], ['mine'])

    def test_missing_field_gives_empty(self):
        self.assertEqual(extract_todays_reports(_card({}, field_id='other'), 'u1', 'cf-time', STOCKHOLM, REFERENCE), [])
        self.assertEqual(extract_todays_reports(_card({}), 'u1', 'cf-time', STOCKHOLM, REFERENCE), [])

    def test_malformed_reports_give_empty(self):
        self.assertEqual(extract_todays_reports(_card([{'x': 1}]), 'u1', 'cf-time', STOCKHOLM, REFERENCE), [])
        self.assertEqual(extract_todays_reports(_card({'u1': 'n/a'}), 'u1', 'cf-time', STOCKHOLM, REFERENCE), [])

    def test_skips_entries_that_are_not_objects(self):
        reports = {'u1': ['junk', None, {'value': 4, 'description': 'ok', 'createdAt': '2025-03-10T08:00:00Z'}]}
        got = extract_todays_reports(_card(reports), 'u1', 'cf-time', STOCKHOLM, REFERENCE)
        self.assertEqual([r.description for r in got], ['ok'])

    def test_keeps_stored_order_and_defaults(self):
        reports = {'u1': [
            {'value': 3, 'description': 'later', 'createdAt': '2025-03-10T15:00:00Z'},
            {'createdAt': '2025-03-10T07:00:00Z'},
            {'value': 5, 'description': 'bad stamp', 'createdAt': 'yesterday'},
        ]}
        got = extract_todays_reports(_card(reports), 'u1', 'cf-time', STOCKHOLM, REFERENCE)
        self.assertEqual([(r.duration_ms, r.description) for r in got], [(3, 'later'), (0, '(no description)')])

    def test_naive_timestamp_is_utc(self):
        self.assertEqual(parse_timestamp('2025-03-10T10:00:00'), datetime(2025, 3, 10, 10, 0, tzinfo=timezone.utc))
        self.assertIsNone(parse_timestamp(None))
        self.assertIsNone(parse_timestamp('not a date'))

    def test_day_bounds_in_zone(self):
        start, end = day_bounds(REFERENCE, 'Europe/Stockholm')
        self.assertEqual(start.isoformat(), '2025-03-10T00:00:00+01:00')
        self.assertEqual((end.hour, end.minute, end.second), (23, 59, 59))

    def test_reference_near_midnight_uses_local_date(self):
        # 23:30 UTC on the 10th is already the 11th in Stockholm
        late = datetime(2025, 3, 10, 23, 30, tzinfo=timezone.utc)
        reports = {'u1': [
            {'value': 1, 'description': 'eleventh', 'createdAt': '2025-03-11T05:00:00Z'},
            {'value': 1, 'description': 'tenth', 'createdAt': '2025-03-10T12:00:00Z'},
        ]}
        got = extract_todays_reports(_card(reports), 'u1', 'cf-time', STOCKHOLM, late)
        self.assertEqual([r.description for r in got], ['eleventh'])


if __name__ == '__main__':
    unittest.main()
