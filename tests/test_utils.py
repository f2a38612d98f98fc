"""Unit tests for date, geo and payload helpers."""

from datetime import datetime

import pytest

from skillpact.errors import BadRequest
from skillpact.routes.invalidation import INVALIDATES, invalidates
from skillpact.utils.dates import format_schedule_date, parse_datetime, utc_isoformat
from skillpact.utils.geo import distance, get_bounding_box, longitude_ranges
from skillpact.utils.payloads import get_bool, get_int, get_number, get_string


class TestDates:

    def test_parse_zulu(self):
        assert parse_datetime('2026-03-05T14:30:00Z') == datetime(2026, 3, 5, 14, 30)

    def test_parse_offset_normalised_to_utc(self):
        assert parse_datetime('2026-03-05T16:30:00+02:00') == datetime(2026, 3, 5, 14, 30)

    def test_parse_invalid(self):
        with pytest.raises(ValueError):
            parse_datetime('next tuesday')

    def test_isoformat_round_trip_marker(self):
        assert utc_isoformat(datetime(2026, 3, 5, 14, 30)) == '2026-03-05T14:30:00Z'
        assert utc_isoformat(None) is None

    @pytest.mark.parametrize('dt,expected', [
        (datetime(2026, 3, 5, 14, 30), 'March 5, 2026 at 2:30 PM'),
        (datetime(2026, 12, 31, 0, 5), 'December 31, 2026 at 12:05 AM'),
        (datetime(2026, 7, 1, 12, 0), 'July 1, 2026 at 12:00 PM'),
    ])
    def test_schedule_format(self, dt, expected):
        assert format_schedule_date(dt) == expected


class TestGeo:

    def test_zero_distance(self):
        assert distance(56.9496, 24.1052, 56.9496, 24.1052) == 0

    def test_riga_to_tallinn(self):
        # Roughly 280 km as the crow flies
        assert 275 < distance(56.9496, 24.1052, 59.4370, 24.7536) < 285

    def test_bounding_box_contains_radius(self):
        min_lat, max_lat, min_lng, max_lng = get_bounding_box(56.9496, 24.1052, 10)
        assert min_lat < 56.9496 < max_lat
        assert min_lng < 24.1052 < max_lng
        # 10 km north is inside, 12 km north is not
        assert 56.9496 + 10 / 111.2 < max_lat < 56.9496 + 12 / 111.2

    def test_bounding_box_at_pole(self):
        assert get_bounding_box(90, 0, 10)[2:] == (-180.0, 180.0)

    def test_longitude_ranges_inside_world(self):
        assert longitude_ranges(24.0, 24.2) == [(24.0, 24.2)]

    def test_longitude_ranges_wrap_east(self):
        assert longitude_ranges(179.7, 180.2) == [(179.7, 180.0), (-180.0, pytest.approx(-179.8))]

    def test_longitude_ranges_wrap_west(self):
        assert longitude_ranges(-180.3, -179.9) == [(pytest.approx(179.7), 180.0), (-180.0, -179.9)]

    def test_longitude_ranges_full_span(self):
        assert longitude_ranges(-300.0, 300.0) == [(-180.0, 180.0)]

    def test_distance_across_antimeridian(self):
        assert 10 < distance(-17.0, 179.95, -17.0, -179.95) < 11


class TestPayloads:

    def test_get_int(self):
        assert get_int({'a': '7'}, 'a') == 7
        assert get_int({}, 'a', default=3) == 3
        with pytest.raises(BadRequest):
            get_int({'a': True}, 'a')
        with pytest.raises(BadRequest):
            get_int({}, 'a', required=True)
        assert get_int({'a': 4.0}, 'a') == 4
        with pytest.raises(BadRequest):
            get_int({'a': 1.9}, 'a')

    def test_get_number_bounds(self):
        assert get_number({'h': 1.5}, 'h', minimum=0.5, maximum=24) == 1.5
        with pytest.raises(BadRequest):
            get_number({'h': 0.3}, 'h', minimum=0.5)
        with pytest.raises(BadRequest):
            get_number({'h': '2'}, 'h')

    @pytest.mark.parametrize('value', [float('nan'), float('inf'), float('-inf')])
    def test_get_number_rejects_non_finite(self, value):
        with pytest.raises(BadRequest):
            get_number({'h': value}, 'h', minimum=0.5, maximum=24)
        with pytest.raises(BadRequest):
            get_number({'h': value}, 'h')

    def test_get_string_strips(self):
        assert get_string({'s': '  hi  '}, 's') == 'hi'
        with pytest.raises(BadRequest):
            get_string({'s': 'abc'}, 's', max_length=2)

    def test_get_bool_strict(self):
        assert get_bool({'b': False}, 'b') is False
        with pytest.raises(BadRequest):
            get_bool({'b': 'yes'}, 'b')


class TestInvalidation:

    def test_every_mutation_declares_queries(self):
        for mutation, queries in INVALIDATES.items():
            assert queries, mutation

    def test_returns_fresh_list(self):
        first = invalidates('create_rating')
        first.append('mutated')
        assert 'mutated' not in invalidates('create_rating')
