from datetime import date

import pytest

from config import EngineConfig
from preprocess import FieldParser, parse_amount, parse_date


@pytest.mark.parametrize('text, expected', [
    ('1.234.567,89', 1234567),
    ('', 0),
    ('Rp 500', 500),
    ('Rp. 25.000', 25000),
    ('12,99', 12),
    ('-2.500', 2500),
    ('tidak ada', 0),
    (None, 0),
    (750, 750),
])
def test_parse_amount(text, expected):
    assert parse_amount(text) == expected


def test_parse_amount_discards_fraction_without_rounding():
    assert parse_amount('999,99') == 999


class TestParseDate:
    encodings = EngineConfig().date_encodings

    def test_iso(self):
        assert parse_date('2025-01-05', self.encodings) == date(2025, 1, 5)

    def test_day_first_wins_when_listed_first(self):
        assert parse_date('05/01/2025', self.encodings) == date(2025, 1, 5)

    def test_month_first_when_day_first_is_invalid(self):
        assert parse_date('1/13/2025', self.encodings) == date(2025, 1, 13)

    def test_encoding_order_is_respected(self):
        assert parse_date('05/01/2025', ['%m/%d/%Y', '%d/%m/%Y']) == date(2025, 5, 1)

    def test_generic_fallback(self):
        assert parse_date('5 January 2025', ['%d/%m/%Y']) == date(2025, 1, 5)

    def test_surrounding_whitespace(self):
        assert parse_date('  2025-02-28 ', self.encodings) == date(2025, 2, 28)

    @pytest.mark.parametrize('text', ['', '   ', None, 'tidak diketahui'])
    def test_unparsable(self, text):
        assert parse_date(text, self.encodings) is None


def test_field_parser_uses_its_encodings():
    field_parser = FieldParser(['%m/%d/%Y'])
    assert field_parser.parse_date('02/03/2025') == date(2025, 2, 3)
    assert field_parser.parse_amount('Rp 1.000') == 1000


@pytest.mark.parametrize('text', ['2025-01-05 00:00:00', '2025-01-05T08:30:00', '2025-01-05 08:30'])
def test_year_first_timestamps_never_swap_day_and_month(text):
    assert parse_date(text, ['%d/%m/%Y'], dayfirst=True) == date(2025, 1, 5)
    assert parse_date(text, EngineConfig().date_encodings) == date(2025, 1, 5)
