import json
from datetime import date

import pytest

from config import load_config
from report import format_idr, main, resolve_window
from schema import CategoryBucket, LedgerKind


@pytest.mark.parametrize('value, expected', [
    (0, 'Rp 0'),
    (1500000, 'Rp 1.500.000'),
    (-600000, 'Rp -600.000'),
])
def test_format_idr(value, expected):
    assert format_idr(value) == expected


class TestResolveWindow:
    def test_month(self):
        window = resolve_window(None, None, '2025-02', date(2025, 7, 1))
        assert (window.start, window.end) == (date(2025, 2, 1), date(2025, 2, 28))

    def test_default_is_trailing_six_months(self):
        window = resolve_window(None, None, None, date(2025, 7, 15))
        assert (window.start, window.end) == (date(2025, 1, 15), date(2025, 7, 15))

    def test_explicit_bounds(self):
        window = resolve_window(date(2025, 1, 1), date(2025, 1, 10), None, date(2025, 7, 15))
        assert window.days == 9


class TestLoadConfig:
    def test_defaults(self):
        assert load_config().default_expense_bucket == CategoryBucket.OPEX

    def test_json_overrides(self, tmp_path):
        path = tmp_path / 'rules.json'
        path.write_text(json.dumps({
            'default_expense_bucket': 'CAPEX',
            'ledger_date_encodings': {'expense': ['%m/%d/%Y']},
            'column_aliases': {'date': ['tgl_transaksi']},
        }), encoding='utf-8')
        config = load_config(path)
        assert config.default_expense_bucket == CategoryBucket.CAPEX
        assert config.encodings_for(LedgerKind.EXPENSE) == ['%m/%d/%Y']
        assert config.encodings_for(LedgerKind.REVENUE) == config.date_encodings
        assert config.column_aliases['date'] == ['tgl_transaksi']
        assert 'revenue_amount' in config.column_aliases

    def test_unknown_key_rejected(self, tmp_path):
        path = tmp_path / 'rules.json'
        path.write_text(json.dumps({'cogs_names': []}), encoding='utf-8')
        with pytest.raises(ValueError):
            load_config(path)


def test_main_writes_reports(tmp_path, capsys):
    revenue = tmp_path / 'omset.csv'
    revenue.write_text('Tanggal,Channel_Penjualan,Nominal_Omset\n'
                       '2025-01-05,Online,"100.000,00"\n'
                       '2025-01-06,Toko Offline,"50.000,00"\n', encoding='utf-8')
    expenses = tmp_path / 'biaya.csv'
    expenses.write_text('Tanggal,Kategori_Biaya,Nominal_Biaya\n'
                        '2025-01-05,Operasional,"30.000,00"\n', encoding='utf-8')
    capital = tmp_path / 'modal.csv'
    capital.write_text('Tanggal,Keterangan,Nominal_Modal\n'
                       '2024-12-01,Setoran awal,300.000\n', encoding='utf-8')
    output = tmp_path / 'report.json'

    main(['--revenue', str(revenue), '--expenses', str(expenses), '--capital', str(capital),
          '--month', '2025-01', '-o', str(output)])

    data = json.loads(output.read_text(encoding='utf-8'))
    assert data['period']['revenue'] == 150000
    assert data['period']['net_profit'] == 120000
    assert data['period']['trend'][0] == {'label': '05 Jan', 'total_revenue': 100000, 'bucket_start': '2025-01-05'}
    assert data['lifetime']['capital_outstanding'] == 180000
    assert data['lifetime']['recovery_percentage'] == pytest.approx(40.0)
    assert 'Capital outstanding: Rp 180.000' in capsys.readouterr().out


def test_main_missing_file_exits(tmp_path):
    with pytest.raises(SystemExit) as exc:
        main(['--revenue', str(tmp_path / 'a.csv'), '--expenses', str(tmp_path / 'b.csv'),
              '--capital', str(tmp_path / 'c.csv')])
    assert exc.value.code == 1
