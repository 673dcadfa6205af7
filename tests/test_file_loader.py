from datetime import date, datetime

import pandas as pd
import pytest

from config import DateFallbackPolicy
from extractor import LedgerExtractor
from file_loader import FileLoader


def write(path, text):
    path.write_text(text, encoding='utf-8')
    return path


def test_csv_rows_are_text(tmp_path):
    path = write(tmp_path / 'omset.csv',
                 'Tanggal,Channel_Penjualan,Nominal_Omset\n'
                 '05/01/2025,Online,"100.000,00"\n'
                 '\n'
                 ',,\n'
                 '06/01/2025,Toko Offline,50000\n')
    rows = FileLoader().load_rows(path)
    assert rows == [
        {'Tanggal': '05/01/2025', 'Channel_Penjualan': 'Online', 'Nominal_Omset': '100.000,00'},
        {'Tanggal': '06/01/2025', 'Channel_Penjualan': 'Toko Offline', 'Nominal_Omset': '50000'},
    ]


def test_header_only_csv(tmp_path):
    path = write(tmp_path / 'modal.csv', 'Tanggal,Keterangan,Nominal_Modal\n')
    assert FileLoader().load_rows(path) == []


def test_header_whitespace_stripped(tmp_path):
    path = write(tmp_path / 'biaya.csv', ' Tanggal , Kategori_Biaya,Nominal_Biaya\n2025-01-05,Gaji,1000\n')
    assert list(FileLoader().load_rows(path)[0].keys()) == ['Tanggal', 'Kategori_Biaya', 'Nominal_Biaya']


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        FileLoader().load_rows(tmp_path / 'nope.csv')


def test_unsupported_extension(tmp_path):
    path = write(tmp_path / 'omset.txt', 'Tanggal\n')
    with pytest.raises(ValueError):
        FileLoader().load_rows(path)


def test_excel_date_cells_parse_to_the_right_day(tmp_path):
    path = tmp_path / 'omset.xlsx'
    pd.DataFrame({
        'Tanggal': [datetime(2025, 1, 5), datetime(2025, 2, 11)],
        'Channel_Penjualan': ['Online', 'Kedai'],
        'Nominal_Omset': ['100.000', '50.000'],
    }).to_excel(path, index=False)

    rows = FileLoader().load_rows(path)
    records = LedgerExtractor().extract_revenue(rows, DateFallbackPolicy.DROP, date(2025, 3, 1))
    assert [r.date for r in records] == [date(2025, 1, 5), date(2025, 2, 11)]
    assert [r.amount for r in records] == [100000, 50000]
