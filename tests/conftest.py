from datetime import date

import pytest

from config import EngineConfig
from schema import RawLedgers, ReportWindow


@pytest.fixture
def config():
    return EngineConfig()


@pytest.fixture
def today():
    return date(2025, 1, 20)


@pytest.fixture
def january():
    return ReportWindow(start=date(2025, 1, 1), end=date(2025, 1, 31))


@pytest.fixture
def revenue_rows():
    return [
        {'Tanggal': '2025-01-05', 'Channel_Penjualan': 'Online', 'Nominal_Omset': '100.000,00'},
        {'Tanggal': '2025-01-06', 'Channel_Penjualan': 'Toko Offline', 'Nominal_Omset': '50.000,00'},
    ]


@pytest.fixture
def expense_rows():
    return [
        {'Tanggal': '2025-01-05', 'Kategori_Biaya': 'Operasional', 'Nominal_Biaya': '30.000,00'},
    ]


@pytest.fixture
def ledgers(revenue_rows, expense_rows):
    return RawLedgers(revenue=revenue_rows, expenses=expense_rows, capital=[])
