"""
Pytest configuration and shared fixtures for Bill Recon tests
"""

import io
import sys
from pathlib import Path

import pandas as pd
import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from bill_recon.reconciliation.csv_parser import TabularParser
from bill_recon.reconciliation.models import Record, RecordCategory


@pytest.fixture
def bills_csv():
    """Invoice file with an extra Date column"""
    return (
        "Date,Company Name,Invoice #,Total\n"
        "2024-01-15,Acme Corp,INV-001,\"$1,200.00\"\n"
        "2024-01-05,Globex,INV-002,500\n"
        "2024-02-01,acme corp,INV-003,300.50\n"
    )


@pytest.fixture
def credits_csv():
    """Payment file with a differently named amount column"""
    return (
        "Date,Client,Reference,Amount\n"
        "2024-01-20,Acme Corp,PAY-1,1000\n"
        "2024-01-25,Globex,PAY-2,\"$600.00\"\n"
    )


@pytest.fixture
def parser():
    return TabularParser()


@pytest.fixture
def bills(parser, bills_csv):
    return parser.parse(bills_csv, RecordCategory.BILL)


@pytest.fixture
def credits(parser, credits_csv):
    return parser.parse(credits_csv, RecordCategory.CREDIT)


@pytest.fixture
def make_record():
    """Factory for records with Name/Total columns"""
    def _make(name, total, category=RecordCategory.BILL, **extra):
        headers = ('Name', 'Total') + tuple(extra)
        row_data = {'Name': name, 'Total': str(total)}
        row_data.update({key: str(value) for key, value in extra.items()})
        return Record(name=name, total=float(total), headers=headers,
                      row_data=row_data, category=category)
    return _make


@pytest.fixture
def workbook_bytes():
    """Workbook with invoice and payment sheets plus an unrelated sheet"""
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
        pd.DataFrame({
            'Vendor': ['Acme', 'Initech'],
            'Total': [250, 75.5]
        }).to_excel(writer, sheet_name='Invoices 2024', index=False)
        pd.DataFrame({
            'Vendor': ['Acme'],
            'Amount': [100]
        }).to_excel(writer, sheet_name='Payments', index=False)
        pd.DataFrame({
            'Note': ['ignore me']
        }).to_excel(writer, sheet_name='Notes', index=False)
    return buffer.getvalue()


@pytest.fixture
def temp_config_dir(tmp_path):
    """Create temporary config directory for testing"""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    return config_dir


# Pytest markers and configuration
def pytest_configure(config):
    """Configure pytest markers"""
    config.addinivalue_line(
        "markers", "unit: mark test as unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as integration test"
    )


def pytest_collection_modifyitems(config, items):
    """Add default markers"""
    for item in items:
        if "test_cli" in str(item.fspath) or "test_session" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)
