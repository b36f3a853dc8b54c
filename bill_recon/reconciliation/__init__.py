"""
Reconciliation Module

Reconciles bills (invoices) against credits (payments) per counterparty.
Supports CSV uploads and workbooks with bills/credits sheets.
"""

from .csv_parser import TabularParser, parse_records
from .engine import ReconciliationEngine, reconcile
from .errors import (
    AdapterUnavailableError,
    EmptyDatasetError,
    MalformedInputError,
    NoMatchingSheetsError,
    ReconciliationError,
    SchemaError,
)
from .exporter import ExportSerializer
from .models import (
    AnnotatedRecord,
    CompanyLedger,
    CompanySummary,
    CounterpartyGroup,
    ExportDocument,
    ReconciliationResult,
    ReconciliationState,
    Record,
    RecordCategory,
    SequencedRecord,
    Summary,
    UploadStatus,
)
from .sequencer import BalanceSequencer
from .session import ReconciliationSession
from .spreadsheet import PandasSpreadsheetAdapter, SpreadsheetAdapter, WorkbookLoader

__all__ = [
    'TabularParser',
    'parse_records',
    'ReconciliationEngine',
    'reconcile',
    'BalanceSequencer',
    'ExportSerializer',
    'ReconciliationSession',
    'SpreadsheetAdapter',
    'PandasSpreadsheetAdapter',
    'WorkbookLoader',
    'Record',
    'RecordCategory',
    'AnnotatedRecord',
    'CounterpartyGroup',
    'CompanySummary',
    'CompanyLedger',
    'Summary',
    'ReconciliationResult',
    'ReconciliationState',
    'SequencedRecord',
    'UploadStatus',
    'ExportDocument',
    'ReconciliationError',
    'SchemaError',
    'MalformedInputError',
    'AdapterUnavailableError',
    'NoMatchingSheetsError',
    'EmptyDatasetError'
]
