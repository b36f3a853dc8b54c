"""
Reconciliation Session

Request/response facade over the loaded bills and credits: upload a
category, search by counterparty, export the current view, reset.

The session holds a single reference to an immutable ReconciliationState.
Every upload parses into a brand new state and swaps the reference in one
assignment, so a failed upload never touches previously loaded data.
"""

import logging
import zipfile
from datetime import date
from pathlib import Path
from typing import Dict, Any, Optional, Sequence, Union

from .csv_parser import TabularParser
from .engine import ReconciliationEngine
from .errors import EmptyDatasetError, ReconciliationError
from .exporter import ExportSerializer
from .models import (
    EMPTY_STATE,
    ExportDocument,
    ReconciliationResult,
    ReconciliationState,
    Record,
    RecordCategory,
    UploadStatus,
)
from .sequencer import BalanceSequencer
from .spreadsheet import PandasSpreadsheetAdapter, SpreadsheetAdapter, WorkbookLoader
from ..utils.structured_logging import ReconLogger, operation_timer

logger = logging.getLogger(__name__)

BILLS_SLOT = 'bills'
CREDITS_SLOT = 'credits'
EXCEL_SLOT = 'excel'
SLOTS = (BILLS_SLOT, CREDITS_SLOT, EXCEL_SLOT)

_SLOT_CATEGORIES = {
    BILLS_SLOT: RecordCategory.BILL,
    CREDITS_SLOT: RecordCategory.CREDIT,
}

NO_FILE_MESSAGE = 'No file selected'

# Failures reported on an upload slot instead of propagating
UPLOAD_ERRORS = (ReconciliationError, OSError, UnicodeDecodeError, ValueError, zipfile.BadZipFile)


def category_for_slot(slot: str) -> RecordCategory:
    try:
        return _SLOT_CATEGORIES[slot]
    except KeyError:
        raise ValueError(f"Unsupported upload slot: {slot}. Supported slots: {list(SLOTS)}")


def slot_for_category(category: RecordCategory) -> str:
    return BILLS_SLOT if category is RecordCategory.BILL else CREDITS_SLOT


class ReconciliationSession:
    """
    Upload / search / export workflow over two record categories

    Collaborators (parser, engine, sequencer, exporter) are pure; the only
    state here is the current ReconciliationState, the last result shown
    and the per-slot upload statuses.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize session with configuration

        Args:
            config: Configuration dict shared by all components
        """
        self.config = config or {}
        self.parser = TabularParser(self.config)
        self.workbook_loader = WorkbookLoader(self.config, parser=self.parser)
        self.engine = ReconciliationEngine(self.config)
        self.sequencer = BalanceSequencer()
        self.exporter = ExportSerializer(self.config, sequencer=self.sequencer)
        self.recon_logger = ReconLogger(__name__)

        self._state: ReconciliationState = EMPTY_STATE
        self._current_result: Optional[ReconciliationResult] = None
        self._statuses: Dict[str, UploadStatus] = self._initial_statuses()

    @staticmethod
    def _initial_statuses() -> Dict[str, UploadStatus]:
        return {slot: UploadStatus(slot=slot, ok=True, message=NO_FILE_MESSAGE) for slot in SLOTS}

    @property
    def state(self) -> ReconciliationState:
        return self._state

    @property
    def current_result(self) -> Optional[ReconciliationResult]:
        return self._current_result

    def status(self, slot: str) -> UploadStatus:
        """Status indicator of an upload slot"""
        return self._statuses[slot]

    @property
    def statuses(self) -> Dict[str, UploadStatus]:
        return dict(self._statuses)

    # Loading

    def load_category(self, category: RecordCategory, records: Sequence[Record]) -> UploadStatus:
        """
        Replace one category's collection with already parsed records

        Args:
            category: Category to replace
            records: New records for that category

        Returns:
            Upload status for the category's slot
        """
        self._swap(self._state.with_category(category, records))

        count = len(records)
        if category is RecordCategory.BILL:
            status = UploadStatus(BILLS_SLOT, True, f"{count} invoices loaded", bill_count=count)
        else:
            status = UploadStatus(CREDITS_SLOT, True, f"{count} payments loaded", credit_count=count)
        return self._record_status(status)

    def load_text(self, category: RecordCategory, text: str, raise_errors: bool = False) -> UploadStatus:
        """
        Parse CSV text and replace that category

        Args:
            category: Category of the file
            text: File contents
            raise_errors: Re-raise parse failures after recording the status

        Returns:
            Upload status for the category's slot
        """
        slot = slot_for_category(category)
        try:
            with operation_timer(self.recon_logger, 'parse', slot=slot):
                records = self.parser.parse(text, category)
        except UPLOAD_ERRORS as e:
            return self._upload_failed(slot, e, raise_errors)
        return self.load_category(category, records)

    def load_workbook(self, content: bytes, adapter: Optional[SpreadsheetAdapter] = None,
                      raise_errors: bool = False) -> UploadStatus:
        """
        Load bills and credits from a workbook, replacing both categories

        Args:
            content: Workbook bytes (ignored when an adapter is given)
            adapter: Pre-built spreadsheet adapter
            raise_errors: Re-raise failures after recording the status

        Returns:
            Upload status for the excel slot
        """
        try:
            with operation_timer(self.recon_logger, 'parse_workbook', slot=EXCEL_SLOT):
                adapter = adapter or PandasSpreadsheetAdapter(content)
                bills, credits = self.workbook_loader.load(adapter)
        except UPLOAD_ERRORS as e:
            return self._upload_failed(EXCEL_SLOT, e, raise_errors)

        self._swap(self._state.with_categories(bills, credits))

        status = UploadStatus(
            EXCEL_SLOT, True,
            f"{len(bills) + len(credits)} transactions loaded "
            f"({len(bills)} invoices, {len(credits)} payments)",
            bill_count=len(bills),
            credit_count=len(credits)
        )
        return self._record_status(status)

    def load_file(self, slot: str, path: Union[str, Path], raise_errors: bool = False) -> UploadStatus:
        """
        Read a file from disk into an upload slot

        Args:
            slot: 'bills', 'credits' or 'excel'
            path: File path
            raise_errors: Re-raise failures after recording the status

        Returns:
            Upload status for the slot
        """
        path = Path(path)
        logger.info(f"Loading {path.name} into {slot} slot")

        if slot == EXCEL_SLOT:
            try:
                content = path.read_bytes()
            except OSError as e:
                return self._upload_failed(slot, e, raise_errors)
            return self.load_workbook(content, raise_errors=raise_errors)

        category = category_for_slot(slot)
        try:
            text = path.read_text(encoding='utf-8-sig')
        except (OSError, UnicodeDecodeError) as e:
            return self._upload_failed(slot, e, raise_errors)
        return self.load_text(category, text, raise_errors=raise_errors)

    def reset(self):
        """Clear both categories, the current result and every slot status"""
        self._swap(EMPTY_STATE)
        self._current_result = None
        self._statuses = self._initial_statuses()
        logger.info("Session reset")

    # Queries

    def search(self, term: Optional[str] = None) -> ReconciliationResult:
        """
        Reconcile the loaded data, optionally filtered by counterparty

        Args:
            term: Case-insensitive counterparty substring; empty shows all

        Returns:
            ReconciliationResult, also kept as the current result for export

        Raises:
            EmptyDatasetError: If nothing has been loaded
        """
        state = self._state
        if state.is_empty:
            raise EmptyDatasetError("Please upload at least one file first")

        result = self._reconcile(state, term)
        self._current_result = result
        return result

    def show_all(self) -> ReconciliationResult:
        """Reconcile every loaded record"""
        return self.search(None)

    def ledgers(self, result: Optional[ReconciliationResult] = None):
        """Per-company running-balance ledgers of a result (default: current)"""
        result = result or self._current_result
        if result is None:
            raise EmptyDatasetError("Please upload at least one file first")
        return self.sequencer.company_ledgers(result)

    def export(self, today: Optional[date] = None) -> ExportDocument:
        """
        Export the current result

        Args:
            today: Date used in the filename (default: today)

        Returns:
            ExportDocument

        Raises:
            EmptyDatasetError: If there is no current result or it has no records
        """
        result = self._current_result
        if result is None or result.is_empty:
            raise EmptyDatasetError("No records to export. Please upload files first.")

        document = self.exporter.build_document(result, today)
        self.recon_logger.export_event(
            filename=document.filename,
            message=f"Export prepared: {document.filename}",
            records=result.record_count,
            companies=result.company_count
        )
        return document

    # Internals

    def _reconcile(self, state: ReconciliationState, term: Optional[str]) -> ReconciliationResult:
        headers = tuple(state.bill_headers) + tuple(state.credit_headers)
        with operation_timer(self.recon_logger, 'reconcile'):
            result = self.engine.reconcile(state.bills, state.credits, term, headers=headers)
        self.recon_logger.reconcile_event(
            message="Reconciliation completed",
            records=result.record_count,
            companies=result.company_count,
            net_balance=result.summary.net_balance
        )
        return result

    def _swap(self, new_state: ReconciliationState):
        """Install a new state and refresh the show-all view"""
        self._state = new_state
        self._current_result = None if new_state.is_empty else self._reconcile(new_state, None)

    def _record_status(self, status: UploadStatus) -> UploadStatus:
        self._statuses[status.slot] = status
        self.recon_logger.upload_event(
            slot=status.slot,
            ok=status.ok,
            message=status.message,
            bill_count=status.bill_count,
            credit_count=status.credit_count
        )
        return status

    def _upload_failed(self, slot: str, error: Exception, raise_errors: bool) -> UploadStatus:
        logger.error(f"Error loading {slot} file: {error}")
        status = self._record_status(UploadStatus(slot, False, f"Error loading file: {error}"))
        if raise_errors:
            raise error
        return status
