"""
Spreadsheet Adapter

Decodes a workbook into named sheets and maps them onto record categories.
Each matched sheet is rendered as CSV text and handed to the Tabular Parser.
"""

import io
import logging
from abc import ABC, abstractmethod
from typing import Dict, Any, List, Optional, Sequence, Tuple

import pandas as pd

from ..utils.config import merge_config
from .csv_parser import TabularParser
from .errors import AdapterUnavailableError, NoMatchingSheetsError
from .models import Record, RecordCategory

logger = logging.getLogger(__name__)


class SpreadsheetAdapter(ABC):
    """Capability to enumerate a workbook's sheets and render one as CSV"""

    @abstractmethod
    def sheet_names(self) -> List[str]:
        """Names of all sheets, in workbook order"""
        pass

    @abstractmethod
    def sheet_to_csv(self, sheet_name: str) -> str:
        """Render a sheet as comma-delimited text, first row as header"""
        pass


class PandasSpreadsheetAdapter(SpreadsheetAdapter):
    """Workbook decoding through pandas.ExcelFile"""

    def __init__(self, content: bytes, engine: Optional[str] = None):
        """
        Open a workbook from raw bytes

        Args:
            content: Workbook file contents
            engine: Optional pandas Excel engine, auto-detected if None

        Raises:
            AdapterUnavailableError: If no Excel backend is installed
            ValueError: If the bytes are not a readable workbook
        """
        try:
            self._workbook = pd.ExcelFile(io.BytesIO(content), engine=engine)
        except ImportError as e:
            raise AdapterUnavailableError(f"Spreadsheet support is not installed: {e}") from e

    def sheet_names(self) -> List[str]:
        return [str(name) for name in self._workbook.sheet_names]

    def sheet_to_csv(self, sheet_name: str) -> str:
        df = self._workbook.parse(sheet_name=sheet_name, header=None, dtype=str)
        return df.to_csv(index=False, header=False, lineterminator='\n')


def find_sheet(sheet_names: Sequence[str], keywords: Sequence[str]) -> Optional[str]:
    """
    First sheet whose lowercase name contains a keyword, by keyword priority

    Args:
        sheet_names: Sheet names in workbook order
        keywords: Keywords in priority order

    Returns:
        Matching sheet name or None
    """
    for keyword in keywords:
        for name in sheet_names:
            if keyword in name.lower():
                return name
    return None


class WorkbookLoader:
    """Loads bills and credits from a workbook's category sheets"""

    def __init__(self, config: Optional[Dict[str, Any]] = None,
                 parser: Optional[TabularParser] = None):
        self.config = merge_config(self._default_config(), config)
        self.bill_keywords = self.config['spreadsheet']['bill_sheet_keywords']
        self.credit_keywords = self.config['spreadsheet']['credit_sheet_keywords']
        self.parser = parser or TabularParser(config)

    def _default_config(self) -> Dict[str, Any]:
        """Default sheet mapping"""
        return {
            'spreadsheet': {
                'bill_sheet_keywords': ['bill', 'invoice', 'inv'],
                'credit_sheet_keywords': ['credit', 'payment', 'pay', 'receipt']
            }
        }

    def load(self, adapter: SpreadsheetAdapter) -> Tuple[List[Record], List[Record]]:
        """
        Parse the bills and credits sheets of a workbook

        Args:
            adapter: Decoded workbook

        Returns:
            Tuple of (bills, credits); a category without a sheet is empty

        Raises:
            NoMatchingSheetsError: If neither category has a sheet
            SchemaError: If a matched sheet lacks name/amount columns
        """
        sheet_names = adapter.sheet_names()
        bills_sheet = find_sheet(sheet_names, self.bill_keywords)
        credits_sheet = find_sheet(sheet_names, self.credit_keywords)

        if bills_sheet is None and credits_sheet is None:
            raise NoMatchingSheetsError(
                "Could not find sheets with names containing: bills, invoices, credits, payments "
                f"(found: {', '.join(sheet_names) or 'none'})"
            )

        logger.info(f"Workbook sheets mapped: bills={bills_sheet!r}, credits={credits_sheet!r}")

        bills = []
        credits = []
        if bills_sheet is not None:
            bills = self.parser.parse(adapter.sheet_to_csv(bills_sheet), RecordCategory.BILL)
        if credits_sheet is not None:
            credits = self.parser.parse(adapter.sheet_to_csv(credits_sheet), RecordCategory.CREDIT)

        return bills, credits


# Convenience functions
def load_workbook(content: bytes, config: Optional[Dict[str, Any]] = None) -> Tuple[List[Record], List[Record]]:
    """
    Convenience function to decode workbook bytes into (bills, credits)

    Args:
        content: Workbook file contents
        config: Optional configuration

    Returns:
        Tuple of (bills, credits)
    """
    loader = WorkbookLoader(config)
    return loader.load(PandasSpreadsheetAdapter(content))
