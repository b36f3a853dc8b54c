"""
Reconciliation error taxonomy
"""


class ReconciliationError(Exception):
    """Base class for reconciliation failures"""
    pass


class SchemaError(ReconciliationError):
    """Raised when the name or amount column cannot be resolved in a file"""
    pass


class MalformedInputError(ReconciliationError):
    """Raised when a text source has fewer than two lines"""
    pass


class AdapterUnavailableError(ReconciliationError):
    """Raised when no spreadsheet decoding backend is installed"""
    pass


class NoMatchingSheetsError(ReconciliationError):
    """Raised when a workbook has neither a bills-like nor a credits-like sheet"""
    pass


class EmptyDatasetError(ReconciliationError):
    """Raised when a search or export is attempted with nothing loaded"""
    pass
