"""
Export Serializer

Renders a reconciliation result as a CSV document: one block of rows per
company with a running balance, then a SUMMARY section and, for more than
one company, a COMPANY SUMMARY section.
"""

import logging
from datetime import date
from typing import Dict, Any, List, Optional

from ..utils.config import merge_config
from .amounts import format_fixed
from .errors import EmptyDatasetError
from .models import ExportDocument, ReconciliationResult
from .sequencer import BalanceSequencer, collation_key

logger = logging.getLogger(__name__)


def quote(value) -> str:
    """Quote a field, doubling embedded quotes"""
    return '"' + str(value).replace('"', '""') + '"'


def quoted_line(values) -> str:
    return ','.join(quote(value) for value in values) + '\n'


class ExportSerializer:
    """Serializes reconciliation results to the transactions CSV format"""

    def __init__(self, config: Optional[Dict[str, Any]] = None,
                 sequencer: Optional[BalanceSequencer] = None):
        self.config = merge_config(self._default_config(), config)
        self.filename_prefix = self.config['export']['filename_prefix']
        self.sequencer = sequencer or BalanceSequencer()

    def _default_config(self) -> Dict[str, Any]:
        """Default export configuration"""
        return {
            'export': {
                'filename_prefix': 'business_transactions',
                'output_dir': 'exports'
            }
        }

    def export_columns(self, result: ReconciliationResult) -> List[str]:
        """Data columns carried from the source files (the name column is replaced by Company)"""
        return [header for header in result.headers if header.lower() != 'name']

    def serialize(self, result: ReconciliationResult) -> str:
        """
        Render a reconciliation result as CSV text

        Args:
            result: Reconciliation result with at least one record

        Returns:
            CSV document text

        Raises:
            EmptyDatasetError: If the result has no records
        """
        if result.is_empty:
            raise EmptyDatasetError("No records to export. Please upload files first.")

        columns = self.export_columns(result)
        lines = [','.join(['Company', 'Type'] + columns + ['Running Balance']) + '\n']

        current_company = None
        for row in self.sequencer.export_sequence(result.records):
            if row.company_key != current_company:
                if current_company is not None:
                    lines.append('\n')
                current_company = row.company_key

            entry = row.entry
            values = [entry.name, entry.category.label]
            values.extend(entry.record.value(header) for header in columns)
            values.append(format_fixed(row.running_balance))
            lines.append(quoted_line(values))

        summary = result.summary
        lines.append('\n\nSUMMARY\n')
        lines.append(quoted_line(['Total Companies', result.company_count]))
        lines.append(quoted_line(['Total Records', result.record_count]))
        lines.append(quoted_line(['Total Invoices', format_fixed(summary.total_bills)]))
        lines.append(quoted_line(['Total Payments', format_fixed(summary.total_credits)]))
        lines.append(quoted_line(['Net Outstanding', format_fixed(summary.net_balance)]))

        if len(summary.companies) > 1:
            lines.append('\n\nCOMPANY SUMMARY\n')
            lines.append(quoted_line(['Company Name', 'Total Invoices', 'Total Payments', 'Outstanding Balance']))
            for company in sorted(summary.companies, key=lambda c: collation_key(c.name)):
                lines.append(quoted_line([
                    company.name,
                    format_fixed(company.bill_sum),
                    format_fixed(company.credit_sum),
                    format_fixed(company.balance)
                ]))

        return ''.join(lines)

    def filename(self, today: Optional[date] = None) -> str:
        """Export filename for the given day, e.g. business_transactions_2024-06-01.csv"""
        today = today or date.today()
        return f"{self.filename_prefix}_{today.isoformat()}.csv"

    def build_document(self, result: ReconciliationResult, today: Optional[date] = None) -> ExportDocument:
        """
        Serialize a result into a named export document

        Args:
            result: Reconciliation result
            today: Date used in the filename (default: today)

        Returns:
            ExportDocument with filename, content type and content
        """
        content = self.serialize(result)
        document = ExportDocument(
            filename=self.filename(today),
            content=content,
            metadata={'records': result.record_count, 'companies': result.company_count}
        )
        logger.info(f"Exported {result.record_count} record(s) for {result.company_count} "
                    f"compan{'y' if result.company_count == 1 else 'ies'} to {document.filename}")
        return document


# Convenience functions
def serialize_result(result: ReconciliationResult, config: Optional[Dict[str, Any]] = None) -> str:
    """
    Convenience function to render a result as CSV text

    Args:
        result: Reconciliation result
        config: Optional export configuration

    Returns:
        CSV document text
    """
    return ExportSerializer(config).serialize(result)
