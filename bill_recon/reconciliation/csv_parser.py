"""
Tabular Parser

Turns delimited text (one uploaded file, or one spreadsheet sheet rendered
as CSV) into Records. Name and amount columns are discovered by keyword,
so files with headers like "Vendor Name" or "Invoice Total" load as-is.
"""

import logging
from typing import Dict, Any, List, Optional, Sequence

from ..utils.config import merge_config
from .amounts import parse_amount
from .errors import MalformedInputError, SchemaError
from .models import Record, RecordCategory

logger = logging.getLogger(__name__)


def split_row(line: str) -> List[str]:
    """
    Split one data row on commas, honouring double-quoted regions

    A quote only toggles the quoted state and is dropped; doubled quotes
    are not collapsed into a literal quote.
    """
    fields = []
    current = []
    in_quotes = False

    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == ',' and not in_quotes:
            fields.append(''.join(current).strip())
            current = []
        else:
            current.append(char)

    fields.append(''.join(current).strip())
    return fields


def find_column(headers_lower: Sequence[str], keywords: Sequence[str]) -> int:
    """
    Index of the first header containing a keyword, by keyword priority

    Args:
        headers_lower: Lowercased header names
        keywords: Keywords in priority order

    Returns:
        Column index, or -1 when no keyword matches
    """
    for keyword in keywords:
        for index, header in enumerate(headers_lower):
            if keyword in header:
                return index
    return -1


class TabularParser:
    """
    Parser for comma-delimited record files

    The first line is the header row. Rows without a name or with a zero
    or unparsable amount are dropped.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize parser with configuration

        Args:
            config: Configuration dict; only the 'parser' section is read
        """
        self.config = merge_config(self._default_config(), config)
        self.name_keywords = self.config['parser']['name_keywords']
        self.amount_keywords = self.config['parser']['amount_keywords']

    def _default_config(self) -> Dict[str, Any]:
        """Default parser configuration"""
        return {
            'parser': {
                'name_keywords': ['name', 'company', 'client', 'vendor', 'supplier'],
                'amount_keywords': ['total', 'amount', 'sum', 'value', 'price']
            }
        }

    def parse(self, text: str, category: RecordCategory = RecordCategory.BILL) -> List[Record]:
        """
        Parse delimited text into Records

        Args:
            text: Raw file contents
            category: Category assigned to every parsed record

        Returns:
            Accepted records in file order; empty when the text has no data rows

        Raises:
            SchemaError: If the name or amount column cannot be found
        """
        try:
            lines = self._split_lines(text)
        except MalformedInputError as e:
            logger.warning(f"No data rows to parse: {e}")
            return []

        headers = [header.strip() for header in lines[0].split(',')]
        headers_lower = [header.lower() for header in headers]

        name_index = find_column(headers_lower, self.name_keywords)
        amount_index = find_column(headers_lower, self.amount_keywords)

        if name_index == -1 or amount_index == -1:
            raise SchemaError("Could not find Name and Total columns")

        logger.debug(f"Resolved columns: name='{headers[name_index]}', amount='{headers[amount_index]}'")

        required_fields = max(name_index, amount_index)
        records = []

        for line in lines[1:]:
            fields = split_row(line)
            if len(fields) <= required_fields:
                continue

            name = fields[name_index].strip()
            total = parse_amount(fields[amount_index])
            if not name or total == 0:
                continue

            row_data = {}
            for index, header in enumerate(headers):
                row_data[header] = fields[index].strip() if index < len(fields) else ''

            records.append(Record(
                name=name,
                total=total,
                headers=tuple(headers),
                row_data=row_data,
                category=category
            ))

        dropped = len(lines) - 1 - len(records)
        if dropped:
            logger.warning(f"Dropped {dropped} {category.value} row(s) without a name or non-zero amount")

        logger.info(f"Parsed {len(records)} {category.value} record(s) from {len(lines) - 1} data row(s)")
        return records

    def _split_lines(self, text: str) -> List[str]:
        """Split text into lines, requiring a header and at least one data row"""
        lines = (text or '').strip().split('\n')
        if len(lines) < 2:
            raise MalformedInputError(f"Expected a header row and data rows, got {len(lines)} line(s)")
        return lines


# Convenience functions
def parse_records(text: str, category: RecordCategory = RecordCategory.BILL,
                  config: Optional[Dict[str, Any]] = None) -> List[Record]:
    """
    Convenience function to parse one file's contents

    Args:
        text: Raw file contents
        category: Category for the parsed records
        config: Optional parser configuration

    Returns:
        List of Records
    """
    parser = TabularParser(config)
    return parser.parse(text, category)
