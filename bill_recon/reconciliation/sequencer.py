"""
Balance Sequencer

Orders annotated records deterministically and attaches the running
balance after each row. Bills add their amount, credits subtract it.
"""

import logging
import unicodedata
from itertools import groupby
from typing import Dict, List, Sequence, Tuple

import numpy as np

from .models import (
    AnnotatedRecord,
    CompanyLedger,
    ReconciliationResult,
    SequencedRecord,
)

logger = logging.getLogger(__name__)


def fold_accents(text: str) -> str:
    """Case-folded text with combining marks removed, so "Émile" folds to "emile"."""
    decomposed = unicodedata.normalize('NFKD', text)
    return ''.join(char for char in decomposed if not unicodedata.combining(char)).casefold()


def collation_key(text: str) -> Tuple[str, str, str]:
    """
    Locale-style sort key

    Accents and case are ignored first, then accents break ties, then
    lowercase sorts before uppercase.
    """
    return fold_accents(text), text.casefold(), text.swapcase()


def company_key(entry: AnnotatedRecord) -> str:
    return entry.name.lower()


def _global_order(entry: AnnotatedRecord):
    return collation_key(entry.name), entry.category.sort_rank


def _company_order(entry: AnnotatedRecord):
    return entry.category.sort_rank, entry.record.date_value


def _export_order(entry: AnnotatedRecord):
    # company_key keeps names that collate equal (Strasse, Straße) in separate blocks
    return collation_key(entry.name), company_key(entry), entry.category.sort_rank, entry.record.date_value


class BalanceSequencer:
    """Builds running-balance ledgers for display and export"""

    def sequence(self, records: Sequence[AnnotatedRecord], grouped: bool = False) -> List[SequencedRecord]:
        """
        Order records and compute running balances

        Args:
            records: Annotated records from a reconciliation result
            grouped: Per-company mode; the balance resets for each company

        Returns:
            Sequenced records in display order
        """
        if not grouped:
            ordered = sorted(records, key=_global_order)
            return self._accumulate([ordered])

        by_company: Dict[str, List[AnnotatedRecord]] = {}
        for entry in records:
            by_company.setdefault(company_key(entry), []).append(entry)

        segments = [
            sorted(by_company[key], key=_company_order)
            for key in sorted(by_company, key=collation_key)
        ]
        return self._accumulate(segments)

    def export_sequence(self, records: Sequence[AnnotatedRecord]) -> List[SequencedRecord]:
        """
        Export order: by name, bills before credits, then by date

        The running balance resets whenever the lowercase name changes.
        """
        ordered = sorted(records, key=_export_order)
        segments = [list(rows) for _, rows in groupby(ordered, key=company_key)]
        return self._accumulate(segments)

    def company_ledgers(self, result: ReconciliationResult) -> List[CompanyLedger]:
        """
        Per-company ledgers for on-screen tables

        Args:
            result: Reconciliation result

        Returns:
            One ledger per counterparty, ordered by company name
        """
        summaries = {company.key: company for company in result.summary.companies}
        ledgers = []

        rows = self.sequence(result.records, grouped=True)
        for key, company_rows in groupby(rows, key=lambda row: row.company_key):
            ledgers.append(CompanyLedger(summary=summaries[key], rows=tuple(company_rows)))

        return ledgers

    def _accumulate(self, segments: List[List[AnnotatedRecord]]) -> List[SequencedRecord]:
        """Running balance per segment, starting from zero in each"""
        sequenced = []
        for segment in segments:
            if not segment:
                continue
            signed = np.array([entry.signed_amount for entry in segment], dtype=float)
            balances = np.cumsum(signed)
            for entry, balance in zip(segment, balances):
                sequenced.append(SequencedRecord(
                    entry=entry,
                    running_balance=float(balance),
                    company_key=company_key(entry)
                ))

        logger.debug(f"Sequenced {len(sequenced)} record(s) in {len(segments)} segment(s)")
        return sequenced


# Convenience functions
def sequence_records(records: Sequence[AnnotatedRecord], grouped: bool = False) -> List[SequencedRecord]:
    """
    Convenience function to sequence records

    Args:
        records: Annotated records
        grouped: Reset the running balance per company

    Returns:
        Sequenced records
    """
    return BalanceSequencer().sequence(records, grouped)
