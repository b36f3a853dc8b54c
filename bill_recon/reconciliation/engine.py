"""
Reconciliation Engine

Merges bill and credit record sets, groups them by counterparty and computes
per-counterparty and aggregate balances. A positive balance is money owed
to the uploader, a negative one means the counterparty overpaid.
"""

import logging
from typing import Dict, Any, Iterable, List, Optional, Sequence, Tuple

from ..utils.config import merge_config
from .amounts import resolve_amount
from .models import (
    AnnotatedRecord,
    CompanySummary,
    CounterpartyGroup,
    ReconciliationResult,
    Record,
    Summary,
)

logger = logging.getLogger(__name__)


def normalize_term(term: Optional[str]) -> str:
    """Lowercased, trimmed search term ('' means show all)"""
    return (term or '').strip().lower()


def filter_records(records: Sequence[Record], term: Optional[str]) -> List[Record]:
    """Records whose name contains term, case-insensitively"""
    term = normalize_term(term)
    if not term:
        return list(records)
    return [record for record in records if term in record.name.lower()]


def header_union(*header_lists: Iterable[str]) -> Tuple[str, ...]:
    """De-duplicated headers in first-seen order"""
    seen = {}
    for headers in header_lists:
        for header in headers:
            seen.setdefault(header, None)
    return tuple(seen)


class ReconciliationEngine:
    """
    Counterparty reconciliation engine

    Stateless: every call recomputes grouping and totals from its inputs.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize engine with configuration

        Args:
            config: Configuration dict; only the 'amounts' section is read
        """
        self.config = merge_config(self._default_config(), config)
        self.exact_headers = tuple(self.config['amounts']['exact_headers'])

    def _default_config(self) -> Dict[str, Any]:
        """Default engine configuration"""
        return {
            'amounts': {
                'exact_headers': ['total', 'amount']
            }
        }

    def reconcile(self,
                  bills: Sequence[Record],
                  credits: Sequence[Record],
                  filter_term: Optional[str] = None,
                  headers: Optional[Sequence[str]] = None) -> ReconciliationResult:
        """
        Reconcile bills against credits

        Args:
            bills: Loaded bill records
            credits: Loaded credit records
            filter_term: Optional case-insensitive counterparty substring
            headers: Header union override; defaults to the headers of the
                first bill and first credit

        Returns:
            ReconciliationResult with grouped records and summary
        """
        if headers is None:
            headers = header_union(bills[0].headers if bills else (),
                                   credits[0].headers if credits else ())
        else:
            headers = header_union(headers)

        filtered_bills = filter_records(bills, filter_term)
        filtered_credits = filter_records(credits, filter_term)

        group_members: Dict[str, Dict[str, Any]] = {}
        annotated = []

        for bucket, records in (('bills', filtered_bills), ('credits', filtered_credits)):
            for record in records:
                key = record.name.lower()
                members = group_members.setdefault(key, {'name': record.name, 'bills': [], 'credits': []})
                members[bucket].append(record)
                annotated.append(AnnotatedRecord(record, resolve_amount(record, self.exact_headers)))

        groups = {
            key: CounterpartyGroup(key, members['name'], tuple(members['bills']), tuple(members['credits']))
            for key, members in group_members.items()
        }
        summary = self._calculate_summary(groups)

        logger.info(f"Reconciled {len(filtered_bills)} bill(s) and {len(filtered_credits)} credit(s) "
                    f"across {len(groups)} counterparties (filter: '{normalize_term(filter_term)}')")

        return ReconciliationResult(
            records=tuple(annotated),
            headers=headers,
            groups=groups,
            summary=summary
        )

    def _calculate_summary(self, groups: Dict[str, CounterpartyGroup]) -> Summary:
        """Per-counterparty and aggregate totals"""
        total_bills = 0.0
        total_credits = 0.0
        companies = []

        for key, group in groups.items():
            bill_sum = 0.0
            for bill in group.bills:
                bill_sum += resolve_amount(bill, self.exact_headers)

            credit_sum = 0.0
            for credit in group.credits:
                credit_sum += resolve_amount(credit, self.exact_headers)

            total_bills += bill_sum
            total_credits += credit_sum

            companies.append(CompanySummary(
                key=key,
                name=group.name,
                bill_sum=bill_sum,
                credit_sum=credit_sum,
                balance=bill_sum - credit_sum
            ))

        return Summary(
            total_bills=total_bills,
            total_credits=total_credits,
            net_balance=total_bills - total_credits,
            companies=tuple(companies)
        )


# Convenience functions
def reconcile(bills: Sequence[Record],
              credits: Sequence[Record],
              filter_term: Optional[str] = None,
              config: Optional[Dict[str, Any]] = None) -> ReconciliationResult:
    """
    Convenience function for counterparty reconciliation

    Args:
        bills: Bill records
        credits: Credit records
        filter_term: Optional counterparty search term
        config: Optional engine configuration

    Returns:
        ReconciliationResult
    """
    engine = ReconciliationEngine(config)
    return engine.reconcile(bills, credits, filter_term)
