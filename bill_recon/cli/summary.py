"""
Reconciliation summary CLI

Prints totals and one running-balance table per counterparty.
"""

import logging
import sys
from typing import List

import click
import pandas as pd

from ..reconciliation.amounts import format_currency, parse_amount
from ..reconciliation.errors import EmptyDatasetError
from ..reconciliation.models import CompanyLedger, ReconciliationResult
from .options import build_session, setup_logging, upload_options

logger = logging.getLogger(__name__)

# Columns rendered as currency when their value parses as a number
AMOUNT_HINTS = ('amount', 'total', 'sum', 'value', 'price')


def signed_currency(value: float) -> str:
    return f"-{format_currency(value)}" if value < 0 else format_currency(value)


def _display_value(header: str, value: str) -> str:
    if not value:
        return '-'
    if any(hint in header.lower() for hint in AMOUNT_HINTS):
        cleaned = value.replace(',', '').replace('$', '').strip()
        try:
            float(cleaned)
        except ValueError:
            return value
        return format_currency(parse_amount(cleaned))
    return value


def ledger_frame(ledger: CompanyLedger, headers: List[str]) -> pd.DataFrame:
    """One company's ledger as a display table"""
    rows = []
    for row in ledger.rows:
        entry = row.entry
        display = {'Type': entry.category.label}
        for header in headers:
            display[header] = _display_value(header, entry.record.value(header))
        display['Running Balance'] = signed_currency(row.running_balance)
        rows.append(display)
    return pd.DataFrame(rows, columns=['Type'] + list(headers) + ['Running Balance'])


def render_result(result: ReconciliationResult, ledgers: List[CompanyLedger], search_term: str = None) -> str:
    """Text report of a reconciliation result"""
    summary = result.summary
    lines = []

    if search_term:
        lines.append(f'Records for "{search_term}" ({result.record_count} transactions)')
    else:
        lines.append(f"All Records ({result.record_count} transactions from {result.company_count} companies)")

    lines.append(f"  Total Invoices:      {format_currency(summary.total_bills)}")
    lines.append(f"  Total Payments:      {format_currency(summary.total_credits)}")
    net_prefix = '+' if summary.net_balance >= 0 else '-'
    lines.append(f"  Outstanding Balance: {net_prefix}{format_currency(summary.net_balance)}")

    for ledger in ledgers:
        company = ledger.summary
        lines.append('')
        lines.append(f"{company.name} | Invoices: {format_currency(company.bill_sum)} | "
                     f"Payments: {format_currency(company.credit_sum)} | "
                     f"{company.status}: {signed_currency(company.balance)}")
        lines.append(ledger_frame(ledger, list(result.headers)).to_string(index=False))

    return '\n'.join(lines)


@click.command('summary')
@upload_options
def summary_command(bills_path, credits_path, excel_path, search_term, config_dir, verbose, log_json, log_file):
    """
    Show balances per counterparty

    Examples:
        recon summary --bills invoices.csv --credits payments.csv
        recon summary --excel ledger.xlsx --search acme
    """
    setup_logging(verbose, log_json, log_file)

    session = build_session(config_dir, bills_path, credits_path, excel_path)

    try:
        result = session.search(search_term)
    except EmptyDatasetError as e:
        click.echo(f"⚠️  {e}")
        sys.exit(1)

    if result.is_empty:
        click.echo(f'No records found for "{search_term}". '
                   'Please check the company name and try again.')
        return

    click.echo(render_result(result, session.ledgers(result), search_term))
