"""
Transactions export CLI

Writes the reconciled records to business_transactions_<date>.csv with a
per-company running balance and summary sections.
"""

import logging
import sys
from pathlib import Path

import click

from ..reconciliation.errors import EmptyDatasetError
from .options import build_session, setup_logging, upload_options

logger = logging.getLogger(__name__)


@click.command('export')
@upload_options
@click.option('--output-dir', default=None,
              help='Output directory (default: export.output_dir from config, else exports)')
def export_command(bills_path, credits_path, excel_path, search_term, config_dir,
                   verbose, log_json, log_file, output_dir):
    """
    Export reconciled transactions to CSV

    Examples:
        recon export --bills invoices.csv --credits payments.csv
        recon export --excel ledger.xlsx --search acme --output-dir reports
    """
    setup_logging(verbose, log_json, log_file)

    session = build_session(config_dir, bills_path, credits_path, excel_path)

    try:
        session.search(search_term)
        document = session.export()
    except EmptyDatasetError as e:
        click.echo(f"⚠️  {e}")
        sys.exit(1)

    target_dir = Path(output_dir or session.exporter.config['export']['output_dir'])
    try:
        file_path = document.write_to(target_dir)
    except OSError as e:
        click.echo(f"❌ Export failed: {e}")
        sys.exit(1)

    click.echo("✅ Export completed successfully!")
    click.echo(f"   • Records exported: {document.metadata.get('records', 0):,}")
    click.echo(f"   • Companies: {document.metadata.get('companies', 0):,}")
    click.echo(f"   • File path: {file_path}")
    click.echo(f"   • File size: {file_path.stat().st_size:,} bytes")
