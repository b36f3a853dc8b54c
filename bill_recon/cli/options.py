"""
Shared CLI options and session bootstrap
"""

import logging
from typing import Optional

import click

from ..reconciliation.session import BILLS_SLOT, CREDITS_SLOT, EXCEL_SLOT, ReconciliationSession
from ..utils.config import ConfigManager
from ..utils.structured_logging import configure_structured_logging

logger = logging.getLogger(__name__)

# Later uploads replace earlier ones, so explicit CSVs override workbook sheets
UPLOAD_ORDER = (EXCEL_SLOT, BILLS_SLOT, CREDITS_SLOT)

_existing_file = click.Path(exists=True, dir_okay=False)


_UPLOAD_OPTIONS = [
    click.option('--bills', 'bills_path', type=_existing_file, default=None,
                 help='CSV file of bills / invoices'),
    click.option('--credits', 'credits_path', type=_existing_file, default=None,
                 help='CSV file of credits / payments'),
    click.option('--excel', 'excel_path', type=_existing_file, default=None,
                 help='Workbook with bills and credits sheets'),
    click.option('--search', 'search_term', default=None,
                 help='Only show counterparties whose name contains this text'),
    click.option('--config-dir', default='config',
                 help='Config directory (default: config)'),
    click.option('--verbose', '-v', is_flag=True, default=False,
                 help='Verbose output'),
    click.option('--log-json', is_flag=True, default=False,
                 help='Emit logs as JSON'),
    click.option('--log-file', default=None,
                 help='Also write logs to this file'),
]


def upload_options(func):
    """Options common to every command that loads data"""
    for option in reversed(_UPLOAD_OPTIONS):
        func = option(func)
    return func


def setup_logging(verbose: bool, log_json: bool, log_file: Optional[str] = None):
    configure_structured_logging(
        log_level='DEBUG' if verbose else 'WARNING',
        log_file=log_file,
        json_format=log_json
    )


def build_session(config_dir: str,
                  bills_path: Optional[str] = None,
                  credits_path: Optional[str] = None,
                  excel_path: Optional[str] = None) -> ReconciliationSession:
    """
    Create a session and apply the given uploads

    Args:
        config_dir: Directory holding recon.yml
        bills_path: Optional bills CSV
        credits_path: Optional credits CSV
        excel_path: Optional workbook

    Returns:
        Session with every readable upload applied
    """
    config = ConfigManager(config_dir).get_recon_config()
    session = ReconciliationSession(config)

    paths = {EXCEL_SLOT: excel_path, BILLS_SLOT: bills_path, CREDITS_SLOT: credits_path}
    for slot in UPLOAD_ORDER:
        if paths[slot]:
            status = session.load_file(slot, paths[slot])
            icon = '✅' if status.ok else '❌'
            click.echo(f"{icon} {slot}: {status.message}")

    return session
