"""
Command Line Interface for Bill Recon
"""

import click

from .. import __version__
from .export import export_command
from .summary import summary_command


@click.group()
@click.version_option(__version__, prog_name='recon')
def main():
    """Reconcile bills against credits per counterparty"""


main.add_command(summary_command)
main.add_command(export_command)

__all__ = [
    'main',
    'export_command',
    'summary_command'
]
