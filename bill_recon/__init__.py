"""
Bill Recon - Invoice and Payment Reconciliation

Groups uploaded bills and credits by counterparty, computes running and
aggregate balances, and exports the result as CSV.
"""

__version__ = "0.1.0"
__author__ = "Bill Recon Team"
