"""
CLI package main entry point
"""

from bill_recon.cli import main

if __name__ == "__main__":
    main()
