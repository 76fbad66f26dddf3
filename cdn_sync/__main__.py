#!/usr/bin/env python3
"""
Entry point for the sync tool CLI.

Run with: python -m cdn_sync upload
"""

from .cli import cli

if __name__ == '__main__':
    cli()
