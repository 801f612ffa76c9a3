"""Shared stock trading ledger service package."""
