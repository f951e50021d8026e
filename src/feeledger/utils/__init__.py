"""Utility modules for feeledger."""
