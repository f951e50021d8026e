"""CLI commands for feeledger."""
