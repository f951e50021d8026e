"""CLI interface for feeledger."""
