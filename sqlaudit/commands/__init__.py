"""CLI commands for sqlaudit."""
