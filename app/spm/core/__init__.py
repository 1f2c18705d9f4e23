"""Core services: paths, configuration, theme and the install ledger."""
