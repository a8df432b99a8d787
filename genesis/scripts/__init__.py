"""Maintenance scripts run with `python -m genesis.scripts.<name>`."""
