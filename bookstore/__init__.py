"""Bookstore - inventory store package

This package contains the inventory data-access layer and its callers:
- Contract, routing and validation (contract.py, routing.py, validators.py)
- SQLite helper and content provider (database.py, provider.py)
- Change notification bus (notifications.py)
- Inventory facade, CLI and HTTP API (inventory.py, main.py, api.py)
"""
