"""Repository layer: DB access helpers (SQLite).

Keep functions thin and focused: each takes a borrowed connection and runs
SQL; transactions and row mapping belong to the services.
"""
from __future__ import annotations
