"""Shared utilities — cross-cutting concerns importable by any layer.

Rules
-----
* No business logic.
* No I/O beyond configuring process-wide facilities (logging).
"""
