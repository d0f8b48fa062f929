"""Lecture settlement package.

Turns verified lecture attendance into teacher payments while keeping a
per-teacher advance ledger. Organized by feature modules (attendance,
ledger, payments, ...) with a thin Flask controller layer on top of
service and repository layers.
"""
