"""Worktime package.

Turns an append-only ledger of check-in/check-out events into per-day work
sessions (reconciled in each user's own time zone) and rolls those sessions up
into daily, weekly, monthly and custom-range reports. Organized by feature
modules (users, ledger, sessions, reports) with Protocol repositories and
MySQL adapters underneath the services.
"""
