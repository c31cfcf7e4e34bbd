"""Ordering engine for the job board.

Modules:
- keys: fractional order keys that never force siblings to be renumbered
- sorter: the canonical in-column ordering of a record snapshot
- targets: drop targets and drop results
- resolver: turns a drop into a new (status, order key) pair
"""
