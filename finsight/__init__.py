"""
Finsight - Source Package

A personal-finance dashboard for a single signed-in user: accounts,
transactions, budgets and goals, with reports computed in memory and
AI commentary layered on top.

DESIGN PRINCIPLES:
1. Amounts are unsigned; direction comes from the transaction type
2. Every calendar window is computed from an explicit reference date
3. Categories are referenced by id, never by name
4. Storage layer is swappable
5. AI output is advisory and never blocks a page
"""

__version__ = "1.0.0"
__author__ = "Finsight Team"
