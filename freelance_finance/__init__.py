"""
Freelance Finance - Source Package

The financial calculation engine behind a freelancer's finance tracker:
project income, expense burn rate, receivables, reminders, a health
score and calendar/timeline views, derived from stored records.

DESIGN PRINCIPLES:
1. The engine is pure: it reads a snapshot and never mutates it
2. Bad numbers degrade to zero, they never crash a dashboard
3. "Now" is injected, never read from the clock mid-calculation
4. Mutations live in the ledger and are auditable
"""

__version__ = "1.0.0"
__author__ = "Freelance Finance Team"
