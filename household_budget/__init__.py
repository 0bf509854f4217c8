"""
Household Budget - Core Package

Calculation and service layer for a personal/household budgeting app:
bills, budgets, net worth, goals and debt payoff.

DESIGN PRINCIPLES:
1. The hosted backend owns persistence and authorization
2. Domain logic is pure and takes every input explicitly
3. Money is Decimal, never float
4. "Today" always comes from an injected clock
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Household Budget Team"
