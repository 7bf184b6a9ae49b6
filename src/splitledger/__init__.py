"""
splitledger — Ledger & Settlement Engine для групп с общими расходами.

Нормализует расходы в разных валютах, строит балансы участников и сводит
их к минимальному практическому набору переводов.
"""

__version__ = "0.1.0"
