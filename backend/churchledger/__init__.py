"""
ChurchLedger - financial ledger service for church management.
"""
__version__ = "1.0.0"
