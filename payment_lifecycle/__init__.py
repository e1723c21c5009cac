"""
Payment Lifecycle - Installment payment engine for a real-estate back office

Generates payment schedules for spot cash and installment lot sales,
reconciles them against the recorded ledger, classifies each agreement's
standing and records payments with acknowledgement receipts.
"""

__version__ = "0.1.0"
