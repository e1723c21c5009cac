"""
Domain Interfaces (Ports)
"""

from .repositories import AgreementRepository

__all__ = [
    "AgreementRepository",
]
