"""
Engine Settings for the installment payment lifecycle.

This module contains the tunable parameters of the payment engine: how
overdue a due date must be before it counts as "super late", how receipt
numbers are synthesized, and the company details printed on receipts.

Environment variables use the PAYMENTS_ prefix:
    PAYMENTS_LATE_THRESHOLD_DAYS=30
    PAYMENTS_RECEIPT_PREFIX=AYCO-
    PAYMENTS_MAX_INSTALLMENT_YEARS=6

Usage:
    from payment_lifecycle.service.engine.settings import engine_settings

    threshold = engine_settings.late_threshold_days

    # Or create custom settings for testing
    custom = EngineSettings(late_threshold_days=15)
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """
    Configurable parameters for schedule, status and receipt logic.

    All settings can be overridden via environment variables with PAYMENTS_ prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="PAYMENTS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Status Classification ===
    late_threshold_days: int = Field(
        default=30,
        ge=0,
        description="Days overdue beyond which an agreement is SUPER_LATE",
    )

    # === Agreement Terms ===
    max_installment_years: int = Field(
        default=6,
        ge=1,
        description="Longest installment period accepted for new agreements",
    )

    # === Receipt Numbering ===
    receipt_prefix: str = Field(
        default="AYCO-",
        description="Prefix for receipt numbers synthesized from the payment number",
    )
    receipt_number_width: int = Field(
        default=3,
        ge=1,
        le=12,
        description="Zero-padded width of the numeric part of a receipt number",
    )

    # === Receipt Rendering ===
    currency_symbol: str = Field(default="₱")
    currency_name: str = Field(default="PESOS")
    company_name: str = Field(default="E-VERGREEN REAL ESTATE SERVICES")
    company_address: str = Field(default="CITY OF SAN JOSE DEL MONTE, BULACAN")
    company_contact: str = Field(default="09667898610")
    company_email: str = Field(default="evergreenrealty2020@gmail.com")

    @field_validator("receipt_prefix")
    @classmethod
    def validate_receipt_prefix(cls, v: str) -> str:
        """Receipt prefixes are printed verbatim, so reject blank ones."""
        if not v.strip():
            raise ValueError("receipt_prefix cannot be blank")
        return v.strip()

    def format_receipt_number(self, payment_number: int) -> str:
        """Build ``AYCO-005`` style receipt numbers."""
        return f"{self.receipt_prefix}{str(payment_number).zfill(self.receipt_number_width)}"


@lru_cache
def get_engine_settings() -> EngineSettings:
    """Get cached engine settings instance."""
    return EngineSettings()


engine_settings = get_engine_settings()
