"""Dependency injection for FastAPI."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from payment_lifecycle.application.services import AgreementService, PaymentService
from payment_lifecycle.infrastructure.database import get_db_session
from payment_lifecycle.infrastructure.repositories import PostgresAgreementRepository
from payment_lifecycle.service.engine import EngineSettings, get_engine_settings


# Repository dependencies
async def get_agreement_repository(
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> PostgresAgreementRepository:
    """Get an AgreementRepository instance."""
    return PostgresAgreementRepository(session)


# Service dependencies
async def get_agreement_service(
    agreement_repo: Annotated[PostgresAgreementRepository, Depends(get_agreement_repository)],
    engine_settings: Annotated[EngineSettings, Depends(get_engine_settings)],
) -> AgreementService:
    """Get an AgreementService instance."""
    return AgreementService(agreement_repository=agreement_repo, settings=engine_settings)


async def get_payment_service(
    agreement_repo: Annotated[PostgresAgreementRepository, Depends(get_agreement_repository)],
    engine_settings: Annotated[EngineSettings, Depends(get_engine_settings)],
) -> PaymentService:
    """Get a PaymentService instance."""
    return PaymentService(agreement_repository=agreement_repo, settings=engine_settings)
