from fastapi import APIRouter

from .client_payments import client_payments_router

router = APIRouter()

router.include_router(client_payments_router, tags=["Client Payments"])
