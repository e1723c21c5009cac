"""Client payment agreement API endpoints."""

from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query

from payment_lifecycle.application.dto import (
    AgreementDetail,
    AgreementSummary,
    CreateAgreementRequest,
    LotSelection,
    RecordPaymentRequest,
    SchedulePreviewRequest,
    UpdateAgreementRequest,
)
from payment_lifecycle.application.services import AgreementService, PaymentService
from payment_lifecycle.core.dependencies import get_agreement_service, get_payment_service
from payment_lifecycle.core.metrics import (
    record_agreement_created,
    record_agreement_status,
    record_payment_conflict,
    record_payment_recorded,
    track_record_payment_latency,
)
from payment_lifecycle.domain.entities import ScheduleEntry, Transaction
from payment_lifecycle.domain.exceptions import PaymentConflictException
from payment_lifecycle.presentation.schemas import (
    AgreementDetailSchema,
    AgreementListResponseSchema,
    AgreementSummarySchema,
    CountersSchema,
    CreateAgreementSchema,
    ErrorResponseSchema,
    LotSchema,
    ProgressSchema,
    ReceiptDataSchema,
    RecordPaymentResponseSchema,
    RecordPaymentSchema,
    ScheduleEntrySchema,
    SchedulePreviewResponseSchema,
    SchedulePreviewSchema,
    TransactionListResponseSchema,
    TransactionSchema,
    UpdateAgreementSchema,
)

client_payments_router = APIRouter(
    prefix="/client-payments",
    responses={
        404: {"model": ErrorResponseSchema, "description": "Agreement not found"},
        422: {"model": ErrorResponseSchema, "description": "Invalid request"},
    },
)


@client_payments_router.post(
    "",
    response_model=AgreementDetailSchema,
    status_code=201,
    summary="Create Client Payment Agreement",
    description="""
    Open a spot cash or installment agreement for one or more lots.

    The contract price is the sum of the lot prices. The payments already
    collected at signing are recorded in the ledger.
    """,
)
async def create_agreement(
    request: CreateAgreementSchema,
    agreement_service: Annotated[AgreementService, Depends(get_agreement_service)],
) -> AgreementDetailSchema:
    dto = CreateAgreementRequest(
        client_name=request.client_name,
        payment_type=request.payment_type,
        start_date=request.start_date,
        installment_years=request.installment_years,
        completed_payments=request.completed_payments,
        contact_number=request.contact_number,
        email=request.email,
        address=request.address,
        notes=request.notes,
        user_id=request.user_id,
        lots=[
            LotSelection(
                lot_id=lot.lot_id,
                property_name=lot.property_name,
                block_lot_no=lot.block_lot_no,
                price=lot.price,
            )
            for lot in request.lots
        ],
    )

    detail = await agreement_service.create_agreement(dto)

    record_agreement_created(detail.agreement.payment_type.value)

    return _detail_schema(detail)


@client_payments_router.get(
    "",
    response_model=AgreementListResponseSchema,
    summary="List Client Payment Agreements",
    description="List agreements, newest first, with their current status and progress.",
)
async def list_agreements(
    user_id: Annotated[
        Optional[str],
        Query(max_length=255, description="Only agreements owned by this client"),
    ] = None,
    agreement_service: Annotated[AgreementService, Depends(get_agreement_service)] = None,
) -> AgreementListResponseSchema:
    summaries = await agreement_service.list_agreements(user_id)

    return AgreementListResponseSchema(
        agreements=[_summary_schema(summary) for summary in summaries],
    )


@client_payments_router.post(
    "/schedule-preview",
    response_model=SchedulePreviewResponseSchema,
    summary="Preview Payment Schedule",
    description="Compute the schedule for terms that have not been saved yet.",
)
async def preview_schedule(
    request: SchedulePreviewSchema,
    agreement_service: Annotated[AgreementService, Depends(get_agreement_service)],
) -> SchedulePreviewResponseSchema:
    preview = agreement_service.preview_schedule(
        SchedulePreviewRequest(
            payment_type=request.payment_type,
            total_amount=request.total_amount,
            start_date=request.start_date,
            installment_years=request.installment_years,
            completed_payments=request.completed_payments,
        )
    )

    return SchedulePreviewResponseSchema(
        payment_type=preview.payment_type,
        total_amount=preview.total_amount,
        total_installments=preview.total_installments,
        schedule=[_schedule_entry_schema(entry) for entry in preview.schedule],
    )


@client_payments_router.get(
    "/{agreement_id}",
    response_model=AgreementDetailSchema,
    summary="Get Client Payment Agreement",
    description="""
    Retrieve an agreement with its reconciled schedule, progress, ledger
    and current status. Status is evaluated as of today.
    """,
)
async def get_agreement(
    agreement_id: Annotated[UUID, Path(description="UUID of the agreement")],
    agreement_service: Annotated[AgreementService, Depends(get_agreement_service)],
) -> AgreementDetailSchema:
    detail = await agreement_service.get_agreement(agreement_id)

    record_agreement_status(detail.status.value)

    return _detail_schema(detail)


@client_payments_router.patch(
    "/{agreement_id}",
    response_model=AgreementDetailSchema,
    summary="Update Client Payment Agreement",
    description="""
    Edit client details or mark installments as paid. Raising
    completed_payments records a ledger entry for each newly paid
    installment. Fails with 409 when a payment was recorded meanwhile.
    """,
    responses={
        409: {"model": ErrorResponseSchema, "description": "Concurrent payment"},
    },
)
async def update_agreement(
    agreement_id: Annotated[UUID, Path(description="UUID of the agreement")],
    request: UpdateAgreementSchema,
    agreement_service: Annotated[AgreementService, Depends(get_agreement_service)],
) -> AgreementDetailSchema:
    detail = await agreement_service.update_agreement(
        agreement_id,
        UpdateAgreementRequest(
            client_name=request.client_name,
            contact_number=request.contact_number,
            email=request.email,
            address=request.address,
            notes=request.notes,
            user_id=request.user_id,
            completed_payments=request.completed_payments,
        ),
    )

    record_agreement_status(detail.status.value)

    return _detail_schema(detail)


@client_payments_router.get(
    "/{agreement_id}/transactions",
    response_model=TransactionListResponseSchema,
    summary="Get Payment Transactions",
    description="Recorded payments for an agreement, ordered by payment number.",
)
async def get_transactions(
    agreement_id: Annotated[UUID, Path(description="UUID of the agreement")],
    agreement_service: Annotated[AgreementService, Depends(get_agreement_service)],
) -> TransactionListResponseSchema:
    transactions = await agreement_service.get_transactions(agreement_id)

    return TransactionListResponseSchema(
        agreement_id=str(agreement_id),
        transactions=[_transaction_schema(txn) for txn in transactions],
    )


@client_payments_router.post(
    "/{agreement_id}/record-payment",
    response_model=RecordPaymentResponseSchema,
    status_code=201,
    summary="Record Payment",
    description="""
    Record the next installment payment and return the acknowledgement
    receipt. Fails with 409 when the agreement is already completed or when
    another recording for the same installment won the race.
    """,
    responses={
        409: {"model": ErrorResponseSchema, "description": "Completed agreement or conflict"},
    },
)
async def record_payment(
    agreement_id: Annotated[UUID, Path(description="UUID of the agreement")],
    request: RecordPaymentSchema,
    payment_service: Annotated[PaymentService, Depends(get_payment_service)],
) -> RecordPaymentResponseSchema:
    dto = RecordPaymentRequest(
        amount=request.amount,
        payment_date=request.payment_date,
        payment_method=request.payment_method,
        reference_number=request.reference_number,
        notes=request.notes,
    )

    try:
        with track_record_payment_latency():
            receipt = await payment_service.record_payment(agreement_id, dto)
    except PaymentConflictException:
        record_payment_conflict()
        raise

    # Record business metrics
    record_payment_recorded(
        receipt.transaction.payment_method.value,
        receipt.transaction.amount,
        receipt.counters.is_completed,
    )

    data = receipt.receipt_data
    return RecordPaymentResponseSchema(
        agreement_id=receipt.agreement_id,
        transaction=_transaction_schema(receipt.transaction),
        receipt_data=ReceiptDataSchema(
            receipt_number=data.receipt_number,
            client_name=data.client_name,
            payment_date=data.payment_date,
            amount=data.amount,
            payment_method=data.payment_method.value,
            reference_number=data.reference_number,
            notes=data.notes,
            property_name=data.property_name,
            block_lot_no=data.block_lot_no,
            payment_number=data.payment_number,
            total_installments=data.total_installments,
        ),
        counters=CountersSchema(
            completed_payments=receipt.counters.completed_payments,
            next_payment_date=receipt.counters.next_payment_date,
            is_completed=receipt.counters.is_completed,
        ),
        receipt_text=receipt.receipt_text,
    )


def _schedule_entry_schema(entry: ScheduleEntry) -> ScheduleEntrySchema:
    return ScheduleEntrySchema(
        payment_number=entry.payment_number,
        due_date=entry.due_date,
        amount=entry.amount,
        status=entry.status.value,
    )


def _transaction_schema(txn: Transaction) -> TransactionSchema:
    return TransactionSchema(
        transaction_id=str(txn.id),
        payment_number=txn.payment_number,
        payment_date=txn.payment_date,
        amount=txn.amount,
        payment_method=txn.payment_method.value if txn.payment_method else None,
        reference_number=txn.reference_number,
        notes=txn.notes,
    )


def _summary_fields(summary: AgreementSummary | AgreementDetail) -> dict:
    agreement = summary.agreement
    return {
        "id": str(agreement.id),
        "client_name": agreement.client_name,
        "payment_type": agreement.payment_type.value,
        "total_amount": agreement.total_amount,
        "installment_years": agreement.installment_years,
        "total_installments": agreement.total_installments,
        "start_date": agreement.start_date,
        "completed_payments": agreement.completed_payments,
        "next_payment_date": agreement.next_payment_date,
        "status": summary.status.value,
        "progress": ProgressSchema(
            total_amount=summary.progress.total_amount,
            paid_amount=summary.progress.paid_amount,
            remaining_amount=summary.progress.remaining_amount,
            completed=summary.progress.completed,
            total=summary.progress.total,
            percent=summary.progress.percent,
        ),
    }


def _summary_schema(summary: AgreementSummary) -> AgreementSummarySchema:
    return AgreementSummarySchema(**_summary_fields(summary))


def _detail_schema(detail: AgreementDetail) -> AgreementDetailSchema:
    agreement = detail.agreement
    return AgreementDetailSchema(
        **_summary_fields(detail),
        contact_number=agreement.contact_number,
        email=agreement.email,
        address=agreement.address,
        notes=agreement.notes,
        user_id=agreement.user_id,
        created_at=agreement.created_at,
        as_of=detail.as_of,
        expected_payment_amount=detail.expected_payment_amount,
        lots=[
            LotSchema(
                lot_id=lot.lot_id,
                property_name=lot.property_name,
                block_lot_no=lot.block_lot_no,
                price=lot.price,
            )
            for lot in agreement.lots
        ],
        schedule=[_schedule_entry_schema(entry) for entry in detail.schedule],
        transactions=[_transaction_schema(txn) for txn in detail.transactions],
    )
