"""Credit bureau endpoints: assessment, core sync, reconciliation, mock data"""

import time
import logging
from fastapi import APIRouter, Depends, HTTPException, Query, Request

from buro_gateway.api.v1.schemas import (
    AssessmentResponse,
    ExpenseRecordSchema,
    IncomeRecordSchema,
    MockPopulationResponse,
    ReconciliationResponse,
    SyncResponse,
)
from buro_gateway.api.dependencies import (
    get_mock_service,
    get_query_service,
    get_reconciliation_service,
    get_request_id,
    get_sync_service,
)
from buro_gateway.domain.exceptions import PersonNotFoundError, UpstreamUnavailableError
from buro_gateway.infrastructure.observability.logging import log_assessment
from buro_gateway.services.mock import ExternalMockService
from buro_gateway.services.query import QueryService
from buro_gateway.services.reconciliation import ReconciliationService
from buro_gateway.services.sync import CoreSyncService

router = APIRouter()


@router.get("/consulta-por-cedula/{person_id}", response_model=AssessmentResponse)
async def query_by_person(
    person_id: str,
    request: Request,
    query_service: QueryService = Depends(get_query_service),
):
    """
    Risk grade and payment capacity for a person.

    Flow:
    1. Probe sources in configured order (internal first by default)
    2. Classify the records of the first source that has any
    3. Return records, grade and capacity
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        assessment = await query_service.query_by_person(person_id)

    except PersonNotFoundError as e:
        logging.warning(f"Person not found: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=404, detail=str(e))

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id, "person_id": person_id})
        raise HTTPException(status_code=500, detail=f"Error inesperado: {e}")

    duration_ms = (time.time() - start_time) * 1000
    log_assessment(request_id, person_id, assessment.risk_grade.value, assessment.matched_source, duration_ms)

    return AssessmentResponse(
        full_name=assessment.full_name,
        person_id=assessment.person_id,
        risk_grade=assessment.risk_grade.value,
        payment_capacity=assessment.payment_capacity,
        matched_source=assessment.matched_source,
        internal_incomes=[IncomeRecordSchema.model_validate(r) for r in assessment.internal_incomes],
        internal_expenses=[ExpenseRecordSchema.model_validate(r) for r in assessment.internal_expenses],
        external_incomes=[IncomeRecordSchema.model_validate(r) for r in assessment.external_incomes],
        external_expenses=[ExpenseRecordSchema.model_validate(r) for r in assessment.external_expenses],
    )


@router.post("/sincronizar-core", response_model=SyncResponse)
async def sync_from_core(
    request: Request,
    sync_service: CoreSyncService = Depends(get_sync_service),
):
    """Populate internal records for every PERSONA in the core directory"""
    request_id = get_request_id(request)

    try:
        result = await sync_service.bulk_sync_from_upstream()

    except UpstreamUnavailableError as e:
        logging.error(f"Core directory error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail=f"Core directory unavailable: {e}")

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail=f"Error inesperado: {e}")

    return SyncResponse(
        message=f"Se guardaron {result.created} clientes del buró interno",
        created=result.created,
        already_present=result.already_present,
        records_created=result.records_created,
    )


@router.get("/count-core-personas", response_model=int)
async def count_core_persons(
    request: Request,
    sync_service: CoreSyncService = Depends(get_sync_service),
):
    """Number of PERSONA entries in the core directory"""
    try:
        return await sync_service.count_upstream_persons()
    except UpstreamUnavailableError as e:
        logging.error(f"Core directory error: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=500, detail=f"Core directory unavailable: {e}")


@router.post("/sincronizar-externo", response_model=ReconciliationResponse)
def reconcile_external(
    request: Request,
    reconciliation_service: ReconciliationService = Depends(get_reconciliation_service),
):
    """Mirror internal records into the external store"""
    try:
        result = reconciliation_service.sync_internal_to_external()
    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=500, detail=f"Error inesperado: {e}")

    return ReconciliationResponse(
        incomes_created=result.incomes_created,
        incomes_skipped=result.incomes_skipped,
        expenses_created=result.expenses_created,
        expenses_skipped=result.expenses_skipped,
    )


@router.post("/mock-externo", response_model=MockPopulationResponse)
def generate_external_mock(
    request: Request,
    cantidad: int = Query(10, ge=1, le=500, description="Number of synthetic persons"),
    mock_service: ExternalMockService = Depends(get_mock_service),
):
    """Generate fictitious persons with records at 2-3 external institutions"""
    try:
        person_ids = mock_service.generate_external_population(cantidad)
    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=500, detail=f"Error inesperado: {e}")

    return MockPopulationResponse(requested=cantidad, person_ids=person_ids)


@router.post("/mock-externo/{person_id}")
def generate_external_mock_for_person(
    person_id: str,
    request: Request,
    nombre: str = Query(..., min_length=1, description="Full name of the person"),
    mock_service: ExternalMockService = Depends(get_mock_service),
):
    """Generate external records for one person if the external store has none"""
    try:
        created = mock_service.populate_external(person_id, nombre)
    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": get_request_id(request), "person_id": person_id})
        raise HTTPException(status_code=500, detail=f"Error inesperado: {e}")

    return {"person_id": person_id, "created": created}
