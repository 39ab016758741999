"""Dependency injection for FastAPI endpoints"""

import random
from fastapi import Depends, Request
from sqlalchemy.orm import Session
from buro_gateway.config import settings
from buro_gateway.domain.generator import SyntheticRecordGenerator
from buro_gateway.infrastructure.clients.core import CorePersonClient
from buro_gateway.infrastructure.database.session import get_db
from buro_gateway.services.mock import ExternalMockService
from buro_gateway.services.query import QueryService, probes_from_settings
from buro_gateway.services.reconciliation import ReconciliationService
from buro_gateway.services.sync import CoreSyncService


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_core_client() -> CorePersonClient:
    """Provide core directory client instance"""
    return CorePersonClient()


def get_rng() -> random.Random:
    """Random source for synthetic data, seeded when mock_seed is set"""
    return random.Random(settings.mock_seed)


def get_generator(rng: random.Random = Depends(get_rng)) -> SyntheticRecordGenerator:
    """Provide synthetic record generator"""
    return SyntheticRecordGenerator(rng, delinquency_rate=settings.delinquency_rate)


def get_query_service(
    db: Session = Depends(get_db),
    core_client: CorePersonClient = Depends(get_core_client),
    generator: SyntheticRecordGenerator = Depends(get_generator),
) -> QueryService:
    return QueryService(
        db,
        probes_from_settings(),
        directory=core_client,
        generator=generator,
        populate_on_miss=settings.populate_on_miss,
    )


def get_sync_service(
    db: Session = Depends(get_db),
    core_client: CorePersonClient = Depends(get_core_client),
    generator: SyntheticRecordGenerator = Depends(get_generator),
) -> CoreSyncService:
    return CoreSyncService(db, core_client, generator)


def get_reconciliation_service(db: Session = Depends(get_db)) -> ReconciliationService:
    return ReconciliationService(db)


def get_mock_service(
    db: Session = Depends(get_db),
    generator: SyntheticRecordGenerator = Depends(get_generator),
) -> ExternalMockService:
    return ExternalMockService(db, generator)
