"""Risk assessment lookup across the internal and external record sources"""

import asyncio
import logging
from typing import List, Optional, Sequence, Tuple
from sqlalchemy.orm import Session
from buro_gateway.config import settings
from buro_gateway.domain.exceptions import PersonNotFoundError
from buro_gateway.domain.generator import SyntheticRecordGenerator
from buro_gateway.domain.models import (
    ExpenseRecord,
    IncomeRecord,
    PersonProfile,
    RecordSource,
    RiskAssessment,
    SourceProbe,
)
from buro_gateway.domain.scoring import classify
from buro_gateway.infrastructure.clients.core import CorePersonClient
from buro_gateway.infrastructure.database.repositories import RecordRepository
from buro_gateway.infrastructure.locks import PersonLockRegistry, person_locks
from buro_gateway.infrastructure.observability.metrics import person_not_found_counter, record_assessment
from buro_gateway.services.sync import CoreSyncService, populate_internal, record_internal_created
from buro_gateway.services.unit_of_work import unit_of_work


def probes_from_settings() -> List[SourceProbe]:
    """Configured fallback order"""
    return [SourceProbe.parse(value) for value in settings.query_probe_order]


class QueryService:
    """
    Resolves a person to a risk assessment.

    Probes are tried in order and the first one holding any income or expense
    wins; records from other sources are not mixed in. With populate_on_miss,
    a person known to the core but absent everywhere gets internal records
    generated on the spot.
    """

    def __init__(
        self,
        db: Session,
        probes: Sequence[SourceProbe],
        directory: Optional[CorePersonClient] = None,
        generator: Optional[SyntheticRecordGenerator] = None,
        populate_on_miss: bool = False,
        locks: PersonLockRegistry = person_locks,
        internal_institution: str | None = None,
    ):
        if not probes:
            raise ValueError("At least one source probe is required")
        self.db = db
        self.probes = list(probes)
        self.directory = directory
        self.generator = generator
        self.populate_on_miss = populate_on_miss
        self.locks = locks
        self.internal_institution = internal_institution or settings.internal_institution

    async def query_by_person(self, person_id: str) -> RiskAssessment:
        """
        Classify the person using the first source that knows them.

        Raises:
            PersonNotFoundError: No records in any probed source
        """
        repo = RecordRepository(self.db)

        with unit_of_work(self.db, "query", person_id, commit=False):
            for probe in self.probes:
                incomes, expenses = self._probe(repo, person_id, probe)
                if incomes or expenses:
                    return self._assess(person_id, probe, incomes, expenses)

        if self.populate_on_miss and self.directory and self.generator:
            return await self._populate_and_assess(repo, person_id)

        person_not_found_counter.inc()
        logging.warning(
            f"No records for person {person_id}",
            extra={"person_id": person_id, "probes": [p.describe() for p in self.probes]},
        )
        raise PersonNotFoundError(person_id)

    def _probe(
        self,
        repo: RecordRepository,
        person_id: str,
        probe: SourceProbe,
    ) -> Tuple[List[IncomeRecord], List[ExpenseRecord]]:
        incomes = repo.find_incomes(person_id, probe.source, probe.institution)
        expenses = repo.find_expenses(person_id, probe.source, probe.institution)
        return incomes, expenses

    def _assess(
        self,
        person_id: str,
        probe: SourceProbe,
        incomes: List[IncomeRecord],
        expenses: List[ExpenseRecord],
    ) -> RiskAssessment:
        classification = classify(incomes, expenses)
        full_name = (incomes or expenses)[0].full_name
        matched = probe.describe()

        assessment = RiskAssessment(
            full_name=full_name,
            person_id=person_id,
            risk_grade=classification.grade,
            payment_capacity=classification.payment_capacity,
            matched_source=matched,
        )
        if probe.source == RecordSource.INTERNAL:
            assessment.internal_incomes = incomes
            assessment.internal_expenses = expenses
        else:
            assessment.external_incomes = incomes
            assessment.external_expenses = expenses

        record_assessment(classification.grade.value, matched)
        return assessment

    async def _populate_and_assess(self, repo: RecordRepository, person_id: str) -> RiskAssessment:
        sync = CoreSyncService(self.db, self.directory, self.generator, self.locks, self.internal_institution)
        persons = await sync.fetch_persons()
        profile = next((p for p in persons if p.person_id == person_id), None)
        if profile is None:
            person_not_found_counter.inc()
            logging.warning(f"Person {person_id} unknown to core", extra={"person_id": person_id})
            raise PersonNotFoundError(person_id, f"Person not found in core: {person_id}")

        logging.info(f"Generating internal records for {person_id}", extra={"person_id": person_id})
        incomes, expenses = await asyncio.to_thread(self._populate_locked, repo, profile)
        return self._assess(person_id, SourceProbe(RecordSource.INTERNAL), incomes, expenses)

    def _populate_locked(
        self,
        repo: RecordRepository,
        profile: PersonProfile,
    ) -> Tuple[List[IncomeRecord], List[ExpenseRecord]]:
        """Blocking part of populate-on-miss: lock wait, generation and commit"""
        with self.locks.hold(profile.person_id), unit_of_work(self.db, "query_populate", profile.person_id):
            created = populate_internal(repo, self.generator, profile, self.internal_institution)
            incomes = repo.find_incomes(profile.person_id, RecordSource.INTERNAL)
            expenses = repo.find_expenses(profile.person_id, RecordSource.INTERNAL)

        record_internal_created(*created)
        return incomes, expenses
