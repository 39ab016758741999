"""Bulk synchronization of internal records from the core person directory"""

import asyncio
import logging
from typing import List, Tuple
from sqlalchemy.orm import Session
from buro_gateway.config import settings
from buro_gateway.domain.exceptions import UpstreamUnavailableError
from buro_gateway.domain.generator import SyntheticRecordGenerator
from buro_gateway.domain.models import PersonProfile, RecordSource, SyncResult
from buro_gateway.infrastructure.clients.core import CorePersonClient
from buro_gateway.infrastructure.database.repositories import RecordRepository
from buro_gateway.infrastructure.locks import PersonLockRegistry, person_locks
from buro_gateway.infrastructure.observability.metrics import core_fetch_failures_counter, record_created
from buro_gateway.services.unit_of_work import unit_of_work
from buro_gateway.utils.money import ZERO


def populate_internal(
    repo: RecordRepository,
    generator: SyntheticRecordGenerator,
    profile: PersonProfile,
    institution: str,
) -> Tuple[int, int]:
    """
    Generate whatever internal records the person is missing.

    Caller must hold the person lock and count the records once committed.
    Returns (incomes_created, expenses_created).
    """
    incomes = repo.find_incomes(profile.person_id, RecordSource.INTERNAL)
    incomes_created = 0
    if not incomes:
        incomes = repo.save_incomes([generator.income(profile, institution)])
        incomes_created = len(incomes)

    expenses_created = 0
    if not repo.has_expenses(profile.person_id, RecordSource.INTERNAL):
        total_income = sum((i.average_monthly_balance for i in incomes), ZERO)
        expenses = repo.save_expenses(generator.expenses(profile, institution, total_income))
        expenses_created = len(expenses)

    return incomes_created, expenses_created


def record_internal_created(incomes_created: int, expenses_created: int) -> None:
    record_created("income", RecordSource.INTERNAL.value, incomes_created)
    record_created("expense", RecordSource.INTERNAL.value, expenses_created)


class CoreSyncService:
    """Keeps the internal store populated for every person the core knows about"""

    def __init__(
        self,
        db: Session,
        directory: CorePersonClient,
        generator: SyntheticRecordGenerator,
        locks: PersonLockRegistry = person_locks,
        internal_institution: str | None = None,
        entity_type: str | None = None,
    ):
        self.db = db
        self.directory = directory
        self.generator = generator
        self.locks = locks
        self.internal_institution = internal_institution or settings.internal_institution
        self.entity_type = entity_type or settings.core_entity_type

    async def fetch_persons(self) -> List[PersonProfile]:
        """Full person list from the core; failures propagate"""
        try:
            return await self.directory.list_by_entity_type(self.entity_type)
        except UpstreamUnavailableError as e:
            core_fetch_failures_counter.inc()
            logging.error(f"Core directory error: {e}", extra={"entity_type": self.entity_type})
            raise

    async def count_upstream_persons(self) -> int:
        return len(await self.fetch_persons())

    async def bulk_sync_from_upstream(self) -> SyncResult:
        """
        Create missing internal income/expense records for every core person.

        Each person is committed on its own: a store failure stops the batch
        but keeps persons already processed. Lock waits and store writes run
        in a worker thread so the event loop keeps serving other requests.
        """
        persons = await self.fetch_persons()
        repo = RecordRepository(self.db)
        result = SyncResult()

        for person in persons:
            incomes_created, expenses_created = await asyncio.to_thread(self._sync_person, repo, person)

            if incomes_created or expenses_created:
                result.created += 1
                result.records_created += incomes_created + expenses_created
            else:
                result.already_present += 1

        logging.info(
            "Core sync completed",
            extra={
                "persons": len(persons),
                "persons_created": result.created,
                "already_present": result.already_present,
                "records_created": result.records_created,
            },
        )
        return result

    def _sync_person(self, repo: RecordRepository, person: PersonProfile) -> Tuple[int, int]:
        with self.locks.hold(person.person_id), unit_of_work(self.db, "bulk_sync", person.person_id):
            created = populate_internal(repo, self.generator, person, self.internal_institution)

        record_internal_created(*created)
        return created
