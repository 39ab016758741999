"""Synthetic population of the external bureau store"""

import logging
from typing import List, Sequence, Tuple
from faker import Faker
from sqlalchemy.orm import Session
from buro_gateway.config import settings
from buro_gateway.domain.generator import SyntheticRecordGenerator
from buro_gateway.domain.models import PersonProfile, RecordSource
from buro_gateway.infrastructure.database.repositories import RecordRepository
from buro_gateway.infrastructure.locks import PersonLockRegistry, person_locks
from buro_gateway.infrastructure.observability.metrics import record_created
from buro_gateway.services.unit_of_work import unit_of_work


class ExternalMockService:
    """Fills the external store with records spread over fictitious institutions"""

    def __init__(
        self,
        db: Session,
        generator: SyntheticRecordGenerator,
        institutions: Sequence[str] | None = None,
        locks: PersonLockRegistry = person_locks,
        locale: str = "es_ES",
    ):
        self.db = db
        self.generator = generator
        self.institutions = list(institutions or settings.external_institutions)
        self.locks = locks
        self.fake = Faker(locale)
        self.fake.seed_instance(generator.rng.getrandbits(32))

    def populate_external(self, person_id: str, full_name: str) -> bool:
        """
        Generate external records for one person unless they already have any.

        Returns True when records were created.
        """
        profile = PersonProfile(person_id=person_id, full_name=full_name, entity_type="PERSONA")
        with self.locks.hold(person_id), unit_of_work(self.db, "mock_external", person_id):
            incomes_created, expenses_created = self._populate(RecordRepository(self.db), profile)

        self._record_created(incomes_created, expenses_created)
        return incomes_created > 0

    def generate_external_population(self, count: int) -> List[str]:
        """Create count fictitious persons with external records, atomically"""
        if count <= 0:
            return []

        profiles = [self.generator.person(self.fake) for _ in range(count)]
        repo = RecordRepository(self.db)
        created: List[str] = []
        incomes_total = expenses_total = 0

        with self.locks.hold_many(p.person_id for p in profiles), unit_of_work(self.db, "mock_population"):
            for profile in profiles:
                incomes_created, expenses_created = self._populate(repo, profile)
                if incomes_created:
                    created.append(profile.person_id)
                    incomes_total += incomes_created
                    expenses_total += expenses_created

        self._record_created(incomes_total, expenses_total)
        logging.info("External mock population generated", extra={"requested": count, "persons_created": len(created)})
        return created

    def _populate(self, repo: RecordRepository, profile: PersonProfile) -> Tuple[int, int]:
        """Stage external records for a person; (0, 0) when they already have some"""
        if repo.has_incomes(profile.person_id, RecordSource.EXTERNAL) or repo.has_expenses(
            profile.person_id, RecordSource.EXTERNAL
        ):
            return 0, 0

        incomes, expenses = self.generator.external_records(profile, self.institutions)
        repo.save_incomes(incomes)
        repo.save_expenses(expenses)
        return len(incomes), len(expenses)

    @staticmethod
    def _record_created(incomes_created: int, expenses_created: int) -> None:
        record_created("income", RecordSource.EXTERNAL.value, incomes_created)
        record_created("expense", RecordSource.EXTERNAL.value, expenses_created)
