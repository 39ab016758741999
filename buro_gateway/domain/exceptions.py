"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class PersonNotFoundError(DomainException):
    """No records for the person in any probed source"""

    def __init__(self, person_id: str, message: str | None = None):
        self.person_id = person_id
        super().__init__(message or f"Person not found: {person_id}")


class UpstreamUnavailableError(DomainException):
    """Core person directory returned an error or is unavailable"""

    pass
