"""Core person directory HTTP client"""

import httpx
from typing import List
from buro_gateway.domain.models import PersonProfile
from buro_gateway.domain.exceptions import UpstreamUnavailableError
from buro_gateway.config import settings


class CorePersonClient:
    """Client for the upstream core service that owns the list of known persons"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.core_api_base
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def list_by_entity_type(self, entity_type: str) -> List[PersonProfile]:
        """
        Fetch every person of the given entity type.

        Raises:
            UpstreamUnavailableError: On timeout, HTTP errors, or invalid response
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(
                    f"{self.base_url}/api/v1/clientes/tipo-entidad/{entity_type}",
                )
                response.raise_for_status()
                data = response.json()

                return [
                    PersonProfile(
                        person_id=str(item["numeroIdentificacion"]),
                        full_name=item["nombre"],
                        entity_type=item.get("tipoEntidad", entity_type),
                    )
                    for item in data
                    if item.get("tipoEntidad", entity_type) == entity_type
                ]

            except httpx.TimeoutException as e:
                raise UpstreamUnavailableError(f"Core directory timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise UpstreamUnavailableError(f"Core directory error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise UpstreamUnavailableError(f"Core directory unreachable: {e}") from e
            except (KeyError, ValueError, TypeError, AttributeError) as e:
                raise UpstreamUnavailableError(f"Invalid person data from core: {e}") from e
