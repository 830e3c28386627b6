import httpx
from typing import Dict, List, Optional
import structlog
from app.repositories.interfaces.test_case_sink import ITestCaseSink
from app.models.schemas import ImportRecord
from app.config.settings import settings

logger = structlog.get_logger()


class HttpTestCaseSink(ITestCaseSink):
    """Hands imported test cases to the persistence service over HTTP"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_token: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.persistence_base_url or "").rstrip("/")
        self.api_token = api_token or settings.persistence_api_token
        self.timeout_seconds = timeout_seconds or settings.persistence_timeout_seconds
        self._transport = transport

    async def store_test_cases(self, records: List[ImportRecord], suite_id: Optional[str]) -> Optional[int]:
        """Post the records in one bulk request and return the stored count"""
        if not self.is_configured():
            logger.warning("Persistence service not configured")
            return None

        payload = {
            "suite_id": suite_id,
            "test_cases": [record.model_dump(mode="json") for record in records],
        }
        headers = self._get_auth_headers()
        headers.update({
            "Accept": "application/json",
            "Content-Type": "application/json"
        })

        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout_seconds) as client:
                response = await client.post(
                    f"{self.base_url}/test-cases/bulk",
                    json=payload,
                    headers=headers
                )
        except httpx.HTTPError as e:
            logger.error("Error storing imported test cases", suite_id=suite_id, error=str(e))
            return None

        if response.status_code not in (200, 201):
            logger.error("Failed to store imported test cases",
                         suite_id=suite_id,
                         status_code=response.status_code,
                         response=response.text)
            return None

        try:
            stored = int(response.json().get("stored", len(records)))
        except (ValueError, AttributeError):
            stored = len(records)
        logger.info("Imported test cases stored", suite_id=suite_id, stored=stored)
        return stored

    def _get_auth_headers(self) -> Dict[str, str]:
        """Get authentication headers for the persistence service"""
        if not self.api_token:
            return {}
        return {
            "Authorization": f"Bearer {self.api_token}"
        }

    def is_configured(self) -> bool:
        """Check if the persistence service is properly configured"""
        return bool(self.base_url)
