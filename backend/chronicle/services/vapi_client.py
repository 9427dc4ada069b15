import httpx
import pydantic
from typing import Dict, Any, List, Optional
import logging
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..config import Settings, get_settings
from ..errors import ProviderError
from ..schemas.pydantic_schemas import RemoteCallRecord

# Set up logger
logger = logging.getLogger(__name__)

# Connection-level failures only; HTTP error statuses are not retried
_transient = retry(
    retry=retry_if_exception_type(httpx.TransportError),
    wait=wait_exponential(min=1, max=10),
    stop=stop_after_attempt(3),
    reraise=True,
)


class VapiClient:
    def __init__(self, settings: Optional[Settings] = None, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self.settings = settings or get_settings()
        self.api_key = self.settings.vapi_api_key
        self.base_url = self.settings.vapi_base_url
        self.timeout = self.settings.http_timeout_seconds
        self.simulated = not self.api_key or len(self.api_key.strip()) == 0
        # Injected in tests to stub the HTTP layer
        self._transport = transport

        if self.simulated:
            logger.info("VapiClient initialized in simulation mode (no API key provided)")
        else:
            logger.info("VapiClient initialized with API key")

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    @_transient
    async def _request(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> Any:
        async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
            response = await client.request(method, f"{self.base_url}{path}", headers=self._headers(), json=json)
            logger.info(f"Vapi API {method} {path}: {response.status_code}")
            response.raise_for_status()
            return response.json()

    async def _call_api(self, method: str, path: str, json: Optional[Dict[str, Any]] = None, call_id: Optional[str] = None) -> Any:
        try:
            return await self._request(method, path, json=json)
        except httpx.HTTPStatusError as e:
            logger.error(f"Vapi API HTTP error: {e.response.status_code} - {e.response.text}")
            raise ProviderError(
                f"Vapi API error: {e.response.status_code}", call_id=call_id, status_code=e.response.status_code
            ) from e
        except httpx.RequestError as e:
            logger.error(f"Vapi API request error: {str(e)}")
            raise ProviderError(f"Vapi API request failed: {str(e)}", call_id=call_id) from e
        except ValueError as e:
            logger.error(f"Vapi API returned malformed JSON: {str(e)}")
            raise ProviderError("Vapi API returned malformed JSON", call_id=call_id) from e

    async def list_calls(self) -> List[RemoteCallRecord]:
        """List every call known to the provider."""
        if self.simulated:
            logger.info("[SIMULATED] Listing calls: none available")
            return []

        data = await self._call_api("GET", "/call")
        if isinstance(data, dict):
            # Tolerate paginated shapes
            data = data.get("results") or data.get("calls") or []
        if not isinstance(data, list):
            raise ProviderError("Unexpected call listing shape from Vapi")
        calls = []
        for item in data:
            if isinstance(item, dict) and item.get("id"):
                calls.append(self._to_record(item))
            else:
                logger.warning(f"Skipping call listing item without id: {str(item)[:200]}")
        logger.info(f"Fetched {len(calls)} calls from Vapi")
        return calls

    async def get_call(self, call_id: str) -> RemoteCallRecord:
        """Fetch one call including its transcript."""
        if self.simulated:
            logger.info(f"[SIMULATED] Fetching call {call_id}")
            return RemoteCallRecord(id=call_id)

        data = await self._call_api("GET", f"/call/{call_id}", call_id=call_id)
        if not isinstance(data, dict):
            raise ProviderError(f"Unexpected call detail shape for {call_id}", call_id=call_id)
        data.setdefault("id", call_id)
        return self._to_record(data, call_id=call_id)

    def _to_record(self, payload: Dict[str, Any], call_id: Optional[str] = None) -> RemoteCallRecord:
        try:
            return RemoteCallRecord.from_provider(payload)
        except pydantic.ValidationError as e:
            logger.error(f"Vapi returned a malformed call object: {e}")
            raise ProviderError(f"Malformed call object from Vapi: {payload.get('id')}", call_id=call_id) from e

    async def initiate_call(self, phone_number: Optional[str] = None, mode: str = "Normal") -> Dict[str, Any]:
        """Start an outbound call with the assistant selected by mode."""
        customer_number = phone_number or self.settings.default_phone_number
        if not customer_number:
            raise ValueError("No phone number provided and no default set")

        assistant_id = (
            self.settings.vapi_severance_assistant_id if mode == "Severance" else self.settings.vapi_normal_assistant_id
        )
        logger.info(f"Using assistant ID: {assistant_id} for mode: {mode}")

        if self.simulated:
            logger.info(f"[SIMULATED] Call queued to {customer_number}")
            return {"id": None, "status": "queued", "assistantId": assistant_id, "mode": mode}

        payload: Dict[str, Any] = {
            "assistantId": assistant_id,
            "customer": {"number": customer_number},
        }
        if self.settings.vapi_phone_number_id:
            payload["phoneNumberId"] = self.settings.vapi_phone_number_id

        result = await self._call_api("POST", "/call", json=payload)
        logger.info(f"Call initiated successfully: {result.get('id')}")
        return {"id": result.get("id"), "status": result.get("status"), "assistantId": assistant_id, "mode": mode}
