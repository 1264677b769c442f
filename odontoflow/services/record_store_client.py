"""
Remote record store client.
Talks to the patients REST API with the signed-in user's bearer token.
"""
import logging
from typing import Callable, List, Optional

import httpx
from pydantic import ValidationError

from ..core.config import settings
from ..schemas import PatientPayload, PatientRecord, PatientUpdate

logger = logging.getLogger(__name__)

PATIENTS_PATH = "/api/v1/patients"


class RemoteStoreError(Exception):
    """A record store call failed; message is suitable for showing to the user."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        body = None
    detail = body.get("detail") if isinstance(body, dict) else None
    if isinstance(detail, str):
        return detail
    if detail:
        return str(detail)
    return f"Record store responded with HTTP {resp.status_code}"


class RecordStoreClient:
    """HTTP client for the remote patient record store."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        token_provider: Optional[Callable[[], Optional[str]]] = None,
        http_client: Optional[httpx.Client] = None,
        timeout: Optional[int] = None,
        on_unauthorized: Optional[Callable[[], Optional[str]]] = None,
    ):
        self.base_url = (base_url or settings.RECORD_STORE_URL or "").rstrip("/")
        self.token_provider = token_provider
        self.timeout = timeout or settings.RECORD_STORE_TIMEOUT
        self._client = http_client
        # called once on a 401; returns a fresh access token or None to give up
        self.on_unauthorized = on_unauthorized

    @property
    def is_configured(self) -> bool:
        return self._client is not None or bool(self.base_url)

    def _http(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(base_url=self.base_url, timeout=self.timeout)
        return self._client

    def _headers(self) -> dict:
        token = self.token_provider() if self.token_provider else None
        return {"Authorization": f"Bearer {token}"} if token else {}

    def _send(self, method: str, path: str, action: str, **kwargs) -> httpx.Response:
        try:
            return self._http().request(method, path, headers=self._headers(), **kwargs)
        except httpx.HTTPError as exc:
            logger.error("Error %s: %s", action, exc)
            raise RemoteStoreError(f"Could not reach the record store: {exc}") from exc

    def _request(self, method: str, path: str, action: str, **kwargs) -> httpx.Response:
        resp = self._send(method, path, action, **kwargs)
        if resp.status_code == 401 and self.on_unauthorized is not None:
            logger.info("Access token rejected while %s, refreshing session", action)
            if self.on_unauthorized():
                resp = self._send(method, path, action, **kwargs)
        if resp.is_error:
            message = _error_message(resp)
            logger.error("Error %s: HTTP %s %s", action, resp.status_code, message)
            raise RemoteStoreError(message, status_code=resp.status_code)
        return resp

    def _parse(self, resp: httpx.Response, action: str):
        try:
            data = resp.json()
        except ValueError as exc:
            logger.error("Error %s: response is not JSON: %s", action, exc)
            raise RemoteStoreError("Record store returned a malformed response") from exc
        try:
            if isinstance(data, list):
                return [PatientRecord.model_validate(item) for item in data]
            return PatientRecord.model_validate(data)
        except ValidationError as exc:
            logger.error("Error %s: malformed response: %s", action, exc)
            raise RemoteStoreError("Record store returned a malformed record") from exc

    def list(self) -> List[PatientRecord]:
        """All records, newest first."""
        resp = self._request("GET", f"{PATIENTS_PATH}/", "fetching patients")
        return self._parse(resp, "fetching patients")

    def get(self, patient_id: str) -> PatientRecord:
        resp = self._request("GET", f"{PATIENTS_PATH}/{patient_id}", "fetching patient")
        return self._parse(resp, "fetching patient")

    def create(self, payload: PatientPayload) -> PatientRecord:
        resp = self._request(
            "POST", f"{PATIENTS_PATH}/", "adding patient", json=payload.model_dump(mode="json")
        )
        return self._parse(resp, "adding patient")

    def update(self, patient_id: str, changes: PatientUpdate) -> PatientRecord:
        resp = self._request(
            "PATCH",
            f"{PATIENTS_PATH}/{patient_id}",
            "updating patient",
            json=changes.model_dump(mode="json", exclude_unset=True),
        )
        return self._parse(resp, "updating patient")

    def delete(self, patient_id: str, confirm_name: Optional[str] = None) -> None:
        params = {"confirm_name": confirm_name} if confirm_name is not None else None
        self._request("DELETE", f"{PATIENTS_PATH}/{patient_id}", "deleting patient", params=params)

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
