"""Remote data gateway for the job scanner backend.

Every call is a single request-response against the REST API. The HTTP work
is done with a blocking ``requests.Session`` on a small thread pool, so
callers simply ``await`` the typed coroutine methods from the event loop.
"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional, Type, TypeVar

import requests
from pydantic import BaseModel, ValidationError

from .config import settings
from .models import GeneralSettings, JobBatch, ScanStatus, ServerStatistics, Website

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class GatewayError(Exception):
    """Raised when a request to the backend fails for any reason."""

    def __init__(self, message: str, *, path: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.path = path
        self.status_code = status_code


class NotFoundError(GatewayError):
    """Raised when the backend answers 404 (e.g. deleting an already deleted website)."""


def _query_params(**params: Any) -> Dict[str, str]:
    """Drop unset params and render booleans the way the backend expects."""
    query = {}
    for key, value in params.items():
        if value is None or value == "":
            continue
        if isinstance(value, bool):
            query[key] = "true" if value else "false"
        else:
            query[key] = str(value)
    return query


class RemoteGateway:
    """Typed access to websites, job batches, statistics and general settings."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
        max_workers: Optional[int] = None,
        session: Optional[requests.Session] = None,
    ):
        """Initialize the gateway.

        Args:
            base_url: API root, e.g. ``http://localhost:3001/api``
            timeout: Per-request timeout in seconds; None keeps the transport default
            max_workers: Size of the thread pool running blocking requests
            session: Optional pre-configured requests session
        """
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.request_timeout
        self._session = session or requests.Session()
        self._session.headers.update({"Content-Type": "application/json"})
        self._executor = ThreadPoolExecutor(max_workers=max_workers or settings.gateway_max_workers)

    def __enter__(self) -> "RemoteGateway":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Release the session and the worker threads.

        Requests already running are left to finish.
        """
        self._executor.shutdown(wait=False)
        self._session.close()

    async def _run_blocking(self, func, *args, **kw):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, lambda: func(*args, **kw))

    def _request_sync(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, str]] = None,
        json: Any = None,
        expect_body: bool = True,
    ) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        logger.debug("%s %s params=%s", method, url, params)
        try:
            response = self._session.request(method, url, params=params, json=json, timeout=self.timeout)
            response.raise_for_status()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            error_cls = NotFoundError if status == 404 else GatewayError
            raise error_cls(f"{method} {path} failed with status {status}", path=path, status_code=status) from e
        except requests.RequestException as e:
            raise GatewayError(f"{method} {path} failed: {e}", path=path) from e

        if not expect_body or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise GatewayError(f"{method} {path} returned invalid JSON", path=path, status_code=response.status_code) from e

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        return await self._run_blocking(self._request_sync, method, path, **kwargs)

    @staticmethod
    def _parse(model: Type[ModelT], payload: Any, path: str) -> ModelT:
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            raise GatewayError(f"Unexpected payload from {path}: {e}", path=path) from e

    def _parse_list(self, model: Type[ModelT], payload: Any, path: str) -> List[ModelT]:
        if not isinstance(payload, list):
            logger.warning("Expected a list from %s, got %s; treating as empty", path, type(payload).__name__)
            return []
        return [self._parse(model, item, path) for item in payload]

    def _parse_entity(self, model: Type[ModelT], payload: Any, path: str) -> Optional[ModelT]:
        # Mutation endpoints may answer with the entity or with a bare acknowledgement
        if isinstance(payload, dict) and "_id" in payload:
            return self._parse(model, payload, path)
        return None

    # --- Websites ---

    async def list_websites(self, search: Optional[str] = None, is_active: Optional[bool] = None) -> List[Website]:
        """Fetch websites, optionally narrowed by the backend's own search/active query."""
        payload = await self._request("GET", "/websites", params=_query_params(search=search, isActive=is_active))
        return self._parse_list(Website, payload, "/websites")

    async def get_website(self, website_id: str) -> Website:
        path = f"/websites/{website_id}"
        return self._parse(Website, await self._request("GET", path), path)

    async def create_website(
        self,
        name: str,
        url: str,
        keywords: Optional[List[str]] = None,
        is_active: bool = True,
    ) -> Optional[Website]:
        body = {"name": name, "url": url, "keywords": list(keywords or []), "isActive": is_active}
        payload = await self._request("POST", "/websites", json=body)
        return self._parse_entity(Website, payload, "/websites")

    async def update_website(self, website_id: str, changes: Dict[str, Any]) -> Optional[Website]:
        path = f"/websites/{website_id}"
        payload = await self._request("PUT", path, json=changes)
        return self._parse_entity(Website, payload, path)

    async def delete_website(self, website_id: str) -> None:
        await self._request("DELETE", f"/websites/{website_id}", expect_body=False)

    async def toggle_website_active(self, website_id: str) -> Optional[Website]:
        path = f"/websites/{website_id}/toggle"
        return self._parse_entity(Website, await self._request("PATCH", path), path)

    async def clear_website_errors(self, website_id: str) -> Optional[Website]:
        path = f"/websites/{website_id}/clear-errors"
        return self._parse_entity(Website, await self._request("PATCH", path), path)

    # --- Jobs ---

    async def list_job_batches(
        self,
        website_id: Optional[str] = None,
        search: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> List[JobBatch]:
        params = _query_params(websiteId=website_id, search=search, isActive=is_active)
        payload = await self._request("GET", "/jobs", params=params)
        return self._parse_list(JobBatch, payload, "/jobs")

    async def get_job_batch(self, batch_id: str) -> JobBatch:
        path = f"/jobs/{batch_id}"
        return self._parse(JobBatch, await self._request("GET", path), path)

    async def get_statistics(self) -> Optional[ServerStatistics]:
        path = "/jobs/stats/overview"
        payload = await self._request("GET", path)
        if not isinstance(payload, dict):
            return None
        return self._parse(ServerStatistics, payload, path)

    async def get_scan_status(self) -> ScanStatus:
        path = "/jobs/scanning-status"
        return self._parse(ScanStatus, await self._request("GET", path), path)

    async def trigger_scan(self) -> Dict[str, Any]:
        """Ask the backend to run a scan. Returns the backend's acknowledgement."""
        payload = await self._request("GET", "/jobs/scan-jobs")
        return payload if isinstance(payload, dict) else {}

    # --- General settings ---

    async def get_general_settings(self) -> Optional[GeneralSettings]:
        """Fetch general settings; None when the backend has none stored yet."""
        payload = await self._request("GET", "/general")
        if not payload:
            return None
        return self._parse(GeneralSettings, payload, "/general")

    async def update_general_settings(self, keywords: List[str], interval: int) -> GeneralSettings:
        body = GeneralSettings(keywords=keywords, interval=interval).to_payload()
        payload = await self._request("PUT", "/general", json=body)
        if not isinstance(payload, dict):
            return GeneralSettings.model_validate(body)
        # An acknowledgement such as {"message": ...} carries no settings; keep what was sent
        echoed = {key: value for key, value in payload.items() if value is not None}
        return self._parse(GeneralSettings, {**body, **echoed}, "/general")
