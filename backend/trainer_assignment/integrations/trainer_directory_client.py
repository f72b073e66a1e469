"""HTTP client for the external trainer directory."""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Callable, Dict, List, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..core.config import settings
from ..core.exceptions import TrainerDirectoryError
from ..domain.trainer import TrainerCandidate
from ..domain.value_objects import Coordinates
from ..monitoring.prometheus_metrics import prometheus_metrics

logger = logging.getLogger(__name__)

TRAINERS_PATH = "/api/v1/trainers"
PAGE_LIMIT = 1000


class TrainerLocationRecord(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class TrainerRecord(BaseModel):
    """Wire shape of one directory entry (camelCase on the wire)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(..., min_length=1)
    is_active: bool = Field(True, alias="isActive")
    franchise_id: Optional[str] = Field(None, alias="franchiseId")
    zone_id: Optional[str] = Field(None, alias="zoneId")
    certified_courses: List[str] = Field(default_factory=list, alias="certifiedCourses")
    location: Optional[TrainerLocationRecord] = None

    def to_candidate(self) -> TrainerCandidate:
        location = None
        if self.location is not None:
            location = Coordinates(self.location.latitude, self.location.longitude)
        return TrainerCandidate(
            id=self.id,
            is_active=self.is_active,
            franchise_id=self.franchise_id or None,
            zone_id=self.zone_id,
            certified_course_ids=frozenset(self.certified_courses),
            location=location,
        )


class TrainerDirectoryClient:
    """
    Thin client for the trainer directory REST API.

    Transport failures and 5xx answers are retried with exponential
    backoff. Exhausted retries, 4xx answers and malformed payloads raise
    TrainerDirectoryError; the engine cannot assign without candidates.
    """

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        backoff_seconds: Optional[float] = None,
        api_key: Optional[str] = None,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._base_url = (base_url or settings.trainer_directory_url).rstrip("/")
        self._timeout = settings.trainer_directory_timeout_seconds if timeout is None else timeout
        self._max_retries = (
            settings.trainer_directory_max_retries if max_retries is None else max_retries
        )
        if self._max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        self._backoff_seconds = (
            settings.trainer_directory_backoff_seconds
            if backoff_seconds is None
            else backoff_seconds
        )
        self._api_key = api_key if api_key is not None else settings.trainer_directory_api_key
        self._transport = transport
        self._sleep = sleep

    def fetch_trainers(
        self,
        *,
        franchise_id: Optional[str],
        zone_id: Optional[str],
        course_id: str,
        is_active: bool = True,
    ) -> List[TrainerCandidate]:
        """
        Fetch candidates for one operator scope.

        ``franchise_id=None`` asks for company-employed trainers.
        """
        params: Dict[str, Any] = {
            "courseId": course_id,
            "isActive": "true" if is_active else "false",
            "limit": PAGE_LIMIT,
        }
        if franchise_id is None:
            params["operator"] = "company"
        else:
            params["franchiseId"] = franchise_id
        if zone_id is not None:
            params["zoneId"] = zone_id

        payload = self._get_with_retries(TRAINERS_PATH, params)
        candidates = self._parse_trainers(payload)
        logger.debug(
            "Fetched %d trainer(s) from directory",
            len(candidates),
            extra={"franchise_id": franchise_id, "zone_id": zone_id, "course_id": course_id},
        )
        return candidates

    # Callable form so the client can be handed to the assignment service directly
    __call__ = fetch_trainers

    def _get_with_retries(self, path: str, params: Dict[str, Any]) -> Any:
        last_error: Optional[TrainerDirectoryError] = None
        for attempt in range(1, self._max_retries + 1):
            try:
                return self._get(path, params)
            except TrainerDirectoryError as exc:
                if exc.status_code is not None and exc.status_code < 500:
                    raise
                last_error = exc
                logger.warning(
                    "Trainer directory request failed (attempt %d/%d): %s",
                    attempt,
                    self._max_retries,
                    exc.message,
                )
                if attempt < self._max_retries:
                    self._sleep(self._backoff_seconds * 2 ** (attempt - 1))

        prometheus_metrics.inc_trainer_directory_request("exhausted")
        raise TrainerDirectoryError(
            f"Trainer directory unavailable after {self._max_retries} attempts",
            status_code=last_error.status_code if last_error else None,
        ) from last_error

    def _get(self, path: str, params: Dict[str, Any]) -> Any:
        headers = {"Accept": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        with httpx.Client(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
            headers=headers,
        ) as client:
            try:
                response = client.get(path, params=params)
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                status = exc.response.status_code
                prometheus_metrics.inc_trainer_directory_request("http_error")
                logger.error(
                    "Trainer directory error %s for GET %s: %s",
                    status,
                    path,
                    exc.response.text[:500],
                )
                raise TrainerDirectoryError(
                    f"Trainer directory responded with status {status}", status_code=status
                ) from exc
            except httpx.RequestError as exc:
                prometheus_metrics.inc_trainer_directory_request("transport_error")
                raise TrainerDirectoryError(f"Failed to reach trainer directory: {exc}") from exc

        prometheus_metrics.inc_trainer_directory_request("success")
        try:
            return response.json()
        except json.JSONDecodeError as exc:
            logger.error("Invalid JSON from trainer directory for GET %s: %s", path, response.text)
            raise TrainerDirectoryError(
                "Received malformed JSON from trainer directory", status_code=response.status_code
            ) from exc

    @staticmethod
    def _parse_trainers(payload: Any) -> List[TrainerCandidate]:
        records = payload.get("data") if isinstance(payload, dict) else payload
        if not isinstance(records, list):
            raise TrainerDirectoryError(
                "Trainer directory payload has no trainer list", status_code=200
            )
        try:
            return [TrainerRecord.model_validate(item).to_candidate() for item in records]
        except ValidationError as exc:
            raise TrainerDirectoryError(
                "Trainer directory returned an invalid trainer record",
                status_code=200,
                details={"errors": exc.errors(include_url=False)},
            ) from exc
