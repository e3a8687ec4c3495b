from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import httpx

from ..config import settings


class ReraRegistryError(RuntimeError):
    pass


class ReraNotConfiguredError(ReraRegistryError):
    pass


@dataclass(frozen=True)
class ReraRegistryResponse:
    status: bool
    message: str
    data: Optional[dict[str, Any]]
    raw: dict[str, Any]


class ReraRegistryClient:
    """
    Surepass RERA verification API.

    POST {base}/{state} with {"rera_id": ...}; the payload comes back as
    {"status": bool, "message": str, "data": {...}}.
    """

    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        state_path: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.rera_api_key
        self.base = (base_url or settings.rera_base_url).rstrip("/")
        self.state_path = (state_path or settings.rera_state_path).strip("/")
        self.timeout = float(timeout if timeout is not None else settings.rera_request_timeout_seconds)
        self._transport = transport

    def enabled(self) -> bool:
        return bool(self.api_key)

    def verify(self, rera_id: str) -> ReraRegistryResponse:
        if not self.api_key:
            raise ReraNotConfiguredError("RERA API key not configured. Please set SUREPASS_API_KEY.")

        url = f"{self.base}/{self.state_path}"
        headers = {"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"}

        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                r = client.post(url, json={"rera_id": rera_id}, headers=headers)
        except httpx.HTTPError as e:
            raise ReraRegistryError(f"Failed to verify RERA project: {e}") from e

        if r.status_code >= 400:
            raise ReraRegistryError(f"RERA API request failed: {r.status_code} {r.reason_phrase}")

        try:
            payload = r.json()
        except ValueError as e:
            raise ReraRegistryError("RERA API returned a non-JSON body") from e

        if not isinstance(payload, dict):
            raise ReraRegistryError("RERA API returned an unexpected payload")

        data = payload.get("data")
        resp = ReraRegistryResponse(
            status=bool(payload.get("status")),
            message=str(payload.get("message") or ""),
            data=data if isinstance(data, dict) else None,
            raw=payload,
        )
        if not resp.status or resp.data is None:
            raise ReraRegistryError(f"RERA verification failed: {resp.message or 'no data returned'}")
        return resp
