from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)


class MorphoAPIError(RuntimeError):
    """Raised when a call to the Morpho API fails or returns GraphQL errors."""


class MorphoGraphQLClient:
    """Async GraphQL client for the Morpho API.

    A fresh ``httpx.AsyncClient`` is opened per call; there is no retry layer,
    every failure surfaces as :class:`MorphoAPIError`.
    """

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url
        self._timeout_seconds = timeout_seconds
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self._base_url

    async def execute(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Execute a GraphQL query and return the ``data`` object of the payload."""
        payload: Dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables

        logger.debug("POST %s variables=%s", self._base_url, variables)
        try:
            async with httpx.AsyncClient(timeout=self._timeout_seconds, transport=self._transport) as client:
                response = await client.post(self._base_url, json=payload)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as exc:
            raise MorphoAPIError(f"Request failed with status code {exc.response.status_code}") from exc
        except httpx.TimeoutException as exc:
            raise MorphoAPIError(f"Request timed out after {self._timeout_seconds}s") from exc
        except httpx.HTTPError as exc:
            raise MorphoAPIError(str(exc) or exc.__class__.__name__) from exc
        except ValueError as exc:
            raise MorphoAPIError(f"Invalid JSON in response: {exc}") from exc

        if not isinstance(data, dict):
            raise MorphoAPIError(f"Unexpected GraphQL response: {data}")
        if data.get("errors"):
            raise MorphoAPIError(f"GraphQL errors: {_format_errors(data['errors'])}")
        if not isinstance(data.get("data"), dict):
            raise MorphoAPIError(f"Unexpected GraphQL response: {data}")

        return data["data"]


def _format_errors(errors: Any) -> str:
    """Join GraphQL error messages into one line."""
    if isinstance(errors, list):
        messages = [str(err.get("message", err)) if isinstance(err, dict) else str(err) for err in errors]
        return "; ".join(messages)
    return str(errors)
