"""Client for the inference server's non-streaming generate endpoint."""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Any

import httpx
from pydantic import ValidationError

from kysy.configs.system import InferenceConfig

from .errors import InferenceTimeout, ProtocolError, TransportError
from .models import OutboundRequest, TransportEnvelope

logger = logging.getLogger(__name__)

_ERROR_BODY_LIMIT = 200


def decode_envelope(payload: Any) -> TransportEnvelope:
    """Validate a decoded response body as a transport envelope.

    Raises
    ------
    ProtocolError
        When ``response`` or ``context`` is missing or has the wrong type.
    """
    try:
        return TransportEnvelope.model_validate(payload)
    except ValidationError as e:
        fields = ", ".join(
            ".".join(str(part) for part in err["loc"]) or "<body>"
            for err in e.errors()
        )
        raise ProtocolError(
            f"Unexpected response shape from inference server (bad fields: {fields})"
        ) from e


class InferenceClient:
    """Performs one blocking request/response exchange per call."""

    def __init__(
        self,
        config: InferenceConfig,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize the client.

        Parameters
        ----------
        config
            Endpoint, model and timeout settings.
        transport
            Optional httpx transport, used by tests to fake the server.
        """
        self.config = config
        self.client = httpx.Client(
            timeout=config.timeout_seconds, transport=transport
        )

    def exchange(self, request: OutboundRequest) -> TransportEnvelope:
        """POST ``request`` and decode the envelope from the response body."""
        url = self.config.endpoint
        logger.debug(
            "Making request to %s (model=%s, context=%s tokens)",
            url,
            request.model,
            len(request.context) if request.context is not None else "no",
        )

        try:
            response = self.client.post(url, json=request.model_dump())
        except httpx.TimeoutException as e:
            raise InferenceTimeout(
                f"Inference server at {url} did not answer within "
                f"{self.config.timeout_seconds:g}s"
            ) from e
        except httpx.ConnectError as e:
            raise TransportError(
                f"Unable to connect to inference server at {url}: {e}"
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(f"Request to {url} failed: {e}") from e
        except httpx.InvalidURL as e:
            raise TransportError(f"Invalid inference endpoint {url!r}: {e}") from e

        logger.debug("Response status: %s", response.status_code)

        if not response.is_success:
            body = response.text[:_ERROR_BODY_LIMIT]
            raise TransportError(
                f"HTTP {response.status_code} from {url}: {body}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise ProtocolError(
                f"Inference server returned a non-JSON body: {e}"
            ) from e

        return decode_envelope(payload)

    def close(self) -> None:
        """Close the HTTP client."""
        self.client.close()

    def __enter__(self) -> InferenceClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
