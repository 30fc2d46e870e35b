"""Mandrill API client."""

import time
from typing import Any, Optional

import httpx

from mandrill_mailer import __version__
from mandrill_mailer.api.errors import HttpError, ProviderCallError, cast_error
from mandrill_mailer.logging import get_logger
from mandrill_mailer.metrics import (
    mandrill_api_errors_total,
    mandrill_api_latency_seconds,
)


logger = get_logger()

DEFAULT_API_URL = "https://mandrillapp.com/api/1.0"


class MandrillClient:
    """Synchronous client for the Mandrill JSON API.

    Every call is a POST of a JSON body carrying the API ``key``. The API
    answers 200 with the result, or an error status with a body of the form
    ``{"status": "error", "code": ..., "name": ..., "message": ...}``.
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = DEFAULT_API_URL,
        timeout: float = 10.0,
    ) -> None:
        if not api_key:
            raise ProviderCallError("You must provide a Mandrill API key")

        self.api_key = api_key
        self._http = httpx.Client(
            base_url=base_url.rstrip("/") + "/",
            timeout=httpx.Timeout(timeout, connect=timeout),
            headers={
                "User-Agent": f"mandrill-mailer/{__version__}",
                "Content-Type": "application/json",
            },
        )

    def __enter__(self) -> "MandrillClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        """Release the underlying HTTP connection pool."""
        self._http.close()

    def call(self, endpoint: str, params: Optional[dict] = None) -> Any:
        """Call a Mandrill API endpoint.

        Args:
            endpoint: API path without the ``.json`` suffix, e.g. ``messages/send``
            params: Call parameters; the API key is added automatically

        Returns:
            Decoded JSON result

        Raises:
            ProviderCallError: (or a subclass) if the API reports an error
            HttpError: If the request fails at the transport level
        """
        payload = dict(params or {})
        payload["key"] = self.api_key

        logger.debug("Calling Mandrill API", endpoint=endpoint)
        start = time.perf_counter()
        try:
            response = self._http.post(f"{endpoint}.json", json=payload)
        except httpx.RequestError as e:
            self._record(endpoint, start, error_type="HttpError")
            raise HttpError(f"API call to {endpoint} failed: {e}") from e

        if response.status_code == 200:
            try:
                result = response.json()
            except ValueError:
                self._record(endpoint, start, error_type="InvalidJSON")
                raise ProviderCallError(
                    f"Invalid JSON response from {endpoint}",
                    code=response.status_code,
                ) from None
            self._record(endpoint, start)
            return result

        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict) and body.get("status") == "error":
            error = cast_error(body)
        else:
            error = ProviderCallError(
                f"We received an unexpected error: HTTP {response.status_code}",
                code=response.status_code,
            )
        self._record(endpoint, start, error_type=error.name or type(error).__name__)
        raise error

    def send_message(
        self,
        message: dict,
        async_: bool = False,
        ip_pool: Optional[str] = None,
        send_at: Optional[str] = None,
    ) -> list[dict]:
        """Send a message and return the per-recipient delivery records."""
        params: dict[str, Any] = {"message": message, "async": async_}
        if ip_pool:
            params["ip_pool"] = ip_pool
        if send_at:
            params["send_at"] = send_at
        return self.call("messages/send", params)

    def render_template(
        self,
        template_name: str,
        template_content: Optional[list[dict]] = None,
        merge_vars: Optional[list[dict]] = None,
    ) -> dict:
        """Render a stored template; the result carries an ``html`` key."""
        return self.call(
            "templates/render",
            {
                "template_name": template_name,
                "template_content": template_content or [],
                "merge_vars": merge_vars or [],
            },
        )

    def ping(self) -> str:
        """Validate the API key; Mandrill answers ``PONG!``."""
        return self.call("users/ping")

    @staticmethod
    def _record(endpoint: str, start: float, error_type: Optional[str] = None) -> None:
        duration = time.perf_counter() - start
        status = "error" if error_type else "success"
        mandrill_api_latency_seconds.labels(endpoint=endpoint, status=status).observe(duration)
        if error_type:
            mandrill_api_errors_total.labels(error_type=error_type).inc()
