"""Synchronous HTTP client with auth injection and the shared retry policy.

This module provides :class:`SyncClient`, the blocking HTTP client used by
every glueapi operation. It wraps :class:`httpx.Client` and layers on:

- **Auth injection** -- headers from :class:`~glueapi.auth.base.AuthResult`
  are merged into every outgoing request.
- **Rate-limit backoff** -- HTTP 429 sleeps a fixed interval
  (``rate_limit_backoff``) and resends the same request, up to
  ``rate_limit_attempts`` attempts in total, then raises
  :class:`~glueapi.exceptions.RateLimitExhausted`.
- **Server-timeout retry** -- an error body reporting "The request took too
  long to process and timed out." is retried up to ``timeout_attempts``
  attempts, then raises :class:`~glueapi.exceptions.TimeoutExhausted`. The
  fetch engine catches that to shrink its page size.
- **Transport retry** -- connect/read timeouts and network errors retry with
  exponential delay (1 s, 2 s, 4 s, ...) up to ``max_retries`` times.
- **Error mapping** -- any other non-2xx is terminal: 404 raises
  :class:`~glueapi.exceptions.NotFoundError`, everything else
  :class:`~glueapi.exceptions.UnexpectedResponseError` with the server's
  title and detail.

Every sleep goes through one injectable hook so tests can count backoffs
without waiting, and a :class:`~glueapi.client.cancel.CancelToken` can
interrupt it.
"""

from __future__ import annotations

import time
from typing import Any, Callable, Optional

import httpx

from glueapi.auth.base import AuthResult
from glueapi.auth.manager import AuthManager
from glueapi.client.cancel import CancelToken
from glueapi.client.response import error_details, extract_response_data, is_server_timeout
from glueapi.exceptions import (
    ConnectionError_,
    NotFoundError,
    OperationCancelled,
    RateLimitExhausted,
    TimeoutExhausted,
    UnexpectedResponseError,
)
from glueapi.models import JSONAPI_CONTENT_TYPE, Profile, RequestConfig
from glueapi.output import get_output


class SyncClient:
    """Synchronous HTTP client for API calls.

    Must be used as a context manager so that the underlying transport is
    opened, authenticated once, and closed. The client holds no state that
    outlives one ``with`` block, so independent operations in separate
    threads should each use their own client.

    Args:
        profile: Connection profile with ``base_url``, auth config and
            :class:`~glueapi.models.RequestConfig` retry settings.
        auth_manager: Resolves credentials on ``__enter__``. When ``None``
            (and no *auth_result* is given) no auth headers are sent.
        auth_result: Pre-computed auth headers, e.g. from
            :meth:`~glueapi.auth.manager.AuthManager.authenticate_credential`.
        cancel_token: Optional token that aborts sleeps and pending requests.
        sleep: Replacement for :func:`time.sleep`, used for every backoff.
        transport: Optional httpx transport (tests pass
            :class:`httpx.MockTransport`).

    Example::

        with SyncClient(profile, auth_manager=am) as client:
            response = client.get("/organizations", params={"page[size]": 1})
    """

    def __init__(
        self,
        profile: Profile,
        auth_manager: Optional[AuthManager] = None,
        auth_result: Optional[AuthResult] = None,
        cancel_token: Optional[CancelToken] = None,
        sleep: Optional[Callable[[float], None]] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._profile = profile
        self._auth_manager = auth_manager
        self._auth_result = auth_result
        self._cancel_token = cancel_token
        self._sleep = sleep
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    @property
    def profile(self) -> Profile:
        return self._profile

    @property
    def config(self) -> RequestConfig:
        return self._profile.request

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> SyncClient:
        config = self._profile.request
        self._client = httpx.Client(
            base_url=self._profile.base_url,
            timeout=config.timeout,
            verify=config.verify_ssl,
            follow_redirects=True,
            transport=self._transport,
        )
        if self._auth_result is None and self._auth_manager and self._profile.auth:
            try:
                self._auth_result = self._auth_manager.authenticate(self._profile)
            except BaseException:
                self._client.close()
                self._client = None
                raise
        return self

    def __exit__(self, *args: object) -> None:
        if self._client:
            self._client.close()
            self._client = None

    # ------------------------------------------------------------------ #
    # Public request methods
    # ------------------------------------------------------------------ #

    def request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        json_body: Optional[Any] = None,
    ) -> httpx.Response:
        """Send one logical request under the retry policy.

        Args:
            method: HTTP method (GET, POST, PATCH, DELETE).
            path: URL path appended to the profile's ``base_url``.
            params: Query parameters.
            json_body: JSON-serialisable body.

        Returns:
            A 2xx :class:`httpx.Response`.

        Raises:
            RateLimitExhausted: 429 on every allowed attempt.
            TimeoutExhausted: Server-reported timeout on every allowed attempt.
            NotFoundError: HTTP 404.
            UnexpectedResponseError: Any other non-2xx response.
            ConnectionError_: Transport failures after all retries.
            OperationCancelled: The cancel token was set.
        """
        headers: dict[str, str] = {
            "Accept": JSONAPI_CONTENT_TYPE,
            "content-type": JSONAPI_CONTENT_TYPE,
        }
        if self._auth_result is not None:
            headers.update(self._auth_result.headers)

        config = self._profile.request
        output = get_output()
        target = f"{method.upper()} {path}"
        rate_limited = 0
        timed_out = 0

        while True:
            self._check_cancelled()
            response = self._execute_with_retry(method, path, headers, params, json_body)

            if response.status_code == 429:
                rate_limited += 1
                if rate_limited >= config.rate_limit_attempts:
                    output.error(
                        f"Rate limit persisted for {rate_limited} attempts on {target}"
                    )
                    raise RateLimitExhausted(
                        f"Rate limited on {target} after {rate_limited} attempts",
                        attempts=rate_limited,
                    )
                output.warning(
                    f"Rate limited on {target}, sleeping {config.rate_limit_backoff:g}s "
                    f"(attempt {rate_limited}/{config.rate_limit_attempts})"
                )
                self._pause(config.rate_limit_backoff)
                continue

            if response.is_success:
                output.debug(f"{target} -> HTTP {response.status_code}")
                return response

            if is_server_timeout(response):
                timed_out += 1
                if timed_out >= config.timeout_attempts:
                    output.warning(
                        f"Server timed out {timed_out} times on {target}, giving up on this request"
                    )
                    raise TimeoutExhausted(
                        f"Server timed out on {target} after {timed_out} attempts",
                        attempts=timed_out,
                    )
                output.warning(
                    f"Server timed out on {target}, retrying in {config.timeout_backoff:g}s "
                    f"(attempt {timed_out}/{config.timeout_attempts})"
                )
                self._pause(config.timeout_backoff)
                continue

            self._raise_for_error(response, target)

    def get(self, path: str, **kwargs: Any) -> httpx.Response:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs: Any) -> httpx.Response:
        return self.request("POST", path, **kwargs)

    def patch(self, path: str, **kwargs: Any) -> httpx.Response:
        return self.request("PATCH", path, **kwargs)

    def delete(self, path: str, **kwargs: Any) -> httpx.Response:
        return self.request("DELETE", path, **kwargs)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _execute_with_retry(
        self,
        method: str,
        path: str,
        headers: dict[str, str],
        params: Optional[dict[str, Any]],
        json_body: Any,
    ) -> httpx.Response:
        """Send the request, retrying transport failures with exponential backoff.

        HTTP responses of any status are returned as-is; only connection,
        transport-timeout and network errors are retried here.
        """
        if self._client is None:
            raise RuntimeError("SyncClient is not open; use it as a context manager")

        max_retries = self._profile.request.max_retries
        output = get_output()

        for attempt in range(max_retries + 1):
            try:
                kwargs: dict[str, Any] = {
                    "method": method,
                    "url": path,
                    "headers": headers,
                    "params": params,
                }
                if json_body is not None:
                    kwargs["json"] = json_body
                return self._client.request(**kwargs)

            except (httpx.ConnectError, httpx.TimeoutException, httpx.NetworkError) as exc:
                if attempt < max_retries:
                    delay = 2 ** attempt
                    output.warning(
                        f"Connection error: {exc}, retrying in {delay}s "
                        f"(attempt {attempt + 1}/{max_retries})"
                    )
                    self._pause(delay)
                    continue
                output.error(f"Connection failed after {max_retries + 1} attempts: {exc}")
                raise ConnectionError_(
                    f"Connection failed after {max_retries + 1} attempts: {exc}"
                ) from exc

        raise ConnectionError_("Request failed after all retries")  # pragma: no cover

    def _raise_for_error(self, response: httpx.Response, target: str) -> None:
        """Log and raise the typed error for a terminal non-2xx response."""
        status = response.status_code
        title, detail = error_details(extract_response_data(response))
        summary = ": ".join(part for part in (title, detail) if part)
        message = f"HTTP {status} on {target}" + (f": {summary}" if summary else "")

        get_output().error(message)
        if status == 404:
            raise NotFoundError(message)
        raise UnexpectedResponseError(message, status_code=status, title=title, detail=detail)

    def _pause(self, seconds: float) -> None:
        """Block for a backoff interval, honouring the cancel token."""
        self._check_cancelled()
        if self._sleep is not None:
            self._sleep(seconds)
        elif self._cancel_token is not None:
            if self._cancel_token.wait(seconds):
                get_output().warning("Cancelled during backoff")
                raise OperationCancelled("Operation cancelled during backoff")
        else:
            time.sleep(seconds)
        self._check_cancelled()

    def _check_cancelled(self) -> None:
        if self._cancel_token is not None and self._cancel_token.cancelled:
            get_output().warning("Cancelled")
            self._cancel_token.raise_if_cancelled()
