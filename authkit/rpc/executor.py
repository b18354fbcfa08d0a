"""Single-retry execution of RPC calls with re-authentication."""

import logging
from collections.abc import Callable
from typing import Generic

import httpx

from authkit.core.errors import RPCValidationError
from authkit.rpc.types import Code, RequestT, ResponseT, RPCCall, RPCError

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRY = 1
HTTP_UNAUTHORIZED = 401


def is_unauthenticated(exc: Exception) -> bool:
    """True for a 401 transport status or the unauthenticated RPC code."""
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code == HTTP_UNAUTHORIZED
    if isinstance(exc, RPCError):
        return exc.code == Code.UNAUTHENTICATED
    return False


def aggregate_validation_error(exc: RPCError) -> RPCValidationError:
    """Fold the message and each ``field: description`` into one error."""
    lines = [exc.message]
    lines.extend(f"{v.field}: {v.description}" for v in exc.field_violations())
    return RPCValidationError("\n".join(lines))


class RPCExecutor(Generic[RequestT, ResponseT]):
    """Runs one RPC, re-authenticating and retrying at most ``max_retry`` times.

    Only unauthenticated failures are retried. Invalid-argument failures are
    raised as :class:`RPCValidationError`; anything else propagates as is.
    A retried write may execute twice if the first failure was spurious.
    """

    def __init__(
        self,
        call: RPCCall[RequestT, ResponseT],
        request: RequestT,
        headers: Callable[[], dict[str, str]],
        reauthenticate: Callable[[], None],
        max_retry: int = DEFAULT_MAX_RETRY,
    ) -> None:
        self._call = call
        self._request = request
        self._headers = headers
        self._reauthenticate = reauthenticate
        self.max_retry = max_retry
        self.retries = 0

    def execute(self) -> ResponseT:
        while True:
            try:
                return self._call(self._request, self._headers())
            except (RPCError, httpx.HTTPStatusError) as exc:
                if isinstance(exc, RPCError) and exc.code == Code.INVALID_ARGUMENT:
                    raise aggregate_validation_error(exc) from exc
                if not is_unauthenticated(exc) or self.retries >= self.max_retry:
                    raise
                logger.warning("RPC unauthenticated, re-authenticating and retrying")
                self._reauthenticate()
                self.retries += 1
