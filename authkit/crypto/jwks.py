"""Memoized fetch of the identity service's signing keys."""

import logging
import threading

from authkit.core.transport import CoreClient
from authkit.crypto.keys import load_key_set
from authkit.crypto.types import SigningKeySet

logger = logging.getLogger(__name__)

JWKS_ENDPOINT = "keys"


class JWKSCache:
    """Fetches ``GET {env_url}/keys`` once per client and keeps the result.

    Failures are not cached; the next call fetches again. The key set is
    never refreshed once stored.
    """

    def __init__(self, core: CoreClient) -> None:
        self._core = core
        self._lock = threading.Lock()
        self._key_set: SigningKeySet | None = None

    def get_key_set(self) -> SigningKeySet:
        cached = self._key_set
        if cached is not None:
            return cached
        with self._lock:
            if self._key_set is None:
                document = self._core.get_json(JWKS_ENDPOINT)
                self._key_set = load_key_set(document)
                logger.debug("loaded JWKS with %d keys", len(self._key_set))
            return self._key_set
