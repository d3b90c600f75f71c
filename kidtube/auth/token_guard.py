"""Gate that decides whether the stored credential may still be used."""

import logging

from .credential_store import CredentialStore

logger = logging.getLogger(__name__)

DEFAULT_BUFFER_SECONDS = 300


class TokenGuard:
    """Checks credential expiry with a safety buffer before the real deadline.

    The buffer keeps in-flight requests from racing a token that expires
    mid-call.
    """

    def __init__(
        self,
        credential_store: CredentialStore,
        buffer_seconds: int = DEFAULT_BUFFER_SECONDS,
    ):
        self.credential_store = credential_store
        self.buffer_seconds = buffer_seconds

    def is_expired_or_expiring(self, buffer_seconds: int | None = None) -> bool:
        """True if no credential exists or it expires within the buffer."""
        if buffer_seconds is None:
            buffer_seconds = self.buffer_seconds
        credential = self.credential_store.load()
        if credential is None:
            return True
        now = self.credential_store.clock()
        return now > credential.expires_at - buffer_seconds * 1000

    def enforce_validity(self) -> bool:
        """Clear an expired or expiring credential.

        Returns:
            True if the credential is usable, False if it was cleared.
        """
        if self.is_expired_or_expiring():
            logger.info("Access token expired or about to expire; clearing credential")
            self.credential_store.clear()
            return False
        return True
