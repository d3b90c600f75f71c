"""
Google OAuth 2.0 implicit-grant login for the subscription manager.

This module provides:
- Authorization URL creation for the implicit (token) flow
- Parsing of the redirect fragment into a bearer token
- Profile lookup from the userinfo endpoint
- Session restore and logout against the credential store
"""

import logging
from typing import TYPE_CHECKING, Callable, Optional

import requests
from authlib.common.errors import AuthlibBaseError
from authlib.integrations.requests_client import OAuth2Session

from ..config import Config
from ..errors import NotAuthenticated, RemoteError, classify_http_error
from ..models import Credential, User, now_millis
from .credential_store import CredentialStore
from .token_guard import TokenGuard

if TYPE_CHECKING:
    from ..subscriptions.service import SubscriptionService

logger = logging.getLogger(__name__)


class OAuthLogin:
    """Drives sign-in, session restore and sign-out."""

    def __init__(
        self,
        config: Config,
        credential_store: CredentialStore,
        token_guard: TokenGuard,
        service: "SubscriptionService",
        http: Optional[requests.Session] = None,
        clock: Callable[[], int] = now_millis,
    ):
        self.config = config
        self.credential_store = credential_store
        self.token_guard = token_guard
        self.service = service
        self.http = http or requests.Session()
        self.clock = clock

    def _oauth_client(self) -> OAuth2Session:
        if not self.config.GOOGLE_CLIENT_ID:
            raise ValueError("OAuth not configured. Set GOOGLE_CLIENT_ID.")
        return OAuth2Session(
            client_id=self.config.GOOGLE_CLIENT_ID,
            scope=" ".join(self.config.YOUTUBE_OAUTH_SCOPES),
            redirect_uri=self.config.GOOGLE_REDIRECT_URI,
        )

    def authorization_url(self) -> tuple[str, str]:
        """
        Build the Google consent URL for the implicit grant.

        Returns:
            tuple: (authorization_url, state). Keep ``state`` to verify the redirect.
        """
        client = self._oauth_client()
        url, state = client.create_authorization_url(
            self.config.GOOGLE_AUTH_URL,
            response_type="token",
            include_granted_scopes="true",
        )
        return url, state

    def complete(self, redirect_url: str, state: Optional[str] = None) -> User:
        """
        Finish login from the URL Google redirected the browser to.

        Args:
            redirect_url: Full redirect URL including the ``#access_token=...`` fragment.
            state: The state returned by :meth:`authorization_url`.

        Returns:
            User: The signed-in user.

        Raises:
            NotAuthenticated: If the fragment carries an error, no token, or a
                mismatching state.
            RemoteError: If the profile lookup fails.
        """
        client = self._oauth_client()
        try:
            token = client.token_from_fragment(redirect_url, state=state)
        except AuthlibBaseError as e:
            logger.warning(f"OAuth redirect rejected: {e}")
            raise NotAuthenticated(f"Login failed: {e}") from e

        access_token = token.get("access_token")
        if not access_token:
            raise NotAuthenticated("Login failed: no access token in redirect")
        return self.login_with_token(access_token, token.get("expires_in"))

    def login_with_token(self, access_token: str, expires_in=None) -> User:
        """
        Store a freshly issued access token and its owner's profile.

        Args:
            access_token: OAuth bearer token.
            expires_in: Lifetime in seconds; defaults to DEFAULT_TOKEN_EXPIRES_IN.

        Returns:
            User: The signed-in user.
        """
        try:
            lifetime = int(expires_in) if expires_in else self.config.DEFAULT_TOKEN_EXPIRES_IN
        except (TypeError, ValueError):
            logger.warning(f"Invalid expires_in value: {expires_in}, using default")
            lifetime = self.config.DEFAULT_TOKEN_EXPIRES_IN

        user = self.fetch_user_profile(access_token)
        credential = Credential(
            access_token=access_token,
            expires_at=self.clock() + lifetime * 1000,
            user=user,
        )
        self.credential_store.save(credential)
        self.service.set_credential_user(user)
        logger.info(f"User logged in: user_id={user.id}")
        return user

    def fetch_user_profile(self, access_token: str) -> User:
        """Look up the token owner's profile on the userinfo endpoint."""
        try:
            response = self.http.get(
                self.config.GOOGLE_USERINFO_URL,
                headers={"Authorization": f"Bearer {access_token}"},
                timeout=self.config.USERINFO_TIMEOUT,
            )
        except requests.exceptions.RequestException as e:
            raise RemoteError(f"Failed to fetch user info: {e}") from e

        if not response.ok:
            raise classify_http_error(response.status_code, response.content)

        try:
            user_info = response.json()
        except ValueError as e:
            raise RemoteError("Failed to fetch user info: invalid JSON") from e

        google_id = user_info.get("sub")
        if not google_id:
            raise RemoteError("Missing required user info")

        return User(
            id=google_id,
            name=user_info.get("name", ""),
            email=user_info.get("email", ""),
            image_url=user_info.get("picture"),
        )

    def restore_session(self) -> Optional[User]:
        """Return the stored user if the credential is still usable, else clear it."""
        if self.credential_store.is_valid() and self.token_guard.enforce_validity():
            credential = self.credential_store.load()
            if credential is not None:
                return credential.user
        self.credential_store.clear()
        return None

    def logout(self) -> None:
        """Forget the stored credential."""
        self.credential_store.clear()
        logger.info("User logged out")
