import os

from dotenv import load_dotenv

DEFAULT_SCOPES = (
    "https://www.googleapis.com/auth/youtube "
    "https://www.googleapis.com/auth/youtube.force-ssl "
    "email profile"
)


class Config:
    def __init__(self, env_file=None):
        """
        Initialize configuration by loading environment variables and setting default attributes.

        Loads environment variables from the provided .env file path when `env_file` is given; otherwise loads from the default environment. After loading, sets configuration attributes (OAuth client settings, local state directory, cache and token lifetimes, and YouTube paging options) using environment values with sensible defaults.
        Parameters:
            env_file (str | None): Optional path to a .env file to load environment variables from. If omitted, the default environment or default .env discovery is used.

        Raises:
            ValueError: If a numeric setting is outside its allowed range.
        """
        if env_file:
            load_dotenv(env_file)
        else:
            load_dotenv()

        # Google OAuth configuration (implicit grant, no client secret needed)
        self.GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID", "")
        self.GOOGLE_REDIRECT_URI = os.getenv(
            "GOOGLE_REDIRECT_URI", "http://localhost:8080/"
        )
        self.GOOGLE_AUTH_URL = os.getenv(
            "GOOGLE_AUTH_URL", "https://accounts.google.com/o/oauth2/v2/auth"
        )
        self.GOOGLE_USERINFO_URL = os.getenv(
            "GOOGLE_USERINFO_URL", "https://www.googleapis.com/oauth2/v3/userinfo"
        )
        self.YOUTUBE_OAUTH_SCOPES = os.getenv("YOUTUBE_OAUTH_SCOPES", DEFAULT_SCOPES).split()
        self.USERINFO_TIMEOUT = float(os.getenv("USERINFO_TIMEOUT", "10"))

        # Local state (credential and subscription cache files)
        self.KIDTUBE_STATE_DIR = os.path.expanduser(
            os.getenv("KIDTUBE_STATE_DIR", "~/.kidtube")
        )

        # Cache and token lifetimes
        self.SUBSCRIPTION_CACHE_TTL_HOURS = float(
            os.getenv("SUBSCRIPTION_CACHE_TTL_HOURS", "24")
        )
        if self.SUBSCRIPTION_CACHE_TTL_HOURS <= 0:
            raise ValueError(
                f"SUBSCRIPTION_CACHE_TTL_HOURS must be positive, got {self.SUBSCRIPTION_CACHE_TTL_HOURS}"
            )
        self.TOKEN_EXPIRY_BUFFER_SECONDS = int(
            os.getenv("TOKEN_EXPIRY_BUFFER_SECONDS", "300")
        )
        if self.TOKEN_EXPIRY_BUFFER_SECONDS < 0:
            raise ValueError(
                f"TOKEN_EXPIRY_BUFFER_SECONDS must not be negative, got {self.TOKEN_EXPIRY_BUFFER_SECONDS}"
            )
        # Google access tokens typically expire in 1 hour
        self.DEFAULT_TOKEN_EXPIRES_IN = int(os.getenv("DEFAULT_TOKEN_EXPIRES_IN", "3600"))

        # YouTube API paging (the API caps maxResults at 50)
        self.YOUTUBE_PAGE_SIZE = int(os.getenv("YOUTUBE_PAGE_SIZE", "50"))
        if not 1 <= self.YOUTUBE_PAGE_SIZE <= 50:
            raise ValueError(
                f"YOUTUBE_PAGE_SIZE must be between 1 and 50, got {self.YOUTUBE_PAGE_SIZE}"
            )

    @property
    def cache_ttl_millis(self) -> int:
        '''Subscription cache lifetime in epoch milliseconds.'''
        return int(self.SUBSCRIPTION_CACHE_TTL_HOURS * 60 * 60 * 1000)
