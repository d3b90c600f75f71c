"""CLI commands for YouTube subscription management.

Provides commands for:
- Signing in and out with a Google account
- Listing subscriptions page by page, with search and family-friendly filters
- Unsubscribing from a channel
- Clearing the local subscription cache
"""

import argparse
import asyncio
import logging
import sys
from dataclasses import dataclass
from typing import Optional

from ..auth.credential_store import CredentialStore
from ..auth.login import OAuthLogin
from ..auth.token_guard import TokenGuard
from ..config import Config
from ..errors import (
    KidTubeError,
    NotAuthenticated,
    NotFound,
    PermissionDenied,
    QuotaExceeded,
    TokenExpired,
)
from ..models import CacheCursor, PageCursor, RemoteCursor
from ..storage import LocalStorage
from ..subscriptions.cache import SubscriptionCache
from ..subscriptions.classifier import filter_channels, label_kid_friendly
from ..subscriptions.service import SubscriptionService
from ..youtube.api_client import YouTubeAPIClient

logger = logging.getLogger(__name__)

EXIT_ERROR = 1
EXIT_AUTH = 2
EXIT_PERMISSION = 3


@dataclass
class App:
    """Wired-up services for one CLI invocation."""

    config: Config
    service: SubscriptionService
    login: OAuthLogin


def build_app(config: Config) -> App:
    """Create the storage, credential, cache and API objects from configuration."""
    storage = LocalStorage(config.KIDTUBE_STATE_DIR)
    credential_store = CredentialStore(storage)
    token_guard = TokenGuard(
        credential_store, buffer_seconds=config.TOKEN_EXPIRY_BUFFER_SECONDS
    )
    cache = SubscriptionCache(
        storage, credential_store, ttl_millis=config.cache_ttl_millis
    )
    service = SubscriptionService(
        credential_store=credential_store,
        token_guard=token_guard,
        cache=cache,
        api_client=YouTubeAPIClient(),
        page_size=config.YOUTUBE_PAGE_SIZE,
    )
    login = OAuthLogin(config, credential_store, token_guard, service)
    return App(config=config, service=service, login=login)


def login(args, app: App):
    """
    Sign in with Google.

    With ``--access-token`` the token is stored directly. Otherwise the consent
    URL is printed and the URL the browser lands on after consent is read
    from ``--redirect-url`` or standard input.
    """
    if args.access_token:
        user = app.login.login_with_token(args.access_token, args.expires_in)
    else:
        url, state = app.login.authorization_url()
        print("Open this URL in your browser and approve access:\n")
        print(f"  {url}\n")
        redirect_url = args.redirect_url or input("Paste the URL you were redirected to: ")
        user = app.login.complete(redirect_url.strip(), state=state)

    print(f"Signed in as {user.name} <{user.email}>")


def logout(args, app: App):
    """Sign out and forget the stored token."""
    app.login.logout()
    print("Signed out")


def whoami(args, app: App):
    """Show the signed-in user, if the stored session is still valid."""
    user = app.login.restore_session()
    if user is None:
        print("Not signed in")
        sys.exit(EXIT_AUTH)
    print(f"{user.name} <{user.email}> (id: {user.id})")


def _cursor_from_args(args) -> Optional[PageCursor]:
    if args.page_token:
        return RemoteCursor(args.page_token)
    if args.page is not None:
        return CacheCursor(args.page)
    return None


def _cursor_hint(cursor: PageCursor) -> str:
    if isinstance(cursor, CacheCursor):
        return f"--page {cursor.index}"
    return f"--page-token {cursor.token}"


def list_subscriptions(args, app: App):
    """Print one page of subscriptions after applying the display filters."""
    result = asyncio.run(
        app.service.get_subscriptions(_cursor_from_args(args), args.max_results)
    )

    channels = label_kid_friendly(result.channels)
    shown = filter_channels(
        channels,
        search_term=args.search or "",
        category=args.category,
        kid_friendly_only=args.kid_friendly,
    )

    for channel in shown:
        marker = "*" if channel.is_kid_friendly else " "
        subscribers = channel.subscriber_count or "?"
        category = channel.category or "-"
        print(f"{marker} {channel.title}  [{category}]  {subscribers} subscribers")
        print(f"    {channel.url}")

    noun = "channel" if len(shown) == 1 else "channels"
    print(f"\n{len(shown)} {noun} displayed", end="")
    if result.total_results is not None:
        print(f" (total: {result.total_results})", end="")
    print()
    if args.kid_friendly:
        print("Showing family-friendly content only")
    if result.prev_page_token is not None:
        print(f"Previous page: {_cursor_hint(result.prev_page_token)}")
    if result.next_page_token is not None:
        print(f"Next page: {_cursor_hint(result.next_page_token)}")


def unsubscribe(args, app: App):
    """Unsubscribe from a channel by its channel id."""
    asyncio.run(app.service.unsubscribe(args.channel_id))
    print(f"Unsubscribed from {args.channel_id}")


def clear_cache(args, app: App):
    """Drop cached subscriptions so the next listing hits YouTube."""
    app.service.clear_cache()
    print("Cache cleared")


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        description="YouTube subscription manager CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--env-file",
        help="Path to .env file",
        default=None,
    )
    parser.add_argument(
        "-l",
        "--log-level",
        help="Set log level (DEBUG, INFO, WARNING, ERROR)",
        default="WARNING",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # login command
    login_parser = subparsers.add_parser(
        "login",
        help="Sign in with Google",
    )
    login_parser.add_argument(
        "--redirect-url",
        help="Redirect URL returned by Google after consent",
    )
    login_parser.add_argument(
        "--access-token",
        help="Use an already issued access token",
    )
    login_parser.add_argument(
        "--expires-in",
        type=int,
        help="Lifetime of --access-token in seconds",
    )

    subparsers.add_parser("logout", help="Sign out")
    subparsers.add_parser("whoami", help="Show the signed-in user")

    # list command
    list_parser = subparsers.add_parser(
        "list",
        help="List subscriptions",
    )
    page_group = list_parser.add_mutually_exclusive_group()
    page_group.add_argument(
        "--page",
        type=int,
        help="Cached page index (from a previous listing)",
    )
    page_group.add_argument(
        "--page-token",
        help="YouTube page token (from a previous listing)",
    )
    list_parser.add_argument(
        "--max-results",
        type=int,
        help="Channels per page (1-50)",
    )
    list_parser.add_argument(
        "--search",
        help="Only show channels whose name or description contains this text",
    )
    list_parser.add_argument(
        "--category",
        help="Only show channels in this category",
    )
    list_parser.add_argument(
        "--kid-friendly",
        action="store_true",
        help="Only show family-friendly channels",
    )

    # unsubscribe command
    unsubscribe_parser = subparsers.add_parser(
        "unsubscribe",
        help="Unsubscribe from a channel",
    )
    unsubscribe_parser.add_argument("channel_id", help="YouTube channel ID (UC...)")

    subparsers.add_parser("clear-cache", help="Clear cached subscriptions")

    return parser


COMMANDS = {
    "login": login,
    "logout": logout,
    "whoami": whoami,
    "list": list_subscriptions,
    "unsubscribe": unsubscribe,
    "clear-cache": clear_cache,
}


def main(argv=None):
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if not args.command:
        parser.print_help()
        sys.exit(EXIT_ERROR)

    config = Config(env_file=args.env_file)
    app = build_app(config)

    try:
        COMMANDS[args.command](args, app)
    except TokenExpired:
        print("Session expired. Please sign in again.")
        sys.exit(EXIT_AUTH)
    except NotAuthenticated as e:
        print(f"Please sign in first ({e}).")
        sys.exit(EXIT_AUTH)
    except PermissionDenied as e:
        print("Additional permissions required.")
        print(e.hint)
        sys.exit(EXIT_PERMISSION)
    except QuotaExceeded:
        print("YouTube API quota exceeded. Please try again later.")
        sys.exit(EXIT_ERROR)
    except NotFound as e:
        print(f"Not found: {e.message}")
        sys.exit(EXIT_ERROR)
    except KidTubeError as e:
        print(f"Error: {e}")
        sys.exit(EXIT_ERROR)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(EXIT_ERROR)


if __name__ == "__main__":
    main()
