"""Tests for CLI subscription_commands module."""

import pytest
from unittest.mock import AsyncMock, Mock, patch

from kidtube.cli.subscription_commands import (
    EXIT_AUTH,
    EXIT_ERROR,
    EXIT_PERMISSION,
    clear_cache,
    create_parser,
    list_subscriptions,
    login,
    logout,
    main,
    unsubscribe,
    whoami,
)
from kidtube.errors import (
    NotAuthenticated,
    NotFound,
    PermissionDenied,
    QuotaExceeded,
    RemoteError,
    TokenExpired,
)
from kidtube.models import CacheCursor, ChannelRecord, PageResult, RemoteCursor, User


@pytest.fixture
def mock_app():
    """Create a mock App with awaitable service methods."""
    app = Mock()
    app.service.get_subscriptions = AsyncMock()
    app.service.unsubscribe = AsyncMock(return_value=True)
    return app


@pytest.fixture
def list_args():
    args = Mock()
    args.page = None
    args.page_token = None
    args.max_results = None
    args.search = None
    args.category = None
    args.kid_friendly = False
    return args


class TestCreateParser:
    """Tests for create_parser function."""

    def test_has_env_file_argument(self):
        """Test that parser has --env-file argument."""
        parser = create_parser()
        args = parser.parse_args(["--env-file", "/path/.env", "list"])
        assert args.env_file == "/path/.env"

    def test_list_subcommand(self):
        """Test list subcommand parsing."""
        parser = create_parser()
        args = parser.parse_args([
            "list", "--page", "2", "--max-results", "20",
            "--search", "science", "--category", "Education", "--kid-friendly",
        ])
        assert args.command == "list"
        assert args.page == 2
        assert args.page_token is None
        assert args.max_results == 20
        assert args.search == "science"
        assert args.category == "Education"
        assert args.kid_friendly is True

    def test_page_and_page_token_are_exclusive(self):
        """Test that a cache page and a YouTube token cannot be combined."""
        parser = create_parser()
        with pytest.raises(SystemExit):
            parser.parse_args(["list", "--page", "1", "--page-token", "CAEQAA"])

    def test_login_subcommand(self):
        """Test login subcommand parsing."""
        parser = create_parser()
        args = parser.parse_args(["login", "--access-token", "tok", "--expires-in", "120"])
        assert args.command == "login"
        assert args.access_token == "tok"
        assert args.expires_in == 120

    def test_unsubscribe_subcommand(self):
        """Test unsubscribe subcommand parsing."""
        parser = create_parser()
        args = parser.parse_args(["unsubscribe", "UCabc"])
        assert args.command == "unsubscribe"
        assert args.channel_id == "UCabc"

    def test_log_level_default(self):
        """Test the default log level."""
        args = create_parser().parse_args(["whoami"])
        assert args.log_level == "WARNING"


class TestListSubscriptions:
    """Tests for list_subscriptions function."""

    def test_prints_page_and_cursors(self, mock_app, list_args, capsys):
        """Test channel lines, totals and next/previous hints."""
        mock_app.service.get_subscriptions.return_value = PageResult(
            channels=[
                ChannelRecord(id="UC1", title="Nursery Rhymes TV", subscriber_count="1200", category="Music"),
                ChannelRecord(id="UC2", title="Market Watch"),
            ],
            next_page_token=CacheCursor(2),
            prev_page_token=CacheCursor(0),
            total_results=120,
        )
        list_args.page = 1

        list_subscriptions(list_args, mock_app)

        mock_app.service.get_subscriptions.assert_awaited_once_with(CacheCursor(1), None)
        captured = capsys.readouterr()
        assert "* Nursery Rhymes TV  [Music]  1200 subscribers" in captured.out
        assert "  Market Watch  [-]  ? subscribers" in captured.out
        assert "2 channels displayed (total: 120)" in captured.out
        assert "Previous page: --page 0" in captured.out
        assert "Next page: --page 2" in captured.out

    def test_remote_cursor_hint(self, mock_app, list_args, capsys):
        """Test that YouTube page tokens are passed through and printed."""
        mock_app.service.get_subscriptions.return_value = PageResult(
            channels=[ChannelRecord(id="UC1", title="One")],
            next_page_token=RemoteCursor("CAIQAA"),
        )
        list_args.page_token = "CAEQAA"

        list_subscriptions(list_args, mock_app)

        mock_app.service.get_subscriptions.assert_awaited_once_with(RemoteCursor("CAEQAA"), None)
        captured = capsys.readouterr()
        assert "1 channel displayed" in captured.out
        assert "Next page: --page-token CAIQAA" in captured.out

    def test_kid_friendly_filter(self, mock_app, list_args, capsys):
        """Test that only family-friendly channels are shown."""
        mock_app.service.get_subscriptions.return_value = PageResult(
            channels=[
                ChannelRecord(id="UC1", title="Cartoon Club"),
                ChannelRecord(id="UC2", title="Late Night Talk"),
            ],
        )
        list_args.kid_friendly = True

        list_subscriptions(list_args, mock_app)

        captured = capsys.readouterr()
        assert "Cartoon Club" in captured.out
        assert "Late Night Talk" not in captured.out
        assert "Showing family-friendly content only" in captured.out


class TestAccountCommands:
    """Tests for login, logout, whoami, unsubscribe and clear-cache."""

    def test_login_with_access_token(self, mock_app, capsys):
        """Test login with an already issued token."""
        mock_app.login.login_with_token.return_value = User("u1", "Test User", "test@example.com")
        args = Mock(access_token="tok", expires_in=3600, redirect_url=None)

        login(args, mock_app)

        mock_app.login.login_with_token.assert_called_once_with("tok", 3600)
        assert "Signed in as Test User <test@example.com>" in capsys.readouterr().out

    def test_login_with_redirect_url(self, mock_app, capsys):
        """Test the browser consent flow with --redirect-url."""
        mock_app.login.authorization_url.return_value = ("https://accounts.google.com/auth?x", "state-1")
        mock_app.login.complete.return_value = User("u1", "Test User", "test@example.com")
        args = Mock(access_token=None, redirect_url=" http://localhost:8080/#access_token=t ")

        login(args, mock_app)

        mock_app.login.complete.assert_called_once_with(
            "http://localhost:8080/#access_token=t", state="state-1"
        )
        assert "https://accounts.google.com/auth?x" in capsys.readouterr().out

    def test_logout(self, mock_app, capsys):
        logout(Mock(), mock_app)
        mock_app.login.logout.assert_called_once()
        assert "Signed out" in capsys.readouterr().out

    def test_whoami_signed_out(self, mock_app, capsys):
        """Test that whoami exits with the auth code when signed out."""
        mock_app.login.restore_session.return_value = None
        with pytest.raises(SystemExit) as exc_info:
            whoami(Mock(), mock_app)
        assert exc_info.value.code == EXIT_AUTH

    def test_whoami_signed_in(self, mock_app, capsys):
        mock_app.login.restore_session.return_value = User("u1", "Test User", "test@example.com")
        whoami(Mock(), mock_app)
        assert "Test User <test@example.com> (id: u1)" in capsys.readouterr().out

    def test_unsubscribe(self, mock_app, capsys):
        unsubscribe(Mock(channel_id="UCabc"), mock_app)
        mock_app.service.unsubscribe.assert_awaited_once_with("UCabc")
        assert "Unsubscribed from UCabc" in capsys.readouterr().out

    def test_clear_cache(self, mock_app, capsys):
        clear_cache(Mock(), mock_app)
        mock_app.service.clear_cache.assert_called_once()
        assert "Cache cleared" in capsys.readouterr().out


class TestMain:
    """Tests for main function."""

    def test_no_command_prints_help(self, capsys):
        """Test that no command prints help and exits."""
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == EXIT_ERROR

    @pytest.mark.parametrize("error, code, text", [
        (TokenExpired(), EXIT_AUTH, "Session expired"),
        (NotAuthenticated(), EXIT_AUTH, "Please sign in first"),
        (PermissionDenied("insufficient scopes"), EXIT_PERMISSION, "sign in again"),
        (QuotaExceeded("quota", status=403), EXIT_ERROR, "quota exceeded"),
        (NotFound("Subscription not found for channel UCx"), EXIT_ERROR, "Not found"),
        (RemoteError("Network error fetching subscriptions: connection reset"), EXIT_ERROR, "Error: Network error"),
    ])
    @patch("kidtube.cli.subscription_commands.Config")
    @patch("kidtube.cli.subscription_commands.build_app")
    def test_error_exit_codes(self, mock_build_app, mock_config, mock_app, error, code, text, capsys):
        """Test that errors map to a message and exit code."""
        mock_build_app.return_value = mock_app
        mock_app.service.get_subscriptions.side_effect = error

        with pytest.raises(SystemExit) as exc_info:
            main(["list"])

        assert exc_info.value.code == code
        assert text in capsys.readouterr().out

    def test_end_to_end_with_state_dir(self, monkeypatch, tmp_path, capsys):
        """Test real wiring against a temporary state directory."""
        monkeypatch.setenv("KIDTUBE_STATE_DIR", str(tmp_path / "state"))

        main(["clear-cache"])
        assert "Cache cleared" in capsys.readouterr().out

        with pytest.raises(SystemExit) as exc_info:
            main(["whoami"])
        assert exc_info.value.code == EXIT_AUTH

        with pytest.raises(SystemExit) as exc_info:
            main(["list"])
        assert exc_info.value.code == EXIT_AUTH
