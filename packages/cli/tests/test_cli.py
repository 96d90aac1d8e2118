"""Tests for the CLI entry point."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

from click.testing import CliRunner

from commitscrub_cli.cli import _build_store, main
from commitscrub_core.errors import ChainBrokenError, InvalidUrlError, NotFoundError
from commitscrub_core.models import ClassifiedCommit, CommitRecord, RewriteResult
from commitscrub_store.gist import GistStore
from commitscrub_store.memory import MemoryStore
from commitscrub_store.models import RepositoryRecord
from commitscrub_store.sqlite import SQLiteStore

URL = "https://github.com/owner/repo"
SHA_A = "a1" + "0" * 38
SHA_B = "b2" + "0" * 38


def _make_config(github_token="tok", store="memory"):
    return {
        "github_token": github_token,
        "store": store,
        "store_path": ".commitscrub.db",
        "gist_id": None,
        "max_commits": 500,
        "per_page": 100,
        "github_api_url": None,
        "connectors_hostname": None,
        "connectors_identity": None,
    }


def _classified(sha, message, flagged):
    commit = CommitRecord(
        id=sha,
        message=message,
        author_name="Dev",
        author_email="dev@example.com",
        author_date=datetime(2024, 1, 1, tzinfo=timezone.utc),
        committer_name="Dev",
        committer_email="dev@example.com",
        tree_id="t" * 40,
    )
    return ClassifiedCommit(commit=commit, is_tool_generated=flagged)


def _patch_common(mocker, config=None, token="tok", service="default"):
    """Patch load_config, token resolution, the store and the service."""
    cfg = config or _make_config()
    mocker.patch("commitscrub_core.config.load_config", return_value=cfg)
    mocker.patch("commitscrub_cli.auth.resolve_github_token", return_value=token)
    mock_store = MagicMock(spec=SQLiteStore)
    mock_store.list_repositories.return_value = []
    mocker.patch("commitscrub_cli.cli._build_store", return_value=mock_store)
    mock_service = MagicMock() if service == "default" else service
    mocker.patch("commitscrub_cli.cli._build_service", return_value=mock_service)
    return mock_store, mock_service


class TestCredentials:
    def test_missing_credentials_is_usage_error(self, mocker):
        _patch_common(mocker, config=_make_config(github_token=None), token=None, service=None)

        result = CliRunner().invoke(main, ["scan", URL])
        assert result.exit_code != 0
        assert "GITHUB_TOKEN" in result.output

    def test_status_connected(self, mocker):
        _, service = _patch_common(mocker)
        service.connection_status.return_value = {"connected": True, "login": "octocat", "name": "Octo"}

        result = CliRunner().invoke(main, ["status"])
        assert result.exit_code == 0
        assert "octocat" in result.output

    def test_status_not_connected(self, mocker):
        _, service = _patch_common(mocker)
        service.connection_status.return_value = {"connected": False, "error": "Bad credentials"}

        result = CliRunner().invoke(main, ["status"])
        assert result.exit_code == 1
        assert "Bad credentials" in result.output


class TestRepositoryCommands:
    def test_add(self, mocker):
        _, service = _patch_common(mocker)
        service.register.return_value = RepositoryRecord(
            id="r1", remote_url=URL, name="repo", owner="owner", visibility="private"
        )

        result = CliRunner().invoke(main, ["add", URL])

        assert result.exit_code == 0
        assert "owner/repo" in result.output
        service.register.assert_called_once_with(URL)

    def test_add_invalid_url(self, mocker):
        _, service = _patch_common(mocker)
        service.register.side_effect = InvalidUrlError("Invalid repository URL: 'nope'")

        result = CliRunner().invoke(main, ["add", "nope"])
        assert result.exit_code != 0
        assert "Invalid repository URL" in result.output

    def test_list_empty(self, mocker):
        _patch_common(mocker)
        result = CliRunner().invoke(main, ["list"])
        assert result.exit_code == 0
        assert "No repositories registered" in result.output

    def test_list_shows_records(self, mocker):
        store, _ = _patch_common(mocker)
        store.list_repositories.return_value = [
            RepositoryRecord(
                id="r1",
                remote_url=URL,
                name="repo",
                owner="owner",
                status="needs_cleanup",
                tool_commits_found=3,
                last_scanned_at="2025-02-01T10:00:00+00:00",
            )
        ]

        result = CliRunner().invoke(main, ["list"])
        assert "owner/repo" in result.output
        assert "needs_cleanup" in result.output

    def test_remove(self, mocker):
        store, _ = _patch_common(mocker)
        store.get_by_url.return_value = RepositoryRecord(id="r1", remote_url=URL, name="repo", owner="owner")
        store.delete.return_value = True

        result = CliRunner().invoke(main, ["remove", URL + ".git"])

        assert result.exit_code == 0
        store.get_by_url.assert_called_once_with(URL)
        store.delete.assert_called_once_with("r1")

    def test_remove_unknown(self, mocker):
        store, _ = _patch_common(mocker)
        store.get_by_url.return_value = None
        result = CliRunner().invoke(main, ["remove", URL])
        assert result.exit_code != 0
        assert "not registered" in result.output


class TestScan:
    def test_lists_flagged_commits(self, mocker):
        _, service = _patch_common(mocker)
        service.scan.return_value = [
            _classified(SHA_B, "Add billing page with tests", False),
            _classified(SHA_A, "save", True),
        ]

        result = CliRunner().invoke(main, ["scan", URL])

        assert result.exit_code == 0
        assert SHA_A[:7] in result.output
        assert SHA_B[:7] not in result.output
        assert "1" in result.output and "flagged" in result.output

    def test_clean_repository(self, mocker):
        _, service = _patch_common(mocker)
        service.scan.return_value = [_classified(SHA_B, "Add billing page with tests", False)]

        result = CliRunner().invoke(main, ["scan", URL])
        assert "No auto-generated commits" in result.output

    def test_scan_error_exits_non_zero(self, mocker):
        _, service = _patch_common(mocker)
        service.scan.side_effect = NotFoundError("Not found while trying to fetch repository (owner/repo)")

        result = CliRunner().invoke(main, ["scan", URL])
        assert result.exit_code != 0
        assert "Not found" in result.output


class TestCleanup:
    def _service_with_scan(self, mocker):
        _, service = _patch_common(mocker)
        service.scan.return_value = [
            _classified(SHA_B, "Add billing page with tests", False),
            _classified(SHA_A, "save", True),
        ]
        service.cleanup.return_value = RewriteResult(new_head_id="c" * 40, rewritten_count=1)
        return service

    def test_defaults_to_flagged_commits(self, mocker):
        service = self._service_with_scan(mocker)

        result = CliRunner().invoke(main, ["cleanup", URL, "--yes"])

        assert result.exit_code == 0
        service.cleanup.assert_called_once_with(URL, [SHA_A], drop=False)
        assert "Rewrote 1 commit(s)" in result.output

    def test_resolves_abbreviated_sha_and_drop(self, mocker):
        service = self._service_with_scan(mocker)

        CliRunner().invoke(main, ["cleanup", URL, "--commit", "b2", "--drop", "--yes"])

        service.cleanup.assert_called_once_with(URL, [SHA_B], drop=True)

    def test_unknown_sha_is_usage_error(self, mocker):
        service = self._service_with_scan(mocker)

        result = CliRunner().invoke(main, ["cleanup", URL, "--commit", "ffff", "--yes"])

        assert result.exit_code != 0
        service.cleanup.assert_not_called()

    def test_declined_confirmation_changes_nothing(self, mocker):
        service = self._service_with_scan(mocker)

        result = CliRunner().invoke(main, ["cleanup", URL], input="n\n")

        assert "Aborted" in result.output
        service.cleanup.assert_not_called()

    def test_nothing_flagged(self, mocker):
        _, service = _patch_common(mocker)
        service.scan.return_value = [_classified(SHA_B, "Add billing page with tests", False)]

        result = CliRunner().invoke(main, ["cleanup", URL, "--yes"])

        assert "No auto-generated commits" in result.output
        service.cleanup.assert_not_called()

    def test_chain_broken_reported(self, mocker):
        service = self._service_with_scan(mocker)
        service.cleanup.side_effect = ChainBrokenError("Failed to recreate commit a100000 in owner/repo")

        result = CliRunner().invoke(main, ["cleanup", URL, "--yes"])

        assert result.exit_code != 0
        assert "Failed to recreate" in result.output


class TestBuildStore:
    def test_default_is_memory(self):
        assert isinstance(_build_store(_make_config()), MemoryStore)

    def test_sqlite(self, tmp_path):
        config = _make_config(store="sqlite")
        config["store_path"] = str(tmp_path / "x.db")
        store = _build_store(config)
        assert isinstance(store, SQLiteStore)
        store.close()

    def test_gist_without_id_falls_back(self):
        config = _make_config(store="gist")
        assert isinstance(_build_store(config), MemoryStore)

    def test_gist(self, mocker):
        mocker.patch("github.Github")
        config = _make_config(store="gist")
        config["gist_id"] = "abc123"
        assert isinstance(_build_store(config), GistStore)


class TestTokenProviderResolution:
    def test_static_token_preferred(self):
        from commitscrub_cli.auth import build_token_provider
        from commitscrub_core.credentials import StaticTokenProvider

        assert isinstance(build_token_provider(_make_config()), StaticTokenProvider)

    def test_connector_used_without_token(self):
        from commitscrub_cli.auth import build_token_provider
        from commitscrub_core.credentials import ConnectorTokenProvider

        config = _make_config(github_token=None)
        config["connectors_hostname"] = "connectors.example"
        config["connectors_identity"] = "repl abc"
        assert isinstance(build_token_provider(config), ConnectorTokenProvider)

    def test_nothing_configured(self):
        from commitscrub_cli.auth import build_token_provider

        assert build_token_provider(_make_config(github_token=None)) is None

    def test_gh_cli_fallback(self, mocker, monkeypatch):
        from commitscrub_cli.auth import resolve_github_token

        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        mocker.patch(
            "commitscrub_cli.auth.subprocess.run",
            return_value=MagicMock(returncode=0, stdout="gho_cli\n"),
        )
        assert resolve_github_token() == "gho_cli"

    def test_gh_cli_missing(self, mocker, monkeypatch):
        from commitscrub_cli.auth import resolve_github_token

        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        mocker.patch("commitscrub_cli.auth.subprocess.run", side_effect=FileNotFoundError)
        assert resolve_github_token() is None
