"""Tests for CLI commands - setup, status, disable, push, pull, sync, watch."""

from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path
from typing import TYPE_CHECKING
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from prompthub.client.cli import cli
from prompthub.client.cli.sync import _apply_outcome
from prompthub.client.settings import SettingsStore
from prompthub.client.state import LocalDataStore
from prompthub.client.sync.types import SyncOutcome
from prompthub.core.config import ProviderKind, SyncSettings
from prompthub.core.snapshot import Metadata, Snapshot, dumps_snapshot
from prompthub.core.types import SyncStatus

if TYPE_CHECKING:
    from conftest import FakeKeyring

GIST_URL = "https://api.github.com/gists/abc"
OLD = "2024-01-01T00:00:00.000Z"
NEW = "2024-06-01T00:00:00.000Z"


def make_snapshot(last_modified: str, title: str = "Prompt") -> Snapshot:
    """Create a one-record snapshot."""
    return Snapshot(
        records=[{"id": "p1", "title": title}],
        metadata=Metadata(last_modified=last_modified, total_records=1),
    )


def gist_body(snapshot: Snapshot | None) -> dict:
    """Gist API response holding the payload (or the placeholder)."""
    content = dumps_snapshot(snapshot) if snapshot is not None else "{}"
    return {"id": "abc", "files": {"prompt-hub.json": {"content": content}}}


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def env(tmp_path: Path, fake_keyring: FakeKeyring) -> Iterator[Path]:
    """Point the CLI at a temporary config directory and an in-memory keyring."""
    with (
        patch("prompthub.client.cli.config.get_config_dir", return_value=tmp_path),
        patch("prompthub.client.secrets.keyring", fake_keyring),
    ):
        yield tmp_path


@pytest.fixture
def configured(env: Path, fake_keyring: FakeKeyring) -> Path:
    """A config directory with GitHub sync enabled."""
    SettingsStore(env / "config.json").save(
        SyncSettings(
            enabled=True,
            auto_sync_enabled=False,
            provider=ProviderKind.GITHUB,
            remote_handle="abc",
        )
    )
    fake_keyring.set_password("prompthub", "githubToken", "ghp_token")
    return env


def write_local(config_dir: Path, snapshot: Snapshot) -> None:
    LocalDataStore(config_dir / "data.json").replace(snapshot)


def read_local(config_dir: Path) -> Snapshot:
    return LocalDataStore(config_dir / "data.json").load()


class TestSetupCommand:
    """Tests for 'prompthub setup'."""

    def test_setup_github(
        self, runner: CliRunner, env: Path, fake_keyring: FakeKeyring, httpx_mock  # type: ignore[no-untyped-def]
    ) -> None:
        """Setup validates, stores the token and saves the new gist id."""
        httpx_mock.add_response(method="POST", url="https://api.github.com/gists", json={"id": "abc"})

        result = runner.invoke(cli, ["setup", "--provider", "github", "--token", "ghp_secret"])

        assert result.exit_code == 0, result.output
        assert "Remote: abc" in result.output
        assert "ghp_secret" not in result.output
        settings = json.loads((env / "config.json").read_text())
        assert settings["enabled"] is True
        assert settings["remote_handle"] == "abc"
        assert "ghp_secret" not in (env / "config.json").read_text()
        assert fake_keyring.get_password("prompthub", "githubToken") == "ghp_secret"

    def test_setup_prompts_for_token(
        self, runner: CliRunner, env: Path, httpx_mock  # type: ignore[no-untyped-def]
    ) -> None:
        """The token is prompted for when not given."""
        httpx_mock.add_response(method="GET", url=GIST_URL, json=gist_body(None))

        result = runner.invoke(
            cli, ["setup", "-p", "github", "--handle", "abc"], input="ghp_prompted\n"
        )

        assert result.exit_code == 0, result.output
        assert httpx_mock.get_request().headers["Authorization"] == "token ghp_prompted"

    def test_setup_invalid_token(
        self, runner: CliRunner, env: Path, fake_keyring: FakeKeyring, httpx_mock  # type: ignore[no-untyped-def]
    ) -> None:
        """A rejected token fails and nothing is saved."""
        httpx_mock.add_response(method="POST", url="https://api.github.com/gists", status_code=401)

        result = runner.invoke(cli, ["setup", "-p", "github", "--token", "bad"])

        assert result.exit_code == 1
        assert "credentials are invalid" in result.output
        assert not (env / "config.json").exists()
        assert fake_keyring.passwords == {}

    def test_setup_webdav_requires_url(self, runner: CliRunner, env: Path) -> None:
        """WebDAV without URL and username is rejected before any request."""
        result = runner.invoke(cli, ["setup", "-p", "webdav", "--token", "pw"])

        assert result.exit_code == 1
        assert "WebDAV URL and username are required" in result.output


class TestStatusAndDisable:
    """Tests for 'prompthub status' and 'prompthub disable'."""

    def test_status_unconfigured(self, runner: CliRunner, env: Path) -> None:
        """Status works before setup."""
        result = runner.invoke(cli, ["status"])

        assert result.exit_code == 0
        assert "Cloud sync: disabled" in result.output
        assert "Local data: none" in result.output

    def test_status_configured(self, runner: CliRunner, configured: Path) -> None:
        """Status shows provider and local timestamp but never the token."""
        write_local(configured, make_snapshot(NEW))

        result = runner.invoke(cli, ["status"])

        assert result.exit_code == 0
        assert "Provider: GitHub" in result.output
        assert f"Last modified: {NEW}" in result.output
        assert "ghp_token" not in result.output

    def test_disable(
        self, runner: CliRunner, configured: Path, fake_keyring: FakeKeyring
    ) -> None:
        """Disable clears settings and credentials."""
        result = runner.invoke(cli, ["disable", "--force"])

        assert result.exit_code == 0
        assert fake_keyring.passwords == {}
        assert json.loads((configured / "config.json").read_text())["enabled"] is False

    def test_disable_aborted(
        self, runner: CliRunner, configured: Path, fake_keyring: FakeKeyring
    ) -> None:
        """Declining the prompt keeps sync enabled."""
        result = runner.invoke(cli, ["disable"], input="n\n")

        assert "Aborted" in result.output
        assert fake_keyring.passwords != {}


class TestPushCommand:
    """Tests for 'prompthub push'."""

    def test_push_not_configured(self, runner: CliRunner, env: Path) -> None:
        """Push without setup fails."""
        result = runner.invoke(cli, ["push"])

        assert result.exit_code == 1
        assert "not enabled" in result.output

    def test_push_uploads(
        self, runner: CliRunner, configured: Path, httpx_mock  # type: ignore[no-untyped-def]
    ) -> None:
        """Newer local data is uploaded."""
        local = make_snapshot(NEW)
        write_local(configured, local)
        httpx_mock.add_response(method="GET", url=GIST_URL, json=gist_body(make_snapshot(OLD)))
        httpx_mock.add_response(method="PATCH", url=GIST_URL, json=gist_body(local))

        result = runner.invoke(cli, ["push"])

        assert result.exit_code == 0, result.output
        patch_request = httpx_mock.get_request(method="PATCH")
        content = json.loads(patch_request.content)["files"]["prompt-hub.json"]["content"]
        assert json.loads(content)["metadata"]["lastModified"] == NEW
        assert "ghp_token" not in content

    def test_push_conflict_declined(
        self, runner: CliRunner, configured: Path, httpx_mock  # type: ignore[no-untyped-def]
    ) -> None:
        """Declining the override leaves the remote untouched."""
        write_local(configured, make_snapshot(OLD))
        httpx_mock.add_response(method="GET", url=GIST_URL, json=gist_body(make_snapshot(NEW)))

        result = runner.invoke(cli, ["push"], input="n\n")

        assert result.exit_code == 1
        assert "Conflict" in result.output
        assert len(httpx_mock.get_requests()) == 1

    def test_push_conflict_confirmed(
        self, runner: CliRunner, configured: Path, httpx_mock  # type: ignore[no-untyped-def]
    ) -> None:
        """--yes force-uploads after a conflict."""
        write_local(configured, make_snapshot(OLD))
        httpx_mock.add_response(method="GET", url=GIST_URL, json=gist_body(make_snapshot(NEW)))
        httpx_mock.add_response(method="PATCH", url=GIST_URL, json=gist_body(None))

        result = runner.invoke(cli, ["push", "--yes"])

        assert result.exit_code == 0, result.output
        assert len(httpx_mock.get_requests(method="PATCH")) == 1


class TestPullCommand:
    """Tests for 'prompthub pull'."""

    def test_pull_replaces_local(
        self, runner: CliRunner, configured: Path, httpx_mock  # type: ignore[no-untyped-def]
    ) -> None:
        """A newer remote replaces local data, keeping its timestamp."""
        write_local(configured, make_snapshot(OLD))
        remote = make_snapshot(NEW, title="from cloud")
        httpx_mock.add_response(method="GET", url=GIST_URL, json=gist_body(remote))

        result = runner.invoke(cli, ["pull"])

        assert result.exit_code == 0, result.output
        assert read_local(configured) == remote

    def test_pull_empty_remote(
        self, runner: CliRunner, configured: Path, httpx_mock  # type: ignore[no-untyped-def]
    ) -> None:
        """An empty remote is reported."""
        httpx_mock.add_response(method="GET", url=GIST_URL, json=gist_body(None))

        result = runner.invoke(cli, ["pull"])

        assert result.exit_code == 1
        assert "REMOTE_EMPTY" in result.output

    def test_pull_conflict_declined(
        self, runner: CliRunner, configured: Path, httpx_mock  # type: ignore[no-untyped-def]
    ) -> None:
        """Declining keeps local data."""
        local = make_snapshot(NEW, title="mine")
        write_local(configured, local)
        httpx_mock.add_response(method="GET", url=GIST_URL, json=gist_body(make_snapshot(OLD)))

        result = runner.invoke(cli, ["pull"], input="n\n")

        assert result.exit_code == 1
        assert read_local(configured) == local


class TestSyncCommand:
    """Tests for 'prompthub sync'."""

    def test_sync_downloads(
        self, runner: CliRunner, configured: Path, httpx_mock  # type: ignore[no-untyped-def]
    ) -> None:
        """A newer remote is written to local data."""
        write_local(configured, make_snapshot(OLD))
        remote = make_snapshot(NEW, title="from cloud")
        httpx_mock.add_response(method="GET", url=GIST_URL, json=gist_body(remote))

        result = runner.invoke(cli, ["sync"])

        assert result.exit_code == 0, result.output
        assert read_local(configured) == remote

    def test_sync_uploads(
        self, runner: CliRunner, configured: Path, httpx_mock  # type: ignore[no-untyped-def]
    ) -> None:
        """Newer local data is uploaded."""
        write_local(configured, make_snapshot(NEW))
        httpx_mock.add_response(method="GET", url=GIST_URL, json=gist_body(make_snapshot(OLD)))
        httpx_mock.add_response(method="GET", url=GIST_URL, json=gist_body(make_snapshot(OLD)))
        httpx_mock.add_response(method="PATCH", url=GIST_URL, json=gist_body(None))

        result = runner.invoke(cli, ["sync"])

        assert result.exit_code == 0, result.output
        assert "Local changes uploaded." in result.output

    def test_sync_in_sync(
        self, runner: CliRunner, configured: Path, httpx_mock  # type: ignore[no-untyped-def]
    ) -> None:
        """Equal timestamps need no transfer."""
        write_local(configured, make_snapshot(NEW))
        httpx_mock.add_response(method="GET", url=GIST_URL, json=gist_body(make_snapshot(NEW)))

        result = runner.invoke(cli, ["sync"])

        assert result.exit_code == 0
        assert "already in sync" in result.output

    def test_sync_error(
        self, runner: CliRunner, configured: Path, httpx_mock  # type: ignore[no-untyped-def]
    ) -> None:
        """Provider failures are reported with their code."""
        write_local(configured, make_snapshot(NEW))
        httpx_mock.add_response(method="GET", url=GIST_URL, status_code=401)

        result = runner.invoke(cli, ["sync"])

        assert result.exit_code == 1
        assert "INVALID_CREDENTIALS" in result.output


class TestWatchCommand:
    """Tests for 'prompthub watch'."""

    def test_watch_requires_auto_sync(self, runner: CliRunner, configured: Path) -> None:
        """Watch refuses to start without auto-sync."""
        result = runner.invoke(cli, ["watch"])

        assert result.exit_code == 1
        assert "auto-sync is not enabled" in result.output


class TestStatusRemote:
    """Tests for 'prompthub status --remote'."""

    def test_status_remote(
        self, runner: CliRunner, configured: Path, httpx_mock  # type: ignore[no-untyped-def]
    ) -> None:
        """The cloud copy's timestamp is shown."""
        httpx_mock.add_response(method="GET", url=GIST_URL, json=gist_body(make_snapshot(NEW)))

        result = runner.invoke(cli, ["status", "--remote"])

        assert result.exit_code == 0, result.output
        assert f"Remote last modified: {NEW}" in result.output

    def test_status_remote_empty(
        self, runner: CliRunner, configured: Path, httpx_mock  # type: ignore[no-untyped-def]
    ) -> None:
        """A provisioned but empty remote is reported."""
        httpx_mock.add_response(method="GET", url=GIST_URL, json=gist_body(None))

        result = runner.invoke(cli, ["status", "--remote"])

        assert result.exit_code == 0
        assert "Remote data: none" in result.output

    def test_status_remote_failure(
        self, runner: CliRunner, configured: Path, httpx_mock  # type: ignore[no-untyped-def]
    ) -> None:
        """Provider failures are shown without failing the command."""
        httpx_mock.add_response(method="GET", url=GIST_URL, status_code=401)

        result = runner.invoke(cli, ["status", "--remote"])

        assert result.exit_code == 0
        assert "Remote data: unavailable" in result.output

    def test_status_without_remote_flag_makes_no_request(
        self, runner: CliRunner, configured: Path, httpx_mock  # type: ignore[no-untyped-def]
    ) -> None:
        """Plain status stays offline."""
        result = runner.invoke(cli, ["status"])

        assert result.exit_code == 0
        assert httpx_mock.get_requests() == []


class TestApplyDownload:
    """Tests for persisting downloads from background syncs."""

    def test_download_applied(self, configured: Path) -> None:
        """A download replaces unchanged local data."""
        write_local(configured, make_snapshot(OLD))
        remote = make_snapshot(NEW, title="remote")

        _apply_outcome(
            SyncOutcome(
                SyncStatus.DOWNLOADED,
                local_modified=OLD,
                remote_modified=NEW,
                snapshot=remote,
            )
        )

        assert read_local(configured) == remote

    def test_local_edit_during_sync_kept(self, configured: Path) -> None:
        """A save made after the sync decision is not overwritten."""
        write_local(configured, make_snapshot(OLD))
        LocalDataStore(configured / "data.json").save(make_snapshot(OLD, title="user-edit"))

        _apply_outcome(
            SyncOutcome(
                SyncStatus.DOWNLOADED,
                local_modified=OLD,
                remote_modified=NEW,
                snapshot=make_snapshot(NEW, title="remote"),
            )
        )

        assert read_local(configured).records[0]["title"] == "user-edit"
