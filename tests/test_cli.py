from datetime import datetime, timezone

import pytest
from click.testing import CliRunner

from alertdesk import cli
from alertdesk.alerts import ActionRecord
from alertdesk.lifecycle import AlertAction, AlertStatus
from alertdesk.overlay import OverlayStore
from alertdesk.settings import get_settings
from alertdesk.views import AlertBoard

from conftest import DURABLE_ID, FakeSource, page, raw_alert, summary


@pytest.fixture
def overlay_path(tmp_path, monkeypatch):
    path = tmp_path / "overlay.json"
    monkeypatch.setenv("ALERTDESK_OVERLAY_PATH", str(path))
    get_settings.cache_clear()
    yield path
    get_settings.cache_clear()


@pytest.fixture
def fake_source(monkeypatch, overlay_path) -> FakeSource:
    source = FakeSource()
    source.set_page(
        1,
        None,
        page([raw_alert("E-17"), raw_alert(DURABLE_ID, "LOW")], summary(high=1, low=1)),
    )

    def build_board(settings, mode=None):
        return AlertBoard(source, OverlayStore(overlay_path))

    monkeypatch.setattr(cli, "build_board", build_board)
    return source


def test_list_renders_alerts(fake_source) -> None:
    result = CliRunner().invoke(cli.main, ["list"])
    assert result.exit_code == 0, result.output
    assert "E-17" in result.output
    assert "Alert Summary" in result.output
    assert "Alert Types Distribution" in result.output
    assert "Students Not in College" in result.output
    assert "Acknowledged" in result.output


def test_acknowledge_command_writes_overlay(fake_source, overlay_path) -> None:
    result = CliRunner().invoke(
        cli.main, ["acknowledge", "E-17", "--user", "op-1", "--role", "OPERATOR"]
    )
    assert result.exit_code == 0, result.output
    assert "Acknowledged" in result.output
    assert OverlayStore(overlay_path).get("E-17").status is AlertStatus.ACKNOWLEDGED


def test_rejected_action_exits_with_message(fake_source) -> None:
    result = CliRunner().invoke(
        cli.main, ["resolve", "E-17", "--user", "v-1", "--role", "VIEWER"]
    )
    assert result.exit_code != 0
    assert "VIEWER" in result.output
    assert fake_source.mutations == []


def test_show_humanizes_detail_keys(fake_source) -> None:
    fake_source.set_page(
        1,
        None,
        page(
            [raw_alert("E-17", details={"lastSeenLocation": "Library"})],
            summary(high=1),
        ),
    )
    result = CliRunner().invoke(cli.main, ["show", "E-17"])
    assert result.exit_code == 0, result.output
    assert "last Seen Location" in result.output
    assert "lastSeenLocation" not in result.output


def test_show_unknown_alert_fails(fake_source) -> None:
    result = CliRunner().invoke(cli.main, ["show", "nope"])
    assert result.exit_code != 0
    assert "not found" in result.output


def test_overlay_show_and_reset(overlay_path) -> None:
    store = OverlayStore(overlay_path)
    store.upsert(
        "E-1",
        AlertStatus.DISMISSED,
        ActionRecord(
            type=AlertAction.DISMISS,
            actor="admin-1",
            timestamp=datetime(2025, 3, 1, tzinfo=timezone.utc),
        ),
    )
    runner = CliRunner()

    shown = runner.invoke(cli.main, ["overlay", "show"])
    assert shown.exit_code == 0, shown.output
    assert "E-1" in shown.output

    reset = runner.invoke(cli.main, ["overlay", "reset", "--yes"])
    assert reset.exit_code == 0, reset.output
    assert store.load_all() == {}
