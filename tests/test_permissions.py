import pytest

from alertdesk.alerts import parse_alert_payload
from alertdesk.lifecycle import AlertAction, AlertStatus
from alertdesk.permissions import Role, User, allowed_actions, can_perform, permissions_for

from conftest import raw_alert


def _alert(status: AlertStatus):
    return parse_alert_payload(raw_alert("E-1", status=status.value))


@pytest.mark.parametrize("status", list(AlertStatus))
@pytest.mark.parametrize("action", list(AlertAction))
def test_viewer_is_denied_everything(status, action) -> None:
    viewer = User(id="v-1", role="VIEWER")
    assert not can_perform(viewer, _alert(status), action)


@pytest.mark.parametrize("role", list(Role))
@pytest.mark.parametrize("status", [AlertStatus.RESOLVED, AlertStatus.DISMISSED])
def test_acknowledge_terminal_alert_denied_for_every_role(role, status) -> None:
    user = User(id="u-1", role=role.value)
    assert not can_perform(user, _alert(status), AlertAction.ACKNOWLEDGE)


def test_missing_user_is_denied() -> None:
    assert not can_perform(None, _alert(AlertStatus.ACTIVE), AlertAction.ACKNOWLEDGE)


def test_unknown_role_has_no_permissions() -> None:
    assert permissions_for("JANITOR") == frozenset()
    assert permissions_for(None) == frozenset()
    user = User(id="u-1", role="JANITOR")
    assert allowed_actions(user, _alert(AlertStatus.ACTIVE)) == []


def test_operator_may_only_acknowledge() -> None:
    operator = User(id="op-1", role="OPERATOR")
    assert allowed_actions(operator, _alert(AlertStatus.ACTIVE)) == [AlertAction.ACKNOWLEDGE]
    assert allowed_actions(operator, _alert(AlertStatus.ACKNOWLEDGED)) == []


def test_admin_actions_follow_state() -> None:
    admin = User(id="a-1", role="admin")
    assert allowed_actions(admin, _alert(AlertStatus.ACTIVE)) == list(AlertAction)
    assert allowed_actions(admin, _alert(AlertStatus.ACKNOWLEDGED)) == [
        AlertAction.RESOLVE,
        AlertAction.DISMISS,
    ]
    assert permissions_for(Role.SECURITY_OFFICER) == frozenset(AlertAction)
