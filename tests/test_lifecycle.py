import pytest

from alertdesk.errors import ActionRejected, TransitionError
from alertdesk.lifecycle import AlertAction, AlertStatus, is_terminal, next_status


@pytest.mark.parametrize(
    ("status", "action", "expected"),
    [
        (AlertStatus.ACTIVE, AlertAction.ACKNOWLEDGE, AlertStatus.ACKNOWLEDGED),
        (AlertStatus.ACTIVE, AlertAction.RESOLVE, AlertStatus.RESOLVED),
        (AlertStatus.ACKNOWLEDGED, AlertAction.RESOLVE, AlertStatus.RESOLVED),
        (AlertStatus.ACTIVE, AlertAction.DISMISS, AlertStatus.DISMISSED),
        (AlertStatus.ACKNOWLEDGED, AlertAction.DISMISS, AlertStatus.DISMISSED),
    ],
)
def test_valid_transitions(status, action, expected) -> None:
    assert next_status(status, action) is expected


@pytest.mark.parametrize("status", [AlertStatus.RESOLVED, AlertStatus.DISMISSED])
@pytest.mark.parametrize("action", list(AlertAction))
def test_terminal_states_reject_every_action(status, action) -> None:
    assert is_terminal(status)
    with pytest.raises(TransitionError, match="already"):
        next_status(status, action)


def test_acknowledge_twice_is_rejected() -> None:
    with pytest.raises(ActionRejected):
        next_status(AlertStatus.ACKNOWLEDGED, AlertAction.ACKNOWLEDGE)
