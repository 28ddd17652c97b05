"""
File: tests/unit/test_lifecycle.py
Description: 微信账号状态机单元测试 (纯计算，不依赖数据库)
"""

import pytest

from wxpanel.domains.wechat.lifecycle import (
    AccountStatus,
    InvalidStateTransition,
    LifecycleEvent,
    next_status,
)


@pytest.mark.parametrize(
    ("current", "event", "expected"),
    [
        ("waiting", LifecycleEvent.QR_ISSUED, AccountStatus.SCANNING),
        ("online", LifecycleEvent.QR_ISSUED, AccountStatus.SCANNING),
        ("scanning", LifecycleEvent.SCAN, AccountStatus.SCANNED_CONFIRMING),
        ("scanned_confirming", LifecycleEvent.CONFIRM_SUCCESS, AccountStatus.ONLINE),
        ("scanned_confirming", LifecycleEvent.CONFIRM_FAILURE, AccountStatus.FAILED),
        ("failed", LifecycleEvent.RETRY, AccountStatus.WAITING),
        ("offline", LifecycleEvent.RETRY, AccountStatus.WAITING),
        ("waiting", LifecycleEvent.WAKEUP_SUCCESS, AccountStatus.ONLINE),
        ("failed", LifecycleEvent.WAKEUP_SUCCESS, AccountStatus.ONLINE),
    ],
)
def test_allowed_transitions(current: str, event: LifecycleEvent, expected: AccountStatus) -> None:
    assert next_status(current, event) == expected


@pytest.mark.parametrize(
    ("current", "event"),
    [
        ("waiting", LifecycleEvent.CONFIRM_SUCCESS),
        ("waiting", LifecycleEvent.SCAN),
        ("scanning", LifecycleEvent.QR_ISSUED),
        ("online", LifecycleEvent.RETRY),
        ("failed", LifecycleEvent.CONFIRM_FAILURE),
    ],
)
def test_rejected_transitions_report_current_status(
    current: str, event: LifecycleEvent
) -> None:
    with pytest.raises(InvalidStateTransition) as exc_info:
        next_status(current, event)

    exc = exc_info.value
    assert exc.code == "wechat.invalid_state_transition"
    assert exc.http_status == 400
    assert exc.data["current_status"] == current
    assert current in exc.message


def test_set_status_only_from_online_or_offline() -> None:
    assert (
        next_status("online", LifecycleEvent.SET_STATUS, AccountStatus.OFFLINE)
        == AccountStatus.OFFLINE
    )
    assert (
        next_status("offline", LifecycleEvent.SET_STATUS, AccountStatus.ONLINE)
        == AccountStatus.ONLINE
    )

    with pytest.raises(InvalidStateTransition):
        next_status("scanning", LifecycleEvent.SET_STATUS, AccountStatus.ONLINE)
