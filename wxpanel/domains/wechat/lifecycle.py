"""
File: wxpanel/domains/wechat/lifecycle.py
Description: 微信账号会话生命周期状态机

迁移表 (当前状态 --事件--> 目标状态)：
- waiting, online            --qr_issued-->        scanning
- scanning                   --scan-->             scanned_confirming
- scanned_confirming         --confirm_success-->  online
- scanned_confirming         --confirm_failure-->  failed
- failed, offline            --retry-->            waiting
- 任意状态                   --wakeup_success-->   online
- online, offline            --set_status-->       调用方指定

唤醒失败不改变状态。不在表中的 (状态, 事件) 组合一律抛出 InvalidStateTransition。
本模块只做纯计算，不触达数据库。

Created: 2026-03-02
"""

from enum import StrEnum

from wxpanel.core.exceptions import AppException
from wxpanel.domains.wechat.constants import WeChatError


class AccountStatus(StrEnum):
    WAITING = "waiting"
    SCANNING = "scanning"
    SCANNED_CONFIRMING = "scanned_confirming"
    ONLINE = "online"
    OFFLINE = "offline"
    FAILED = "failed"


class LifecycleEvent(StrEnum):
    QR_ISSUED = "qr_issued"
    SCAN = "scan"
    CONFIRM_SUCCESS = "confirm_success"
    CONFIRM_FAILURE = "confirm_failure"
    RETRY = "retry"
    WAKEUP_SUCCESS = "wakeup_success"
    SET_STATUS = "set_status"


ALL_STATUSES = frozenset(AccountStatus)

# 事件 -> (允许的源状态, 目标状态)；目标为 None 表示由调用方指定
TRANSITIONS: dict[LifecycleEvent, tuple[frozenset[AccountStatus], AccountStatus | None]] = {
    LifecycleEvent.QR_ISSUED: (
        frozenset({AccountStatus.WAITING, AccountStatus.ONLINE}),
        AccountStatus.SCANNING,
    ),
    LifecycleEvent.SCAN: (
        frozenset({AccountStatus.SCANNING}),
        AccountStatus.SCANNED_CONFIRMING,
    ),
    LifecycleEvent.CONFIRM_SUCCESS: (
        frozenset({AccountStatus.SCANNED_CONFIRMING}),
        AccountStatus.ONLINE,
    ),
    LifecycleEvent.CONFIRM_FAILURE: (
        frozenset({AccountStatus.SCANNED_CONFIRMING}),
        AccountStatus.FAILED,
    ),
    LifecycleEvent.RETRY: (
        frozenset({AccountStatus.FAILED, AccountStatus.OFFLINE}),
        AccountStatus.WAITING,
    ),
    LifecycleEvent.WAKEUP_SUCCESS: (ALL_STATUSES, AccountStatus.ONLINE),
    LifecycleEvent.SET_STATUS: (
        frozenset({AccountStatus.ONLINE, AccountStatus.OFFLINE}),
        None,
    ),
}


class InvalidStateTransition(AppException):
    """当前状态不接受该事件。data.current_status 携带当前状态。"""

    def __init__(self, current: str, event: LifecycleEvent):
        self.current = current
        self.event = event
        super().__init__(
            WeChatError.INVALID_STATE_TRANSITION,
            message=f"当前状态 {current} 不允许执行 {event.value}",
            data={"current_status": current, "event": event.value},
        )


def next_status(
    current: str,
    event: LifecycleEvent,
    requested: AccountStatus | None = None,
) -> AccountStatus:
    """
    计算迁移后的状态。

    Args:
        current: 当前状态 (数据库中的字符串)
        event: 生命周期事件
        requested: SET_STATUS 事件时调用方指定的目标状态

    Raises:
        InvalidStateTransition: 当前状态不在该事件的源状态集合中
    """
    sources, target = TRANSITIONS[event]
    if current not in sources:
        raise InvalidStateTransition(current, event)

    if target is None:
        if requested is None:
            raise ValueError("requested status is required for SET_STATUS")
        return requested
    return target
