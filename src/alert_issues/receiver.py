from __future__ import annotations

import structlog

from alert_issues.errors import AlertIssuesError
from alert_issues.formatting import group_id
from alert_issues.models import AlertNotification, ReconcileAction, decode_notification
from alert_issues.reconciler import Reconciler


class NotificationReceiver:
    """Decodes webhook bodies and hands them to the reconciler.

    Decode failures propagate so the HTTP layer can answer 400. Anything the
    reconciler raises is logged and never reaches the caller.
    """

    def __init__(self, reconciler: Reconciler, log: structlog.stdlib.BoundLogger | None = None) -> None:
        self.reconciler = reconciler
        self._log = log if log is not None else structlog.get_logger().bind(component="receiver")

    def decode(self, body: bytes) -> AlertNotification:
        return decode_notification(body)

    async def handle(self, body: bytes) -> ReconcileAction | None:
        notification = self.decode(body)
        return await self.dispatch(notification)

    async def dispatch(self, notification: AlertNotification) -> ReconcileAction | None:
        log = self._log.bind(group_key=group_id(notification), status=notification.status)
        log.info("alert_handling_started")
        try:
            action = await self.reconciler.reconcile(notification)
        except AlertIssuesError as exc:
            log.error("alert_handling_failed", error=str(exc), error_type=type(exc).__name__)
            return None
        except Exception as exc:
            log.exception("alert_handling_crashed", error=str(exc))
            return None
        log.info("alert_handling_completed", action=action)
        return action
