from __future__ import annotations

from contextlib import AbstractAsyncContextManager, nullcontext

import structlog

from alert_issues.errors import UnsupportedStatus
from alert_issues.formatting import format_issue_body, format_title, group_id
from alert_issues.issues import IssueDirectory
from alert_issues.locking import IdentityLocks
from alert_issues.models import AlertNotification, ReconcileAction, TrackedIssue


def find_issue(issues: list[TrackedIssue], title: str) -> TrackedIssue | None:
    for issue in issues:
        if issue.title == title:
            return issue
    return None


class Reconciler:
    """Maps a notification onto the open/closed state of its tracked issue.

    Current state is re-read from the directory on every call, which makes
    duplicated or reordered firing/resolved deliveries harmless: firing only
    creates when no open issue carries the identity, resolved only closes one
    that is still open.
    """

    def __init__(self, directory: IssueDirectory, locks: IdentityLocks | None = None) -> None:
        self.directory = directory
        self.locks = locks
        self._log = structlog.get_logger().bind(component="reconciler")

    def _guard(self, identity: str) -> AbstractAsyncContextManager[None]:
        if self.locks is None:
            return nullcontext()
        return self.locks.hold(identity)

    async def reconcile(self, notification: AlertNotification) -> ReconcileAction:
        identity = format_title(notification)
        async with self._guard(identity):
            return await self._reconcile(notification, identity)

    async def _reconcile(self, notification: AlertNotification, identity: str) -> ReconcileAction:
        log = self._log.bind(group_key=group_id(notification), identity=identity)
        open_issues = await self.directory.list_open_issues()
        found = find_issue(open_issues, identity)
        if found is not None:
            log.info("matching_issue_found", number=found.number)

        status = notification.status
        if status == "firing":
            if found is not None:
                return "noop"
            await self.directory.create_issue(identity, format_issue_body(notification))
            return "created"

        if status == "resolved":
            # Alertmanager repeats resolved notifications until resolve_timeout elapses.
            if found is None:
                return "noop"
            await self.directory.close_issue(found)
            return "closed"

        raise UnsupportedStatus(status)
