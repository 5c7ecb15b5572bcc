from __future__ import annotations

from html import escape

import structlog

from alert_issues.issues import IssueDirectory
from alert_issues.models import TrackedIssue


def render_issue_table(issues: list[TrackedIssue]) -> str:
    rows = [
        f'<tr><td><a href="{escape(issue.html_url, quote=True)}">{escape(issue.title)}</a></td></tr>'
        for issue in issues
    ]
    return "<table>\n" + "".join(row + "\n" for row in rows) + "</table>\n"


async def render_open_issues(directory: IssueDirectory) -> str:
    """Debug page listing open issues. Errors are rendered inline."""
    try:
        issues = await directory.list_open_issues()
    except Exception as exc:
        structlog.get_logger().bind(component="viewer").exception("issue_listing_failed", error=str(exc))
        content = f"<p>{escape(str(exc))}</p>\n"
    else:
        content = render_issue_table(issues)
    return f"<html><body>\n{content}</body></html>\n"
