from __future__ import annotations

from alert_issues.models import Alert, AlertNotification


def group_id(notification: AlertNotification) -> str:
    """Hex form of the group key, safe to use as a log correlation token."""
    return "0x" + notification.group_key.encode("utf-8").hex()


def format_title(notification: AlertNotification) -> str:
    """Issue title used as the identity of an alert group.

    Only the group key and the ``alertname`` group label take part, so every
    redelivery of the same group yields the same string.
    """
    return f"[{notification.group_key}] {notification.alertname}"


def _format_alert(alert: Alert) -> list[str]:
    header = f"* {alert.status or 'unknown'}"
    if alert.generator_url:
        header = f"{header} {alert.generator_url}"
    lines = [header]
    if alert.labels:
        lines.append("  Labels:")
        lines.extend(f"    - {key} = {value}" for key, value in sorted(alert.labels.items()))
    if alert.annotations:
        lines.append("  Annotations:")
        lines.extend(f"    - {key} = {value}" for key, value in sorted(alert.annotations.items()))
    return lines


def format_issue_body(notification: AlertNotification) -> str:
    lines = [f"Original alert: {notification.external_url}"]
    for alert in notification.alerts:
        lines.append("")
        lines.extend(_format_alert(alert))
    return "\n".join(lines) + "\n"
