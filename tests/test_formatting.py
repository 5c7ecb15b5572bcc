from __future__ import annotations

from alert_issues.formatting import format_issue_body, format_title, group_id
from alert_issues.models import AlertNotification


def build(group_key: str, alertname: str, **extra: object) -> AlertNotification:
    payload: dict[str, object] = {
        "groupKey": group_key,
        "status": "firing",
        "groupLabels": {"alertname": alertname},
        "externalURL": "http://localhost:9093",
    }
    payload.update(extra)
    return AlertNotification.model_validate(payload)


def test_title_matches_known_identity() -> None:
    notification = build('{}:{alertname="DiskFull"}', "DiskFull")
    assert format_title(notification) == '[{}:{alertname="DiskFull"}] DiskFull'


def test_title_is_deterministic_across_deliveries() -> None:
    first = build('{}:{alertname="DiskFull"}', "DiskFull", status="firing")
    second = build(
        '{}:{alertname="DiskFull"}',
        "DiskFull",
        status="resolved",
        externalURL="http://elsewhere:9093",
        alerts=[{"status": "resolved", "labels": {"instance": "a"}}],
    )
    assert format_title(first) == format_title(second)
    assert format_title(first) == format_title(first)


def test_title_differs_per_group() -> None:
    assert format_title(build("a", "DiskFull")) != format_title(build("b", "DiskFull"))
    assert format_title(build("a", "DiskFull")) != format_title(build("a", "CpuHigh"))


def test_group_id_is_hex_of_group_key() -> None:
    assert group_id(build("{}", "x")) == "0x7b7d"


def test_issue_body_lists_alerts() -> None:
    notification = build(
        '{}:{alertname="DiskRunningFull"}',
        "DiskRunningFull",
        alerts=[
            {
                "status": "resolved",
                "labels": {"instance": "example4", "alertname": "DiskRunningFull", "dev": "sda3"},
                "annotations": {"test": "value"},
                "generatorURL": "http://generator.url/",
            },
            {"status": "firing", "labels": {"instance": "example1"}},
        ],
    )
    body = format_issue_body(notification)
    assert body.startswith("Original alert: http://localhost:9093\n")
    assert "* resolved http://generator.url/" in body
    assert "    - dev = sda3\n    - instance = example4" in body
    assert "  Annotations:\n    - test = value" in body
    assert "* firing\n" in body
