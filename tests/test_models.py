from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from alert_issues.errors import DecodeError
from alert_issues.models import decode_notification


def test_decode_flat_alertmanager_payload() -> None:
    body = json.dumps(
        {
            "version": "4",
            "groupKey": '{}:{alertname="DiskRunningFull"}',
            "status": "firing",
            "receiver": "webhook",
            "groupLabels": {"alertname": "DiskRunningFull"},
            "commonLabels": {"alertname": "DiskRunningFull"},
            "externalURL": "http://localhost:9093",
            "alerts": [
                {
                    "status": "firing",
                    "labels": {"instance": "example1", "alertname": "DiskRunningFull", "dev": "sda2"},
                    "annotations": {},
                    "startsAt": "2017-03-09T13:30:56.503Z",
                    "endsAt": "0001-01-01T00:00:00Z",
                    "generatorURL": "http://generator.url/",
                }
            ],
        }
    )
    notification = decode_notification(body.encode("utf-8"))
    assert notification.group_key == '{}:{alertname="DiskRunningFull"}'
    assert notification.status == "firing"
    assert notification.alertname == "DiskRunningFull"
    assert notification.external_url == "http://localhost:9093"
    assert notification.alerts[0].labels["dev"] == "sda2"
    assert notification.alerts[0].generator_url == "http://generator.url/"


def test_decode_nested_data_payload() -> None:
    body = json.dumps(
        {
            "groupKey": "abc",
            "data": {
                "status": "resolved",
                "groupLabels": {"alertname": "DiskFull"},
                "externalURL": "http://am:9093",
            },
        }
    )
    notification = decode_notification(body)
    assert notification.group_key == "abc"
    assert notification.status == "resolved"
    assert notification.alertname == "DiskFull"
    assert notification.external_url == "http://am:9093"


def test_unknown_status_still_decodes() -> None:
    notification = decode_notification(json.dumps({"groupKey": "k", "status": "pending"}))
    assert notification.status == "pending"
    assert notification.alertname == ""


def test_alertname_ignores_common_labels() -> None:
    notification = decode_notification(
        json.dumps({"groupKey": "k", "status": "firing", "commonLabels": {"alertname": "DiskFull"}})
    )
    assert notification.alertname == ""


@pytest.mark.parametrize(
    "body",
    [
        b"",
        b"not json",
        b"[]",
        b'{"status": "firing"}',
        b'{"groupKey": "k"}',
        b'{"groupKey": 5, "status": "firing"}',
    ],
)
def test_malformed_payloads_raise_decode_error(body: bytes) -> None:
    with pytest.raises(DecodeError):
        decode_notification(body)


def test_notification_is_immutable() -> None:
    notification = decode_notification(json.dumps({"groupKey": "k", "status": "firing"}))
    with pytest.raises(ValidationError):
        notification.status = "resolved"  # type: ignore[misc]
