from __future__ import annotations

import pytest

from forge.core.config import settings
from forge.services import ses_email_service
from forge.services.email_sender import OutboundEmail


class _FakeSesClient:
    def __init__(self, error: Exception | None = None):
        self.calls: list[dict] = []
        self.error = error

    def send_email(self, **kwargs):  # noqa: ANN003
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return {"MessageId": "0100018f-test"}


def _message(**overrides) -> OutboundEmail:
    values = dict(
        from_email="alerts@forge-crm.com",
        to="rep@forge-crm.com",
        subject="Performance Alert: Rep - 30% to Monthly Quota",
        html_body="<p>Hi</p>",
        text_body="Hi",
    )
    values.update(overrides)
    return OutboundEmail(**values)


def test_get_ses_client_uses_configured_region_and_timeouts(monkeypatch):
    captured: dict[str, object] = {}

    def _fake_boto3_client(service_name, **kwargs):  # noqa: ANN001
        captured["service_name"] = service_name
        captured["kwargs"] = kwargs
        return object()

    monkeypatch.setattr(ses_email_service.boto3, "client", _fake_boto3_client)
    monkeypatch.setattr(settings, "AWS_SES_REGION", "eu-west-1", raising=False)
    monkeypatch.setattr(settings, "AWS_ACCESS_KEY_ID", "", raising=False)
    monkeypatch.setattr(settings, "SES_CONNECT_TIMEOUT_SECONDS", 3, raising=False)

    ses_email_service.get_ses_client()

    kwargs = captured["kwargs"]
    assert captured["service_name"] == "ses"
    assert kwargs["region_name"] == "eu-west-1"
    assert kwargs["aws_access_key_id"] is None
    assert kwargs["config"].connect_timeout == 3


def test_send_builds_destination_with_copies():
    client = _FakeSesClient()
    sender = ses_email_service.SesEmailSender(client=client)

    message_id = sender.send(_message(cc=("hr@forge-crm.com",), bcc=("admin@forge-crm.com",)))

    assert message_id == "0100018f-test"
    call = client.calls[0]
    assert call["Source"] == "alerts@forge-crm.com"
    assert call["Destination"] == {
        "ToAddresses": ["rep@forge-crm.com"],
        "CcAddresses": ["hr@forge-crm.com"],
        "BccAddresses": ["admin@forge-crm.com"],
    }
    assert call["Message"]["Subject"]["Data"].startswith("Performance Alert")
    assert call["Message"]["Body"]["Text"]["Data"] == "Hi"


def test_send_omits_empty_copy_lists():
    client = _FakeSesClient()
    ses_email_service.SesEmailSender(client=client).send(_message())

    assert client.calls[0]["Destination"] == {"ToAddresses": ["rep@forge-crm.com"]}


def test_send_propagates_provider_errors():
    sender = ses_email_service.SesEmailSender(client=_FakeSesClient(error=RuntimeError("throttled")))

    with pytest.raises(RuntimeError, match="throttled"):
        sender.send(_message())
