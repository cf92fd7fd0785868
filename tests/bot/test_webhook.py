import pytest
import requests

from atcoder_notifier.bot.webhook import DiscordWebhook
from atcoder_notifier.errors import NotifyError


class FakeResponse:
    def __init__(self, status_code):
        self.status_code = status_code


@pytest.mark.parametrize("status_code", [200, 204])
def test_webhook_send_message(monkeypatch, status_code):
    captured = {}

    def fake_post(url, json, timeout):
        captured["url"] = url
        captured["json"] = json
        captured["timeout"] = timeout
        return FakeResponse(status_code)

    monkeypatch.setattr("atcoder_notifier.bot.webhook.requests.post", fake_post)

    webhook = DiscordWebhook("https://example.test/hook")
    webhook.send_message("ping")

    assert captured == {
        "url": "https://example.test/hook",
        "json": {"content": "ping"},
        "timeout": 10.0,
    }


@pytest.mark.parametrize("status_code", [201, 400, 404, 429, 500])
def test_webhook_rejected_status_raises(monkeypatch, status_code):
    monkeypatch.setattr(
        "atcoder_notifier.bot.webhook.requests.post",
        lambda url, json, timeout: FakeResponse(status_code),
    )

    with pytest.raises(NotifyError):
        DiscordWebhook("https://example.test/hook").send_message("ping")


def test_webhook_transport_error_raises(monkeypatch):
    def fake_post(url, json, timeout):
        raise requests.ConnectionError("refused")

    monkeypatch.setattr("atcoder_notifier.bot.webhook.requests.post", fake_post)

    with pytest.raises(NotifyError):
        DiscordWebhook("https://example.test/hook").send_message("ping")
