import requests

from atcoder_notifier.errors import NotifyError

from .botinterface import BotInterface

WEBHOOK_OK_STATUSES = (200, 204)


class DiscordWebhook(BotInterface):
    def __init__(self, webhook: str, timeout: float = 10.0) -> None:
        self.webhook = webhook
        self.timeout = timeout

    def send_message(self, message: str) -> None:
        payload = {"content": message}
        try:
            response = requests.post(self.webhook, json=payload, timeout=self.timeout)
        except requests.RequestException as err:
            raise NotifyError(f"webhook request failed: {err}") from err
        if response.status_code not in WEBHOOK_OK_STATUSES:
            raise NotifyError(f"webhook returned status code: {response.status_code}")
