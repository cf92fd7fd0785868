import requests

from atcoder_notifier.errors import NotifyError

from .botinterface import BotInterface

API_BASE = "https://discord.com/api/v10"


class DiscordRest(BotInterface):
    """Minimal REST client for posting messages to a Discord channel."""

    def __init__(self, token: str, channel_id: int, timeout: float = 10.0) -> None:
        self.token = token
        self.channel_id = channel_id
        self.timeout = timeout

    def send_message(self, message: str) -> None:
        """Post a message to the configured channel."""
        url = f"{API_BASE}/channels/{self.channel_id}/messages"
        headers = {"Authorization": f"Bot {self.token}"}
        payload = {"content": message}
        try:
            response = requests.post(url, json=payload, headers=headers, timeout=self.timeout)
        except requests.RequestException as err:
            raise NotifyError(f"Discord API request failed: {err}") from err
        if not 200 <= response.status_code < 300:
            raise NotifyError(f"Discord API returned status code: {response.status_code}")
