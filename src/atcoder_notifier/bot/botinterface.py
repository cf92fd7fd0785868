class BotInterface:
    """Interface for chat senders used to deliver contest announcements."""

    def send_message(self, message: str) -> None:
        """Send a message to the chat backend (implemented by subclasses).

        Implementations raise NotifyError when delivery fails.
        """
        raise NotImplementedError("A send message method has not been implemented")
