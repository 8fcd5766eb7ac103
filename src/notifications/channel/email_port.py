"""Email channel port: abstract interface for e-mail dispatch."""

from abc import ABC, abstractmethod


class EmailPort(ABC):
    @abstractmethod
    def send(
        self,
        to: str | list[str],
        subject: str,
        body: str,
        html_body: str | None = None,
    ) -> dict:
        """Send an e-mail message to one or several recipients.

        Returns:
            dict with keys: message_id, status ("sent" or "failed"), error (optional)
        """
        ...
