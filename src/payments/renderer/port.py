"""Document renderer port (abstract interface).

Turns an order and its invoice into a printable document. Rendering is done
on demand and never stored by this service.
"""

from abc import ABC, abstractmethod


class DocumentRendererPort(ABC):
    content_type: str = "application/pdf"

    @abstractmethod
    def render(self, order, invoice) -> bytes:
        """Render ``invoice`` for ``order`` (both read models) into document bytes."""
        ...
