"""Document renderer factory.

The adapter is chosen by the ``RENDERER_ADAPTER`` environment variable;
``fake`` (the default) renders plain text.
"""

import os

from payments.renderer.fake_adapter import FakeDocumentRenderer
from payments.renderer.port import DocumentRendererPort

_ADAPTERS = {
    "fake": FakeDocumentRenderer,
}

_current_renderer: DocumentRendererPort | None = None


def get_renderer() -> DocumentRendererPort:
    """Return the current renderer, creating it from ``RENDERER_ADAPTER`` on first use."""
    global _current_renderer
    if _current_renderer is None:
        name = os.environ.get("RENDERER_ADAPTER", "fake")
        try:
            _current_renderer = _ADAPTERS[name]()
        except KeyError:
            raise ValueError(f"Unknown renderer adapter: {name}") from None
    return _current_renderer


def set_renderer(renderer: DocumentRendererPort) -> None:
    """Override the active renderer (useful for tests)."""
    global _current_renderer
    _current_renderer = renderer


def reset_renderer() -> None:
    global _current_renderer
    _current_renderer = None
