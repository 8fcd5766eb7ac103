"""Channel adapter registry: pluggable e-mail dispatch.

Uses the fake adapter by default; the adapter is selected with the
``EMAIL_ADAPTER`` environment variable.
"""

import os

from notifications.channel.email_port import EmailPort

EMAIL = "Email"

_channel_instances: dict[str, EmailPort] = {}


def get_channel(channel_type: str = EMAIL) -> EmailPort:
    """Return the configured channel adapter (singleton per channel type)."""
    if channel_type not in _channel_instances:
        if channel_type != EMAIL:
            raise ValueError(f"Unknown channel type: {channel_type}")

        adapter = os.environ.get("EMAIL_ADAPTER", "fake")
        if adapter == "fake":
            from notifications.channel.fake_email import FakeEmailAdapter

            _channel_instances[channel_type] = FakeEmailAdapter()
        else:
            raise ValueError(f"Unknown email adapter: {adapter}")

    return _channel_instances[channel_type]


def set_channel(adapter: EmailPort, channel_type: str = EMAIL) -> None:
    """Override a channel adapter (useful for tests)."""
    _channel_instances[channel_type] = adapter


def reset_channels():
    """Reset all channel singletons (useful for testing)."""
    _channel_instances.clear()
