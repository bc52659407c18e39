"""Shared fixtures for bangbot tests."""

import pytest

from bangbot import Bot
from bangbot.interfaces import TextMessage

from .fakes import BOT_NICK, CONFIG, OWNER, FakeTransport, RecordingConfig


@pytest.fixture
def log():
    """A list shared by the transport and the config, to check ordering."""
    return []


@pytest.fixture
def config(log):
    return RecordingConfig(data=CONFIG, log=log)


@pytest.fixture
def transport(log):
    return FakeTransport(log=log)


@pytest.fixture
def bot(transport, config):
    return Bot(transport, config)


@pytest.fixture
def private(bot):
    """Sends a private message to the bot."""
    def send(text, sender=OWNER):
        bot.handle_inbound_event(TextMessage(BOT_NICK, text, sender))
    return send


@pytest.fixture
def channel(bot):
    """Sends a message to a channel the bot is in."""
    def send(text, sender=OWNER, target="#x"):
        bot.handle_inbound_event(TextMessage(target, text, sender))
    return send
