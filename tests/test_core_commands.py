"""Tests for the builtin commands."""

import pytest

from bangbot.modules.core import DEFAULT_KICK_REASON, SELF_KICK_REASON

from .fakes import BOT_NICK, OWNER


class TestSay:
    def test_say(self, transport, channel):
        channel("!say  hello   world")

        assert transport.sent == [('message', '#x', 'hello world')]

    def test_say_needs_text(self, transport, channel):
        channel("!say", sender="alice")

        assert transport.sent == [('notice', 'alice', 'USAGE <text>')]

    def test_long_text_is_one_message(self, transport, private):
        text = " ".join(["word"] * 120)

        private("say " + text, sender="alice")

        assert transport.sent == [('message', 'alice', text)]


class TestKick:
    def test_kick_with_reason(self, transport, channel):
        channel("!kick bob spamming too much")

        assert transport.sent == [('kick', '#x', 'bob', 'spamming too much')]

    def test_default_reason(self, transport, channel):
        channel("!kick bob")

        assert transport.sent == [('kick', '#x', 'bob', DEFAULT_KICK_REASON)]

    def test_private(self, transport, private):
        private("kick bob")

        assert transport.sent == [('notice', OWNER, "You can't kick people from a private chat...")]

    def test_kick_the_bot(self, transport, channel):
        channel("!kick {}".format(BOT_NICK))

        assert transport.sent == [('kick', '#x', OWNER, SELF_KICK_REASON)]


class TestJoin:
    def test_join(self, transport, config, channel):
        channel("!join #new")

        assert transport.sent == [('join', '#new'), ('save', ['#home', '#new'])]
        assert config.load_channel_membership() == ['#home', '#new']

    def test_join_twice(self, transport, config, channel):
        channel("!join #new")
        channel("!join #new")

        assert transport.of('join') == [('join', '#new'), ('join', '#new')]
        assert config.load_channel_membership() == ['#home', '#new']
        assert config.saves == 1

    def test_rejoin_moves_to_end(self, config, channel):
        channel("!join #new")
        channel("!join #home")

        assert config.load_channel_membership() == ['#new', '#home']

    @pytest.mark.parametrize('target', ['new', '#a,#b'])
    def test_invalid_channel(self, transport, config, channel, target):
        channel("!join {}".format(target))

        assert transport.sent == [('notice', OWNER, '{} is not a valid channel.'.format(target))]
        assert config.saves == 0

    def test_needs_channel(self, transport, private):
        private("join")

        assert transport.sent == [('notice', OWNER, 'USAGE <channel>')]

    def test_own_nick(self, transport, private):
        private("join {}".format(OWNER))

        assert transport.sent == [('notice', OWNER, 'USAGE <channel>')]


class TestPart:
    def test_part(self, transport, config, channel):
        channel("!part #home")

        assert transport.sent == [('save', []), ('leave', '#home')]
        assert config.load_channel_membership() == []

    def test_part_current_channel(self, transport, channel):
        channel("!part", target="#home")

        assert transport.of('leave') == [('leave', '#home')]

    def test_part_not_a_member(self, transport, config, channel):
        channel("!part #elsewhere")

        assert transport.sent == [('leave', '#elsewhere')]
        assert config.saves == 0

    def test_part_removes_one_entry(self, config, channel):
        config.save_channel_membership(['#a', '#home', '#b'])

        channel("!part #home")

        assert config.load_channel_membership() == ['#a', '#b']

    def test_private_without_channel(self, transport, private):
        private("part")

        assert transport.sent == [('notice', OWNER, 'USAGE [channel]')]

    def test_invalid_channel(self, transport, channel):
        channel("!part #a,#b")

        assert transport.sent == [('notice', OWNER, '#a,#b is not a valid channel.')]


class TestHelp:
    def test_list(self, transport, channel):
        channel("!help", sender="alice")

        assert transport.sent == [
            ('notice', 'alice', 'For detailed help on a specific command, use !help <command>'),
            ('notice', 'alice', 'help, say'),
            ('notice', 'alice', '[ADMIN]: join, kick, part'),
        ]

    def test_one_command(self, transport, private):
        private("help !say", sender="alice")

        assert transport.sent == [
            ('notice', 'alice', 'Usage: !say <text>'),
            ('notice', 'alice', 'Aliases: !echo'),
            ('notice', 'alice', 'Repeats <text> in the channel or private chat it was asked in.'),
        ]

    def test_alias(self, transport, private):
        private("help echo", sender="alice")

        assert transport.sent[0] == ('notice', 'alice', 'Usage: !say <text>')

    def test_unknown(self, transport, private):
        private("help frobnicate", sender="alice")

        assert transport.sent == [
            ('notice', 'alice', 'Unknown command !frobnicate.  See !help for a complete list of commands.'),
        ]
