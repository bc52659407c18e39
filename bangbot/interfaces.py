"""
Interfaces for the things the bot talks to but doesn't implement itself: the network transport and the configuration
store.

Transports hand the bot inbound events, which are one of :class:`TextMessage`, :class:`Invite` or :class:`Other`.
"""
import collections

__all__ = ['TextMessage', 'Invite', 'Other', 'Transport', 'ConfigStore']


#: A PRIVMSG.  `target` is a channel or our own nickname.
TextMessage = collections.namedtuple('TextMessage', ['target', 'text', 'sender'])

#: An INVITE of `invited` to `channel`, sent by `sender`.
Invite = collections.namedtuple('Invite', ['invited', 'channel', 'sender'])

#: Anything else the transport saw.  The bot ignores these.
Other = collections.namedtuple('Other', ['command', 'params'])


class Transport:
    """
    Connection to the IRC network.

    Subclass this and override every method.  Send methods should raise
    :class:`~bangbot.commands.exc.TransportFailure` when they can't deliver.
    """

    def identify(self):
        """Registers with the server (NICK/USER and whatever authentication is needed)."""
        raise NotImplementedError

    def iterate(self):
        """Yields inbound events, one at a time, until the connection dies."""
        raise NotImplementedError

    def current_identity(self):
        """Returns our current nickname."""
        raise NotImplementedError

    def send_message(self, target, text):
        raise NotImplementedError

    def send_notice(self, target, text):
        raise NotImplementedError

    def send_kick(self, channel, nick, reason):
        raise NotImplementedError

    def send_join(self, channel):
        raise NotImplementedError

    def send_leave(self, channel):
        raise NotImplementedError


class ConfigStore:
    """
    Persistent storage for owners and channel membership.

    Implementations should raise :class:`~bangbot.commands.exc.PersistenceFailure` when loading or saving fails.
    """

    def load_owner_identities(self):
        """Returns a set of owner nicknames."""
        raise NotImplementedError

    def load_channel_membership(self):
        """Returns the list of channels we should be in, in order."""
        raise NotImplementedError

    def save_channel_membership(self, channels):
        """
        Replaces the list of channels we should be in.

        :param channels: Sequence of channel names, in order.
        """
        raise NotImplementedError
