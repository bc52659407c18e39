"""
Defines exceptions regarding command handling.

:class:`CommandError` and its subclasses represent problems with what a user typed.  They are caught by the bot and
turned into a single NOTICE to whoever issued the command.

:class:`TransportFailure` and :class:`PersistenceFailure` represent problems on our end.  They are logged and otherwise
ignored, and the user gets no reply.
"""
__all__ = [
    'BotError', 'CommandError', 'UsageError', 'MissingArgument', 'PermissionDenied', 'InvalidChannelTarget',
    'UnknownCommand', 'TransportFailure', 'PersistenceFailure',
]


class BotError(Exception):
    """Base class for all bot errors."""
    pass


class CommandError(BotError):
    """
    An error the user who issued the command should hear about.

    str(error) is the text of the notice that is sent.
    """
    def __init__(self, message=None, command=None):
        """
        Creates a new CommandError.

        :param message: Error message.  If None, :meth:`default_message` is used.
        :param command: The :class:`~bangbot.commands.Command` involved, if any.
        """
        self.command = command
        self.message = message or self.default_message()
        super().__init__(self.message)

    def default_message(self):
        """Supplies a default message when our message is None on construction."""
        return None

    def __str__(self):
        if self.message:
            return self.message
        return super().__str__()


class UsageError(CommandError):
    """
    Thrown when a command is called with invalid syntax.

    If no message is given and a command is, the message is that command's usage string.
    """
    def __init__(self, message=None, command=None):
        if message is None and command is not None:
            message = command.usage
        super().__init__(message, command)


class MissingArgument(UsageError):
    """Thrown when a required argument had no word left to bind to.  `name` is the first unfilled argument."""
    def __init__(self, name, command=None):
        self.name = name
        super().__init__("{} is required.".format(name), command)


class PermissionDenied(CommandError):
    """Thrown when someone who is not an owner tries to use an owner-only command."""

    def default_message(self):
        return "You don't have permission to use that command."


class InvalidChannelTarget(CommandError):
    """Thrown when a command needs a channel and didn't get a usable one."""
    def __init__(self, channel=None, message=None, command=None):
        self.channel = channel
        if message is None and channel is not None:
            message = "{} is not a valid channel.".format(channel)
        super().__init__(message, command)


class UnknownCommand(CommandError):
    """Thrown when a private message names a command we don't have."""
    def __init__(self, name):
        self.name = name
        super().__init__("Unknown command {}.".format(name))


class TransportFailure(BotError):
    """Raised by transports when something could not be sent."""
    pass


class PersistenceFailure(BotError):
    """Raised by configuration stores when loading or saving failed."""
    pass
