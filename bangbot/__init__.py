"""
A small IRC command bot.

This package routes chat messages to commands: it decides whether a line of text is a command, finds the command,
checks that the sender may use it, binds its arguments and runs it.  Talking to the network and storing configuration
are left to a :class:`~bangbot.interfaces.Transport` and a :class:`~bangbot.interfaces.ConfigStore`.
"""
import configparser
import contextlib
import functools
import logging
import textwrap

import bangbot.commands
import bangbot.modules.core
import bangbot.util
from bangbot.commands import CommandError, PermissionDenied, PersistenceFailure, Registry, UnknownCommand, authorize
from bangbot.interfaces import ConfigStore, Invite, TextMessage, Transport

__all__ = [
    'ConfigSection', 'MainConfigSection', 'LoggingConfigSection', 'Config', 'Bot', 'Event', 'Transport', 'main',
]

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = 'bangbot.ini'


class ConfigSection(dict):
    """
    Represents a ConfigSection

    Subclass this and override read() to perform your own config file validation.  Override write() to allow saving
    of settings

    Allows attribute-based dict access.
    """
    def __init__(self, section=None):
        """
        Initializes ourself based on a :class:`configparser.SectionProxy`

        :param section: :class:`configparser.SectionProxy` to initialize ourselves with.
        """
        super().__init__()
        self.read(section)

    def read(self, section):
        """
        Converts, initializes and validates our parameters.

        :param section: :class:`configparser.SectionProxy` to initialize ourselves with.
        """
        return True

    # noinspection PyMethodMayBeStatic
    def write(self, section):
        """
        (Possibly) updates the specified configsection to match us.

        :param section: A :class:`configparser.SectionProxy` to modify
        """
        pass

    def __getattr__(self, item):
        try:
            return self[item]
        except KeyError:
            raise AttributeError(item)

    def __delattr__(self, item):
        try:
            del self[item]
        except KeyError:
            raise AttributeError(item)

    __setattr__ = dict.__setitem__


class MainConfigSection(ConfigSection):
    """
    Handles main bot configuration
    """

    # noinspection PyAttributeOutsideInit
    def read(self, section):
        self.prefix = section.get('prefix', '!')
        self.owners = bangbot.util.split_list(section.get('owners'))
        self.channels = bangbot.util.split_list(section.get('channels'))
        self.chantypes = section.get('chantypes', '#')
        self.wrap_length = section.getint('wrap_length', 400)
        self.wrap_indent = section.get('wrap_indent', '...')

    def write(self, section):
        section['channels'] = ", ".join(self.channels)


class LoggingConfigSection(ConfigSection):
    # noinspection PyAttributeOutsideInit
    def read(self, section):
        self.level = section.get('level', 'INFO')
        self.file = section.get('file') or None
        self.format = section.get('format') or None


class Config(ConfigStore):
    """
    Handles configuration, and is a wrapper around a :class:`configparser.ConfigParser`.

    Also serves as the bot's :class:`~bangbot.interfaces.ConfigStore`.  If we were loaded from a file, every load
    re-reads it and every save rewrites it.  Otherwise everything stays in memory.
    """

    def __init__(self, filename=None, data=None):
        """
        Creates a new Configuration.

        :param filename: Filename to load from using read_file().  Saves go here too.
        :param data: Dict or str to load from using read_data()
        """
        self.filename = filename
        self.sections = {}
        self.section_classes = {}
        self._data = data
        self._parser = self._new_parser()
        if data:
            self.read_data(data)
        if filename:
            self.read_file(filename)

        self.section('main', MainConfigSection)
        self.section('logging', LoggingConfigSection)

    @staticmethod
    def _new_parser():
        # Values like log formats contain '%'
        return configparser.ConfigParser(interpolation=None)

    def section(self, name, class_=None):
        """
        Registers the specified class as a handler for the specified config section.  Ignored if the section is already
        handled.

        :param name: Config section name.
        :param class_: Class.  If None, returns a decorator.
        """
        if class_ is None:
            return functools.partial(self.section, name)
        if name not in self.sections:
            self.section_classes[name] = class_
            self.sections[name] = class_(self._proxy(name))
        return class_

    def _proxy(self, name):
        if not self._parser.has_section(name):
            self._parser.add_section(name)
        return self._parser[name]

    def read_file(self, filename):
        """
        Reads configuration from the specified ini file.  A missing file is treated as an empty one.

        :param filename: Filename to read
        """
        try:
            with open(filename, encoding='utf-8') as f:
                self._parser.read_file(f)
        except FileNotFoundError:
            logger.warning("Config file %r does not exist; using defaults.", filename)

    def read_data(self, data):
        """
        Reads configuration from the specified dict or str

        :param data: String (with INI file syntax) or dict consisting of data to read
        """
        if isinstance(data, str):
            self._parser.read_string(data)
        elif isinstance(data, dict):
            self._parser.read_dict(data)

    def reload(self):
        """
        Re-reads our file (if we have one) on top of any data we were created with, and rebuilds every section.

        :raises: :class:`PersistenceFailure` if the file can't be read or parsed.
        """
        if not self.filename:
            return
        parser, self._parser = self._parser, self._new_parser()
        try:
            if self._data:
                self.read_data(self._data)
            self.read_file(self.filename)
        except (OSError, UnicodeDecodeError, configparser.Error) as ex:
            self._parser = parser
            raise PersistenceFailure("Could not load {}: {}".format(self.filename, ex)) from ex
        for name, class_ in self.section_classes.items():
            self.sections[name] = class_(self._proxy(name))

    def save(self):
        """
        Writes every section back to the parser, and the parser to our file (if we have one).

        :raises: :class:`PersistenceFailure` if the file can't be written.
        """
        for name, section in self.sections.items():
            section.write(self._proxy(name))
        if not self.filename:
            return
        try:
            bangbot.util.atomic_write(self.filename, self._parser.write)
        except OSError as ex:
            raise PersistenceFailure("Could not save {}: {}".format(self.filename, ex)) from ex
        logger.debug("Saved configuration to %r", self.filename)

    def load_owner_identities(self):
        self.reload()
        return set(self.main.owners)

    def load_channel_membership(self):
        self.reload()
        return list(self.main.channels)

    def save_channel_membership(self, channels):
        self.reload()
        self.main.channels = list(channels)
        self.save()

    def __getattr__(self, item):
        try:
            return self.__dict__['sections'][item]
        except KeyError:
            raise AttributeError(item)

    def __getitem__(self, item):
        return self.sections[item]


class Bot:
    """
    Routes inbound events to commands.

    Events are handled strictly one at a time.  :attr:`state` is 'idle' between events, 'classifying' while deciding
    whether a message is a command and 'dispatching' while one runs.
    """
    IDLE = 'idle'
    CLASSIFYING = 'classifying'
    DISPATCHING = 'dispatching'

    def __init__(self, transport, config=None, filename=None, data=None, **kwargs):
        """
        Creates a new Bot.

        :param transport: A :class:`~bangbot.interfaces.Transport`
        :param config: Configuration object.  Must be a :class:`Config` or something with the same sections that is
            also a :class:`~bangbot.interfaces.ConfigStore`.
        :param filename: Filename to load config from.  Ignored if `config` is not None.
        :param data: Data to load config from.  Ignored if `config` is not None.
        :param kwargs: `event_factory` overrides the :class:`Event` class, `registry` supplies a
            :class:`~bangbot.commands.Registry` and `core_commands=False` skips registering the builtin commands.
        """
        if config is None:
            config = Config(filename=filename, data=data)
        self.config = config
        self.transport = transport
        main = self.config.main

        self.event_factory = kwargs.pop('event_factory', Event)
        self.command_registry = kwargs.pop('registry', None)
        if self.command_registry is None:
            self.command_registry = Registry()
        if kwargs.pop('core_commands', True):
            self.command_registry.register(*bangbot.modules.core.COMMANDS)
        if kwargs:
            raise TypeError("Unexpected keyword arguments: {}".format(", ".join(sorted(kwargs))))

        self.state = self.IDLE
        self.textwrapper = textwrap.TextWrapper(
            width=main.wrap_length, subsequent_indent=main.wrap_indent,
            replace_whitespace=False, tabsize=4, drop_whitespace=True
        )

    @contextlib.contextmanager
    def log_exceptions(self, message="Failed to process command"):
        """
        Log exceptions rather than allowing them to raise.  Contextmanager.

        :param message: Logged along with the traceback.

        Usage::

            with bot.log_exceptions():
                raise ValueError("oh no!")
        """
        try:
            yield None
        except Exception:
            logger.exception(message)

    @property
    def nickname(self):
        """Our current nickname, according to the transport."""
        return self.transport.current_identity()

    def is_channel(self, target):
        """Returns True if `target` looks like a channel name."""
        return bool(target) and target[0] in self.config.main.chantypes

    def wraptext(self, text):
        return self.textwrapper.wrap(text)

    def command(self, *args, **kwargs):
        """
        Same as :meth:`bangbot.commands.command`, but using our command registry by default.

        :param args: Passed to decorator
        :param kwargs: Passed to decorator
        :return: fn
        """
        kwargs.setdefault('registry', self.command_registry)
        return bangbot.commands.command(*args, **kwargs)

    def _lines(self, message, wrap):
        if wrap:
            message = "\n".join(self.wraptext(message))
        return [line for line in message.replace('\r', '').split('\n') if line]

    def message(self, target, message, wrap=True):
        """
        Sends a PRIVMSG

        :param target: Recipient
        :param message: Message text.  May contain newlines, which will be split into multiple messages.
        :param wrap: If True, text will be wordwrapped.
        """
        for line in self._lines(message, wrap):
            self.transport.send_message(target, line)

    def notice(self, target, message, wrap=True):
        """
        Sends a NOTICE

        :param target: Recipient
        :param message: Message text.  May contain newlines, which will be split into multiple messages.
        :param wrap: If True, text will be wordwrapped.
        """
        for line in self._lines(message, wrap):
            self.transport.send_notice(target, line)

    say = message

    def kick(self, channel, nick, reason):
        logger.info("Kicking %s from %s (%s)", nick, channel, reason)
        self.transport.send_kick(channel, nick, reason)

    def join(self, channel):
        logger.info("Joining %s", channel)
        self.transport.send_join(channel)

    def part(self, channel):
        logger.info("Leaving %s", channel)
        self.transport.send_leave(channel)

    def run(self):
        """
        Identifies, joins our channels and then handles events until the transport runs dry.

        Failing to identify is fatal.  Nothing after that is.
        """
        self.command_registry.seal()
        logger.info("Identifying...")
        self.transport.identify()
        self.autojoin()
        for event in self.transport.iterate():
            self.handle_inbound_event(event)
        logger.info("Transport closed.")

    def autojoin(self):
        """Attempt to join our persisted channels."""
        try:
            channels = self.config.load_channel_membership()
        except PersistenceFailure:
            logger.exception("Could not load channel list")
            return
        for channel in channels:
            with self.log_exceptions("Could not join {}".format(channel)):
                self.join(channel)

    def handle_inbound_event(self, event):
        """
        Handles one event from the transport.  Never raises.

        :param event: A :class:`~bangbot.interfaces.TextMessage`, :class:`~bangbot.interfaces.Invite` or anything
            else (which is ignored).
        """
        logger.debug("<- %r", event)
        if isinstance(event, TextMessage):
            return self.handle_message(event.target, event.sender, event.text)
        if isinstance(event, Invite):
            return self.handle_invite(event.invited, event.channel, event.sender)
        logger.debug("Ignoring %r", event)

    def handle_message(self, target, sender, message):
        """
        Handles incoming messages

        :param target: Message target: a channel or our own nickname.
        :param sender: Nickname of sender
        :param message: Message
        """
        try:
            self.state = self.CLASSIFYING
            with self.log_exceptions():
                line = self.classify(target, sender, message)
                if line is None:
                    return
                self.state = self.DISPATCHING
                self.dispatch(*line, sender=sender)
        finally:
            self.state = self.IDLE

    def handle_invite(self, invited, channel, sender):
        """
        Handles an INVITE by running `join <channel>` as though `sender` had asked us privately.

        :param invited: Who was invited.  Invites for anyone but us are ignored.
        :param channel: Channel we were invited to.
        :param sender: Nickname of the inviter.
        """
        try:
            self.state = self.CLASSIFYING
            with self.log_exceptions():
                if invited != self.nickname or 'join' not in self.command_registry:
                    return
                logger.info("Invited to %s by %s", channel, sender)
                self.state = self.DISPATCHING
                self.dispatch('', 'join', channel, sender, sender=sender)
        finally:
            self.state = self.IDLE

    def classify(self, target, sender, message):
        """
        Decides whether `message` is a command.

        Private messages are always commands, and the prefix is optional.  Channel messages must start with the prefix.

        :returns: None if it isn't a command, otherwise a (prefix, name, text, reply_target) tuple.
        """
        is_private = target == self.nickname
        prefix = self.config.main.prefix
        is_bang = bool(prefix) and message.startswith(prefix)
        if not (is_private or is_bang):
            return None
        if is_bang:
            message = message[len(prefix):]
        else:
            prefix = ''

        match = self.command_registry.match(message)
        if not match:
            return None
        name, text = match
        return prefix, name, text, sender if is_private else target

    def dispatch(self, prefix, name, text, target, sender):
        """
        Looks up, authorizes and runs a command.

        Problems with what the user typed are answered with a NOTICE to `sender`.  Anything else propagates.

        :param prefix: Prefix the command was given with, if any.
        :param name: Command name as typed.
        :param text: Argument text.
        :param target: Where replies should go.
        :param sender: Who issued the command.
        """
        command = self.command_registry.lookup(name)
        try:
            if command is None:
                if self.is_channel(target):
                    logger.debug("Ignoring unknown command %r in %s", name, target)
                    return
                raise UnknownCommand(name)

            owners = self.config.load_owner_identities() if command.owner_only else ()
            if not authorize(command, sender, owners):
                logger.info("Denied %s%s to %s", prefix, name, sender)
                raise PermissionDenied(command=command)

            event = self.event_factory(
                bot=self, prefix=prefix, name=name, command=command, text=text, sender=sender, target=target
            )
            logger.info("%s ran %s%s in %s", sender, prefix, name, target)
            return command(event)
        except CommandError as ex:
            self.notice(sender, str(ex))


def _implied_target(method):
    """
    If 'target' is specified as a keyword argument, uses it.  Otherwise, uses the event's reply target.

    :param method: Method to wrap
    :return: Wrapped method
    """
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        target = kwargs.pop('target', None) or self.target
        return method(self, target, *args, **kwargs)
    return wrapper


def _implied_target_user(method):
    """
    If 'target' is specified as a keyword argument, uses it.  Otherwise, uses the sender.

    :param method: Method to wrap
    :return: Wrapped method
    """
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        target = kwargs.pop('target', None) or self.sender
        return method(self, target, *args, **kwargs)
    return wrapper


# noinspection PyIncorrectDocstring
class Event(bangbot.commands.Event):
    """
    Passed to command functions when they run.

    :ivar args: Bound arguments (name -> value), filled in by the command.
    """

    def __init__(self, prefix=None, name=None, command=None, text=None, bot=None, sender=None, target=None):
        """
        Creates a new :class:`Event`

        :param prefix: Prefix that matched, if any.
        :param name: Name of command as entered (minus prefix).  May differ from command.name
        :param command: :class:`~bangbot.commands.Command` object that matched.
        :param text: Argument text.
        :param bot: Bot instance
        :param sender: Triggering nickname
        :param target: Where replies go: the channel, or `sender` for private messages.
        """
        super().__init__(prefix=prefix, name=name, command=command, text=text)
        self.bot = bot
        self.sender = sender
        self.target = target

    @property
    def is_private(self):
        """True if the command was sent to us directly rather than in a channel."""
        return self.target == self.sender

    @property
    def channel(self):
        """Returns the channel that invoked this, or None for private messages."""
        return None if self.is_private else self.target

    @_implied_target
    def message(self, *args, **kwargs):
        """bot.message with a default target"""
        return self.bot.message(*args, **kwargs)

    say = message

    @_implied_target
    def notice(self, *args, **kwargs):
        """bot.notice with a default target"""
        return self.bot.notice(*args, **kwargs)

    @_implied_target_user
    def unotice(self, *args, **kwargs):
        """bot.notice, but noticing the sender (not the channel) by default"""
        return self.bot.notice(*args, **kwargs)

    def kick(self, nick, reason, channel=None):
        """bot.kick with an implied channel"""
        return self.bot.kick(channel or self.channel, nick, reason)

    def join(self, channel):
        return self.bot.join(channel)

    def part(self, channel):
        return self.bot.part(channel)


def main(transport, filename=DEFAULT_CONFIG):
    """
    Loads configuration from `filename`, sets up logging and runs a bot on `transport` until it closes.

    :param transport: A :class:`~bangbot.interfaces.Transport`
    :param filename: Config file.
    :return: The bot.
    """
    config = Config(filename=filename)
    bangbot.util.configure_logging(config.logging)
    bot = Bot(transport, config)
    bot.run()
    return bot
