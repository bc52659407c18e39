"""
Core bot functionality.

Every :class:`~bangbot.Bot` registers the commands in :data:`COMMANDS` unless told not to.

``say`` / ``echo``
    Repeats text where it was asked.
``kick``, ``join``, ``part``
    Channel administration.  Owners only.  ``join`` and ``part`` also update the persisted channel list so the bot
    comes back to the same channels next time.
``help``
    Lists commands, or shows usage for one.
"""
import functools
import itertools
import textwrap

from bangbot.commands import InvalidChannelTarget, UsageError, alias, arg, command, doc

DEFAULT_KICK_REASON = "Requested"
SELF_KICK_REASON = "No you."


def default_reply(event, message):
    """Default function called to reply to help requests."""
    return event.unotice(message)


def valid_channel(event, channel):
    """
    Returns `channel` if it's something we can join or leave.

    :raises: :class:`UsageError` if `channel` is the sender's own nick, which happens when a channel argument defaults
        to the reply target of a private message.  :class:`InvalidChannelTarget` if it doesn't look like a channel.
    """
    if channel == event.sender:
        raise UsageError(command=event.command)
    if not event.bot.is_channel(channel) or ',' in channel:
        raise InvalidChannelTarget(channel)
    return channel


@command('say', return_command=True)
@alias('echo')
@arg('text')
@doc("Repeats <text> in the channel or private chat it was asked in.")
def say_command(event, text):
    event.say(text, wrap=False)


@command('kick', owner_only=True, group='admin', return_command=True)
@arg('nick')
@arg('reason', required=False)
@doc("Kicks <nick> from the current channel.")
def kick_command(event, nick, reason=DEFAULT_KICK_REASON):
    if event.is_private:
        raise InvalidChannelTarget(message="You can't kick people from a private chat...")
    if nick == event.bot.nickname:
        event.kick(event.sender, SELF_KICK_REASON)
        return
    event.kick(nick, reason)


@command('join', owner_only=True, group='admin', return_command=True)
@arg('channel')
@doc("Joins <channel> and remembers it.")
def join_command(event, channel):
    channel = valid_channel(event, channel)
    event.join(channel)

    store = event.bot.config
    channels = store.load_channel_membership()
    updated = [item for item in channels if item != channel] + [channel]
    if updated != channels:
        store.save_channel_membership(updated)


@command('part', owner_only=True, group='admin', return_command=True)
@arg('channel', required=False)
@doc("Leaves [channel] (default: this one) and forgets it.")
def part_command(event, channel=None):
    channel = valid_channel(event, channel or event.target)

    # Forget the channel before leaving it.
    store = event.bot.config
    channels = store.load_channel_membership()
    if channel in channels:
        channels.remove(channel)
        store.save_channel_membership(channels)
    event.part(channel)


@command('help', return_command=True)
@arg('name', required=False)
@doc("Shows a list of commands, or detailed help on one command.")
def help_command(event, name=None):
    """
    Produces help.
    :param event: Event
    :param name: Optional command name to search for.
    """
    registry = event.bot.command_registry
    prefix = event.bot.config.main.prefix
    reply = functools.partial(default_reply, event)

    if name:
        if prefix and name.startswith(prefix):
            name = name[len(prefix):]
        command = registry.lookup(name)
        if command is None:
            reply(
                "Unknown command {prefix}{name}.  See {prefix}{help} for a complete list of commands."
                .format(prefix=prefix, name=name, help=event.name)
            )
            return
        reply("Usage: {}{} {}".format(prefix, command.name, command.signature).rstrip())

        aliases = [prefix + alias for alias in command.names[1:]]
        if aliases:
            reply("Aliases: " + ", ".join(aliases))
        if command.doc:
            reply(command.doc)
        return

    # Build a wordwrapper for formatting the command list.
    ww = textwrap.TextWrapper(
        width=80, subsequent_indent="... "
    ).wrap

    reply("For detailed help on a specific command, use {}{} <command>".format(prefix, event.name))
    # Sort it and group by category
    for group, commandlist in itertools.groupby(
        sorted(registry.commands, key=lambda item: (item.group.lower(), item.name)),
        key=lambda item: item.group.lower()
    ):
        fmt = ("[{group}]: " if group else "") + "{commands}"
        for line in ww(fmt.format(
            group=group.upper(),
            commands=", ".join(command.name for command in commandlist))
        ):
            reply(line)


COMMANDS = (say_command, kick_command, join_command, part_command, help_command)
