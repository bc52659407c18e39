import collections
import functools
import inspect
import itertools
import re

import bangbot.util
from .core import ArgumentList
from .exc import *

__all__ = [
    'CommandArg', 'Command', 'Registry', 'PendingCommand', 'authorize',
    'wrap_decorator', 'chain_decorator', 'command', 'arg', 'alias', 'doc',
]


class CommandArg(collections.namedtuple('_CommandArg', ['name', 'required'])):
    """
    One positional command parameter.

    :ivar name: Parameter name.  Bound values are passed to the command function under this keyword.
    :ivar required: If False, the parameter may be left out.
    """
    __slots__ = ()

    def __new__(cls, name, required=True):
        return super().__new__(cls, name, bool(required))

    @property
    def usage(self):
        """Returns '<name>' for required arguments and '[name]' for optional ones."""
        return ("<{}>" if self.required else "[{}]").format(self.name)


def authorize(command, sender, owners):
    """
    Returns True if `sender` may run `command`.

    Commands that aren't owner-only are open to everyone.  Owner-only commands require that `sender` is in `owners`
    (exact match).  `command.group` is not checked.

    :param command: A :class:`Command`
    :param sender: Nickname of whoever issued the command.
    :param owners: Collection of owner nicknames.
    """
    if not command.owner_only:
        return True
    return sender in owners


class Registry:
    """
    Maps command names and aliases to commands, and splits lines of text into a command name and argument text.

    Lookups are case-sensitive.

    :ivar aliases: Dictionary of names and aliases -> command.
    :ivar commands: List of registered commands, in registration order.
    :ivar regex: Pattern that splits a line into named groups 'name' and 'text'
    :ivar sealed: If True, no further commands may be registered.
    """

    #: Default pattern for splitting command lines.
    DEFAULT_PATTERN = r'\s*(?P<name>\S+)(?:\s+(?P<text>.*))?'

    def __init__(self, pattern=None):
        """
        :param pattern: Regular expression that matches a line of text and breaks it into named groups "name" and
            "text".
        """
        if pattern is None:
            pattern = self.DEFAULT_PATTERN
        if not hasattr(pattern, 'pattern'):
            pattern = re.compile(pattern, re.DOTALL)

        # Make sure pattern is sane.
        t = pattern.groupindex
        if 'name' not in t:
            raise TypeError("pattern must have a group named 'name'")
        if 'text' not in t:
            raise TypeError("pattern must have a group named 'text'")
        self.regex = pattern
        self.aliases = {}
        self.commands = []
        self.sealed = False

    def register(self, *commands):
        """
        Adds one or more commands to the registry.

        :param commands: Command(s) to add.
        :raises: :class:`RuntimeError` if the registry is sealed, :class:`ValueError` on a duplicate name or alias.
        """
        if self.sealed:
            raise RuntimeError("Cannot register commands in a sealed registry")
        for command in commands:
            names = command.names
            dupes = set(names).intersection(self.aliases.keys())
            if dupes:
                raise ValueError("Duplicate command alias {!r}".format(dupes.pop()))
            self.aliases.update(zip(names, itertools.repeat(command)))
            self.commands.append(command)

    def seal(self):
        """Prevents any further registration."""
        self.sealed = True

    def lookup(self, name):
        """
        Returns the command registered under `name`, or None.

        :param name: Command name or alias, minus any prefix.
        """
        return self.aliases.get(name)

    def match(self, text):
        """
        Splits `text` into a command name and the rest of the line.

        :param text: Line of text, minus any prefix.
        :returns: A (name, text) tuple, or None if there is no command name.
        """
        result = self.regex.fullmatch(text)
        if not result:
            return None
        return result.group('name'), result.group('text') or ''

    def __contains__(self, name):
        return name in self.aliases

    def __len__(self):
        return len(self.aliases)


class Command:
    """
    Represents commands.

    In addition to constructing commands using this class, they can also be constructed using the decorator syntax with
    :func:`command`, :func:`arg`, :func:`alias` and :func:`doc`.

    These are designed in such a way to account for the fact that they run 'backwards', e.g::

        @command('kick', owner_only=True)
        @arg('nick')
        @arg('reason', required=False)
        def kick(event, nick, reason=None):
            pass

    Despite the fact that the second ``@arg`` is called first, the arguments will be in the 'logical' order of top to
    bottom.
    """

    def __init__(self, function, name=None, aliases=None, args=None, owner_only=False, group='', doc=None):
        """
        Defines a new command.

        :param function: Called as function(event, **bound_arguments)
        :param name: Command name.  If None, uses the first alias.
        :param aliases: Additional names the command answers to.
        :param args: Sequence of :class:`CommandArg` (or names of required arguments), in order.
        :param owner_only: If True, only bot owners may use this command.
        :param group: Group this command belongs to.  Used to organize help.
        :param doc: Detailed help text.
        """
        self.function = function
        self.aliases = tuple(aliases or ())
        self.name = name or next(iter(self.aliases), None)
        if not self.name:
            raise ValueError("Command has no name")
        self.args = tuple(a if isinstance(a, CommandArg) else CommandArg(a) for a in (args or ()))
        names = [a.name for a in self.args]
        if len(set(names)) != len(names):
            raise ValueError("Duplicate argument name in {!r}".format(names))
        self.owner_only = bool(owner_only)
        self.group = group or ''
        self.doc = doc or None

    @property
    def names(self):
        """Returns our name followed by any aliases that differ from it."""
        return [self.name] + [alias for alias in self.aliases if alias != self.name]

    @property
    def signature(self):
        """Returns our arguments as they'd appear in a usage line, e.g. '<nick> [reason]'"""
        return " ".join(a.usage for a in self.args)

    @property
    def usage(self):
        """Returns a usage string, e.g. 'USAGE <nick> [reason]'"""
        return ("USAGE " + self.signature).rstrip()

    def bind(self, text):
        """
        Binds a line of argument text to our arguments.

        Words are taken one at a time, left to right.  Anything left over once every argument has a word is appended to
        the last argument, provided it got one.  Optional arguments that don't get a word are left out.

        :param text: Argument text.
        :returns: Dictionary of argument name -> value.
        :raises: :class:`MissingArgument` for the first required argument that could not be filled.
        """
        if not self.args:
            return {}
        words = collections.deque(ArgumentList(text))
        result = {}
        for arg in self.args:
            if words:
                result[arg.name] = words.popleft()
            elif arg.required:
                raise MissingArgument(arg.name, self)

        last = self.args[-1].name
        if words and last in result:
            result[last] = " ".join(itertools.chain([result[last]], words))
        return result

    def __call__(self, event):
        """
        Binds the event's text and calls our function.

        :param event: A :class:`Event` instance representing information we were called with.
        :raises: :class:`UsageError` with our usage string if binding fails.
        """
        try:
            event.args = self.bind(event.text)
        except MissingArgument as ex:
            raise UsageError(command=self) from ex
        return self.function(event, **event.args)

    def __repr__(self):
        return "<{}({!r})>".format(type(self).__name__, self.name)

    @classmethod
    def from_pending(cls, pending, registry=None, **kwargs):
        """
        Create a new instance from a :class:`PendingCommand`

        :param pending: A PendingCommand instance.
        :param registry: If non-None, a :class:`Registry` to register the new command with.
        :param kwargs: Additional arguments to pass to constructor.  May be merged with PendingCommand arguments.
        :return: The new command
        """
        # Merge the various lists in reverse.  This allows decorators to be interpreted top-down even though they are
        # executed bottom-up.
        for attr in ('aliases', 'args'):
            kwargs[attr] = list(kwargs.get(attr) or [])
            kwargs[attr].extend(reversed(getattr(pending, attr)))
        doc = list(bangbot.util.listify(kwargs.get('doc')))
        doc.extend(reversed(pending.doc))
        kwargs['doc'] = "\n".join(doc)

        rv = cls(pending.function, **kwargs)
        if registry is not None:
            registry.register(rv)
        return rv


class PendingCommand:
    """
    Trickery to allow decorators to return something looking like the original function.

    Should not be directly instantiated by external code.
    """
    def __init__(self, function):
        self.function = function
        # These all resemble the Command counterparts, but will be reversed upon being finalized.
        self.args = []
        self.aliases = []
        self.doc = []

    def __call__(self, *args, **kwargs):
        return self.function(*args, **kwargs)


def wrap_decorator(fn):
    """
    Returns a version of the function wrapped in such a way as to allow both decorator and non-decorator syntax.

    If the first argument of the wrapped function is a callable, the wrapped function is called as-is.

    Otherwise, returns a decorator

    :param fn: Function to decorate.
    """
    # Determine the name of the first argument, in case it is specified in kwargs instead.
    signature = inspect.signature(fn)
    param = next(iter(signature.parameters.values()), None)
    assert param
    assert param.kind not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
    arg = param.name

    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        if (args and callable(args[0])) or (arg in kwargs and callable(kwargs[arg])):
            return fn(*args, **kwargs)

        def decorator(_fn):
            return fn(_fn, *args, **kwargs)
        return decorator
    return wrapper


def chain_decorator(fn):
    """
    The wrapped function will always receive a PendingCommand instead of a function, and will always return that same
    PendingCommand.  This allows for chaining decorators.

    If fn is not a PendingCommand, converts it to one.

    :param fn: Function to decorate.
    """
    @functools.wraps(fn)
    @wrap_decorator
    def wrapper(pending, *args, **kwargs):
        if not isinstance(pending, PendingCommand):
            pending = PendingCommand(pending)
        fn(pending, *args, **kwargs)
        return pending
    return wrapper


@wrap_decorator
def command(
    fn=None, name=None, aliases=None, args=None, doc=None, owner_only=False, group='',
    registry=None, factory=Command, return_command=False, **kwargs
):
    """
    Command decorator.

    This must be the 'last' decorator in the chain of command construction (and thus, the first to appear when stacking
    multiple decorators)

    :param fn: Function to decorate, or a :class:`PendingCommand` instance.
    :param name: Command name.
    :param aliases: List of command aliases.
    :param args: Arguments, in addition to those added by :func:`arg`.
    :param doc: Helptext.
    :param owner_only: If True, only bot owners can use the command.
    :param group: Command group.
    :param registry: Which :class:`Registry` the command will be registered in.  None disables registration.
    :param factory: A :class:`Command` subclass or a function that will create the new command.
    :param return_command: If True, returns the new command object rather than the wrapped function.
    :param kwargs: Passed to factory.
    :return: the new :class:`Command` object if return_command is True, otherwise the original function.
    """
    if not isinstance(fn, PendingCommand):
        fn = PendingCommand(fn)

    if hasattr(factory, 'from_pending'):
        factory = factory.from_pending

    created = factory(
        fn, registry,
        name=name, aliases=aliases, args=args, doc=doc, owner_only=owner_only, group=group,
        **kwargs
    )
    if return_command:
        return created
    return fn.function


@chain_decorator
def arg(fn, name, required=True):
    """
    Adds a positional argument to the pending command.

    :param fn: Function to decorate, or a :class:`PendingCommand` instance.
    :param name: Argument name.
    :param required: If False, the argument is optional.
    """
    fn.args.append(CommandArg(name, required))


@chain_decorator
def alias(fn, *aliases):
    """
    Adds one or more aliases to the pending command.

    :param fn: Function to decorate, or a :class:`PendingCommand` instance.
    :param aliases: One or more aliases to add.
    """
    fn.aliases.extend(reversed(aliases))


@chain_decorator
def doc(fn, helptext):
    """
    Adds helptext to the pending command.

    :param fn: Function to decorate, or a :class:`PendingCommand` instance.
    :param helptext: Helptext to add.
    """
    fn.doc.append(helptext)
