"""
IRC command definition and argument binding.

This package defines the classes and decorators used to declare bot commands, look them up by name and bind the text
following a command name to its arguments.

Argument Binding
================
A command declares an ordered list of :class:`CommandArg`, each of which is required or optional.  The text after the
command name is split on whitespace and the words are handed out to the arguments in order, one each.  Whatever is left
over is glued back onto the last argument (joined by single spaces), which makes something like::

    !kick bob please leave now

bind as ``nick="bob", reason="please leave now"``.  Running out of words before a required argument is filled raises
:class:`MissingArgument`; the bot answers that with the command's usage string, e.g. ``USAGE <nick> [reason]``.

Commands
========
A :class:`Command` wraps a function that is called as::

    function(event, **bound_arguments)

Commands are usually built with the decorators::

    @command('say', return_command=True)
    @alias('echo')
    @arg('text')
    def say(event, text):
        event.say(text)

Permissions
===========
Commands flagged ``owner_only`` may only be used by the bot's owners; see :func:`authorize`.  A command's ``group`` is
informational only.
"""
from .exc import *
from .core import *
from .commands import *
