import re

__all__ = ['ArgumentList', 'Event']


class ArgumentList(list):
    """
    When parsing IRC commands, it's often useful to have the input text split into words on runs of whitespace.

    This does exactly that, while remembering the text it was built from.
    """
    pattern = re.compile(r'\S+')  # Matches not-whitespace.

    def __init__(self, text):
        """
        Parse a string of text (likely said by someone on IRC) into a series of words.
        :param text: Original text.
        """
        self.text = text or ''
        super().__init__(match.group() for match in self.pattern.finditer(self.text))


class Event:
    """Stores the result of splitting a command line, and includes data passed to commands."""
    def __init__(self, prefix=None, name=None, command=None, text=None):
        """
        Creates a new :class:`Event`

        :param prefix: Prefix that matched.  Empty if the command was given without one (e.g. in a private message).
        :param name: Name of command as entered (minus prefix).  May differ from command.name
        :param command: :class:`Command` object that matched.  Will be None if there was no command match.
        :param text: Argument text that followed the command name.
        """
        self.prefix = prefix or ''
        self.name = name
        self.command = command
        self.text = text or ''
        self._arglist = None
        self.args = {}

    @property
    def full_name(self):
        """Returns the full command name used.  (Essentially prefix + command)"""
        return self.prefix + self.name

    def __bool__(self):
        """Returns True if `self.command` is not None"""
        return self.command is not None

    @property
    def arglist(self):
        """Returns the :class:`ArgumentList` for our text.  Computed on first use."""
        if self._arglist is None:
            self._arglist = ArgumentList(self.text)
        return self._arglist
