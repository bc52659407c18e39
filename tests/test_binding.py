"""Tests for argument binding and usage strings."""

import pytest

from bangbot.commands import Command, CommandArg, MissingArgument, UsageError
from bangbot.commands.core import Event


def make(*args):
    return Command(lambda event, **kwargs: kwargs, name='test', args=args)


class TestCommandArg:
    def test_required_by_default(self):
        assert CommandArg('nick').required is True

    def test_usage(self):
        assert CommandArg('nick').usage == '<nick>'
        assert CommandArg('reason', False).usage == '[reason]'

    def test_immutable(self):
        arg = CommandArg('nick')
        with pytest.raises(AttributeError):
            arg.name = 'other'


class TestBind:
    @pytest.mark.parametrize('args', [
        (),
        (CommandArg('a', False),),
        (CommandArg('a', False), CommandArg('b', False)),
    ])
    def test_empty_tail_without_required_args(self, args):
        assert make(*args).bind('') == {}

    @pytest.mark.parametrize('args', [
        (CommandArg('a'),),
        (CommandArg('a', False), CommandArg('b')),
        (CommandArg('a'), CommandArg('b', False)),
    ])
    def test_empty_tail_with_required_args(self, args):
        with pytest.raises(MissingArgument):
            make(*args).bind('')

    def test_slurps_trailing_words_into_last_argument(self):
        command = make(CommandArg('nick'), CommandArg('reason', False))

        assert command.bind('bob please leave now') == {'nick': 'bob', 'reason': 'please leave now'}

    def test_slurped_words_are_joined_with_single_spaces(self):
        command = make(CommandArg('text'))

        assert command.bind('  hello    big\tworld  ') == {'text': 'hello big world'}

    def test_optional_argument_left_out(self):
        command = make(CommandArg('nick'), CommandArg('reason', False))

        assert command.bind('bob') == {'nick': 'bob'}

    def test_names_first_unfillable_argument(self):
        command = make(CommandArg('a'), CommandArg('b'), CommandArg('c'))

        with pytest.raises(MissingArgument) as info:
            command.bind('x')
        assert info.value.name == 'b'
        assert str(info.value) == 'b is required.'

    def test_optional_before_required(self):
        command = make(CommandArg('a', False), CommandArg('b'))

        with pytest.raises(MissingArgument) as info:
            command.bind('x')
        assert info.value.name == 'b'
        assert command.bind('x y z') == {'a': 'x', 'b': 'y z'}

    def test_no_arguments_ignores_tail(self):
        assert make().bind('anything at all') == {}


class TestUsage:
    def test_usage(self):
        command = make(CommandArg('nick'), CommandArg('reason', False))

        assert command.usage == 'USAGE <nick> [reason]'
        assert command.signature == '<nick> [reason]'

    def test_usage_without_arguments(self):
        assert make().usage == 'USAGE'


class TestCall:
    def test_passes_bound_arguments(self):
        command = make(CommandArg('nick'), CommandArg('reason', False))
        event = Event(name='test', command=command, text='bob go away')

        assert command(event) == {'nick': 'bob', 'reason': 'go away'}
        assert event.args == {'nick': 'bob', 'reason': 'go away'}

    def test_missing_argument_becomes_usage_error(self):
        command = make(CommandArg('nick'))
        event = Event(name='test', command=command, text='')

        with pytest.raises(UsageError) as info:
            command(event)
        assert str(info.value) == 'USAGE <nick>'
        assert isinstance(info.value.__cause__, MissingArgument)
