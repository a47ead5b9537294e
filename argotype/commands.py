"""
argotype command layer: declare, build, and run commands and command groups.

What this module provides
- CommandSpecification: immutable description of a single command (positionals, an
  optional extra sink, options, parse policy). Every builder call returns a new
  specification; the receiver is never touched.
- GroupSpecification: immutable description of a command group (named subcommands plus
  the group's own options).
- Command / Group: the runnable units produced by build(...). They carry a description
  (listed by a parent group), render help/version text and run an argument vector.
- Context: what an action (or a group's context mapper) learns about its invocation.
- command(...) / group(...): factories for the two specifications.
- run(...): entry contract that turns signals and failures into host callbacks.
- invoke(...): convenience runner for scripts and tests (shell-like strings accepted).

Quick start
    from argotype import command, group, invoke

    copy = (
        command("Copy a file")
        .positional("source", "the source file")
        .positional("destination", "the destination file")
        .option("f", "force", "overwrite existing files")
        .build(lambda positionals, options, context: (positionals, options.force))
    )

    app = (
        group("Sample app", enable_help=True)
        .command("copy", copy)
        .option("C", "cwd", "change directory", "scalar")
        .build(lambda options, context: {**context.context, "cwd": options.cwd})
    )

    invoke(app, "-C dir copy a b", {})   # → (('a', 'b'), None)

Parse policy (keyword-only flags of the specifications)
- allow_option_after_positional: options may still follow positionals (commands only).
- allow_duplicate_options: repeated boolean/scalar options are accepted (last wins).
- allow_single_dash_as_positional: a lone '-' is a positional (or a subcommand name).
- enable_help / enable_version: reserve -h/--help and -v/--version; giving them raises
  HelpRequested / VersionRequested with the rendered text.

Design notes
- Specifications and built units hold no per-run state. Each invocation creates its
  own Stream and resolvers, so the same unit can be run any number of times.
- Build-time mistakes raise SpecificationError; user-input mistakes raise a
  ParseFailure bound to the help of the command/group where they happened.
"""
import difflib
import functools
import os.path
import re
import shlex
import sys
from collections.abc import Iterable, Mapping

from . import formatting
from .arguments import Positional, Extra, Option
from .faults import *
from .resolvers import OptionResolver, PositionalResolver
from .tokens import TokenKind, Stream, classify
from .utils import *


def _sanitize_strings(cls, descr, name, version):
    """
    Validate the descriptive fields shared by both specifications.

    - descr: str (trimmed, may be empty)
    - name/version: Unset or a non-empty str (trimmed)
    """
    if not isinstance(descr, str):
        raise SpecificationError(f"{cls.__typename__} 'descr' must be a string")
    for field, value in (("name", name), ("version", version)):
        if not isinstance(value, str | Unset):
            raise SpecificationError(f"{cls.__typename__} {field!r} must be a string")
        if isinstance(value, str) and not value.strip():
            raise SpecificationError(f"{cls.__typename__} {field!r} cannot be empty")
    return (
        descr.strip(),
        name.strip() if isinstance(name, str) else Unset,
        version.strip() if isinstance(version, str) else Unset,
    )


def _replace(self, **overrides):
    """
    Persistent update: a new record with the private fields of 'self' and the overrides.
    """
    clone = object.__new__(type(self))
    clone.__dict__.update(self.__dict__)
    for name, value in overrides.items():
        setattr(clone, "_" + name, value)
    return clone


def _with_option(self, option):
    """
    Register 'option' into the option/short tables of a specification (returns a new one).
    """
    typename = self.__typename__
    if option.long in self._options:
        raise SpecificationError(f"{typename} long option {option.long!r} is already defined")
    if option.short is not None and option.short in self._shorts:
        raise SpecificationError(f"{typename} short option {option.short!r} is already defined")
    return self.__replace__(
        options={**self._options, option.long: option},
        shorts={**self._shorts, option.short: option.long} if option.short is not None else self._shorts,
    )


def _with_builtins(self, help, version):
    if help:
        self = _with_option(self, Option("h", "help", "show this help message and exit"))
    if version:
        self = _with_option(self, Option("v", "version", "show the version and exit"))
    return self


def _fault(type, message, /, *, help, path, **details):
    return type(message, help=help, path=path, **details)


def _path(name, fullname):
    """
    Normalize the (name, fullname) pair of the public run() contract into a name path.

    The full name wins when both are given; a lone name is a one-segment path.
    """
    if fullname is not Unset:
        return tuple(fullname.split(" "))
    return (coalesce(name, os.path.basename(sys.argv[0]) or "main"),)


def _signals(unit, spec, path):
    """
    Early-exit handlers for the built-in --help / --version options.
    """
    signals = {}
    if spec.enable_help:
        @rename("help")
        def help():
            raise HelpRequested(unit.help(path[-1], " ".join(path)), path=path)
        signals["help"] = help
    if spec.enable_version:
        @rename("version")
        def version():
            raise VersionRequested(unit.version(path[-1]), path=path)
        signals["version"] = version
    return signals


class Options(Mapping):
    """
    Read-only option values of one invocation, keyed by long name.

    Values: True for present boolean options, the converted value for scalar options,
    a list of converted values for list options. Absent options are not keys.

    Attribute access is a shortcut for .get() with '_' standing for '-':
    options.dry_run is options.get("dry-run") (None when absent).

    Option values shadow the mapping methods: with a --values option given,
    options.values is its value. Item access and the 'in' operator always work.
    """

    def __init__(self, values=(), /):
        self._values = dict(values)

    def __getitem__(self, name):
        return self._values[name]

    def __iter__(self):
        return iter(self._values)

    def __len__(self):
        return len(self._values)

    def __contains__(self, name):
        return name in self._values

    def __eq__(self, other):
        if not isinstance(other, Mapping):
            return NotImplemented
        return self._values == {name: other[name] for name in other}

    __hash__ = None

    def __getattribute__(self, name):
        if name.startswith("_"):
            return super().__getattribute__(name)
        values = super().__getattribute__("_values")
        for key in (name, name.replace("_", "-")):
            if key in values:
                return values[key]
        return super().__getattribute__(name)

    def __getattr__(self, name):
        if name.startswith("_"):
            raise AttributeError(name)
        return None

    def __repr__(self):
        return f"options({self._values!r})"


class Context(metaclass=SpecificationType):
    """
    Invocation context handed to actions and to group context mappers.

    Attributes
    - name: last segment of the name path (the command or subcommand name).
    - fullname: the name path joined by spaces ("app copy").
    - path: the name path as a tuple.
    - args: the raw arguments of this unit (for a group: the tokens left after the
      subcommand name, which are forwarded verbatim to the subcommand).
    - context: the external context value, passed through untouched.

    Accessors
    - help(): help text of the running command/group.
    - version(): version text, or None when no version was registered.
    - rerun(args, context=..., name=..., fullname=...): run the same unit again.
    """

    __introspectable__ = (
        "name",
        "fullname",
        "path",
        "args",
    )
    __displayable__ = (
        "fullname",
        "args",
        "context",
    )

    def __new__(cls, unit, args, context, path, /):
        self = super().__new__(cls)
        self._unit = unit
        self._args = tuple(args)
        self._context = context
        self._path = tuple(path)
        self._name = self._path[-1]
        self._fullname = " ".join(self._path)
        return self

    @property
    def context(self):
        return self._context

    def help(self):
        return self._unit.help(self._name, self._fullname)

    def version(self):
        return self._unit.version(self._name)

    def rerun(self, args, context=Unset, /, name=Unset, fullname=Unset):
        """
        Run the same unit again with new arguments.

        Omitted fields keep their current value; a new name alone replaces the last
        segment of the current path.
        """
        if fullname is Unset:
            path = self._path[:-1] + (coalesce(name, self._name),)
        else:
            path = _path(name, fullname)
        return self._unit._invoke(args, coalesce(context, self._context), path)


class CommandSpecification(metaclass=SpecificationType):
    """
    Immutable description of one command.

    Builders
    - positional(name, descr, type=str, required=True)
    - extra(name, descr, type=str)
    - option(short, long, descr, cardinality="boolean", type=...)
    - build(action) -> Command

    Structural rules (checked by each builder, SpecificationError on violation)
    - long names and short aliases are unique (built-in help/version included);
    - a required positional cannot follow an optional one;
    - an optional positional cannot be combined with the extra sink;
    - the extra sink is declared at most once;
    - positional and extra names are unique.
    """

    __introspectable__ = (
        "descr",
        "name",
        "version",
        "positionals",
        "variadic",
        "options",
        "shorts",
        "allow_option_after_positional",
        "allow_duplicate_options",
        "allow_single_dash_as_positional",
        "enable_help",
        "enable_version",
    )
    __displayable__ = (
        "descr",
        "name",
        "version",
        "positionals",
        "variadic",
        "options",
    )

    def __new__(
            cls,
            descr="",
            /,
            name=Unset,
            version=Unset,
            *,
            allow_option_after_positional=False,
            allow_duplicate_options=False,
            allow_single_dash_as_positional=False,
            enable_help=False,
            enable_version=False,
    ):
        self = super().__new__(cls)
        self._descr, self._name, self._version = _sanitize_strings(cls, descr, name, version)
        self._positionals = ()
        self._variadic = None
        self._options = {}
        self._shorts = {}
        self._allow_option_after_positional = bool(allow_option_after_positional)
        self._allow_duplicate_options = bool(allow_duplicate_options)
        self._allow_single_dash_as_positional = bool(allow_single_dash_as_positional)
        self._enable_help = bool(enable_help)
        self._enable_version = bool(enable_version)
        return _with_builtins(self, enable_help, enable_version)

    def __replace__(self, **overrides):
        return _replace(self, **overrides)

    def _check_name(self, name):
        names = [positional.name for positional in self._positionals]
        if self._variadic is not None:
            names.append(self._variadic.name)
        if name in names:
            raise SpecificationError(f"{self.__typename__} positional parameter {name!r} is already defined")

    def positional(self, name, descr="", /, type=str, required=True):
        positional = Positional(name, descr, type=type, required=required)
        self._check_name(positional.name)
        if positional.required:
            if any(not declared.required for declared in self._positionals):
                raise SpecificationError(
                    f"{self.__typename__} required positional parameter {name!r}"
                    f" cannot be after optional positional parameters"
                )
        elif self._variadic is not None:
            raise SpecificationError(
                f"{self.__typename__} optional positional parameter {name!r}"
                f" and extra positional parameters cannot be used together"
            )
        return self.__replace__(positionals=self._positionals + (positional,))

    def extra(self, name, descr="", /, type=str):
        extra = Extra(name, descr, type=type)
        if self._variadic is not None:
            raise SpecificationError(f"{self.__typename__} extra positional parameters already registered")
        if any(not declared.required for declared in self._positionals):
            raise SpecificationError(
                f"{self.__typename__} extra positional parameters cannot be used with optional positional parameters"
            )
        self._check_name(extra.name)
        return self.__replace__(variadic=extra)

    def option(self, short, long, descr="", cardinality="boolean", /, type=Unset):
        return _with_option(self, Option(short, long, descr, cardinality, type=type))

    def build(self, action, /):
        """
        Bind an action and return the runnable Command.

        The action is called as action(positionals, options, context):
        - positionals: tuple of converted values, declared slots first (absent optional
          ones as None), then the extra values;
        - options: Options mapping keyed by long name;
        - context: Context of this invocation.
        Its return value is the result of the run. Usable as a decorator.
        """
        if not callable(action):
            raise SpecificationError(f"{self.__typename__} action must be callable")
        return Command(self, action)


class GroupSpecification(metaclass=SpecificationType):
    """
    Immutable description of a command group.

    Builders
    - command(name, unit): register a built Command or Group under 'name'
    - option(short, long, descr, cardinality="boolean", type=...)
    - build(map_context=...) -> Group
    """

    __introspectable__ = (
        "descr",
        "name",
        "version",
        "commands",
        "options",
        "shorts",
        "allow_duplicate_options",
        "allow_single_dash_as_positional",
        "enable_help",
        "enable_version",
    )
    __displayable__ = (
        "descr",
        "name",
        "version",
        "commands",
        "options",
    )

    def __new__(
            cls,
            descr="",
            /,
            name=Unset,
            version=Unset,
            *,
            allow_duplicate_options=False,
            allow_single_dash_as_positional=False,
            enable_help=False,
            enable_version=False,
    ):
        self = super().__new__(cls)
        self._descr, self._name, self._version = _sanitize_strings(cls, descr, name, version)
        self._commands = {}
        self._options = {}
        self._shorts = {}
        self._allow_duplicate_options = bool(allow_duplicate_options)
        self._allow_single_dash_as_positional = bool(allow_single_dash_as_positional)
        self._enable_help = bool(enable_help)
        self._enable_version = bool(enable_version)
        return _with_builtins(self, enable_help, enable_version)

    def __replace__(self, **overrides):
        return _replace(self, **overrides)

    def command(self, name, unit, /):
        typename = self.__typename__
        if not isinstance(name, str):
            raise SpecificationError(f"{typename} subcommand name must be a string")
        if not re.fullmatch(r"[^\s-]\S*", name):
            raise SpecificationError(
                f"{typename} subcommand name {name!r} must be a non-empty string without whitespace nor leading '-'"
            )
        if name in self._commands:
            raise SpecificationError(f"{typename} subcommand {name!r} is already defined")
        if not isinstance(unit, Command | Group):
            raise SpecificationError(f"{typename} subcommand {name!r} must be a built command or group")
        return self.__replace__(commands={**self._commands, name: unit})

    def option(self, short, long, descr="", cardinality="boolean", /, type=Unset):
        return _with_option(self, Option(short, long, descr, cardinality, type=type))

    def build(self, map_context=Unset, /):
        """
        Return the runnable Group.

        map_context(options, context) derives the context value handed to the selected
        subcommand from the group's option values and the group's Context. By default
        the outer context value is passed through unchanged.
        """
        if map_context is Unset:
            map_context = rename(lambda options, context: context.context, "map_context")
        if not callable(map_context):
            raise SpecificationError(f"{self.__typename__} 'map_context' must be callable")
        return Group(self, map_context)


class Command(metaclass=SpecificationType):
    """
    Runnable command: a CommandSpecification bound to its action.
    """

    __introspectable__ = (
        "spec",
        "action",
    )

    def __new__(cls, spec, action, /):
        self = super().__new__(cls)
        self._spec = spec
        self._action = action
        return self

    @property
    def descr(self):
        return self._spec.descr

    def help(self, name, fullname=Unset, /):
        return formatting.command_help(self._spec, name, coalesce(fullname, name))

    def version(self, name, /):
        return formatting.version(self._spec, name)

    def run(self, args, context=None, /, name=Unset, fullname=Unset):
        """
        Parse 'args' and call the action; returns the action's result.

        Raises ParseFailure, HelpRequested or VersionRequested.
        """
        return self._invoke(args, context, _path(name, fullname))

    __call__ = run

    def _invoke(self, args, context, path):
        spec = self._spec
        args = list(args)
        help = rename(lambda: self.help(path[-1], " ".join(path)), "help")
        fault = functools.partial(_fault, help=help, path=path)

        stream = Stream(args)
        options = OptionResolver(
            spec.options,
            spec.shorts,
            fault=fault,
            duplicates=spec.allow_duplicate_options,
            signals=_signals(self, spec, path),
        )
        positionals = PositionalResolver(spec.positionals, spec.variadic, fault=fault)

        accepting = True  # still accepting options
        while stream:
            raw = stream.take()
            token = classify(raw, options=accepting)
            match token.kind:
                case TokenKind.SEPARATOR:
                    accepting = False
                case TokenKind.DASH:
                    if not spec.allow_single_dash_as_positional:
                        raise fault(
                            SingleDashError,
                            "single dash '-' at %s position is invalid unless after '--'" % ordinal(stream.index),
                            hint="write '-- -' to pass a lone dash as a positional value",
                            index=stream.index,
                        )
                    positionals.accept(raw, stream.index)
                    accepting = spec.allow_option_after_positional
                case TokenKind.LONG | TokenKind.SHORT:
                    options.resolve(token, stream)
                case TokenKind.POSITIONAL:
                    positionals.accept(raw, stream.index)
                    accepting = accepting and spec.allow_option_after_positional

        values = positionals.finalize()
        return self._action(values, Options(options.values), Context(self, args, context, path))


class Group(metaclass=SpecificationType):
    """
    Runnable command group: a GroupSpecification bound to its context mapper.
    """

    __introspectable__ = (
        "spec",
        "map_context",
    )

    def __new__(cls, spec, map_context, /):
        self = super().__new__(cls)
        self._spec = spec
        self._map_context = map_context
        return self

    @property
    def descr(self):
        return self._spec.descr

    def help(self, name, fullname=Unset, /):
        return formatting.group_help(self._spec, name, coalesce(fullname, name))

    def version(self, name, /):
        return formatting.version(self._spec, name)

    def run(self, args, context=None, /, name=Unset, fullname=Unset):
        """
        Parse the group options, dispatch to the subcommand and return its result.

        Raises ParseFailure, HelpRequested or VersionRequested (possibly from the
        subcommand, bound to the subcommand's own help).
        """
        return self._invoke(args, context, _path(name, fullname))

    __call__ = run

    def _invoke(self, args, context, path):
        spec = self._spec
        args = list(args)
        help = rename(lambda: self.help(path[-1], " ".join(path)), "help")
        fault = functools.partial(_fault, help=help, path=path)
        choices = ", ".join(spec.commands) or "(none)"

        stream = Stream(args)
        options = OptionResolver(
            spec.options,
            spec.shorts,
            fault=fault,
            duplicates=spec.allow_duplicate_options,
            signals=_signals(self, spec, path),
        )

        command = Unset
        while stream:
            raw = stream.take()
            token = classify(raw)
            match token.kind:
                case TokenKind.SEPARATOR:
                    if not stream:
                        raise fault(
                            MissingSubcommandError,
                            "no subcommand given after '--' in group '%s'" % " ".join(path),
                            hint="choose one of: %s" % choices,
                            index=stream.index,
                        )
                    command = stream.take()
                case TokenKind.DASH:
                    if not spec.allow_single_dash_as_positional:
                        raise fault(
                            SingleDashError,
                            "single dash '-' at %s position is invalid unless after '--'" % ordinal(stream.index),
                            index=stream.index,
                        )
                    command = raw
                case TokenKind.LONG | TokenKind.SHORT:
                    options.resolve(token, stream)
                    continue
                case TokenKind.POSITIONAL:
                    command = raw
            break

        if command is Unset:
            raise fault(
                MissingSubcommandError,
                "no subcommand given in group '%s'" % " ".join(path),
                hint="choose one of: %s" % choices,
                args=tuple(args),
            )

        try:
            unit = spec.commands[command]
        except KeyError:
            suggestions = difflib.get_close_matches(command, spec.commands.keys(), 5)
            try:
                hint = "did you mean %r? available subcommands: %s" % (suggestions[0], choices)
            except IndexError:
                hint = "available subcommands: %s" % choices
            raise fault(
                UnknownSubcommandError,
                "subcommand %r not found in group '%s'" % (command, " ".join(path)),
                hint=hint,
                index=stream.index,
                suggestions=suggestions,
            ) from None

        remaining = stream.remaining()
        inner = self._map_context(Options(options.values), Context(self, remaining, context, path))
        return unit._invoke(remaining, inner, path + (command,))


def command(descr="", /, *args, **kwargs):
    """
    Start a command specification (see CommandSpecification for the keywords).
    """
    return CommandSpecification(descr, *args, **kwargs)


def group(descr="", /, *args, **kwargs):
    """
    Start a group specification (see GroupSpecification for the keywords).
    """
    return GroupSpecification(descr, *args, **kwargs)


def _describe(failure):
    """
    Error text handed to on_error: message, hint, then the contextual help.
    """
    return "error: %s\nhint: %s\n\n%s" % (failure.message, failure.hint, failure.help())


def run(command, args, context, name, on_error, on_help, on_version, /):
    """
    Run a built command or group and route every early exit to the host.

    Contract
    - success: the result of the action is returned.
    - HelpRequested → on_help(help_text)
    - VersionRequested → on_version(version_text_or_None)
    - MissingSubcommandError for a group given no arguments at all → on_help(help text of
      that group), an implicit help request
    - any other ParseFailure → on_error(text), where text holds the message, the hint and
      the help of the command/group where the failure happened

    The handlers are expected never to return (typically they exit the process). When
    one does return, the original signal or failure is re-raised.
    """
    try:
        return command.run(args, context, name)
    except HelpRequested as signal:
        on_help(signal.text)
        raise
    except VersionRequested as signal:
        on_version(signal.text)
        raise
    except ParseFailure as failure:
        if isinstance(failure, MissingSubcommandError) and not failure.details.get("args", True):
            on_help(failure.help())
        else:
            on_error(_describe(failure))
        raise


def invoke(command, prompt=Unset, context=None, /, name=Unset):
    """
    Convenience runner for scripts and tests.

    Parameters
    - command: a built Command or Group.
    - prompt:
      • Unset: use sys.argv[1:].
      • str: shell-like string, split with shlex.split.
      • Iterable[str]: pre-tokenized arguments (kept verbatim, empty strings included).
    - context: external context value handed to the unit.
    - name: program name (defaults to the basename of sys.argv[0]).

    Failures and signals propagate as exceptions.
    """
    if not isinstance(command, Command | Group):
        raise TypeError("invoke() first argument must be a built command or group")

    if prompt is Unset:
        tokens = sys.argv[1:]
    elif isinstance(prompt, str):
        tokens = shlex.split(prompt)
    elif isinstance(prompt, Iterable):
        tokens = list(prompt)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("invoke() argument must be a string or an iterable of strings")
    else:
        raise TypeError("invoke() argument must be a string or an iterable of strings")

    return command.run(tokens, context, name)


__all__ = (
    "CommandSpecification",
    "GroupSpecification",
    "Command",
    "Group",
    "Context",
    "Options",
    "command",
    "group",
    "run",
    "invoke",
)
