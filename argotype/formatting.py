"""
Help and version text.

Everything here is derived from a specification alone and returns plain strings, so the
same specification always renders the same text. Colors, panels and where the text ends
up are decided by the host (see argotype.shell).

Help layout (blocks are separated by one blank line, empty blocks are skipped)

    <name> version <version>          header; just <name> without a version
    <description>
    Usage: <fullname> [options] <required> [optional] [...extra]
    Positional parameters:            commands only
    Options:                          sorted by long name
    Commands:                         groups only, declaration order

Labels of a block are padded to the longest label + 2 so descriptions line up.
"""


def _columns(title, rows):
    if not rows:
        return []
    width = max(len(label) for label, _ in rows) + 2
    return [title + ":"] + [("  " + label.ljust(width) + descr).rstrip() for label, descr in rows]


def _header(spec, name):
    return version(spec, name) or coalesce_name(spec, name)


def coalesce_name(spec, name, /):
    """
    The display name: the specification's override when it has one, else the given name.
    """
    return spec.name or name


def version(spec, name, /):
    """
    "<name> version <version>", or None when the specification registered no version.
    """
    if spec.version is None:
        return None
    return f"{coalesce_name(spec, name)} version {spec.version}"


def _option_rows(spec):
    options = sorted(spec.options.values(), key=lambda option: option.long.casefold())
    return [(option.label, option.descr) for option in options]


def command_help(spec, name, fullname, /):
    """
    Render the help of a command specification.
    """
    usage = f"Usage: {fullname}"
    if spec.options:
        usage += " [options]"
    for positional in spec.positionals:
        usage += " " + positional.label
    if spec.variadic is not None:
        usage += " " + spec.variadic.label

    rows = [(positional.label, positional.descr) for positional in spec.positionals]
    if spec.variadic is not None:
        rows.append((spec.variadic.label, spec.variadic.descr))

    blocks = [
        [_header(spec, name)],
        [spec.descr] if spec.descr else [],
        [usage],
        _columns("Positional parameters", rows),
        _columns("Options", _option_rows(spec)),
    ]
    return "\n\n".join("\n".join(block) for block in blocks if block)


def group_help(spec, name, fullname, /):
    """
    Render the help of a group specification.
    """
    usage = f"Usage: {fullname}"
    if spec.options:
        usage += " [options]"
    usage += " <command> [...args]"

    blocks = [
        [_header(spec, name)],
        [spec.descr] if spec.descr else [],
        [usage],
        _columns("Options", _option_rows(spec)),
        _columns("Commands", [(command, unit.descr) for command, unit in spec.commands.items()]),
    ]
    return "\n\n".join("\n".join(block) for block in blocks if block)


__all__ = (
    "command_help",
    "group_help",
    "version",
    "coalesce_name",
)
