import sys

from rich import print
from rich.pretty import pprint

from argotype import command, group, handle_help, handle_help_and_version
from argotype.shell import main


copying = (
    command("Copy a file")
    .positional("source", "The source file")
    .positional("destination", "The destination file")
    .option("h", "help", "Show help")
    .option("f", "force", "Force overwrite")
    .option("r", "recursive", "Copy recursively")
)


@copying.build
def copy(positionals, options, context):
    handle_help(options, context)
    source, destination = positionals
    flags = [name for name in ("force", "recursive") if options.get(name)]
    print(f"Copying {source} to {destination}" + (", " + " ".join(flags) if flags else ""))
    return 42


def scope(options, context):
    print("args:", list(context.args))
    handle_help_and_version(options, context)
    return {**context.context, "cwd": options.cwd}


app = (
    group("Sample app", version="0.0.0")
    .command("copy", copy)
    .command("cp", copy)
    .option("v", "version", "Show version")
    .option("h", "help", "Show help")
    .option("C", "cwd", "change directory", "scalar")
    .build(scope)
)


if __name__ == '__main__':
    pprint(main(app, {"ft": 42}, "app", sys.argv[1:] or ["-C", "my_cwd", "copy", "-h", "a", "b"]))
