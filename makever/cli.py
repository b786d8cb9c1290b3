"""
makever command line.

    makever [-c CODENAME] [-o FILE | --std] [-v UPGRADE [-m MESSAGE]] [-r] [-t] [-q] [-f]
    makever -d | -h

Runs from the root of an npm project (the current working directory) and
writes a version file describing the version found in its package.json.

Dispatch
- -t: dry run, nothing is written nor executed.
- -v: run `npm version UPGRADE`, then write the version file of the new version.
- -r: tag the last commit with an annotated tag of the current version.
- otherwise: write the version file of the current version.
"""
import os
import shlex
import subprocess
import sys
import warnings
from collections import defaultdict
from warnings import catch_warnings

from rich.console import Console, Group
from rich.table import Table
from rich.text import Text

from . import version
from .arguments import Flag, Valued, Specification
from .faults import *
from .reader import Accepted, Exited, Failed, scan

TIP = 'see accepted arguments by: "makever -h"'

REPOSITORY = "https://github.com/verdebydesign/makever-cli"

NPM_VERSION = "https://docs.npmjs.com/cli/version"


def _styles():
    return defaultdict(str, {
        "usage": "bold #00E6FF",
        "program-name": "bold #FF4D94",
        "section": "bold #FFFFFF",
        "option-name": "bold #00E6FF",
        "flag-name": "bold #22C55E",
        "metavar": "bold #FFD600",
        "description": "#9CA3AF",
        "footer": "#737373",
        "log": "#D1D5DB",
        "info": "bold #36C5F0",
        "success": "bold #22C55E",
        "error": "bold #FF4DA6",
        "tip": "italic #9CE19C",
    } | getattr(__import__("__main__"), "__styles__", {}))


def show_help(arguments=None):
    """
    Render the accepted arguments, grouped by section, on stdout.
    """
    console = Console()
    styles = _styles()

    renders = [Text.assemble(
        ("usage: ", styles["usage"]),
        ("makever", styles["program-name"]),
        " -c=<codename> [options]\n",
    )]

    for section, identifiers in SECTIONS:
        table = Table.grid(padding=(0, 3))
        table.add_column(no_wrap=True)
        table.add_column()

        for identifier in identifiers:
            argument = SPECIFICATION[identifier]
            style = styles["option-name" if isinstance(argument, Valued) else "flag-name"]
            names = Text(", ").join(Text(name, style) for name in _names(identifier))
            if isinstance(argument, Valued) and argument.metavar:
                names.append(" ").append(argument.metavar, styles["metavar"])
            table.add_row(names, Text(argument.descr or "", styles["description"]))

        renders.append(Text(section + ":", styles["section"]))
        renders.append(table)
        renders.append(Text(""))

    renders.append(Text("get involved at %s" % REPOSITORY, styles["footer"]))
    console.print(Group(*renders))


def show_upgrade_help(identifier):
    """
    Render the values accepted by the npm version option.
    """
    console = Console()
    styles = _styles()
    console.print(Text.assemble(
        ("makever ", styles["program-name"]),
        (" | ".join(_names(identifier)), styles["option-name"]),
        " ",
        ("[<newversion> | major | minor | patch | premajor | preminor | prepatch | prerelease]", styles["metavar"]),
        " [--preid=<prerelease-id>]\n",
        ("placeholders: %codename (%c) and %version (%v)\n", styles["description"]),
        ("see: " + NPM_VERSION, styles["footer"]),
    ))


def dump_contents(arguments=None):
    """
    Print the contents of the version file of the current directory.
    """
    path = os.path.join(os.getcwd(), version.DEFAULT_OUTPUT)
    if version.read_version_file(path) is None:
        styles = _styles()
        console = Console()
        console.print(Text("no contents to dump", styles["info"]))
        console.print(Text('see "makever -h"', styles["tip"]))
        return
    with open(path, encoding="utf-8") as file:
        print(file.read())


OPTIONS = {
    "-c": Valued(
        "CODENAME",
        descr="set the codename; letters, digits, '_' and '-' only (3-50 chars)",
    ),
    "-o": Valued(
        "FILE",
        descr='name of the version file, with or without ".json" (default "version.json")',
    ),
    "-v": Valued(
        "UPGRADE",
        trigger="?",
        helper=show_upgrade_help,
        descr="run \"npm version UPGRADE\" first, see \"makever -v ?\"",
    ),
    "-m": Valued(
        "MESSAGE",
        descr="commit message of \"npm version\" or message of the tag",
    ),
    "-r": Flag(descr="tag the last commit with an annotated tag of the current version and codename"),
    "--std": Flag(descr="write to the standard output instead of a file"),
    "-d": Flag(combinable=False, accepted=dump_contents, descr="dump the version file contents to stdout"),
    "-t": Flag(descr="dry run: mock the command behaviour and output to stdout"),
    "-h": Flag(combinable=False, accepted=show_help, descr="show this help"),
    "-q": Flag(descr='"Shh mode": silent run'),
    "-f": Flag(descr="force an action that would not otherwise run"),
}

ALIASES = {
    "--codename": "-c",
    "--version": "-v",
    "--help": "-h",
    "--output": "-o",
    "--dump": "-d",
    "--view": "-d",
    "--quiet": "-q",
    "--dry-run": "-t",
    "--force": "-f",
    "--tag": "-r",
    "--message": "-m",
}

SPECIFICATION = Specification(OPTIONS, ALIASES)

SECTIONS = (
    ("Basic", ("-c", "-o", "-r", "-v", "-m")),
    ("Output", ("--std", "-d", "-t")),
    ("Misc", ("-h", "-q", "-f")),
)


def _names(identifier):
    return (identifier, *(alias for alias, target in ALIASES.items() if target == identifier))


def _failed(message):
    styles = _styles()
    console = Console(stderr=True)
    console.print(Text.assemble(("error: ", styles["error"]), message))
    console.print(Text(TIP, styles["tip"]))


def execute(command, root):
    """
    Run `command` in `root`; a non-zero status raises DelegatedCommandError.
    """
    try:
        result = subprocess.run(command, cwd=root, capture_output=True, text=True)
    except OSError as exception:
        raise DelegatedCommandError('"%s" failed: %s' % (shlex.join(command), exception)) from None
    if result.returncode != 0:
        raise DelegatedCommandError(
            '"%s" failed: %s' % (shlex.join(command), result.stderr.strip() or "status %d" % result.returncode),
            stderr=result.stderr,
        )
    return result


def run(arguments, root, console):
    """
    Write the version file of the current version.
    """
    directory, filename, contents = version.get_contents(arguments, root)
    path = version.write_to(root, directory, filename, contents, arguments.get("--std", False))
    if path is not None:
        console.print(Text('version file "%s" written' % os.path.relpath(path, root), _styles()["success"]))


def run_npm_version(arguments, root, console):
    """
    Run `npm version`, then write the version file of the new version.
    """
    directory, filename, contents = version.get_contents(arguments, root, overwrite=True)
    codename = contents["codename"]

    message = (
        version.replace_placeholders(arguments.get("-m", ""), codename)
        or "Update to %s, codename " + codename
    )
    upgrade = version.replace_placeholders(arguments["-v"], codename)

    result = execute(["npm", "version", *shlex.split(upgrade), "-m", message], root)
    output = result.stdout.strip().splitlines()
    if not output:
        raise DelegatedCommandError('"npm version %s" printed no version' % upgrade)

    semver = version.split_version(output[-1].strip().removeprefix("v"))
    contents = version.describe(semver, codename, upgrade)

    path = version.write_to(root, directory, filename, contents, arguments.get("--std", False))
    if path is not None:
        console.print(Text('updated to %s, version file "%s" written' % (
            contents["raw"], os.path.relpath(path, root)
        ), _styles()["success"]))


def run_tag(arguments, root, console):
    """
    Tag the last commit with an annotated tag of the current version.
    """
    styles = _styles()
    full = ".".join(version.split_version(version.read_manifest(root).get("version")))

    if arguments.get("-c"):
        codename = version.valid_codename(arguments["-c"])
    else:
        filename = version.valid_filename(arguments.get("-o"), arguments.get("--std"))
        current = version.read_version_file(os.path.join(root, filename))
        codename = current["codename"] if current is not None else version.valid_codename()

    if not os.path.isdir(os.path.join(root, ".git")):
        console.print(Text("not a repository, didn't tag", styles["info"]))
        return

    status = execute(["git", "status", "--porcelain"], root)
    if status.stdout.strip() and not arguments.get("-f"):
        console.print(Text("cannot tag a repo with current changes", styles["info"]))
        console.print(Text("please commit or stash your current changes before tagging", styles["log"]))
        return

    message = (
        version.replace_placeholders(arguments.get("-m", ""), codename, full)
        or "Codename " + codename
    )
    execute(["git", "tag", "-f", "-a", "v" + full, "-m", message], root)
    console.print(Text("last commit tagged v%s" % full, styles["success"]))


def run_dry(arguments, root, console):
    """
    Mock the command: compute what would be written, with no side effects.
    """
    styles = _styles()
    directory, filename, contents = version.get_contents(arguments, root)

    if upgrade := arguments.get("-v"):
        upgrade = version.replace_placeholders(upgrade, contents["codename"])
        contents = version.describe(version.bump(contents["full"].split("."), upgrade), contents["codename"], upgrade)

    def log(message):
        console.print(Text(message, styles["log"]))

    if arguments.get("-q"):
        log('ran in "Shh mode", the command runs silently')
    elif arguments.get("--std"):
        log('do not write a version file, output data to stdout by "--std"')
    else:
        log("successfully written a new version file")
        where = 'directory "%s"' % directory if directory else "current directory"
        log('the file "%s" was written to the %s' % (filename, where))

    if not arguments.get("-q"):
        if arguments.get("-f"):
            log('force ran this command, "-f" only forces certain operations, otherwise it is ignored')
        console.print_json(data=contents, indent=4)

    console.print(Text("dry run complete", styles["success"]))


def dispatch(arguments, root, console):
    if arguments.get("-t"):
        return run_dry(arguments, root, console)
    if arguments.get("-v"):
        return run_npm_version(arguments, root, console)
    if arguments.get("-r"):
        return run_tag(arguments, root, console)
    return run(arguments, root, console)


def main(argv=None):
    """
    Entry point of the `makever` command.

    `argv` follows the [executable, script, *arguments] convention; it
    defaults to the arguments of the running process.
    """
    if argv is None:
        argv = [sys.executable, *sys.argv]

    with catch_warnings(record=True, action="always") as captured:
        outcome = scan(SPECIFICATION, (), argv, _failed)

    for warning in captured:
        if isinstance(warning.message, MakeverWarning):
            trigger(warning.message, shell=True)
        else:
            warnings.showwarning(warning.message, warning.category, warning.filename, warning.lineno)

    match outcome:
        case Failed():
            sys.exit(1)
        case Exited(status):
            sys.exit(status)
        case Accepted(arguments):
            pass

    quiet = bool(arguments.get("-q") and not arguments.get("-t"))
    try:
        dispatch(arguments, os.getcwd(), Console(quiet=quiet))
    except MakeverException as exception:
        trigger(exception, shell=True)


__all__ = (
    "OPTIONS",
    "ALIASES",
    "SPECIFICATION",
    "SECTIONS",
    "show_help",
    "show_upgrade_help",
    "dump_contents",
    "execute",
    "run",
    "run_npm_version",
    "run_tag",
    "run_dry",
    "dispatch",
    "main",
)
