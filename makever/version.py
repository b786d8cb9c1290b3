"""
Version metadata: read the host manifest and derive the version file contents.

The version file is a small JSON document describing the current version of
the host project:

    {
        "codename": "swift-otter",
        "branch": "x.0.0",
        "full": "1.0.0",
        "raw": "v1.0.0",
        "major": "1",
        "minor": "0",
        "patch": "0"
    }

plus ``prerelease`` (the text after the first '-') and a ``prepatch`` /
``preminor`` / ``premajor`` marker when the version is a prerelease.

Every validation failure raises a MakeverException subclass; nothing in this
module prints or exits.
"""
import json
import os.path
import re

from . import codenames
from .faults import *

MANIFEST = "package.json"
DEFAULT_OUTPUT = "version.json"

KEYS = ("codename", "branch", "full", "raw", "major", "minor", "patch")
LABELS = ("prepatch", "preminor", "premajor")

_PLACEHOLDER = re.compile(r"%(codename|version|c|v)")


def read_manifest(root):
    """
    Load the package manifest found at `root`.
    """
    path = os.path.join(root, MANIFEST)
    try:
        with open(path, encoding="utf-8") as file:
            manifest = json.load(file)
    except FileNotFoundError:
        raise InvalidManifestError("can't run, no package manifest found at %r" % root) from None
    except (OSError, ValueError) as exception:
        raise InvalidManifestError("can't read package manifest %r: %s" % (path, exception)) from None
    if not isinstance(manifest, dict):
        raise InvalidManifestError("command failed, invalid package manifest")
    return manifest


def split_version(version):
    """
    Split a ``MAJOR.MINOR.PATCH[-PRERELEASE]`` string into its dot-separated parts.

    >>> split_version("1.2.3-beta.1")
    ['1', '2', '3-beta', '1']
    """
    if not isinstance(version, str) or len(parts := version.split(".")) < 3:
        raise InvalidManifestError("command failed, invalid package.json version %r" % (version,))
    if not all(re.match(r"\d+", part) for part in parts[:3]):
        raise InvalidManifestError("command failed, invalid package.json version %r" % version)
    return parts


def _numbers(semver):
    return tuple(int(re.match(r"\d+", part)[0]) for part in semver[:3])


def infer_branch(semver):
    """
    Infer the version branch, the component that moved last, from its zeros.

    - x.MINOR.PATCH when minor and patch are 0
    - MAJOR.x.PATCH when major and patch are 0
    - MAJOR.MINOR.x when major and minor are 0
    - "" when it cannot be inferred
    """
    major, minor, patch = _numbers(semver)
    if minor == 0 and patch == 0:
        return "x.%d.%d" % (minor, patch)
    if major == 0 and patch == 0:
        return "%d.x.%d" % (major, patch)
    if major == 0 and minor == 0:
        return "%d.%d.x" % (major, minor)
    return ""


def get_prerelease(semver, bump=""):
    """
    Separate the prerelease text from the patch number.

    Returns (patch, prerelease, label): `prerelease` is "" for regular versions
    and `label` is the prerelease kind named by the `bump` argument, if any.

    >>> get_prerelease(["1", "2", "3-beta", "1"], "prepatch")
    ('3', 'beta.1', 'prepatch')
    """
    label = next((label for label in LABELS if label in bump), "")
    patch, _, prerelease = ".".join(semver[2:]).partition("-")
    return patch, prerelease, label


def replace_placeholders(text, codename="", version="%s"):
    """
    Expand ``%codename``/``%c`` and ``%version``/``%v`` placeholders.

    The version defaults to '%s', the placeholder `npm version` itself expands.
    """
    return _PLACEHOLDER.sub(
        lambda match: codename if match[1] in ("codename", "c") else version,
        text
    )


def bump(semver, upgrade):
    """
    Compute the version `npm version <upgrade>` would produce, without running it.

    Supports major, minor, patch, premajor, preminor, prepatch, prerelease,
    an explicit <newversion>, and '--preid=<id>' for prerelease identifiers.
    Returns the new version as dot-separated parts.
    """
    kind, _, preid = upgrade.partition("--preid=")
    kind, preid = kind.strip(), preid.strip()
    major, minor, patch = _numbers(semver)
    suffix = "-%s.0" % preid if preid else "-0"

    match kind:
        case "major":
            return [str(major + 1), "0", "0"]
        case "minor":
            return [str(major), str(minor + 1), "0"]
        case "patch":
            return [str(major), str(minor), str(patch + 1)]
        case "premajor":
            return [str(major + 1), "0", "0" + suffix]
        case "preminor":
            return [str(major), str(minor + 1), "0" + suffix]
        case "prepatch":
            return [str(major), str(minor), str(patch + 1) + suffix]
        case "prerelease" | "":
            if not kind and not preid:
                raise InvalidBumpError('invalid "npm version" option %r' % upgrade)
            _, prerelease, _ = get_prerelease(semver)
            if not prerelease:
                return [str(major), str(minor), str(patch + 1) + suffix]
            identifiers = prerelease.split(".")
            if preid and identifiers[0] != preid:
                return [str(major), str(minor), "%d-%s.0" % (patch, preid)]
            if identifiers[-1].isdigit():
                identifiers[-1] = str(int(identifiers[-1]) + 1)
            else:
                identifiers.append("0")
            return [str(major), str(minor), "%d-%s" % (patch, ".".join(identifiers))]
        case _ if re.fullmatch(r"\d+\.\d+\.\d+(-[0-9A-Za-z.-]+)?", kind):
            return kind.split(".")
        case _:
            raise InvalidBumpError('invalid "npm version" option %r' % upgrade)


def valid_filename(output=None, std=False, default=DEFAULT_OUTPUT):
    """
    Validate the version file name, appending '.json' when it has no extension.
    """
    if output and std:
        raise ConflictingOptionsError('invalid operation: cannot combine "--std" and "-o"')

    name, extension = os.path.splitext(output or default)

    if not re.search(r"[\w/]{3,}", name):
        raise InvalidOutputError("output file must be a valid name and a json file")
    if extension and extension != ".json":
        raise InvalidOutputError("generated file must be a json file", hint='"makever -h"')
    return name + ".json"


def valid_codename(codename=None):
    """
    Validate a codename; a random one is generated when none is given.
    """
    if not codename:
        return codenames.generate("-")
    if match := re.search(r"[\w\-]{3,50}", codename):
        return match[0]
    raise InvalidCodenameError('invalid codename: "%s" please provide a valid codename' % codename)


def is_version_file(data):
    return isinstance(data, dict) and all(key in data for key in KEYS)


def read_version_file(path):
    """
    Return the version file at `path`, or None if missing or not a version file.
    """
    try:
        with open(path, encoding="utf-8") as file:
            data = json.load(file)
    except (OSError, ValueError):
        return None
    return data if is_version_file(data) else None


def describe(semver, codename, bump=""):
    """
    Build the version file contents for the version `semver`.
    """
    full = ".".join(semver)
    patch, prerelease, label = get_prerelease(semver, bump)

    contents = {
        "codename": codename,
        "branch": infer_branch(semver),
        "full": full,
        "raw": "v" + full,
        "major": semver[0],
        "minor": semver[1],
        "patch": patch,
    }
    if prerelease:
        contents["prerelease"] = prerelease
    if label:
        contents[label] = True
    return contents


def get_contents(arguments, root, *, overwrite=False):
    """
    Aggregate the data of a run: returns (directory, filename, contents).

    Raises ExistingVersionFileError when the requested output already holds
    the version file of the current version, unless '-f' was given or
    `overwrite` is set (the version is about to change).
    """
    filename = valid_filename(arguments.get("-o"), arguments.get("--std"))
    semver = split_version(read_manifest(root).get("version"))

    if not (overwrite or arguments.get("-f") or arguments.get("--std")):
        current = read_version_file(os.path.join(root, filename))
        if current is not None and current["full"] == ".".join(semver):
            raise ExistingVersionFileError("a version file already exists for this version")

    codename = valid_codename(arguments.get("-c"))
    directory, filename = os.path.split(filename)
    return directory, filename, describe(semver, codename)


def write_to(root, directory, filename, contents, std=False):
    """
    Write the version file (JSON, 4-space indent), or print it when `std` is set.
    """
    data = json.dumps(contents, indent=4)
    if std:
        print(data)
        return None
    os.makedirs(os.path.join(root, directory), exist_ok=True)
    with open(path := os.path.join(root, directory, filename), "w", encoding="utf-8") as file:
        file.write(data)
    return path


__all__ = (
    "MANIFEST",
    "DEFAULT_OUTPUT",
    "KEYS",
    "read_manifest",
    "split_version",
    "infer_branch",
    "get_prerelease",
    "replace_placeholders",
    "bump",
    "valid_filename",
    "valid_codename",
    "is_version_file",
    "read_version_file",
    "describe",
    "get_contents",
    "write_to",
)
