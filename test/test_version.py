# python
"""
Version metadata behavioral tests.

Scope
- Manifest reading and version splitting.
- Branch inference, prerelease separation, placeholders and dry-run bumps.
- Output/codename validation and version file aggregation on a temporary project root.
"""

import io
import json
import os
import random
import tempfile
import unittest
from contextlib import redirect_stdout
from unittest import TestCase

from makever import codenames, version
from makever.faults import *


class ProjectTestCase(TestCase):
    """A temporary project root holding a package.json."""

    manifest = {"name": "host", "version": "1.2.3"}

    def setUp(self):
        directory = tempfile.TemporaryDirectory()
        self.addCleanup(directory.cleanup)
        self.root = directory.name
        if self.manifest is not None:
            self.write("package.json", self.manifest)

    def write(self, name, data):
        path = os.path.join(self.root, name)
        with open(path, "w", encoding="utf-8") as file:
            file.write(data if isinstance(data, str) else json.dumps(data))
        return path


class TestManifest(ProjectTestCase):

    def testReadManifest(self):
        self.assertEqual(version.read_manifest(self.root)["version"], "1.2.3")

    def testMissingManifest(self):
        os.remove(os.path.join(self.root, "package.json"))
        with self.assertRaises(InvalidManifestError):
            version.read_manifest(self.root)

    def testMalformedManifest(self):
        self.write("package.json", "{ not json")
        with self.assertRaises(InvalidManifestError):
            version.read_manifest(self.root)

    def testManifestMustBeObject(self):
        self.write("package.json", [])
        with self.assertRaises(InvalidManifestError):
            version.read_manifest(self.root)


class TestSplitVersion(TestCase):

    def testSplit(self):
        self.assertEqual(version.split_version("1.2.3"), ["1", "2", "3"])
        self.assertEqual(version.split_version("1.2.3-beta.1"), ["1", "2", "3-beta", "1"])

    def testInvalid(self):
        for value in ("1.2", "", "a.b.c", None):
            with self.subTest(value=value):
                with self.assertRaises(InvalidManifestError):
                    version.split_version(value)


class TestInferBranch(TestCase):

    def testBranches(self):
        cases = {
            "2.0.0": "x.0.0",
            "1.0.0": "x.0.0",
            "0.3.0": "0.x.0",
            "0.0.4": "0.0.x",
            "0.0.0": "x.0.0",
            "1.2.3": "",
            "1.2.0": "",
            "1.0.0-beta.0": "x.0.0",
        }
        for value, branch in cases.items():
            with self.subTest(value=value):
                self.assertEqual(version.infer_branch(version.split_version(value)), branch)


class TestPrerelease(TestCase):

    def testRegularVersion(self):
        self.assertEqual(version.get_prerelease(["1", "2", "3"]), ("3", "", ""))

    def testPrereleaseWithLabel(self):
        semver = version.split_version("1.2.4-rc.0")
        self.assertEqual(version.get_prerelease(semver, "prepatch"), ("4", "rc.0", "prepatch"))
        self.assertEqual(version.get_prerelease(semver, "premajor --preid=rc")[2], "premajor")


class TestPlaceholders(TestCase):

    def testAllPlaceholders(self):
        text = "%codename %c %version %v"
        self.assertEqual(version.replace_placeholders(text, "otter", "1.0.0"), "otter otter 1.0.0 1.0.0")

    def testVersionDefaultsToNpmPlaceholder(self):
        self.assertEqual(version.replace_placeholders("Release %v (%c)", "otter"), "Release %s (otter)")

    def testEveryOccurrenceIsReplaced(self):
        self.assertEqual(version.replace_placeholders("%c-%c", "otter"), "otter-otter")


class TestBump(TestCase):

    def bump(self, current, upgrade):
        return ".".join(version.bump(version.split_version(current), upgrade))

    def testReleases(self):
        self.assertEqual(self.bump("1.2.3", "major"), "2.0.0")
        self.assertEqual(self.bump("1.2.3", "minor"), "1.3.0")
        self.assertEqual(self.bump("1.2.3", "patch"), "1.2.4")

    def testPrereleases(self):
        self.assertEqual(self.bump("1.2.3", "premajor"), "2.0.0-0")
        self.assertEqual(self.bump("1.2.3", "preminor"), "1.3.0-0")
        self.assertEqual(self.bump("1.2.3", "prepatch"), "1.2.4-0")
        self.assertEqual(self.bump("1.2.3", "prepatch --preid=beta"), "1.2.4-beta.0")

    def testPrerelease(self):
        self.assertEqual(self.bump("1.2.3", "prerelease"), "1.2.4-0")
        self.assertEqual(self.bump("1.2.3", "--preid=alpha"), "1.2.4-alpha.0")
        self.assertEqual(self.bump("1.2.4-alpha.0", "prerelease"), "1.2.4-alpha.1")
        self.assertEqual(self.bump("1.2.4-alpha", "prerelease"), "1.2.4-alpha.0")

    def testPrereleaseIdentifierChange(self):
        self.assertEqual(self.bump("1.2.3-beta.1", "prerelease --preid=alpha"), "1.2.3-alpha.0")
        self.assertEqual(self.bump("1.2.3-alpha.0", "prerelease --preid=alpha"), "1.2.3-alpha.1")

    def testExplicitVersion(self):
        self.assertEqual(self.bump("1.2.3", "3.0.0"), "3.0.0")

    def testInvalid(self):
        for upgrade in ("", "bogus", "from-git"):
            with self.subTest(upgrade=upgrade):
                with self.assertRaises(InvalidBumpError):
                    self.bump("1.2.3", upgrade)


class TestValidators(TestCase):

    def testDefaultFilename(self):
        self.assertEqual(version.valid_filename(), "version.json")

    def testExtensionAppended(self):
        self.assertEqual(version.valid_filename("meta/release"), "meta/release.json")
        self.assertEqual(version.valid_filename("release.json"), "release.json")

    def testOtherExtensionRejected(self):
        with self.assertRaises(InvalidOutputError):
            version.valid_filename("release.txt")

    def testShortNameRejected(self):
        with self.assertRaises(InvalidOutputError):
            version.valid_filename("ab")

    def testOutputAndStdConflict(self):
        with self.assertRaises(ConflictingOptionsError):
            version.valid_filename("release", True)

    def testCodename(self):
        self.assertEqual(version.valid_codename("baby-face"), "baby-face")
        self.assertEqual(version.valid_codename("Marine44"), "Marine44")

    def testCodenameRejected(self):
        with self.assertRaises(InvalidCodenameError):
            version.valid_codename("!!")

    def testCodenameGenerated(self):
        self.assertRegex(version.valid_codename(), r"^[\w-]{3,}$")


class TestCodenames(TestCase):

    def testGenerateIsSeedable(self):
        self.assertEqual(
            codenames.generate(rng=random.Random(7)),
            codenames.generate(rng=random.Random(7)),
        )

    def testGenerateUsesWordLists(self):
        adjective, noun = codenames.generate("_").split("_")
        self.assertIn(adjective, codenames.ADJECTIVES)
        self.assertIn(noun, codenames.NOUNS)


class TestContents(ProjectTestCase):

    def testContents(self):
        directory, filename, contents = version.get_contents({"-c": "otter"}, self.root)
        self.assertEqual((directory, filename), ("", "version.json"))
        self.assertEqual(contents, {
            "codename": "otter",
            "branch": "",
            "full": "1.2.3",
            "raw": "v1.2.3",
            "major": "1",
            "minor": "2",
            "patch": "3",
        })

    def testNestedOutput(self):
        directory, filename, _ = version.get_contents({"-c": "otter", "-o": "meta/release"}, self.root)
        self.assertEqual((directory, filename), ("meta", "release.json"))

    def testPrereleaseContents(self):
        self.write("package.json", {"version": "2.0.0-beta.1"})
        _, _, contents = version.get_contents({"-c": "otter"}, self.root)
        self.assertEqual(contents["patch"], "0")
        self.assertEqual(contents["prerelease"], "beta.1")
        self.assertEqual(contents["branch"], "x.0.0")

    def testExistingVersionFileBlocks(self):
        self.write("version.json", version.describe(["1", "2", "3"], "otter"))
        with self.assertRaises(ExistingVersionFileError):
            version.get_contents({}, self.root)

    def testExistingVersionFileForced(self):
        self.write("version.json", version.describe(["1", "2", "3"], "otter"))
        _, _, contents = version.get_contents({"-f": True, "-c": "swift"}, self.root)
        self.assertEqual(contents["codename"], "swift")

    def testOlderVersionFileIsOverwritten(self):
        self.write("version.json", version.describe(["1", "2", "2"], "otter"))
        _, _, contents = version.get_contents({"-c": "swift"}, self.root)
        self.assertEqual(contents["full"], "1.2.3")

    def testWriteTo(self):
        contents = version.describe(["1", "2", "3"], "otter")
        path = version.write_to(self.root, "meta", "release.json", contents)
        self.assertEqual(path, os.path.join(self.root, "meta", "release.json"))
        with open(path, encoding="utf-8") as file:
            self.assertEqual(file.read(), json.dumps(contents, indent=4))
        self.assertEqual(version.read_version_file(path), contents)

    def testWriteToStdout(self):
        stream = io.StringIO()
        with redirect_stdout(stream):
            self.assertIsNone(version.write_to(self.root, "", "version.json", {"codename": "otter"}, std=True))
        self.assertEqual(json.loads(stream.getvalue()), {"codename": "otter"})
        self.assertFalse(os.path.exists(os.path.join(self.root, "version.json")))


if __name__ == "__main__":
    unittest.main()
