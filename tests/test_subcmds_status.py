# Copyright 2021 The Android Open Source Project
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#      http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Unittests for the subcmds/status.py and subcmds/dump_projects.py modules."""

import contextlib
import io
import json
import unittest
from unittest import mock

import color
from error import GitError
import manifest_xml
import project
from subcmds import dump_projects
from subcmds import status


MANIFEST = """
<manifest>
  <remote name="origin" fetch="https://git.example.com/org"/>
  <default revision="main"/>
  <project name="core" groups="base">
    <project name="lib" revision="stable"/>
  </project>
  <project name="documentation" path="docs"/>
  <branch-config>
    <branch name="main" color="green"/>
    <branch name="feature" color="yellow" prefixes="feature/"/>
  </branch-config>
</manifest>
"""


class _FakeConfig:
    def GetInt(self, name):
        return None

    def GetString(self, name):
        return None


def _Branches(branches):
    def _CurrentBranch(p):
        value = branches[p.name]
        if isinstance(value, Exception):
            raise value
        return value

    return mock.patch.object(
        project.Project,
        "CurrentBranch",
        autospec=True,
        side_effect=_CurrentBranch,
    )


class _CommandTestCase(unittest.TestCase):
    cls = None

    def setUp(self):
        self.cmd = self.cls(
            manifest=manifest_xml.XmlManifest.FromString(MANIFEST),
            config=_FakeConfig(),
            environ={},
        )

    def _Run(self, argv):
        opts, args = self.cmd.OptionParser.parse_args(argv)
        self.cmd.CommonValidateOptions(opts, args)
        self.cmd.ValidateOptions(opts, args)
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            self.cmd.Execute(opts, args)
        return out.getvalue()


class StatusTests(_CommandTestCase):
    cls = status.Status

    def test_text(self):
        with _Branches(
            {"core/lib": "stable", "core": "main", "documentation": "wip"}
        ):
            output = self._Run([])
        self.assertEqual(
            output.splitlines(),
            [
                "core/lib      stable",
                "core          main",
                "documentation wip",
            ],
        )

    def test_text_error(self):
        e = GitError("no such directory", project="core")
        with _Branches({"core/lib": "main", "core": e, "documentation": "x"}):
            output = self._Run(["core"])
        self.assertEqual(output, "core %s\n" % e)

    def test_text_color(self):
        color.SetDefaultColoring("always")
        with _Branches(
            {"core/lib": "feature/x", "core": "main", "documentation": "wip"}
        ):
            output = self._Run([])
        lines = output.splitlines()
        green = color._Color(fg="green", attr="bold")
        yellow = color._Color(fg="yellow", attr="bold")
        self.assertIn(yellow + "feature/x" + color.RESET, lines[0])
        self.assertIn(green + "main" + color.RESET, lines[1])
        self.assertTrue(lines[2].endswith(color.RESET + "wip"))

    def test_uncolored_branch_has_no_escapes(self):
        color.SetDefaultColoring("always")
        out = status.StatusColoring(_FakeConfig())
        self.assertEqual(out.branch("")("wip"), "wip")
        self.assertEqual(out.branch("chartreuse")("wip"), "wip")
        self.assertEqual(
            out.branch("red")("main"),
            color._Color(fg="red", attr="bold") + "main" + color.RESET,
        )

    def test_json(self):
        e = GitError("no such directory", project="core")
        with _Branches(
            {"core/lib": "stable", "core": e, "documentation": "main"}
        ):
            output = self._Run(["--format=json"])
        self.assertEqual(
            json.loads(output),
            [
                {"project": "core/lib", "ref": "stable"},
                {"project": "core", "ref": str(e)},
                {"project": "documentation", "ref": "main"},
            ],
        )

    def test_bad_format(self):
        with self.assertRaises(SystemExit):
            self._Run(["--format=xml"])


class DumpProjectsTests(_CommandTestCase):
    cls = dump_projects.DumpProjects

    def test_dump(self):
        projects = json.loads(self._Run([]))
        self.assertEqual(
            [p["name"] for p in projects], ["core/lib", "core", "documentation"]
        )
        self.assertEqual(
            projects[0],
            {
                "name": "core/lib",
                "path": "core/lib",
                "remote": "origin",
                "fetch": "https://git.example.com/org/core/lib.git",
                "revision": "stable",
                "groups": [],
            },
        )
        self.assertEqual(projects[1]["groups"], ["base"])
        self.assertEqual(projects[1]["revision"], "main")
        self.assertEqual(projects[2]["path"], "docs")

    def test_dump_selected(self):
        projects = json.loads(self._Run(["docs"]))
        self.assertEqual([p["name"] for p in projects], ["documentation"])
