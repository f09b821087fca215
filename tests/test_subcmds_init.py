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

"""Unittests for the subcmds/init.py module."""

import contextlib
import io
import os
import shutil
import subprocess
import tempfile
import unittest

from error import InitError
import manifest_loader
import subcmds
from subcmds import init


class _FakeConfig:
    def GetInt(self, name):
        return None


class InitCommandTestCase(unittest.TestCase):
    def setUp(self):
        self.tempdir = tempfile.mkdtemp(prefix="pman_tests")
        self.addCleanup(shutil.rmtree, self.tempdir)
        self.topdir = os.path.join(self.tempdir, "top")
        os.makedirs(self.topdir)
        self.cmd = init.Init(config=_FakeConfig(), topdir=self.topdir)

    def _Run(self, argv):
        opts, args = self.cmd.OptionParser.parse_args(argv)
        self.cmd.CommonValidateOptions(opts, args)
        self.cmd.ValidateOptions(opts, args)
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            self.cmd.Execute(opts, args)
        return out.getvalue()


class InitOptionsTests(InitCommandTestCase):
    def test_requires_url(self):
        with contextlib.redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit):
                self._Run([])

    def test_too_many_args(self):
        with contextlib.redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit):
                self._Run(["a", "b"])

    def test_default_branch(self):
        opts, _ = self.cmd.OptionParser.parse_args(["url"])
        self.assertEqual(
            opts.manifest_branch, manifest_loader.MANIFEST_REPO_BRANCH
        )

    def test_registered(self):
        self.assertIs(subcmds.all_commands["init"], init.Init)
        self.assertIn(
            manifest_loader.MANIFEST_REPO_BRANCH, init.Init.helpDescription
        )
        self.assertIn("pman init", self.cmd.OptionParser.get_usage())


@unittest.skipUnless(shutil.which("git"), "git is required")
class InitTests(InitCommandTestCase):
    def _git(self, *args, cwd):
        subprocess.check_call(["git"] + list(args), cwd=cwd)

    def setUp(self):
        super().setUp()
        self.upstream = os.path.join(self.tempdir, "manifest")
        os.makedirs(self.upstream)
        self._git("init", "-q", cwd=self.upstream)
        self._git(
            "symbolic-ref", "HEAD", "refs/heads/master", cwd=self.upstream
        )
        with open(os.path.join(self.upstream, "default.xml"), "w") as fp:
            fp.write("<manifest/>")
        self._git("add", "default.xml", cwd=self.upstream)
        self._git("commit", "-q", "-m", "init", cwd=self.upstream)
        self._git("branch", "stable", cwd=self.upstream)

    def test_init(self):
        output = self._Run([self.upstream])
        mandir = manifest_loader.ManifestRepoDir(self.topdir)
        self.assertTrue(os.path.isfile(os.path.join(mandir, "default.xml")))
        self.assertIn("pman has been initialized in %s" % self.topdir, output)
        self.assertEqual(
            manifest_loader.FindManifest(self.topdir),
            os.path.join(mandir, "default.xml"),
        )

    def test_init_branch(self):
        self._Run(["-q", "-b", "stable", self.upstream])
        mandir = manifest_loader.ManifestRepoDir(self.topdir)
        branch = subprocess.check_output(
            ["git", "symbolic-ref", "--short", "HEAD"], cwd=mandir
        )
        self.assertEqual(branch.decode().strip(), "stable")

    def test_reinit(self):
        self._Run(["-q", self.upstream])
        self.assertEqual(self._Run(["-q", self.upstream]), "")

    def test_bad_url(self):
        with self.assertRaises(InitError) as ctx:
            self._Run(["-q", os.path.join(self.tempdir, "nope")])
        self.assertIn("cannot fetch manifest", str(ctx.exception))
