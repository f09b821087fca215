# Copyright 2019 The Android Open Source Project
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

"""Unittests for the git_command.py module."""

import os
import shutil
import subprocess
import unittest
from unittest import mock

import git_command


class GitCommandEnvTest(unittest.TestCase):
    """Tests the environment git is run under."""

    def test_git_dir_is_dropped(self):
        with mock.patch.dict(
            os.environ, {"GIT_DIR": "/elsewhere", "GIT_WORK_TREE": "/wt"}
        ):
            env = git_command.GitCommand._GetBasicEnv()
        self.assertNotIn("GIT_DIR", env)
        self.assertNotIn("GIT_WORK_TREE", env)


class GitCommandWaitTest(unittest.TestCase):
    """Tests the GitCommand class .Wait()"""

    def setUp(self):
        class MockPopen:
            rc = 0

            def communicate(
                self, input: str = None, timeout: float = None
            ) -> [str, str]:
                """Mock communicate fn."""
                return ["", "fatal: bad revision\n"]

            def wait(self, timeout=None):
                return self.rc

        self.popen = popen = MockPopen()

        def popen_mock(*args, **kwargs):
            return popen

        self.popen_patch = mock.patch.object(
            subprocess, "Popen", side_effect=popen_mock
        )
        self.mock_popen = self.popen_patch.start()

    def tearDown(self):
        mock.patch.stopall()

    def test_raises_when_verify_non_zero_result(self):
        self.popen.rc = 1
        r = git_command.GitCommand(None, ["status"], verify_command=True)
        with self.assertRaises(git_command.GitCommandError):
            r.Wait()

    def test_returns_when_no_verify_non_zero_result(self):
        self.popen.rc = 1
        r = git_command.GitCommand(None, ["status"], verify_command=False)
        self.assertEqual(1, r.Wait())

    def test_default_returns_non_zero_result(self):
        self.popen.rc = 1
        r = git_command.GitCommand(None, ["status"])
        self.assertEqual(1, r.Wait())

    def test_error_class(self):
        self.popen.rc = 1
        r = git_command.GitCommand(
            "core",
            ["checkout", "nope"],
            capture_stderr=True,
            verify_command=True,
            error_class=git_command.GitCheckoutError,
        )
        with self.assertRaises(git_command.GitCheckoutError) as ctx:
            r.Wait()
        e = ctx.exception
        self.assertEqual(e.project, "core")
        self.assertEqual(e.command_args, ["checkout", "nope"])
        self.assertEqual(e.git_rc, 1)
        self.assertIn("bad revision", e.git_stderr)

    def test_cwd_and_command(self):
        git_command.GitCommand(None, ["pull"], cwd="/src/core")
        args, kwargs = self.mock_popen.call_args
        self.assertEqual(args[0], ["git", "pull"])
        self.assertEqual(kwargs["cwd"], "/src/core")

    def test_popen_failure(self):
        self.mock_popen.side_effect = OSError("no git")
        with self.assertRaises(git_command.GitPopenCommandError):
            git_command.GitCommand("core", ["status"])


@unittest.skipUnless(shutil.which("git"), "git is required")
class GitCallUnitTest(unittest.TestCase):
    """Tests the _GitCall class (via git_command.git)."""

    def test_check_ref_format(self):
        self.assertTrue(git_command.git.check_ref_format("heads/feature-x"))
        self.assertFalse(git_command.git.check_ref_format("heads/a..b"))


class GitCommandErrorTest(unittest.TestCase):
    """Test for the GitCommandError class."""

    def test_augument_stderr(self):
        self.assertEqual(
            git_command.GitCommandError(
                git_stderr="couldn't find remote ref refs/heads/foo"
            ).suggestion,
            "Check if the provided ref exists in the remote.",
        )

        self.assertEqual(
            git_command.GitCommandError(
                git_stderr="fatal: not a git repository (or any parent)"
            ).suggestion,
            "Run `pman sync --force` to replace the directory.",
        )

    def test_str(self):
        e = git_command.GitCommandError(
            project="core",
            command_args=["checkout", "main"],
            git_rc=1,
            git_stderr="error: pathspec 'main' did not match any file(s)",
        )
        self.assertEqual(
            str(e),
            "GitCommandError: 'checkout main' on core failed\n"
            "stderr: error: pathspec 'main' did not match any file(s)\n"
            "suggestion: Check if the branch exists in this project.",
        )

    def test_checkout_error_is_command_error(self):
        self.assertTrue(
            issubclass(
                git_command.GitCheckoutError, git_command.GitCommandError
            )
        )
