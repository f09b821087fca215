# Copyright (C) 2008 The Android Open Source Project
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

import functools
import os
import re
import subprocess

from error import GitError
from pman_logging import PmanLogger


GIT = "git"
GIT_DIR = "GIT_DIR"

DEFAULT_GIT_FAIL_MESSAGE = "git command failure"
# Common line length limit
GIT_ERROR_STDOUT_LINES = 1
GIT_ERROR_STDERR_LINES = 10

logger = PmanLogger(__file__)


class _GitCall:
    def __getattr__(self, name):
        name = name.replace("_", "-")

        def fun(*cmdv):
            command = [name]
            command.extend(cmdv)
            return GitCommand(None, command).Wait() == 0

        return fun


git = _GitCall()


class GitCommand:
    """Wrapper around a single git invocation."""

    def __init__(
        self,
        project,
        cmdv,
        capture_stdout=False,
        capture_stderr=False,
        cwd=None,
        verify_command=False,
        error_class=None,
    ):
        """Run git with |cmdv| and wait for it to exit.

        Args:
            project: name of the project the command runs for, or None.
            cmdv: git subcommand and its arguments.
            capture_stdout: keep stdout in self.stdout.
            capture_stderr: keep stderr in self.stderr.
            cwd: directory to run in.
            verify_command: have Wait() raise on a non-zero exit.
            error_class: GitCommandError subclass raised by VerifyCommand.
        """
        self.project = project
        self.cmdv = cmdv
        self.cwd = cwd
        self.verify_command = verify_command
        self.error_class = error_class or GitCommandError
        self.stdout, self.stderr = None, None

        command = [GIT]
        command.extend(cmdv)

        self._RunCommand(
            command,
            self._GetBasicEnv(),
            capture_stdout=capture_stdout,
            capture_stderr=capture_stderr,
            cwd=cwd,
        )

    def _RunCommand(
        self,
        command,
        env,
        capture_stdout=False,
        capture_stderr=False,
        cwd=None,
    ):
        # Set subprocess.PIPE for streams that need to be captured.
        stdout = subprocess.PIPE if capture_stdout else None
        stderr = subprocess.PIPE if capture_stderr else None

        logger.debug(
            ": %s%s", "cd %s && " % cwd if cwd else "", " ".join(command)
        )

        try:
            p = subprocess.Popen(
                command,
                cwd=cwd,
                env=env,
                stdout=stdout,
                stderr=stderr,
                encoding="utf-8",
                errors="backslashreplace",
            )
        except (OSError, ValueError) as e:
            raise GitPopenCommandError(
                message=f"{command[1]}: {e}",
                project=self.project,
                command_args=self.cmdv,
            )

        self.process = p
        self.stdout, self.stderr = p.communicate()
        self.rc = p.wait()

    @staticmethod
    def _GetBasicEnv():
        """Return a basic env for running git under.

        This is guaranteed to be side-effect free.
        """
        env = os.environ.copy()
        for key in (
            GIT_DIR,
            "GIT_ALTERNATE_OBJECT_DIRECTORIES",
            "GIT_OBJECT_DIRECTORY",
            "GIT_WORK_TREE",
            "GIT_GRAFT_FILE",
            "GIT_INDEX_FILE",
        ):
            env.pop(key, None)
        return env

    def VerifyCommand(self):
        if self.rc == 0:
            return None
        stdout = (
            "\n".join(self.stdout.split("\n")[:GIT_ERROR_STDOUT_LINES])
            if self.stdout
            else None
        )
        stderr = (
            "\n".join(self.stderr.split("\n")[:GIT_ERROR_STDERR_LINES])
            if self.stderr
            else None
        )
        raise self.error_class(
            project=self.project,
            command_args=self.cmdv,
            git_rc=self.rc,
            git_stdout=stdout,
            git_stderr=stderr,
        )

    def Wait(self):
        if self.verify_command:
            self.VerifyCommand()
        return self.rc


class GitCommandError(GitError):
    """
    Error raised from a failed git command.
    Note that GitError can refer to any Git related error (e.g. a missing
    working directory), while GitCommandError is raised exclusively from
    non-zero exit codes returned from git commands.
    """

    # Tuples with error formats and suggestions for those errors.
    _ERROR_TO_SUGGESTION = [
        (
            re.compile("couldn't find remote ref .*"),
            "Check if the provided ref exists in the remote.",
        ),
        (
            re.compile("unable to access '.*': .*"),
            (
                "Please make sure you have the correct access rights and the "
                "repository exists."
            ),
        ),
        (
            re.compile("pathspec '.*' did not match any file"),
            "Check if the branch exists in this project.",
        ),
        (
            re.compile("not a git repository"),
            "Run `pman sync --force` to replace the directory.",
        ),
    ]

    def __init__(
        self,
        message: str = DEFAULT_GIT_FAIL_MESSAGE,
        git_rc: int = None,
        git_stdout: str = None,
        git_stderr: str = None,
        **kwargs,
    ):
        super().__init__(
            message,
            **kwargs,
        )
        self.git_rc = git_rc
        self.git_stdout = git_stdout
        self.git_stderr = git_stderr

    @property
    @functools.lru_cache(maxsize=None)
    def suggestion(self):
        """Returns helpful next steps for the given stderr."""
        if not self.git_stderr:
            return self.git_stderr

        for err, suggestion in self._ERROR_TO_SUGGESTION:
            if err.search(self.git_stderr):
                return suggestion

        return None

    def __str__(self):
        args = "[]" if not self.command_args else " ".join(self.command_args)
        error_type = type(self).__name__
        string = f"{error_type}: '{args}' on {self.project} failed"

        if self.message != DEFAULT_GIT_FAIL_MESSAGE:
            string += f": {self.message}"

        if self.git_stdout:
            string += f"\nstdout: {self.git_stdout}"

        if self.git_stderr:
            string += f"\nstderr: {self.git_stderr}"

        if self.suggestion:
            string += f"\nsuggestion: {self.suggestion}"

        return string


class GitCheckoutError(GitCommandError):
    """
    Error raised when git could not select the requested revision.
    Only these failures are eligible for a fallback checkout; a failed pull
    after a successful checkout is a plain GitCommandError.
    """


class GitPopenCommandError(GitError):
    """
    Error raised when subprocess.Popen fails for a GitCommand
    """
