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

import os
from typing import NamedTuple

from error import GitError
from error import UnmanagedDirectoryError
from git_command import GitCheckoutError
from git_command import GitCommand
import platform_utils
from pman_logging import PmanLogger


logger = PmanLogger(__file__)

HEAD = "HEAD"
R_HEADS = "refs/heads/"


class ExecuteOneResult(NamedTuple):
    """Outcome of running one lifecycle operation on one project."""

    project: "Project"
    error: Exception = None
    # Revision the project ended up on, when the operation reports one.
    revision: str = None

    @property
    def success(self) -> bool:
        return not self.error


class GitWorkTree:
    """Runs the git operations pman needs inside one working tree."""

    def __init__(self, worktree, name=None):
        self.worktree = worktree
        self.name = name or worktree

    def _RequireWorkTree(self):
        if not platform_utils.isdir(self.worktree):
            raise GitError(
                "no such directory %r" % self.worktree, project=self.name
            )

    def _git(self, *args, **kwargs):
        return GitCommand(
            self.name,
            list(args),
            cwd=self.worktree,
            capture_stdout=True,
            capture_stderr=True,
            verify_command=True,
            **kwargs,
        )

    def clone(self, url):
        """Clone |url| into this working tree."""
        GitCommand(
            self.name,
            ["clone", url, self.worktree],
            capture_stdout=True,
            capture_stderr=True,
            verify_command=True,
        ).Wait()

    def pull(self):
        """Pull the currently checked out branch."""
        self._RequireWorkTree()
        self._git("pull").Wait()

    def select_revision(self, revision):
        """Checkout |revision|.

        Raises:
            GitCheckoutError: git could not select |revision|.
        """
        self._RequireWorkTree()
        if not revision:
            # Nothing configured; stay on whatever is checked out.
            return
        self._git("checkout", revision, error_class=GitCheckoutError).Wait()

    def branch_to(self, name):
        """Create a branch called |name| at HEAD and switch to it."""
        self._RequireWorkTree()
        self._git("checkout", "-b", name).Wait()

    def current_branch(self):
        """Obtain the name of the currently checked out branch.

        The branch name omits the 'refs/heads/' prefix.  On a detached HEAD
        the abbreviated commit id is returned instead.
        """
        self._RequireWorkTree()
        p = GitCommand(
            self.name,
            ["symbolic-ref", "-q", HEAD],
            cwd=self.worktree,
            capture_stdout=True,
            capture_stderr=True,
        )
        if p.Wait() == 0:
            ref = p.stdout.strip()
            if ref.startswith(R_HEADS):
                return ref[len(R_HEADS) :]
            return ref
        p = self._git("rev-parse", "--short", HEAD)
        p.Wait()
        return p.stdout.strip()


class Project:
    """A fully resolved project, ready to be synced or checked out.

    Every field is populated; nothing refers back to the manifest.
    """

    def __init__(
        self,
        name,
        path,
        remote,
        url,
        revision,
        groups=None,
        work_git=None,
    ):
        """Init a Project object.

        Args:
            name: Slash-joined names of this project and its ancestors.
            path: Local working tree path, with ~ already expanded.
            remote: Name of the remote the project is fetched from.
            url: Absolute fetch URL, ending in ".git".
            revision: Revision configured for the project in the manifest.
            groups: List of group names.
            work_git: Git collaborator; defaults to a GitWorkTree on |path|.
        """
        self.name = name
        self.path = path
        self.remote = remote
        self.url = url
        self.revision = revision
        self.groups = list(groups or [])
        self._work_git = work_git

    @property
    def worktree(self):
        return self.path

    @property
    def work_git(self):
        if self._work_git is None:
            self._work_git = GitWorkTree(self.path, name=self.name)
        return self._work_git

    @property
    def gitdir(self):
        return os.path.join(self.path, ".git")

    @property
    def Exists(self):
        return platform_utils.isdir(self.gitdir)

    def __getstate__(self):
        # The git collaborator is rebuilt on demand in worker processes.
        state = self.__dict__.copy()
        state["_work_git"] = None
        return state

    def __eq__(self, other):
        if not isinstance(other, Project):
            return False
        return self.ToDict() == other.ToDict()

    def __ne__(self, other):
        return not self.__eq__(other)

    def __repr__(self):
        return "<Project %s %s@%s>" % (self.name, self.url, self.revision)

    def ToDict(self):
        return {
            "name": self.name,
            "path": self.path,
            "remote": self.remote,
            "fetch": self.url,
            "revision": self.revision,
            "groups": self.groups,
        }

    def Sync(self, force=False):
        """Clone the project, or bring an existing clone to its revision.

        Args:
            force: Replace a directory at |path| that is not a git checkout.

        Returns:
            The revision the working tree is on, or None after a fresh clone.

        Raises:
            UnmanagedDirectoryError: |path| is taken and |force| is False.
            GitError: A git operation failed.
        """
        if platform_utils.exists(self.path):
            if self.Exists:
                return self.Checkout(self.revision, use_fallback=False)
            if not force:
                raise UnmanagedDirectoryError(self.path, project=self.name)
            logger.warning(
                "%s: removing unmanaged directory %s", self.name, self.path
            )
            if platform_utils.isdir(self.path):
                platform_utils.rmtree(self.path)
            else:
                platform_utils.remove(self.path)

        self.work_git.clone(self.url)
        return None

    def Checkout(self, revision, use_fallback=True):
        """Checkout and pull |revision|.

        If git cannot select |revision| and |use_fallback| is set, the
        project's own revision is checked out and pulled instead.  Failures
        while pulling are never retried.

        Returns:
            The revision the working tree ended up on.
        """
        try:
            self._CheckoutAndPull(revision)
            return revision
        except GitCheckoutError as e:
            if not use_fallback:
                raise
            logger.info(
                "%s: cannot checkout %s, falling back to %s: %s",
                self.name,
                revision,
                self.revision,
                e,
            )
        self._CheckoutAndPull(self.revision)
        return self.revision

    def _CheckoutAndPull(self, revision):
        git = self.work_git
        git.select_revision(revision)
        if revision:
            git.pull()

    def Fork(self, name, branch_from=None):
        """Create and switch to the branch |name|.

        Args:
            name: The new branch.
            branch_from: Branch to checkout (with fallback) before forking.
        """
        if branch_from:
            self.Checkout(branch_from, use_fallback=True)
        self.work_git.branch_to(name)

    def CurrentBranch(self):
        """Obtain the name of the currently checked out branch."""
        return self.work_git.current_branch()
