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

from typing import List


class BasePmanError(Exception):
    """All pman specific exceptions derive from BasePmanError."""


class PmanError(BasePmanError):
    """Exceptions thrown inside pman that can be handled."""

    def __init__(self, *args, project: str = None) -> None:
        super().__init__(*args)
        self.project = project


class PmanExitError(BasePmanError):
    """Exception thrown that result in termination of pman.
    - Should only be handled in main.py
    """

    def __init__(
        self,
        *args,
        exit_code: int = 1,
        aggregate_errors: List[Exception] = None,
        **kwargs,
    ) -> None:
        super().__init__(*args, **kwargs)
        self.exit_code = exit_code
        self.aggregate_errors = aggregate_errors


class SilentPmanExitError(PmanExitError):
    """PmanExitError that should not include CLI logging of issue/issues."""


class ManifestParseError(PmanExitError):
    """Failed to parse the manifest file."""


class NoRemotesError(ManifestParseError):
    """The manifest does not declare any remote."""


class NoManifestException(PmanExitError):
    """The required manifest does not exist."""

    def __init__(self, path, reason, **kwargs):
        super().__init__(path, reason, **kwargs)
        self.path = path
        self.reason = reason

    def __str__(self):
        return self.reason


class ManifestMergeError(PmanError):
    """A project definition could not be merged with its parent."""

    def __init__(self, reason, **kwargs):
        super().__init__(reason, **kwargs)
        self.reason = reason

    def __str__(self):
        return self.reason


class UnmanagedDirectoryError(PmanError):
    """A non-git directory already occupies a project's path."""

    def __init__(self, path, **kwargs):
        super().__init__(path, **kwargs)
        self.path = path

    def __str__(self):
        return "unmanaged directory already exists at %r" % self.path


class GitError(PmanError):
    """Unspecified git related error."""

    def __init__(self, message, command_args=None, **kwargs):
        super().__init__(message, **kwargs)
        self.message = message
        self.command_args = command_args

    def __str__(self):
        return self.message


class InvalidArgumentsError(PmanExitError):
    """Invalid command Arguments."""


class SyncError(PmanExitError):
    """Cannot sync one or more projects."""


class CheckoutError(PmanExitError):
    """Cannot checkout one or more projects."""


class ForkError(PmanExitError):
    """Cannot fork one or more projects."""


class InitError(PmanExitError):
    """Cannot fetch the manifest repository."""


class NoSuchProjectError(PmanExitError):
    """A specified project does not exist in the manifest."""

    def __init__(self, name=None, **kwargs):
        super().__init__(**kwargs)
        self.name = name

    def __str__(self):
        if self.name is None:
            return "in current directory"
        return self.name
