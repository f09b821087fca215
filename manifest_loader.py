# Copyright (C) 2009 The Android Open Source Project
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

"""Locates the manifest for the current checkout."""

import os

from error import GitError
from error import NoManifestException
from manifest_xml import MANIFEST_FILE_NAME
from manifest_xml import XmlManifest
from pman_logging import PmanLogger
from project import GitWorkTree


logger = PmanLogger(__file__)

# Where `pman init` clones the manifest repository, relative to the top.
MANIFEST_REPO_DIR = os.path.join(".repo", "manifest")
MANIFEST_REPO_BRANCH = "master"
DEFAULT_MANIFEST_NAME = "default.xml"


def _IsNonemptyFile(path):
    return os.path.isfile(path) and os.path.getsize(path) > 0


def ManifestRepoDir(topdir=None):
    return os.path.join(topdir or os.getcwd(), MANIFEST_REPO_DIR)


def RefreshManifestRepo(mandir, branch=MANIFEST_REPO_BRANCH):
    """Bring the manifest repository at |mandir| up to date with |branch|.

    Raises:
        NoManifestException: The repository is missing or cannot be pulled.
    """
    if not os.path.isdir(mandir):
        raise NoManifestException(
            mandir,
            "no %s in the current directory and no manifest repository at "
            "%s; run `pman init` first" % (MANIFEST_FILE_NAME, mandir),
        )

    work_git = GitWorkTree(mandir, name="manifest")
    try:
        work_git.select_revision(branch)
        work_git.pull()
    except GitError as e:
        raise NoManifestException(
            mandir, "failed to retrieve manifest: %s" % e
        )


def FindManifest(topdir=None, refresh=True):
    """Return the path of the manifest to use for |topdir|.

    A non-empty pman.xml in |topdir| wins.  Otherwise the default.xml of the
    manifest repository created by `pman init` is used, pulled first when
    |refresh| is set.
    """
    topdir = topdir or os.getcwd()
    local = os.path.join(topdir, MANIFEST_FILE_NAME)
    if _IsNonemptyFile(local):
        return local

    mandir = ManifestRepoDir(topdir)
    if refresh:
        RefreshManifestRepo(mandir)
    return os.path.join(mandir, DEFAULT_MANIFEST_NAME)


def LoadManifest(manifest_file=None, topdir=None, refresh=True):
    """Find, parse and return the XmlManifest for this checkout.

    Args:
        manifest_file: Explicit manifest path, bypassing discovery.
        topdir: Directory to search from; defaults to the cwd.
        refresh: Pull the manifest repository before reading it.

    Raises:
        NoManifestException: No manifest could be found.
        ManifestParseError: The manifest is malformed.
    """
    if not manifest_file:
        manifest_file = FindManifest(topdir=topdir, refresh=refresh)

    if not os.path.isfile(manifest_file):
        raise NoManifestException(
            manifest_file, "manifest %s does not exist" % manifest_file
        )

    manifest = XmlManifest(manifest_file)
    manifest.Load()
    logger.debug("Loaded project manifest from %s", manifest_file)
    return manifest
