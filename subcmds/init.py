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

from command import Command
from error import GitError
from error import InitError
from error import NoManifestException
import manifest_loader
from pman_logging import PmanLogger
from project import GitWorkTree


logger = PmanLogger(__file__)


class Init(Command):
    COMMON = True
    helpSummary = "Initialize a pman checkout in the current directory"
    helpUsage = """
%prog [options] <manifest url>
"""
    helpDescription = """
The '%prog' command is run once to set up a checkout.  The manifest
repository at <manifest url> is cloned into .repo/manifest/ in the
current directory, and its default.xml becomes the manifest for every
later pman command run from here.

Running '%prog' again in an existing checkout updates the manifest
repository instead of cloning it.

The optional -b argument selects the manifest branch (default: master).

A pman.xml file in the current directory takes precedence over the
manifest repository.
"""

    def _Options(self, p):
        p.add_option(
            "-b",
            "--manifest-branch",
            metavar="REVISION",
            default=manifest_loader.MANIFEST_REPO_BRANCH,
            help="manifest branch or revision (default: %default)",
        )

    def ValidateOptions(self, opt, args):
        if not args:
            self.OptionParser.error("a manifest url is required")
        if len(args) > 1:
            self.OptionParser.error("too many arguments to init")

    def Execute(self, opt, args):
        url = args[0]
        mandir = manifest_loader.ManifestRepoDir(self.topdir)

        if os.path.isdir(os.path.join(mandir, ".git")):
            if not opt.quiet:
                logger.info(
                    "pman: reusing existing manifest repository in %s", mandir
                )
            try:
                manifest_loader.RefreshManifestRepo(
                    mandir, branch=opt.manifest_branch
                )
            except NoManifestException as e:
                raise InitError(str(e), aggregate_errors=[e])
        else:
            os.makedirs(os.path.dirname(mandir), exist_ok=True)
            work_git = GitWorkTree(mandir, name="manifest")
            try:
                work_git.clone(url)
                work_git.select_revision(opt.manifest_branch)
            except GitError as e:
                raise InitError(
                    "cannot fetch manifest from %s" % url, aggregate_errors=[e]
                )

        if not opt.quiet:
            topdir = os.path.dirname(os.path.dirname(mandir))
            print()
            print("pman has been initialized in %s" % topdir)
