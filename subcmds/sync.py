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

from command import Command
from error import PmanError
from error import SyncError
from pman_logging import PmanLogger
from progress import Progress
from project import ExecuteOneResult


logger = PmanLogger(__file__)


class Sync(Command):
    COMMON = True
    PARALLEL_JOBS = 1
    helpSummary = "Clone or update every project in the manifest"
    helpUsage = """
%prog [<project>...]
"""
    helpDescription = """
The '%prog' command synchronizes local project directories with the
remote repositories specified in the manifest.  If a local project does
not yet exist, it will clone a new local directory from the remote
repository and set up tracking branches as specified in the manifest.
If the local project already exists, '%prog' checks out the revision
the manifest names for it and pulls.

A directory that exists at a project's path but is not a git checkout
is left alone unless -f/--force is given, in which case it is removed
and the project is cloned in its place.  PMAN_FORCE_SYNC=1 in the
environment has the same effect.

The number of parallel jobs defaults to the sync-j attribute of the
default remote, then to the pman.jobs git config key, then to 1.

Every project is attempted; failures are reported together at the end.
"""

    def _Options(self, p):
        p.add_option(
            "-f",
            "--force",
            action="store_true",
            default=None,
            help="replace existing directories that are not git checkouts",
        )

    def _RegisteredEnvironmentOptions(self):
        return {"PMAN_FORCE_SYNC": "force"}

    def DefaultJobs(self):
        remote = self.manifest.default_remote
        if remote is not None and remote.sync_j:
            return remote.sync_j
        return super().DefaultJobs()

    def ValidateOptions(self, opt, args):
        if isinstance(opt.force, str):
            opt.force = opt.force.strip().lower() in ("1", "true", "yes")
        opt.force = bool(opt.force)

    @classmethod
    def _SyncOne(cls, force, project):
        """Sync one project."""
        try:
            revision = project.Sync(force=force)
        except (PmanError, OSError) as e:
            return ExecuteOneResult(project, error=e)
        return ExecuteOneResult(project, revision=revision)

    def Execute(self, opt, args):
        all_projects = self.GetProjects(args)
        errors = []

        def _ProcessResults(_pool, pm, results):
            for result in results:
                if result.success:
                    logger.info("Synced %s", result.project.name)
                else:
                    logger.error(
                        "error: %s: cannot sync: %s",
                        result.project.name,
                        result.error,
                    )
                    errors.append(result.error)
                pm.update(msg=result.project.name, failed=not result.success)

        self.ExecuteInParallel(
            opt.jobs,
            functools.partial(self._SyncOne, opt.force),
            all_projects,
            callback=_ProcessResults,
            output=Progress("Syncing", len(all_projects), quiet=opt.quiet),
        )

        if errors:
            raise SyncError(
                "cannot sync %d of %d projects"
                % (len(errors), len(all_projects)),
                aggregate_errors=errors,
            )
