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

import functools

from command import Command
from error import CheckoutError
from error import PmanError
from pman_logging import PmanLogger
from progress import Progress
from project import ExecuteOneResult


logger = PmanLogger(__file__)


class Checkout(Command):
    COMMON = True
    PARALLEL_JOBS = 1
    helpSummary = "Checkout a branch in every project"
    helpUsage = """
%prog <branchname> [<project>...]
"""
    helpDescription = """
The '%prog' command checks out <branchname> in each project and pulls
it.  Projects where <branchname> cannot be checked out fall back to
the revision the manifest names for them.

The command is roughly equivalent to running, in each project:

  git checkout <branchname> && git pull
"""

    def ValidateOptions(self, opt, args):
        if not args:
            self.Usage()

    @classmethod
    def _ExecuteOne(cls, branch, project):
        """Checkout one project."""
        try:
            revision = project.Checkout(branch, use_fallback=True)
        except PmanError as e:
            return ExecuteOneResult(project, error=e)
        return ExecuteOneResult(project, revision=revision)

    def Execute(self, opt, args):
        branch = args[0]
        all_projects = self.GetProjects(args[1:])
        errors = []

        def _ProcessResults(_pool, pm, results):
            for result in results:
                if result.success:
                    logger.debug(
                        "Project %s now on branch %s",
                        result.project.name,
                        result.revision,
                    )
                else:
                    logger.error(
                        "error: %s: cannot checkout %s: %s",
                        result.project.name,
                        branch,
                        result.error,
                    )
                    errors.append(result.error)
                pm.update(msg=result.project.name, failed=not result.success)

        self.ExecuteInParallel(
            opt.jobs,
            functools.partial(self._ExecuteOne, branch),
            all_projects,
            callback=_ProcessResults,
            output=Progress(
                "Checkout %s" % (branch,), len(all_projects), quiet=opt.quiet
            ),
        )

        if errors:
            raise CheckoutError(
                "cannot checkout %s in %d projects" % (branch, len(errors)),
                aggregate_errors=errors,
            )
