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
from error import ForkError
from error import PmanError
from git_command import git
from pman_logging import PmanLogger
from progress import Progress
from project import ExecuteOneResult


logger = PmanLogger(__file__)


class Fork(Command):
    COMMON = True
    PARALLEL_JOBS = 1
    helpSummary = "Start a new branch in every project"
    helpUsage = """
%prog <newbranchname> [<project>...]
"""
    helpDescription = """
'%prog' creates <newbranchname> at the current HEAD of each project
and switches to it.  Nothing is pulled.

With -b/--branch-from, each project first checks out and pulls that
branch, falling back to its manifest revision when it does not exist.
"""

    def _Options(self, p):
        p.add_option(
            "-b",
            "--branch-from",
            metavar="BRANCH",
            help="checkout BRANCH before creating the new branch",
        )

    def ValidateOptions(self, opt, args):
        if not args:
            self.Usage()

        nb = args[0]
        if not git.check_ref_format("heads/%s" % nb):
            self.OptionParser.error("'%s' is not a valid name" % nb)

    @classmethod
    def _ExecuteOne(cls, nb, branch_from, project):
        """Fork one project."""
        try:
            project.Fork(nb, branch_from=branch_from)
        except PmanError as e:
            return ExecuteOneResult(project, error=e)
        return ExecuteOneResult(project, revision=nb)

    def Execute(self, opt, args):
        nb = args[0]
        all_projects = self.GetProjects(args[1:])
        errors = []

        def _ProcessResults(_pool, pm, results):
            for result in results:
                if not result.success:
                    logger.error(
                        "error: %s: cannot start %s: %s",
                        result.project.name,
                        nb,
                        result.error,
                    )
                    errors.append(result.error)
                pm.update(msg=result.project.name, failed=not result.success)

        self.ExecuteInParallel(
            opt.jobs,
            functools.partial(self._ExecuteOne, nb, opt.branch_from),
            all_projects,
            callback=_ProcessResults,
            output=Progress(
                "Starting %s" % (nb,), len(all_projects), quiet=opt.quiet
            ),
        )

        if errors:
            raise ForkError(
                "cannot start %s in %d projects" % (nb, len(errors)),
                aggregate_errors=errors,
            )
