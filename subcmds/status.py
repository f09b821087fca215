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

import json
import sys

from color import Coloring
from color import is_color
from command import Command
from error import PmanError


class StatusColoring(Coloring):
    def __init__(self, config):
        super().__init__(config, "status")
        self.project = self.printer("header", attr="bold")
        self.error = self.nofmt_colorer("error", fg="white", bg="red")

    def branch(self, color):
        """Colorer for a branch shown in |color|, or plain text."""
        if not is_color(color) or not color:
            return lambda s: s
        return self.nofmt_colorer(fg=color, attr="bold")


class Status(Command):
    COMMON = True
    PARALLEL_JOBS = 1
    helpSummary = "Show the current branch of every project"
    helpUsage = """
%prog [<project>...]
"""
    helpDescription = """
'%prog' prints one line per project: the project name and the branch
currently checked out in it.  Branches are colored by the first
<branch> rule of the manifest's <branch-config> that matches them.

Projects whose branch cannot be determined (for example because they
have not been synced yet) show the error instead, in red.

--format=json prints a list of {"project": ..., "ref": ...} objects.
"""

    def _Options(self, p):
        p.add_option(
            "--format",
            default="text",
            choices=("text", "json"),
            help="output format: text or json (default: %default)",
        )

    @classmethod
    def _StatusOne(cls, project):
        """Return (project name, branch or error) for one project."""
        try:
            return project.name, project.CurrentBranch(), None
        except PmanError as e:
            return project.name, None, e

    def Execute(self, opt, args):
        all_projects = self.GetProjects(args)

        def _ProcessResults(_pool, _output, results):
            return list(results)

        statuses = self.ExecuteInParallel(
            opt.jobs,
            self._StatusOne,
            all_projects,
            callback=_ProcessResults,
            ordered=True,
        )

        if opt.format == "json":
            self._PrintJson(statuses)
        else:
            self._PrintText(statuses)

    def _PrintJson(self, statuses):
        out = [
            {"project": name, "ref": ref if err is None else str(err)}
            for name, ref, err in statuses
        ]
        json.dump(out, sys.stdout, indent=2)
        sys.stdout.write("\n")

    def _PrintText(self, statuses):
        out = StatusColoring(self.config)
        width = max((len(name) for name, _, _ in statuses), default=0)
        for name, ref, err in statuses:
            out.project("%-*s ", width, name)
            if err is not None:
                out.write("%s", out.error(str(err)))
            else:
                color = self.manifest.ColorForBranch(ref)
                out.write("%s", out.branch(color)(ref))
            out.nl()
        out.flush()
