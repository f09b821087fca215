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

from command import Command


class DumpProjects(Command):
    COMMON = False
    helpSummary = "Print the resolved project list as JSON"
    helpUsage = """
%prog [<project>...]
"""
    helpDescription = """
'%prog' resolves the manifest and prints every project with its
inherited fields filled in: name, path, remote, fetch URL, revision
and groups.  Nothing is read from or written to the project
directories.
"""

    def Execute(self, opt, args):
        projects = [p.ToDict() for p in self.GetProjects(args)]
        json.dump(projects, sys.stdout, indent=2)
        sys.stdout.write("\n")
