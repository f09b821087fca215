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

import re
from typing import List, NamedTuple, Optional, Tuple
import xml.dom.minidom
import xml.parsers.expat

from error import ManifestParseError
import manifest_resolve


MANIFEST_FILE_NAME = "pman.xml"

# Projects in this group are never emitted themselves; their children are.
NOTDEFAULT_GROUP = "notdefault"


def ParseGroups(groups):
    """Split a groups attribute on commas and whitespace."""
    return [x for x in re.split(r"[,\s]+", groups or "") if x]


def XmlInt(node, attr, default=None):
    """Determine integer value of |node|'s |attr|.

    Args:
        node: XML node whose attributes we access.
        attr: The attribute to access.
        default: If the attribute is not set (value is empty), then use this.

    Returns:
        The number if the attribute is a valid number.

    Raises:
        ManifestParseError: The number is invalid.
    """
    value = node.getAttribute(attr)
    if not value:
        return default

    try:
        return int(value)
    except ValueError:
        raise ManifestParseError(
            'manifest: invalid %s="%s" integer' % (attr, value)
        )


class Remote(NamedTuple):
    """A <remote> element: a named template for fetch URLs."""

    name: str
    fetch: str = ""
    # Suggested number of parallel jobs when syncing from this remote.
    sync_j: Optional[int] = None


class BranchRule(NamedTuple):
    """A <branch> element inside <branch-config>, used to color branches."""

    name: str
    color: str = ""
    prefixes: str = ""

    @property
    def prefix_list(self):
        return [p.strip() for p in self.prefixes.split(",") if p.strip()]

    def Matches(self, branch):
        if branch == self.name:
            return True
        return any(branch.startswith(p) for p in self.prefix_list)


class ProjectDefinition(NamedTuple):
    """A <project> or <default> element as written in the manifest.

    Empty fields mean "inherit from the enclosing project or the default".
    """

    name: str = ""
    path: str = ""
    remote: str = ""
    fetch: str = ""
    revision: str = ""
    groups: str = ""
    projects: Tuple["ProjectDefinition", ...] = ()

    @property
    def group_list(self) -> List[str]:
        return ParseGroups(self.groups)

    def SkipInclude(self):
        """Whether this definition is excluded from the project list."""
        return NOTDEFAULT_GROUP in self.group_list


class XmlManifest:
    """manages the pman manifest file"""

    def __init__(self, manifest_file=None, data=None):
        """Initialize.

        Args:
            manifest_file: Path of the XML manifest to load.
            data: XML text to parse instead of reading |manifest_file|.
        """
        self.manifestFile = manifest_file or "<string>"
        self._data = data
        self.Unload()

    @classmethod
    def FromString(cls, data, manifest_file=None):
        return cls(manifest_file=manifest_file, data=data)

    def Unload(self):
        """Unload the manifest.

        If the manifest files have been changed since Load() was called, this
        will cause the new/updated manifest to be used.
        """
        self._loaded = False
        self._remotes = []
        self._remotes_by_name = {}
        self._default = None
        self._projects = []
        self._branch_rules = []

    def Load(self):
        """Read the manifest into memory."""
        if not self._loaded:
            self._ParseManifest(self._ParseManifestXml())
            self._loaded = True

    @property
    def remotes(self) -> List[Remote]:
        """Remotes in declaration order; the first one is the default."""
        self.Load()
        return self._remotes

    @property
    def default(self) -> ProjectDefinition:
        self.Load()
        return self._default

    @property
    def projects(self) -> List[ProjectDefinition]:
        """Top-level project definitions, nested projects included."""
        self.Load()
        return self._projects

    @property
    def branch_rules(self) -> List[BranchRule]:
        self.Load()
        return self._branch_rules

    @property
    def default_remote(self) -> Optional[Remote]:
        remotes = self.remotes
        return remotes[0] if remotes else None

    def GetRemote(self, name) -> Optional[Remote]:
        """Look up a remote by its exact name."""
        self.Load()
        return self._remotes_by_name.get(name)

    def GetProjects(self, environ=None):
        """Return the flat list of resolved project.Project objects."""
        return manifest_resolve.ResolveProjects(self, environ=environ)

    def ColorForBranch(self, branch):
        """The color of the first branch rule matching |branch|, or ""."""
        for rule in self.branch_rules:
            if rule.Matches(branch):
                return rule.color
        return ""

    def _ParseManifestXml(self):
        """Parse the manifest XML and return the <manifest> node."""
        try:
            if self._data is not None:
                root = xml.dom.minidom.parseString(self._data)
            else:
                root = xml.dom.minidom.parse(self.manifestFile)
        except (OSError, xml.parsers.expat.ExpatError) as e:
            raise ManifestParseError(
                "error parsing manifest %s: %s" % (self.manifestFile, e)
            )

        if not root or not root.childNodes:
            raise ManifestParseError("no root node in %s" % self.manifestFile)

        for manifest in root.childNodes:
            if manifest.nodeName == "manifest":
                return manifest
        raise ManifestParseError("no <manifest> in %s" % self.manifestFile)

    def _ParseManifest(self, manifest):
        for node in manifest.childNodes:
            if node.nodeName == "remote":
                remote = self._ParseRemote(node)
                if remote.name in self._remotes_by_name:
                    if remote != self._remotes_by_name[remote.name]:
                        raise ManifestParseError(
                            "remote %s already exists with different "
                            "attributes" % remote.name
                        )
                else:
                    self._remotes_by_name[remote.name] = remote
                    self._remotes.append(remote)

        for node in manifest.childNodes:
            if node.nodeName == "default":
                new_default = self._ParseProject(node, allow_children=False)
                if self._default is None:
                    self._default = new_default
                elif new_default != self._default:
                    raise ManifestParseError(
                        "duplicate default in %s" % self.manifestFile
                    )

        if self._default is None:
            self._default = ProjectDefinition()

        for node in manifest.childNodes:
            if node.nodeName == "project":
                self._projects.append(self._ParseProject(node))
            elif node.nodeName == "branch-config":
                for n in node.childNodes:
                    if n.nodeName == "branch":
                        self._branch_rules.append(self._ParseBranchRule(n))

    def _ParseRemote(self, node):
        """
        reads a <remote> element from the manifest file
        """
        sync_j = XmlInt(node, "sync-j", None)
        if sync_j is not None and sync_j <= 0:
            raise ManifestParseError(
                '%s: sync-j must be greater than 0, not "%s"'
                % (self.manifestFile, sync_j)
            )
        return Remote(
            name=node.getAttribute("name"),
            fetch=node.getAttribute("fetch"),
            sync_j=sync_j,
        )

    def _ParseProject(self, node, allow_children=True):
        """
        reads a <project> (or <default>) element from the manifest file
        """
        children = ()
        if allow_children:
            children = tuple(
                self._ParseProject(n)
                for n in node.childNodes
                if n.nodeName == "project"
            )
        return ProjectDefinition(
            name=node.getAttribute("name"),
            path=node.getAttribute("path"),
            remote=node.getAttribute("remote"),
            fetch=node.getAttribute("fetch"),
            revision=node.getAttribute("revision"),
            groups=node.getAttribute("groups"),
            projects=children,
        )

    def _ParseBranchRule(self, node):
        """
        reads a <branch> element from the <branch-config> element
        """
        return BranchRule(
            name=node.getAttribute("name"),
            color=node.getAttribute("color"),
            prefixes=node.getAttribute("prefixes"),
        )
