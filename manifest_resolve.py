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

"""Expands a manifest's tree of project definitions into resolved projects.

Each <project> inherits whatever it leaves empty from the project that
encloses it, and top-level projects inherit from <default>.  Resolution is a
pure function of the manifest and an environment snapshot.
"""

import os
import posixpath
import re
import urllib.parse

from error import ManifestMergeError
import platform_utils
from pman_logging import PmanLogger
from project import Project


logger = PmanLogger(__file__)

# Fields of a definition that may reference environment variables.
_EXPANDED_FIELDS = ("name", "path", "fetch", "revision", "remote", "groups")

_ENV_RE = re.compile(r"\$(?:\{([^}]*)\}|(\w+))")

GIT_SUFFIX = ".git"


def ExpandEnv(value, environ):
    """Substitute $VAR and ${VAR} in |value| from |environ|.

    Unset variables expand to the empty string.
    """
    if not value or "$" not in value:
        return value
    return _ENV_RE.sub(
        lambda m: environ.get(m.group(1) or m.group(2), ""), value
    )


def ExpandEnvDefinition(definition, environ):
    """Return a copy of |definition| with its string fields expanded.

    Nested project definitions are left alone.
    """
    return definition._replace(
        **{
            f: ExpandEnv(getattr(definition, f), environ)
            for f in _EXPANDED_FIELDS
        }
    )


def _JoinPath(pathmod, *elems):
    """Join non-empty |elems| and clean the result, like Go's path.Join.

    Unlike os.path.join, an absolute element does not discard what came
    before it.
    """
    elems = [e for e in elems if e]
    if not elems:
        return ""
    return pathmod.normpath(pathmod.sep.join(elems))


def _HasUrlScheme(parts):
    # A one letter "scheme" is a Windows drive.
    return len(parts.scheme) > 1


def UrlPathJoin(base, path):
    """Join |path| onto |base|, which is either a URL or a local path.

    For a URL only the path component changes; scheme, host, query and
    fragment are preserved.

    >>> UrlPathJoin("http://a/b", "c/d")
    'http://a/b/c/d'
    """
    try:
        parts = urllib.parse.urlsplit(base)
    except ValueError:
        # Not a URL after all; join it like a local path.
        return _JoinPath(os.path, base, path)
    if not _HasUrlScheme(parts):
        return _JoinPath(os.path, base, path)
    return urllib.parse.urlunsplit(
        parts._replace(path=_JoinPath(posixpath, parts.path, path))
    )


def AddGitSuffix(fetch):
    """Append ".git" to the path of the URL |fetch| if it is missing."""
    try:
        parts = urllib.parse.urlsplit(fetch)
    except ValueError:
        # Leave unparseable URLs for git to complain about.
        return fetch
    if parts.path.endswith(GIT_SUFFIX):
        return fetch
    return urllib.parse.urlunsplit(parts._replace(path=parts.path + GIT_SUFFIX))


def MergeDefinition(parent, node, remote):
    """Merge |node| onto its inherited context |parent|.

    Args:
        parent: ProjectDefinition holding everything inherited so far.
        node: ProjectDefinition being resolved.
        remote: The Remote in effect for |node|.

    Returns:
        A new ProjectDefinition; neither input is modified.

    Raises:
        ManifestMergeError: The merged fields could not be computed.
    """
    try:
        fetch = parent.fetch or remote.fetch
        return parent._replace(
            name=_JoinPath(posixpath, parent.name, node.name),
            remote=node.remote or parent.remote,
            revision=node.revision or parent.revision,
            fetch=UrlPathJoin(fetch, node.fetch or node.name),
            path=UrlPathJoin(parent.path, node.path or node.name),
            projects=node.projects,
            # Groups are never inherited.
            groups=node.groups,
        )
    except (TypeError, ValueError) as e:
        raise ManifestMergeError(
            "failed to populate project %s: %s" % (node.name, e),
            project=node.name,
        )


def _NewProject(context, remote):
    """Materialize a merged context into a resolved Project."""
    return Project(
        name=context.name,
        path=platform_utils.expanduser(context.path),
        remote=context.remote or remote.name,
        url=AddGitSuffix(context.fetch),
        revision=context.revision,
        groups=context.group_list,
    )


def ResolveProjects(manifest, environ=None):
    """Resolve every project in |manifest|.

    Args:
        manifest: An XmlManifest.
        environ: Mapping used for $VAR expansion; defaults to os.environ.

    Returns:
        A list of Project objects.  A project's children precede it.
    """
    if environ is None:
        environ = dict(os.environ)

    remote = manifest.default_remote
    if remote is None:
        logger.error("No remotes specified in %s", manifest.manifestFile)
        return []

    default = ExpandEnvDefinition(manifest.default, environ)
    if default.remote:
        named = manifest.GetRemote(default.remote)
        if named is None:
            logger.warning(
                "Default: Remote %r does not exist, using %r",
                default.remote,
                remote.name,
            )
            default = default._replace(remote="")
        else:
            remote = named

    return _Resolve(manifest, manifest.projects, default, remote, environ)


def _Resolve(manifest, definitions, parent, remote, environ):
    """Resolve |definitions| inheriting from the already expanded |parent|.

    Args:
        manifest: The XmlManifest, used as the remote table.
        definitions: Sibling ProjectDefinitions to resolve, in order.
        parent: Expanded ProjectDefinition context to inherit from.
        remote: The Remote in effect for |parent|.
        environ: Environment snapshot.
    """
    projects = []

    for definition in definitions:
        node = ExpandEnvDefinition(definition, environ)

        node_remote = remote
        if node.remote:
            node_remote = manifest.GetRemote(node.remote)
            if node_remote is None:
                logger.warning(
                    "Project %s: Remote %r does not exist",
                    node.name,
                    node.remote,
                )
                continue

        try:
            context = MergeDefinition(parent, node, node_remote)
        except ManifestMergeError as e:
            logger.warning("%s", e)
            continue

        # Depth-first: subprojects precede the project that declares them.
        if context.projects:
            projects.extend(
                _Resolve(
                    manifest,
                    context.projects,
                    ExpandEnvDefinition(context, environ),
                    node_remote,
                    environ,
                )
            )

        if not node.SkipInclude():
            projects.append(_NewProject(context, node_remote))

    return projects
