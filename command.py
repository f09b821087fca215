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

import multiprocessing
import optparse
import os
import sys

from error import NoRemotesError
from error import NoSuchProjectError
from git_config import GitConfig
import manifest_loader
import progress


# Number of projects to submit to a single worker process at a time.
# This number represents a tradeoff between the overhead of IPC and finer
# grained opportunity for parallelism.
WORKER_BATCH_SIZE = 4

# git config key holding the user's preferred number of parallel jobs.
JOBS_CONFIG_KEY = "pman.jobs"


class Command:
    """Base class for any command line action in pman."""

    # Whether this command is a "common" one, i.e. whether the user would
    # commonly use it or it's a more uncommon command.  This is used by the
    # help output to show short-vs-full summaries.
    COMMON = False

    # Whether this command supports running in parallel.  If not None, it is
    # the number of parallel jobs to default to.
    PARALLEL_JOBS = None

    def __init__(
        self,
        manifest=None,
        config=None,
        manifest_file=None,
        topdir=None,
        environ=None,
    ):
        self._manifest = manifest
        self.config = config if config is not None else GitConfig.ForUser()
        self.manifest_file = manifest_file
        self.topdir = topdir
        # Environment snapshot used when resolving the manifest.
        self.environ = environ

        # Cache for the OptionParser property.
        self._optparse = None

    @property
    def manifest(self):
        """The XmlManifest for this checkout, loaded on first use."""
        if self._manifest is None:
            self._manifest = manifest_loader.LoadManifest(
                manifest_file=self.manifest_file, topdir=self.topdir
            )
        return self._manifest

    def ReadEnvironmentOptions(self, opts):
        """Set options from environment variables."""

        env_options = self._RegisteredEnvironmentOptions()

        for env_key, opt_key in env_options.items():
            # Get the user-set option value if any
            opt_value = getattr(opts, opt_key)

            # If the value is set, it means the user has passed it as a command
            # line option, and we should use that.  Otherwise we can try to set
            # it with the value from the corresponding environment variable.
            if opt_value is not None:
                continue

            env_value = os.environ.get(env_key)
            if env_value is not None:
                setattr(opts, opt_key, env_value)

        return opts

    @property
    def OptionParser(self):
        if self._optparse is None:
            try:
                me = "pman %s" % self.NAME
                usage = self.helpUsage.strip().replace("%prog", me)
            except AttributeError:
                usage = "pman %s" % self.NAME
            self._optparse = optparse.OptionParser(usage=usage)
            self._CommonOptions(self._optparse)
            self._Options(self._optparse)
        return self._optparse

    def _CommonOptions(self, p, opt_v=True):
        """Initialize the option parser with common options.

        These will show up for *all* subcommands, so use sparingly.
        """
        g = p.add_option_group("Logging options")
        opts = ["-v"] if opt_v else []
        g.add_option(
            *opts,
            "--verbose",
            dest="output_mode",
            action="store_true",
            help="show all output",
        )
        g.add_option(
            "-q",
            "--quiet",
            dest="output_mode",
            action="store_false",
            help="only show errors",
        )

        if self.PARALLEL_JOBS is not None:
            p.add_option(
                "-j",
                "--jobs",
                type=int,
                default=None,
                help="number of jobs to run in parallel (default: %s or %d)"
                % (JOBS_CONFIG_KEY, self.PARALLEL_JOBS),
            )

    def _Options(self, p):
        """Initialize the option parser with subcommand-specific options."""

    def _RegisteredEnvironmentOptions(self):
        """Get options that can be set from environment variables.

        Return a dictionary mapping environment variable name
        to option key name that it can override.

        Example: {'PMAN_MY_OPTION': 'my_option'}

        Will allow the option with key value 'my_option' to be set
        from the value in the environment variable named 'PMAN_MY_OPTION'.

        Note: This does not work properly for options that are explicitly
        set to None by the user, or options that are defined with a
        default value other than None.
        """
        return {}

    def Usage(self):
        """Display usage and terminate."""
        self.OptionParser.print_usage()
        sys.exit(1)

    def DefaultJobs(self):
        """Number of parallel jobs to use when -j is not given."""
        jobs = self.config.GetInt(JOBS_CONFIG_KEY)
        if jobs and jobs > 0:
            return jobs
        return self.PARALLEL_JOBS

    def CommonValidateOptions(self, opt, args):
        """Validate common options."""
        opt.quiet = opt.output_mode is False
        opt.verbose = opt.output_mode is True
        if self.PARALLEL_JOBS is not None:
            if opt.jobs is None:
                opt.jobs = self.DefaultJobs()
            elif opt.jobs < 1:
                self.OptionParser.error("-j/--jobs must be at least 1")

    def ValidateOptions(self, opt, args):
        """Validate the user options & arguments before executing.

        This is meant to help break the code up into logical steps.  Some tips:
        * Use self.OptionParser.error to display CLI related errors.
        * Adjust opt member defaults as makes sense.
        * Adjust the args list, but do so inplace so the caller sees updates.
        * Try to avoid updating self state.  Leave that to Execute.
        """

    def Execute(self, opt, args):
        """Perform the action, after option parsing is complete."""
        raise NotImplementedError

    @staticmethod
    def ExecuteInParallel(
        jobs, func, inputs, callback, output=None, ordered=False
    ):
        """Helper for managing parallel execution boiler plate.

        For subcommands that can easily split their work up.

        Args:
            jobs: How many parallel processes to use.
            func: The function to apply to each of the |inputs|.  Usually a
                functools.partial for wrapping additional arguments.  It will
                be run in a separate process, so it must be pickalable, so
                nested functions won't work.  Methods on the subcommand
                Command class should work.
            inputs: The list of items to process.  Must be a list.
            callback: The function to pass the results to for processing.  It
                will be executed in the main thread and process the results of
                |func| as they become available.  Thus it may be a local nested
                function.  Its return value is passed back directly.  It takes
                three arguments:
                - The processing pool (or None with one job).
                - The |output| argument.
                - An iterator for the results.
            output: An output manager.  May be progress.Progess or
                color.Coloring.
            ordered: Whether the jobs should be processed in order.

        Returns:
            The |callback| function's results are returned.
        """
        try:
            # NB: Multiprocessing is heavy, so don't spin it up for one job.
            if len(inputs) <= 1 or jobs == 1:
                return callback(None, output, (func(x) for x in inputs))
            else:
                with multiprocessing.Pool(jobs) as pool:
                    submit = pool.imap if ordered else pool.imap_unordered
                    return callback(
                        pool,
                        output,
                        submit(func, inputs, chunksize=WORKER_BATCH_SIZE),
                    )
        finally:
            if isinstance(output, progress.Progress):
                output.end()

    def GetProjects(self, args):
        """A list of resolved projects that match the arguments.

        Args:
            args: a list of project names or paths; empty selects everything.

        Returns:
            A list of project.Project instances, in manifest order.

        Raises:
            NoRemotesError: The manifest declares no remote.
            NoSuchProjectError: An argument matches no project.
        """
        if not self.manifest.remotes:
            raise NoRemotesError(
                "no <remote> declared in %s" % self.manifest.manifestFile
            )

        all_projects = self.manifest.GetProjects(environ=self.environ)
        if not args:
            return all_projects

        by_key = {}
        for project in all_projects:
            by_key.setdefault(project.name, []).append(project)
            by_key.setdefault(os.path.abspath(project.path), []).append(project)

        selected = set()
        for arg in args:
            matches = by_key.get(arg) or by_key.get(os.path.abspath(arg))
            if not matches:
                raise NoSuchProjectError(arg)
            selected.update(id(p) for p in matches)

        return [p for p in all_projects if id(p) in selected]
