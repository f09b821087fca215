#!/usr/bin/env python3
#
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

"""The pman tool.

Like repo, but less opinionated: resolves a nested XML manifest into a flat
list of git projects and runs sync/checkout/fork/status over them.
"""

import optparse
import signal
import sys

from color import SetDefaultColoring
from error import InvalidArgumentsError
from error import ManifestParseError
from error import NoManifestException
from error import NoSuchProjectError
from error import PmanExitError
from error import SilentPmanExitError
from pman_logging import DefaultLogLevel
from pman_logging import LOG_LEVELS
from pman_logging import PmanLogger
from pman_logging import SetLogLevel
from subcmds import all_commands


logger = PmanLogger(__file__)

VERSION = "0.0.1"

KEYBOARD_INTERRUPT_EXIT = 128 + signal.SIGINT

# Global options that consume the following argument.
_OPTIONS_WITH_VALUES = ("-L", "--log-level", "-m", "--manifest", "--color")

global_options = optparse.OptionParser(
    usage="pman [-L LEVEL] [-m MANIFEST] COMMAND [ARGS]",
    add_help_option=False,
)
global_options.add_option(
    "-h", "--help", action="store_true", help="show this help message and exit"
)
global_options.add_option(
    "--help-all",
    action="store_true",
    help="show this help message with all subcommands and exit",
)
global_options.add_option(
    "-L",
    "--log-level",
    dest="log_level",
    default=None,
    help="level of log output verbosity: %s (default: $LOGLEVEL or info)"
    % ", ".join(LOG_LEVELS),
)
global_options.add_option(
    "--color",
    choices=("auto", "always", "never"),
    default=None,
    help="control color usage: auto, always, never",
)
global_options.add_option(
    "-m",
    "--manifest",
    dest="manifest_file",
    metavar="FILE",
    help="use FILE instead of discovering the manifest",
)
global_options.add_option(
    "--version",
    dest="show_version",
    action="store_true",
    help="display this version of pman",
)


class _Pman:
    def __init__(self, commands=None):
        self.commands = commands if commands is not None else all_commands

    def _PrintHelp(self, all_commands: bool = False):
        """Show --help screen."""
        global_options.print_help()
        print()
        names = sorted(
            name
            for name, cmd in self.commands.items()
            if all_commands or cmd.COMMON
        )
        if not names:
            return
        width = max(len(name) for name in names)
        kind = "complete" if all_commands else "most commonly used"
        print("The %s pman commands are:" % kind)
        for name in names:
            summary = getattr(self.commands[name], "helpSummary", "").strip()
            print("  %-*s %s" % (width, name, summary))
        print()
        print("Run `pman COMMAND --help` for command-specific details.")

    def _ParseArgs(self, argv):
        """Parse the main `pman` command line options."""
        for i, arg in enumerate(argv):
            if not arg.startswith("-"):
                # The value of -L/-m may look like a command name.
                if i > 0 and argv[i - 1] in _OPTIONS_WITH_VALUES:
                    continue
                name = arg
                glob = argv[:i]
                argv = argv[i + 1 :]
                break
        else:
            name = None
            glob = argv
            argv = []
        gopts, _gargs = global_options.parse_args(glob)
        return (name, gopts, argv)

    def _Run(self, name, gopts, argv):
        """Execute the requested subcommand."""
        if gopts.help or gopts.help_all:
            self._PrintHelp(all_commands=gopts.help_all)
            return 0
        elif gopts.show_version:
            print("pman version %s" % VERSION)
            return 0
        elif not name:
            # No subcommand specified, so show the help/subcommand.
            self._PrintHelp()
            return 1

        SetDefaultColoring(gopts.color)

        try:
            cmd = self.commands[name](manifest_file=gopts.manifest_file)
        except KeyError:
            logger.error(
                "pman: '%s' is not a pman command.  See 'pman --help'.", name
            )
            return 1

        copts, cargs = cmd.OptionParser.parse_args(argv)
        copts = cmd.ReadEnvironmentOptions(copts)

        try:
            cmd.CommonValidateOptions(copts, cargs)
            cmd.ValidateOptions(copts, cargs)
            result = cmd.Execute(copts, cargs)
        except (ManifestParseError, NoManifestException) as e:
            logger.error("error: in `%s`: %s", " ".join([name] + argv), e)
            if isinstance(e, NoManifestException):
                logger.error(
                    "error: manifest missing or unreadable -- please run init"
                )
            return e.exit_code
        except NoSuchProjectError as e:
            if e.name:
                logger.error("error: project %s not found", e.name)
            else:
                logger.error("error: no project in current directory")
            return e.exit_code
        return result or 0


def _SetLogLevel(gopts):
    level = gopts.log_level or DefaultLogLevel()
    try:
        SetLogLevel(level)
    except ValueError as e:
        raise InvalidArgumentsError(str(e))


def _Main(argv):
    result = 0

    pman = _Pman()

    try:
        name, gopts, argv = pman._ParseArgs(argv)
        _SetLogLevel(gopts)
        result = pman._Run(name, gopts, argv) or 0
    except PmanExitError as e:
        if not isinstance(e, SilentPmanExitError):
            logger.log_aggregated_errors(e)
        result = e.exit_code
    except KeyboardInterrupt:
        print("aborted by user", file=sys.stderr)
        result = KEYBOARD_INTERRUPT_EXIT

    sys.exit(result)


def main():
    _Main(sys.argv[1:])


if __name__ == "__main__":
    main()
