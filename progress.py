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

import sys
import time


# This will erase all content in the current line after the cursor.  This is
# useful for partial updates & progress messages as the terminal can display
# it better.
CSI_ERASE_LINE_AFTER = "\x1b[K"

# Seconds to wait before a delayed meter first draws.
SHOW_DELAY = 0.5


def duration_str(total):
    """A less noisy timedelta.__str__, e.g. "1m2.500s"."""
    hours, rem = divmod(total, 3600)
    mins, secs = divmod(rem, 60)
    ret = f"{secs:.3f}s"
    if mins:
        ret = f"{int(mins)}m{ret}"
    if hours:
        ret = f"{int(hours)}h{ret}"
    return ret


class Progress:
    """One-line meter on stderr for an operation run over many projects.

    Nothing is drawn when stderr is not a terminal or |quiet| is set, and a
    delayed meter stays hidden for operations that finish quickly.
    """

    def __init__(self, title, total=0, delay=True, quiet=False, out=None):
        self._title = title
        self._total = total
        self._done = 0
        self._failed = 0
        self._start = time.time()
        self._show = not delay
        self._quiet = quiet
        self._ended = False
        self._last_msg = None
        self._out = out or sys.stderr

    @property
    def done(self):
        return self._done

    @property
    def failed(self):
        return self._failed

    def _enabled(self):
        return not self._quiet and self._out.isatty()

    def _write(self, s, end=""):
        self._out.write("\r" + s + CSI_ERASE_LINE_AFTER + end)
        self._out.flush()

    def _counts(self):
        if self._total <= 0:
            s = "%d" % self._done
        else:
            s = "%3d%% (%d/%d)" % (
                (100 * self._done) / self._total,
                self._done,
                self._total,
            )
        if self._failed:
            s += ", %d failed" % self._failed
        return s

    def update(self, inc=1, msg=None, failed=False):
        """Record |inc| more projects as finished.

        Args:
            inc: The number of projects completed.
            msg: The message to display. If None, use the last message.
            failed: Whether these projects failed.
        """
        self._done += inc
        if failed:
            self._failed += inc
        if msg is None:
            msg = self._last_msg
        self._last_msg = msg

        if not self._enabled():
            return

        if not self._show:
            if time.time() - self._start < SHOW_DELAY:
                return
            self._show = True

        self._write("%s: %s %s" % (self._title, self._counts(), msg or ""))

    def end(self):
        if self._ended:
            return
        self._ended = True

        if not self._enabled() or not self._show:
            return

        duration = duration_str(time.time() - self._start)
        self._write(
            "%s: %s, done in %s" % (self._title, self._counts(), duration),
            end="\n",
        )
