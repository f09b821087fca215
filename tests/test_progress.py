# Copyright 2021 The Android Open Source Project
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

"""Unittests for the progress.py module."""

import io
import unittest
from unittest import mock

import progress


class _Tty(io.StringIO):
    def isatty(self):
        return True


class DurationStrTests(unittest.TestCase):
    def test_duration_str(self):
        self.assertEqual(progress.duration_str(2.5), "2.500s")
        self.assertEqual(progress.duration_str(62.5), "1m2.500s")
        self.assertEqual(progress.duration_str(3600), "1h0.000s")
        self.assertEqual(progress.duration_str(3723), "1h2m3.000s")


class ProgressTests(unittest.TestCase):
    def test_counts(self):
        out = _Tty()
        pm = progress.Progress("Syncing", 4, delay=False, out=out)
        pm.update(msg="core")
        pm.update(msg="docs", failed=True)
        self.assertEqual(pm.done, 2)
        self.assertEqual(pm.failed, 1)
        self.assertIn("Syncing:  50% (2/4), 1 failed docs", out.getvalue())
        pm.end()
        self.assertIn("(2/4), 1 failed, done in ", out.getvalue())
        self.assertTrue(out.getvalue().endswith("\n"))

    def test_no_total(self):
        out = _Tty()
        pm = progress.Progress("Checking", delay=False, out=out)
        pm.update()
        pm.update()
        self.assertIn("Checking: 2 ", out.getvalue())

    def test_quiet(self):
        out = _Tty()
        pm = progress.Progress("Syncing", 2, delay=False, quiet=True, out=out)
        pm.update()
        pm.end()
        self.assertEqual(out.getvalue(), "")
        self.assertEqual(pm.done, 1)

    def test_not_a_tty(self):
        out = io.StringIO()
        pm = progress.Progress("Syncing", 2, delay=False, out=out)
        pm.update(failed=True)
        pm.end()
        self.assertEqual(out.getvalue(), "")
        self.assertEqual(pm.failed, 1)

    def test_delay(self):
        out = _Tty()
        with mock.patch.object(progress.time, "time", return_value=100.0):
            pm = progress.Progress("Syncing", 2, out=out)
            pm.update()
            pm.end()
        self.assertEqual(out.getvalue(), "")

        with mock.patch.object(progress.time, "time", return_value=100.0):
            pm = progress.Progress("Syncing", 2, out=out)
        with mock.patch.object(progress.time, "time", return_value=101.0):
            pm.update()
        self.assertIn("(1/2)", out.getvalue())

    def test_end_once(self):
        out = _Tty()
        pm = progress.Progress("Syncing", 1, delay=False, out=out)
        pm.update()
        pm.end()
        first = out.getvalue()
        pm.end()
        self.assertEqual(out.getvalue(), first)
