#!/usr/bin/python
#
# CDDL HEADER START
#
# The contents of this file are subject to the terms of the
# Common Development and Distribution License (the "License").
# You may not use this file except in compliance with the License.
#
# You can obtain a copy of the license at usr/src/OPENSOLARIS.LICENSE
# or http://www.opensolaris.org/os/licensing.
# See the License for the specific language governing permissions
# and limitations under the License.
#
# When distributing Covered Code, include this CDDL HEADER in each
# file and include the License file at usr/src/OPENSOLARIS.LICENSE.
# If applicable, add the following below this CDDL HEADER, with the
# fields enclosed by brackets "[]" replaced with your own identifying
# information: Portions Copyright [yyyy] [name of copyright owner]
#
# CDDL HEADER END
#

#
# Copyright (c) 2026, Oracle and/or its affiliates. All rights reserved.
#

import unittest

import iuplanner.filter as filter

from iuplanner.client.variant import Environment


class TestFilter(unittest.TestCase):

        linux = {"osgi.os": "linux", "osgi.arch": "x86_64",
            "osgi.nl": "en_US", "level": "1.10"}

        def match(self, text, env=None):
                if env is None:
                        env = self.linux
                return filter.Filter(text).match(env)

        def test_01_equality(self):
                self.assertTrue(self.match("(osgi.os=linux)"))
                self.assertFalse(self.match("(osgi.os=win32)"))
                self.assertFalse(self.match("(osgi.ws=gtk)"))

        def test_02_composite(self):
                self.assertTrue(self.match(
                    "(&(osgi.os=linux)(|(osgi.arch=x86_64)(osgi.arch=ppc)))"))
                self.assertFalse(self.match(
                    "(&(osgi.os=linux)(osgi.arch=ppc))"))
                self.assertTrue(self.match("(|(osgi.os=win32)(osgi.os=linux))"))
                self.assertTrue(self.match("(!(osgi.os=win32))"))
                self.assertFalse(self.match("(!(osgi.os=linux))"))

        def test_03_presence_and_wildcards(self):
                self.assertTrue(self.match("(osgi.nl=*)"))
                self.assertFalse(self.match("(osgi.ws=*)"))
                self.assertTrue(self.match("(osgi.nl=en_*)"))
                self.assertTrue(self.match("(osgi.arch=*86*)"))
                self.assertFalse(self.match("(osgi.nl=fr_*)"))

        def test_04_ordering(self):
                """Ordering operators compare versions as versions."""
                self.assertTrue(self.match("(level>=1.9)"))
                self.assertFalse(self.match("(level<=1.9)"))
                self.assertTrue(self.match("(level<=1.10)"))
                self.assertTrue(self.match("(osgi.os>=abc)"))

        def test_05_approx_and_case(self):
                """Attribute names match regardless of case, and '~='
                ignores case and white space in values."""
                self.assertTrue(self.match("(OSGI.OS=linux)"))
                self.assertTrue(self.match("(osgi.os~=LI NUX)"))
                self.assertFalse(self.match("(osgi.os=LINUX)"))

        def test_06_escapes(self):
                env = {"name": "a*b(c)"}
                self.assertTrue(self.match(r"(name=a\*b\(c\))", env))
                self.assertFalse(self.match(r"(name=a\*c)", env))

        def test_07_environment(self):
                env = Environment({"OSGI.OS": "linux"})
                self.assertTrue(filter.Filter("(osgi.os=linux)").match(env))
                self.assertFalse(filter.Filter("(osgi.os=linux)").match(None))

        def test_08_equality(self):
                f1 = filter.Filter("(osgi.os=linux)")
                f2 = filter.Filter(" (osgi.os=linux) ")
                self.assertEqual(f1, f2)
                self.assertEqual(hash(f1), hash(f2))
                self.assertEqual(str(f2), "(osgi.os=linux)")
                self.assertNotEqual(f1, filter.Filter("(osgi.os=win32)"))

        def test_09_compile(self):
                self.assertTrue(filter.compile_filter(None) is None)
                self.assertTrue(filter.compile_filter("  ") is None)
                f = filter.compile_filter("(a=b)")
                self.assertTrue(filter.compile_filter(f) is f)
                self.assertTrue(filter.apply_filters({"a": "b"}, [None, f]))
                self.assertFalse(filter.apply_filters({"a": "c"}, [f]))

        def test_10_bogus(self):
                for text in ["osgi.os=linux", "(osgi.os=linux", "()",
                    "(&)", "(=linux)", "(a>b)", "(a>=b*)", "(a=b))",
                    "(a=b(c)"]:
                        self.assertRaises(filter.FilterError, filter.Filter,
                            text)


if __name__ == "__main__":
        unittest.main()
