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

import re
import weakref

class VersionError(Exception):
        """Base exception class for all version errors."""

        def __init__(self, *args):
                Exception.__init__(self, *args)


class IllegalVersion(VersionError):
        """Used to indicate that the specified version string is not valid."""


class IllegalVersionRange(VersionError):
        """Used to indicate that the specified version range is not valid."""


class Version(object):
        """A Version is the "major.minor.micro.qualifier" string used to
        identify a revision of an installable unit.  The numeric components
        default to zero when omitted; the qualifier is compared as a plain
        string, and an absent qualifier sorts first."""

        __slots__ = ["major", "minor", "micro", "qualifier", "__weakref__"]

        #
        # We employ the Flyweight design pattern for versions, since they
        # are used immutably and are highly repetitive (1.0.0 over and over).
        #
        __version_pool = weakref.WeakValueDictionary()

        __qualifier_re = re.compile(r"^[A-Za-z0-9_\-]*$")

        @staticmethod
        def version_val(elem):
                # Do this first; if the string is zero chars or non-numeric
                # chars, this will throw.
                x = int(elem)
                if elem.strip()[0] in "-+":
                        raise ValueError("Signed number")
                return x

        def __new__(cls, version_string):
                if not isinstance(version_string, str):
                        raise IllegalVersion(version_string)
                key = version_string.strip()
                v = Version.__version_pool.get(key)
                if v is None:
                        Version.__version_pool[key] = v = \
                            object.__new__(cls)
                return v

        def __init__(self, version_string):
                # Was I already initialized?  See __new__ above.
                if getattr(self, "qualifier", None) is not None:
                        return

                s = version_string.strip()
                if not s:
                        raise IllegalVersion("Version cannot be empty")

                parts = s.split(".", 3)
                try:
                        nums = [Version.version_val(p) for p in parts[:3]]
                except ValueError:
                        # The qualifier may only follow all three numbers.
                        raise IllegalVersion(version_string)

                qualifier = ""
                if len(parts) == 4:
                        qualifier = parts[3]
                        if not qualifier or \
                            not self.__qualifier_re.match(qualifier):
                                raise IllegalVersion(version_string)

                nums.extend([0] * (3 - len(nums)))
                self.major, self.minor, self.micro = nums
                self.qualifier = qualifier

        @staticmethod
        def parse(value):
                """Return a Version for 'value', which may already be one."""
                if isinstance(value, Version):
                        return value
                return Version(value)

        @staticmethod
        def getstate(obj, je_state=None):
                """Returns the serialized state of this object in a format
                that that can be easily stored using JSON, pickle, etc."""
                return str(obj)

        @staticmethod
        def fromstate(state, jd_state=None):
                """Allocate a new object using previously serialized state
                obtained via getstate()."""
                return Version(state)

        def __str__(self):
                outstr = "{0:d}.{1:d}.{2:d}".format(self.major, self.minor,
                    self.micro)
                if self.qualifier:
                        outstr += "." + self.qualifier
                return outstr

        def __repr__(self):
                return "<Version '{0}' at {1:#x}>".format(self, id(self))

        def __key(self):
                return (self.major, self.minor, self.micro, self.qualifier)

        def __ne__(self, other):
                if not isinstance(other, Version):
                        return True
                return self.__key() != other.__key()

        def __eq__(self, other):
                if not isinstance(other, Version):
                        return False
                return self.__key() == other.__key()

        def __lt__(self, other):
                if not isinstance(other, Version):
                        return NotImplemented
                return self.__key() < other.__key()

        def __gt__(self, other):
                if not isinstance(other, Version):
                        return NotImplemented
                return self.__key() > other.__key()

        def __le__(self, other):
                if not isinstance(other, Version):
                        return NotImplemented
                return self.__key() <= other.__key()

        def __ge__(self, other):
                if not isinstance(other, Version):
                        return NotImplemented
                return self.__key() >= other.__key()

        def __hash__(self):
                return hash(self.__key())


class VersionRange(object):
        """A VersionRange is an interval of versions.  The accepted string
        forms are '[low,high]', '[low,high)', '(low,high]', '(low,high)',
        '[low,)' and a bare version 'low', which means low and everything
        above it.  '()' denotes the empty range, which includes nothing."""

        __slots__ = ["low", "high", "low_inclusive", "high_inclusive",
            "__empty"]

        def __init__(self, range_string=None, low=None, high=None,
            low_inclusive=True, high_inclusive=True, _empty=False):

                self.__empty = _empty
                if _empty:
                        self.low = Version("0.0.0")
                        self.high = Version("0.0.0")
                        self.low_inclusive = self.high_inclusive = False
                        return

                if range_string is not None:
                        low, high, low_inclusive, high_inclusive = \
                            self.__parse(range_string)
                elif low is None:
                        low = "0.0.0"

                self.low = Version.parse(low)
                self.high = None
                if high is not None:
                        self.high = Version.parse(high)
                self.low_inclusive = low_inclusive
                self.high_inclusive = high_inclusive and high is not None

                if self.high is not None:
                        if self.low > self.high or (self.low == self.high and
                            not (self.low_inclusive and self.high_inclusive)):
                                raise IllegalVersionRange(
                                    range_string or str(self))

        @staticmethod
        def __parse(s):
                s = s.strip()
                if not s:
                        raise IllegalVersionRange("Range cannot be empty")
                if s[0] not in "[(":
                        # A bare version: everything at or above it.
                        try:
                                return Version(s), None, True, False
                        except IllegalVersion:
                                raise IllegalVersionRange(s)

                if s[-1] not in "])" or s.count(",") != 1:
                        raise IllegalVersionRange(s)
                lo, hi = s[1:-1].split(",")
                try:
                        low = Version(lo)
                        high = None
                        if hi.strip():
                                high = Version(hi)
                except IllegalVersion:
                        raise IllegalVersionRange(s)
                return low, high, s[0] == "[", s[-1] == "]"

        @staticmethod
        def parse(value):
                """Return a VersionRange for 'value', which may be a range,
                a range string, None (any version) or '()' (empty)."""
                if isinstance(value, VersionRange):
                        return value
                if value is None:
                        return VersionRange.ANY
                if value.strip() == "()":
                        return VersionRange.EMPTY
                return VersionRange(value)

        @staticmethod
        def exact(version):
                """Return the range including only 'version'."""
                v = Version.parse(version)
                return VersionRange(low=v, high=v)

        @staticmethod
        def getstate(obj, je_state=None):
                """Returns the serialized state of this object in a format
                that that can be easily stored using JSON, pickle, etc."""
                return str(obj)

        @staticmethod
        def fromstate(state, jd_state=None):
                """Allocate a new object using previously serialized state
                obtained via getstate()."""
                return VersionRange.parse(state)

        def is_empty(self):
                return self.__empty

        def includes(self, version):
                """Returns True if 'version' lies within this range."""

                if self.__empty or version is None:
                        return False
                if version < self.low or \
                    (version == self.low and not self.low_inclusive):
                        return False
                if self.high is None:
                        return True
                if version > self.high or \
                    (version == self.high and not self.high_inclusive):
                        return False
                return True

        def intersect(self, other):
                """Return the range of versions included by both this range
                and 'other'; VersionRange.EMPTY if there are none."""

                if self.__empty or other.is_empty():
                        return VersionRange.EMPTY

                if self.low > other.low:
                        low, low_inc = self.low, self.low_inclusive
                elif self.low < other.low:
                        low, low_inc = other.low, other.low_inclusive
                else:
                        low = self.low
                        low_inc = self.low_inclusive and other.low_inclusive

                if other.high is None or (self.high is not None and
                    self.high < other.high):
                        high, high_inc = self.high, self.high_inclusive
                elif self.high is None or self.high > other.high:
                        high, high_inc = other.high, other.high_inclusive
                else:
                        high = self.high
                        high_inc = self.high_inclusive and other.high_inclusive

                try:
                        return VersionRange(low=low, high=high,
                            low_inclusive=low_inc, high_inclusive=high_inc)
                except IllegalVersionRange:
                        return VersionRange.EMPTY

        def __str__(self):
                if self.__empty:
                        return "()"
                if self.high is None and self.low_inclusive:
                        return str(self.low)
                return "{0}{1},{2}{3}".format(
                    self.low_inclusive and "[" or "(", self.low,
                    self.high if self.high is not None else "",
                    self.high_inclusive and "]" or ")")

        def __repr__(self):
                return "<VersionRange '{0}' at {1:#x}>".format(self, id(self))

        def __key(self):
                return (self.__empty, self.low, self.high, self.low_inclusive,
                    self.high_inclusive)

        def __eq__(self, other):
                if not isinstance(other, VersionRange):
                        return False
                return self.__key() == other.__key()

        def __ne__(self, other):
                return not self.__eq__(other)

        def __hash__(self):
                return hash(self.__key())


VersionRange.ANY = VersionRange(low="0.0.0")
VersionRange.EMPTY = VersionRange(_empty=True)
