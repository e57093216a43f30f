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

"""Misc utility functions used by the planner modules."""

import time

# EmptyI for argument defaults
EmptyI = tuple()

# ImmutableDict for argument defaults
class ImmutableDict(dict):
        # Missing docstring; pylint: disable=C0111
        # Unused argument; pylint: disable=W0613

        def __init__(self, default=EmptyI):
                dict.__init__(self, default)

        def __setitem__(self, item, value):
                self.__oops()

        def __delitem__(self, item):
                self.__oops()

        def pop(self, item, default=None):
                self.__oops()

        def popitem(self):
                self.__oops()

        def setdefault(self, item, default=None):
                self.__oops()

        def update(self, d):
                self.__oops()

        def copy(self):
                return ImmutableDict(self)

        def clear(self):
                self.__oops()

        def __hash__(self):
                return hash(tuple(sorted(self.items())))

        @staticmethod
        def __oops():
                raise TypeAttributeError("Item assignment to ImmutableDict")


class TypeAttributeError(TypeError, AttributeError):
        pass


EmptyDict = ImmutableDict()


def N_(message):
        """Return its argument; used to mark strings for localization when
        their use is delayed by the program."""
        return message


def sorted_units(units):
        """Return the given units ordered by id ascending and then by version
        descending.  This is the order in which the planner considers
        candidates everywhere a deterministic choice is needed."""

        # two stable sorts, as versions must be compared in reverse
        rv = sorted(units, key=lambda u: u.version, reverse=True)
        rv.sort(key=lambda u: u.id)
        return rv


def parse_csv_properties(value):
        """Parse a "k1=v1,k2=v2" string into a dictionary.  Entries without
        an '=' or with an empty key are ignored."""

        rv = {}
        if not value:
                return rv
        for entry in value.split(","):
                key, sep, val = entry.partition("=")
                key = key.strip()
                if not sep or not key:
                        continue
                rv[key] = val.strip()
        return rv


def timestamp_ms():
        """Current time in milliseconds since the epoch; used for profile
        timestamps."""
        return int(time.time() * 1000)
