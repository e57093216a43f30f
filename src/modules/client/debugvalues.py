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

# Known keys:
#   "plan"        log the operands of every plan produced

class DebugValues(object):
        """ simple singleton class to handle debug variables """
        __debug_values = {}

        def __call__(self):
                return self

        def __getitem__(self, key):
                """ returns None if not set """
                return self.__debug_values.get(key, None)

        def __setitem__(self, key, value):
                self.__debug_values[key] = value

        def __delitem__(self, key):
                self.__debug_values.pop(key, None)

        def get_value(self, key):
                return self[key]

        def set_value(self, key, value):
                self[key] = value

        def clear(self):
                self.__debug_values.clear()

DebugValues=DebugValues()
