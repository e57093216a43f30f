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

# resolution environment (selection context) support

import iuplanner.client.pkgdefs as pkgdefs

from iuplanner.misc import EmptyI, parse_csv_properties

class Environment(dict):
        # store the properties filters are evaluated against; subclass dict
        # and keep keys in lower case so lookups don't depend on case

        def __init__(self, init=EmptyI):
                dict.__init__(self)
                if init:
                        self.update(init)

        def __setitem__(self, item, value):
                dict.__setitem__(self, item.lower(), value)

        def __getitem__(self, item):
                return dict.__getitem__(self, item.lower())

        def __delitem__(self, item):
                dict.__delitem__(self, item.lower())

        def __contains__(self, item):
                return dict.__contains__(self, item.lower())

        def get(self, item, default=None):
                return dict.get(self, item.lower(), default)

        def pop(self, item, default=None):
                return dict.pop(self, item.lower(), default)

        def setdefault(self, item, default=None):
                if item not in self:
                        self[item] = default
                return self[item]

        def update(self, d):
                for a in d:
                        self[a] = d[a]

        def copy(self):
                return Environment(self)

        def allow_unit(self, iu):
                """Returns True if installable unit 'iu' exists in this
                environment."""
                return iu.filter is None or iu.filter.match(self)

        def allow_requirement(self, req):
                """Returns True if requirement 'req' applies in this
                environment."""
                return req.filter is None or req.filter.match(self)

        @staticmethod
        def from_properties(properties):
                """Build the environment a profile resolves in: its
                properties, overlaid with the key=value pairs listed in its
                environments property."""

                env = Environment()
                if not properties:
                        return env
                for k, v in properties.items():
                        if k != pkgdefs.PROP_ENVIRONMENTS:
                                env[k] = v
                env.update(parse_csv_properties(
                    properties.get(pkgdefs.PROP_ENVIRONMENTS)))
                return env
