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

from collections import namedtuple

import iuplanner.client.pkgdefs as pkgdefs
import iuplanner.metadata as metadata

from iuplanner.client import global_settings
from iuplanner.client.profile import ProfileChangeRequest
from iuplanner.misc import sorted_units

logger = global_settings.logger


class Update(namedtuple("Update", "to_update replacement")):
        """A unit which can replace an installed unit."""

        __slots__ = ()

        def __str__(self):
                return "{0} -> {1}".format(self.to_update, self.replacement)


def possible_updates(planner, profile, ius, context=None, check_cancel=None):
        """Return the list of Updates available for each of 'ius'.  Units
        which are already installed are never offered as updates."""

        updates = []
        for iu in sorted_units(metadata.unwrap(u) for u in ius):
                for r in planner.updates_for(iu, context=context,
                    check_cancel=check_cancel):
                        if r in profile:
                                continue
                        updates.append(Update(iu, r))
        return updates


def latest_updates(iu, updates):
        """Pick the updates to apply to 'iu' among 'updates': the latest
        version of a true update wins over any patch, and if there are only
        patches the latest version of each one is chosen."""

        latest = {}
        found_update = found_patch = False
        for u in updates:
                if u.to_update != iu:
                        continue
                if u.replacement.is_patch:
                        found_patch = True
                        key = u.replacement.id
                else:
                        found_update = True
                        key = iu.id
                prev = latest.get(key)
                if prev is None or \
                    u.replacement.version > prev.replacement.version:
                        latest[key] = u

        if found_patch and found_update:
                latest = dict((k, v) for k, v in latest.items() if k == iu.id)
        return [latest[k] for k in sorted(latest)]


def compute_update_request(planner, profile, ius, context=None,
    root_marker_key=None, check_cancel=None):
        """Return the ProfileChangeRequest which updates 'ius' in 'profile'
        to their latest versions, or None if there is nothing to update.

        True updates replace the unit they update; patches are added
        alongside it as optional roots.  If 'root_marker_key' is given, the
        chosen units get that property set to "true"."""

        updates = possible_updates(planner, profile, ius, context=context,
            check_cancel=check_cancel)
        chosen = []
        for iu in sorted_units(set(u.to_update for u in updates)):
                chosen.extend(latest_updates(iu, updates))
        if not chosen:
                logger.debug("no updates found for {0}".format(
                    ", ".join(str(i) for i in ius)))
                return None

        request = ProfileChangeRequest(profile)
        for u in chosen:
                new = u.replacement
                request.add(new)
                if root_marker_key is not None:
                        request.set_iu_property(new, root_marker_key, "true")
                if new.is_patch:
                        request.set_inclusion_rule(new,
                            pkgdefs.INCLUSION_OPTIONAL)
                else:
                        request.remove(u.to_update)
        return request
