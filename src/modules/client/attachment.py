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

# fragment attachment

import iuplanner.metadata as metadata

from iuplanner.misc import sorted_units


def is_host(fragment, iu):
        """Returns True if 'iu' can host 'fragment': it is not a fragment
        itself and it satisfies every one of the fragment's host
        requirements."""

        if iu.is_fragment or iu == fragment:
                return False
        return all(req.is_match(iu) for req in fragment.host_requirements)


def compute_association(units):
        """Map every non-fragment unit in 'units' to the list of fragments
        in 'units' which attach to it."""

        units = sorted_units(metadata.unwrap(u) for u in units)
        fragments = [u for u in units if u.is_fragment]
        association = {}
        for iu in units:
                if iu.is_fragment:
                        continue
                association[iu] = [f for f in fragments if is_host(f, iu)]
        return association


def attach_fragments(units, association=None):
        """Return the set of ResolvedInstallableUnits for 'units', with the
        fragments named in 'association' attached to their hosts.  If no
        association is given it is computed from 'units'."""

        if association is None:
                association = compute_association(units)
        return set(
            metadata.ResolvedInstallableUnit(u, association.get(
                metadata.unwrap(u), ()))
            for u in units
        )
