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

import iuplanner.metadata as metadata

from iuplanner.client import global_settings
from iuplanner.client.plandesc import InstallableUnitOperand

logger = global_settings.logger


def _state_key(iu):
        """Units are compared by identity and attached fragments."""
        if isinstance(iu, metadata.ResolvedInstallableUnit):
                return (iu.unit, iu.fragments)
        return (iu, ())


def _order(iu):
        return (iu.id, iu.version)


class OperationGenerator(object):
        """Computes the unit operands which turn one state into another."""

        def generate(self, from_state, to_state):
                """Return the list of InstallableUnitOperands transforming
                'from_state' into 'to_state': removals first, then
                updates, then additions."""

                before = dict((_state_key(u), u) for u in from_state)
                after = dict((_state_key(u), u) for u in to_state)

                added = sorted((u for k, u in after.items()
                    if k not in before), key=_order)
                removed = sorted((u for k, u in before.items()
                    if k not in after), key=_order)

                updates = []
                additions = []
                for new in added:
                        old = self.__match_update(new, removed)
                        if old is None:
                                additions.append(new)
                                continue
                        removed.remove(old)
                        updates.append(InstallableUnitOperand(old, new))

                operands = [InstallableUnitOperand(u, None) for u in removed]
                operands.extend(updates)
                operands.extend(InstallableUnitOperand(None, u)
                    for u in additions)

                logger.debug("generated {0:d} removals, {1:d} updates and "
                    "{2:d} additions".format(len(removed), len(updates),
                    len(additions)))
                return operands

        @staticmethod
        def __match_update(new, removed):
                """Return the unit in 'removed' which 'new' replaces, if
                any.  The update descriptor of 'new' is consulted first,
                then units of the same id."""

                ud = new.update_descriptor
                if ud is not None:
                        for old in removed:
                                if ud.is_update_of(metadata.unwrap(old)):
                                        return old
                for old in removed:
                        if old.id == new.id:
                                return old
                return None
