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

# Common code for the planner test suites.

import unittest

import iuplanner.client.pkgdefs as pkgdefs
import iuplanner.metadata as metadata
import iuplanner.query as query

from iuplanner.client.debugvalues import DebugValues
from iuplanner.client.planner import Planner
from iuplanner.client.profile import Profile, ProfileChangeRequest
from iuplanner.repository import MetadataRepository, RepositoryManager


def req(iu_id, range=None, **kwargs):
        """A requirement on unit 'iu_id'."""
        # Redefining built-in; pylint: disable=W0622
        return metadata.iu_requirement(iu_id, range, **kwargs)


def iu(iu_id, ver="1.0.0", reqs=(), **kwargs):
        """An installable unit requiring 'reqs'."""
        return metadata.InstallableUnit(iu_id, ver, requirements=reqs,
            **kwargs)


def ids(units):
        """The set of (id, version string) pairs of 'units'."""
        return set((metadata.unwrap(u).id, str(metadata.unwrap(u).version))
            for u in units)


class PlannerTestCase(unittest.TestCase):
        """Base class for tests which plan requests against profiles; each
        test gets a planner with an empty repository manager."""

        repo_location = "mem:test"

        def setUp(self):
                self.repo_manager = RepositoryManager()
                self.planner = Planner(self.repo_manager)

        def tearDown(self):
                DebugValues.clear()

        def create_repository(self, units, location=None):
                if location is None:
                        location = self.repo_location
                self.repo_manager.add_repository(location,
                    MetadataRepository(location, units))

        def create_profile(self, profile_id="test", installed=(), roots=(),
            properties=None, rule=pkgdefs.INCLUSION_STRICT):
                """Create a profile holding 'installed' and 'roots'; the
                latter are marked with inclusion rule 'rule'."""

                profile = Profile(profile_id, properties=properties)
                for u in installed:
                        profile.add_iu(u)
                for u in roots:
                        profile.add_iu(u)
                        profile.set_iu_property(u, pkgdefs.INCLUSION_RULES,
                            rule)
                return profile

        def plan(self, request, context=None, **kwargs):
                return self.planner.get_provisioning_plan(request, context,
                    **kwargs)

        def install(self, profile, *units, **kwargs):
                """Plan the addition of 'units' to 'profile'."""
                request = ProfileChangeRequest(profile)
                request.add_all(units)
                return self.plan(request, **kwargs)

        def apply_plan(self, profile, plan):
                """Return a copy of 'profile' with the changes of 'plan'
                applied, as an installer would."""

                rv = profile.copy()
                for u in profile.ius():
                        rv.remove_iu(u)
                for u in plan.get_future_state():
                        rv.add_iu(u, profile.get_iu_properties(u))
                for op in plan.get_operands():
                        if hasattr(op, "iu"):
                                if op.second is None:
                                        rv.remove_iu_property(op.iu, op.key)
                                else:
                                        rv.set_iu_property(op.iu, op.key,
                                            op.second)
                        elif hasattr(op, "key"):
                                if op.second is None:
                                        rv.remove_property(op.key)
                                else:
                                        rv.set_property(op.key, op.second)
                return rv

        def find(self, units, iu_id):
                """The units in the Queryable 'units' with id 'iu_id'."""
                return units.query(query.IUQuery(iu_id))

        def assertPlanOk(self, plan):
                self.assertTrue(plan.status.is_ok(), str(plan))

        def assertPlanError(self, plan, code=pkgdefs.CODE_UNSATISFIABLE):
                self.assertEqual(plan.status.severity, pkgdefs.STATUS_ERROR,
                    str(plan))
                self.assertEqual(plan.status.code, code, str(plan))

        def assertFutureState(self, plan, expected):
                """Verify that the planned state is exactly 'expected', a
                set of (id, version string) pairs."""
                self.assertEqual(ids(plan.get_future_state()), set(expected))