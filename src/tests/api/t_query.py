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

import iuplanner.metadata as metadata
import iuplanner.query as query

from iuplanner.misc import sorted_units


def iu(iu_id, ver, **kwargs):
        return metadata.InstallableUnit(iu_id, ver, **kwargs)


class TestQueryable(unittest.TestCase):

        def setUp(self):
                self.a1 = iu("a", "1")
                self.a2 = iu("a", "2")
                self.a10 = iu("a", "10")
                self.b1 = iu("b", "1", provides=[
                    metadata.ProvidedCapability("java.package", "org.x", "1")],
                    properties={"kind": "bundle"})
                self.c1 = iu("c", "1", properties={"kind": "feature"})
                self.units = query.Queryable([self.c1, self.a2, self.b1,
                    self.a10, self.a1])

        def test_01_order(self):
                """Units are returned by id ascending, then version
                descending."""
                self.assertEqual(list(self.units), [self.a10, self.a2,
                    self.a1, self.b1, self.c1])
                self.assertEqual(sorted_units([self.a1, self.b1, self.a2]),
                    [self.a2, self.a1, self.b1])

        def test_02_iu_query(self):
                self.assertEqual(self.units.query(query.IUQuery("a")),
                    [self.a10, self.a2, self.a1])
                self.assertEqual(self.units.query(query.IUQuery("a", "[2,3)")),
                    [self.a2])
                self.assertEqual(self.units.query(query.IUQuery("x")), [])

        def test_03_find(self):
                req = metadata.Requirement("java.package", "org.x")
                self.assertEqual(self.units.find(req), [self.b1])
                self.assertEqual(self.units.find(
                    metadata.iu_requirement("a", "[1,2]")), [self.a2, self.a1])

        def test_04_property_query(self):
                self.assertEqual(self.units.query(query.PropertyQuery("kind")),
                    [self.b1, self.c1])
                self.assertEqual(self.units.query(
                    query.PropertyQuery("kind", "feature")), [self.c1])

        def test_05_predicate(self):
                q = query.PredicateQuery(lambda u: u.version.major > 1)
                self.assertEqual(self.units.query(q), [self.a10, self.a2])
                # any callable will do
                self.assertEqual(self.units.query(lambda u: u.id == "c"),
                    [self.c1])
                self.assertEqual(len(self.units.query(query.AllQuery())), 5)

        def test_06_contents(self):
                self.assertEqual(len(self.units), 5)
                self.assertTrue(self.a1 in self.units)
                self.assertFalse(iu("a", "3") in self.units)
                self.assertTrue(self.units.get("a", "2.0.0") is self.a2)
                self.assertTrue(self.units.get("a", "3") is None)
                self.assertEqual(self.units.ids(), set(["a", "b", "c"]))
                self.units.add(iu("a", "1"))
                self.assertEqual(len(self.units), 5)


class TestUpdateQuery(unittest.TestCase):

        def test_01_updates(self):
                """Verify that newer versions, units declaring themselves an
                update and applicable patches are all updates."""

                a1 = iu("a", "1")
                a2 = iu("a", "2")
                a0 = iu("a", "0.5")
                renamed = iu("new.a", "1",
                    update_descriptor=metadata.UpdateDescriptor("a", "[0,2)"))
                other = iu("new.b", "1",
                    update_descriptor=metadata.UpdateDescriptor("b"))
                patch = iu("p", "1", patch=metadata.PatchInfo(
                    scope=[[metadata.iu_requirement("a")]]))
                nopatch = iu("q", "1", patch=metadata.PatchInfo(
                    scope=[[metadata.iu_requirement("b")]]))

                units = query.Queryable([a0, a1, a2, renamed, other, patch,
                    nopatch])
                self.assertEqual(units.query(query.UpdateQuery(a1)),
                    [a2, renamed, patch])
                self.assertEqual(units.query(query.UpdateQuery(
                    metadata.ResolvedInstallableUnit(a2))), [patch])

        def test_02_no_downgrade(self):
                """Verify that an older version of the same unit is never an
                update, even when its update descriptor covers the installed
                version."""

                x2 = iu("x", "2.0.0")
                older = iu("x", "1.5.0",
                    update_descriptor=metadata.UpdateDescriptor("x",
                    "[0.0.0,3.0.0)"))
                newer = iu("x", "2.5.0",
                    update_descriptor=metadata.UpdateDescriptor("x",
                    "[0.0.0,3.0.0)"))
                renamed = iu("new.x", "1.0.0",
                    update_descriptor=metadata.UpdateDescriptor("x",
                    "[0.0.0,3.0.0)"))

                units = query.Queryable([older, x2, newer, renamed])
                self.assertEqual(units.query(query.UpdateQuery(x2)),
                    [renamed, newer])
                self.assertFalse(query.UpdateQuery(x2).matches(older))


class TestUnitCollector(unittest.TestCase):

        def test_01_fidelity(self):
                """A complete unit replaces a partial one; otherwise the
                first unit seen is kept."""

                partial = iu("a", "1", properties={
                    metadata.PROP_PARTIAL_IU: "true"})
                full = iu("a", "1", properties={"x": "1"})
                other = iu("a", "1", properties={"x": "2"})

                c = query.UnitCollector()
                c.add(partial)
                c.update([full, other])
                self.assertEqual(len(c), 1)
                self.assertTrue(c.values()[0] is full)
                self.assertTrue(query.has_higher_fidelity(full, partial))
                self.assertFalse(query.has_higher_fidelity(other, full))

                c.add(iu("b", "1"))
                self.assertEqual(len(c.queryable()), 2)


if __name__ == "__main__":
        unittest.main()
