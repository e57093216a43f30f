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

import plannertest
import unittest

import iuplanner.client.explanation as explanation
import iuplanner.client.pkgdefs as pkgdefs
import iuplanner.client.plandesc as plandesc
import iuplanner.client.progress as progress
import iuplanner.metadata as metadata

from iuplanner.client.debugvalues import DebugValues
from iuplanner.client.profile import ProfileChangeRequest, \
    ProvisioningContext

iu = plannertest.iu
req = plannertest.req
ids = plannertest.ids


class TestPlannerInstall(plannertest.PlannerTestCase):
        """Requests which add units to a profile."""

        def setUp(self):
                plannertest.PlannerTestCase.setUp(self)
                self.a1 = iu("a", "1", reqs=[req("b", "[1,2)")])
                self.b10 = iu("b", "1.0")
                self.b15 = iu("b", "1.5")
                self.b20 = iu("b", "2.0")
                self.create_repository([self.a1, self.b10, self.b15,
                    self.b20])
                self.profile = self.create_profile()

        def test_01_install(self):
                """Verify that a unit is installed along with the newest
                version of what it requires."""

                plan = self.install(self.profile, self.a1)
                self.assertPlanOk(plan)
                self.assertFutureState(plan, [("a", "1.0.0"),
                    ("b", "1.5.0")])
                self.assertEqual(ids(plan.get_additions()),
                    set([("a", "1.0.0"), ("b", "1.5.0")]))
                self.assertEqual(len(plan.get_removals()), 0)

                # the requested unit is marked as a root
                self.assertTrue(plandesc.InstallableUnitPropertyOperand(
                    self.a1, pkgdefs.INCLUSION_RULES, None,
                    pkgdefs.INCLUSION_STRICT) in plan.get_operands())
                rs = plan.status.request_changes[self.a1]
                self.assertEqual(rs.kind, plandesc.REQUEST_ADDED)
                self.assertEqual(rs.severity, pkgdefs.STATUS_OK)

                # the caller's request is left alone
                request = ProfileChangeRequest(self.profile)
                request.add(self.a1)
                self.plan(request)
                self.assertEqual(request.iu_property_changes, {})

        def test_02_exact_version(self):
                c = iu("c", "1", reqs=[req("b", "[1.0,1.0]")])
                self.create_repository([c], "mem:other")
                plan = self.install(self.profile, c)
                self.assertPlanOk(plan)
                self.assertFutureState(plan, [("c", "1.0.0"),
                    ("b", "1.0.0")])

        def test_03_optional(self):
                """Optional requirements which can't be met don't prevent
                installation; those which can are met."""

                c = iu("c", "1", reqs=[req("absent", optional=True),
                    req("b", optional=True), req("a", optional=True)])
                plan = self.install(self.profile, c)
                self.assertPlanOk(plan)
                self.assertFutureState(plan, [("c", "1.0.0"),
                    ("a", "1.0.0"), ("b", "1.5.0")])

        def test_04_optional_with_dependencies(self):
                """An optional requirement on a unit whose own dependencies
                are missing is left unsatisfied."""

                d = iu("d", "1", reqs=[req("absent")])
                c = iu("c", "1", reqs=[req("d", optional=True),
                    req("a", optional=True)])
                self.create_repository([c, d], "mem:other")
                plan = self.install(self.profile, c)
                self.assertPlanOk(plan)
                self.assertFutureState(plan, [("c", "1.0.0"),
                    ("a", "1.0.0"), ("b", "1.5.0")])

        def test_05_filtered(self):
                """Only units and requirements applicable in the profile's
                environment are installed."""

                lin = iu("frag.linux", "1", filter="(osgi.os=linux)")
                win = iu("frag.win32", "1", filter="(osgi.os=win32)")
                c = iu("c", "1", reqs=[
                    req("frag.linux", filter="(osgi.os=linux)"),
                    req("frag.win32", filter="(osgi.os=win32)")])
                self.create_repository([lin, win, c], "mem:other")

                profile = self.create_profile(properties={
                    pkgdefs.PROP_ENVIRONMENTS: "osgi.os=linux,osgi.ws=gtk"})
                plan = self.install(profile, c)
                self.assertPlanOk(plan)
                self.assertFutureState(plan, [("c", "1.0.0"),
                    ("frag.linux", "1.0.0")])

                # a required unit filtered out of the environment
                d = iu("d", "1", reqs=[req("frag.win32")])
                self.create_repository([d], "mem:more")
                plan = self.install(profile, d)
                self.assertPlanError(plan)
                self.assertTrue(explanation.FilteredOut(win, win.filter)
                    in plan.status.explanations)
                self.assertEqual(plan.status.request_changes[d].severity,
                    pkgdefs.STATUS_ERROR)
                self.assertTrue(plan.get_future_state() is None)

        def test_06_missing(self):
                """A request which can't be met at all fails with an
                explanation."""

                request = ProfileChangeRequest(self.profile)
                request.add(self.a1)
                request.add_extra_requirements([req("nowhere")])
                plan = self.plan(request)
                self.assertPlanError(plan)
                self.assertEqual([e.kind for e in plan.status.explanations],
                    [explanation.EXPLAIN_MISSING])

                c = iu("c", "1", reqs=[req("b", "[3,4)")])
                plan = self.install(self.profile, c)
                self.assertPlanError(plan)
                self.assertTrue(explanation.VersionMismatch(c,
                    req("b", "[3,4)")) in plan.status.explanations)
                self.assertTrue(explanation.IUToInstall(c)
                    in plan.status.explanations)

        def test_07_singleton(self):
                """Verify that two versions of a singleton can't be
                installed together and that the conflict is explained."""

                s1 = iu("s", "1", singleton=True)
                s2 = iu("s", "2", singleton=True)
                x = iu("x", "1", reqs=[req("s", "[1,1]")])
                y = iu("y", "1", reqs=[req("s", "[2,2]")])
                self.create_repository([s1, s2, x, y], "mem:other")
                plan = self.install(self.profile, x, y)
                self.assertPlanError(plan)
                self.assertTrue(plan.status.message.endswith(
                    "conflicting dependency."))
                conflicts = [e for e in plan.status.explanations
                    if e.kind == explanation.EXPLAIN_SINGLETON]
                self.assertEqual(len(conflicts), 1)
                self.assertEqual(conflicts[0].id, "s")
                for u in (x, y):
                        self.assertEqual(
                            plan.status.request_changes[u].severity,
                            pkgdefs.STATUS_ERROR)

        def test_08_no_explanation(self):
                s1 = iu("s", "1", singleton=True)
                s2 = iu("s", "2", singleton=True)
                self.create_repository([s1, s2], "mem:other")
                context = ProvisioningContext()
                context.set_property(pkgdefs.CTX_EXPLANATION, "false")
                plan = self.install(self.profile, s1, s2, context=context)
                self.assertPlanError(plan)
                self.assertEqual(plan.status.explanations, frozenset())

        def test_09_patch(self):
                """Verify that an installed patch changes the requirements
                of the units it applies to."""

                b11 = iu("b", "1.1")
                patch = iu("p", "1", patch=metadata.PatchInfo(
                    changes=[metadata.RequirementChange(req("b", "[1,2)"),
                        req("b", "[1.1,1.1]"))],
                    scope=[[req("a")]]))
                self.create_repository([b11, patch], "mem:patches")
                plan = self.install(self.profile, self.a1, patch)
                self.assertPlanOk(plan)
                self.assertFutureState(plan, [("a", "1.0.0"),
                    ("b", "1.1.0"), ("p", "1.0.0")])

        def test_10_fragments(self):
                """Attaching a fragment to an installed host updates the
                host."""

                h = iu("h", "1")
                f = iu("f", "1", host_requirements=[req("h")])
                self.create_repository([h, f], "mem:other")
                profile = self.create_profile(roots=[h])
                plan = self.install(profile, f)
                self.assertPlanOk(plan)
                self.assertEqual(plan.get_updates(), [(h, h)])
                update = [o for o in plan.iu_operands()
                    if o.kind == pkgdefs.OP_UPDATE][0]
                self.assertEqual(update.second.fragments, (f,))
                self.assertEqual(ids(plan.get_additions()),
                    set([("f", "1.0.0"), ("h", "1.0.0")]))

        def test_11_meta_requirements(self):
                """Meta-requirements are resolved unless the profile turns
                them off."""

                t = iu("touchpoint", "1")
                c = iu("c", "1", meta_requirements=[req("touchpoint")])
                self.create_repository([t, c], "mem:other")
                plan = self.install(self.profile, c)
                self.assertFutureState(plan, [("c", "1.0.0"),
                    ("touchpoint", "1.0.0")])

                profile = self.create_profile(properties={
                    pkgdefs.PROP_RESOLVE_META: "false"})
                plan = self.install(profile, c)
                self.assertFutureState(plan, [("c", "1.0.0")])

        def test_12_progress(self):
                """Verify that a progress tracker sees every phase."""

                class Tracker(progress.QuietProgressTracker):
                        def __init__(self):
                                progress.QuietProgressTracker.__init__(self)
                                self.started = []

                        def plan_start(self, planid, goal=None):
                                self.started.append(planid)
                                progress.QuietProgressTracker.plan_start(
                                    self, planid, goal)

                t = Tracker()
                DebugValues["plan"] = True
                plan = self.install(self.profile, self.a1, progtrack=t)
                self.assertPlanOk(plan)
                self.assertEqual(t.started, [t.PLAN_GATHER, t.PLAN_SLICE,
                    t.PLAN_PROJECT, t.PLAN_SOLVE, t.PLAN_OPGEN])
                self.assertEqual(t.plan_item(t.PLAN_GATHER).items, 1)


class TestPlannerChange(plannertest.PlannerTestCase):
        """Requests against profiles which already have units."""

        def setUp(self):
                plannertest.PlannerTestCase.setUp(self)
                self.a1 = iu("a", "1", reqs=[req("b")])
                self.a2 = iu("a", "2", reqs=[req("b", "2")])
                self.b1 = iu("b", "1")
                self.b2 = iu("b", "2")
                self.c1 = iu("c", "1")
                self.create_repository([self.a1, self.a2, self.b1, self.b2,
                    self.c1])
                self.profile = self.create_profile(installed=[self.b1],
                    roots=[self.a1])

        def test_01_identity(self):
                """Planning an empty request changes nothing, even when
                newer versions are available."""

                plan = self.plan(ProfileChangeRequest(self.profile))
                self.assertPlanOk(plan)
                self.assertTrue(plan.is_empty(), str(plan))
                self.assertFutureState(plan, [("a", "1.0.0"),
                    ("b", "1.0.0")])

        def test_02_remove(self):
                """Removing a root removes what only it needed."""

                request = ProfileChangeRequest(self.profile)
                request.remove(self.a1)
                plan = self.plan(request)
                self.assertPlanOk(plan)
                self.assertEqual(ids(plan.get_removals()),
                    set([("a", "1.0.0"), ("b", "1.0.0")]))
                self.assertFutureState(plan, [])
                self.assertEqual(plan.status.request_changes[self.a1].kind,
                    plandesc.REQUEST_REMOVED)
                self.assertEqual(plan.status.request_changes[self.a1].severity,
                    pkgdefs.STATUS_OK)
                self.assertTrue(plandesc.InstallableUnitPropertyOperand(
                    self.a1, pkgdefs.INCLUSION_RULES, pkgdefs.INCLUSION_STRICT,
                    None) in plan.get_operands())

        def test_03_remove_keeps_shared(self):
                """Units still needed by another root stay."""

                d = iu("d", "1", reqs=[req("b")])
                self.create_repository([d], "mem:other")
                profile = self.create_profile(installed=[self.b1],
                    roots=[self.a1, d])
                request = ProfileChangeRequest(profile)
                request.remove(self.a1)
                plan = self.plan(request)
                self.assertPlanOk(plan)
                self.assertFutureState(plan, [("b", "1.0.0"),
                    ("d", "1.0.0")])

        def test_04_update(self):
                request = ProfileChangeRequest(self.profile)
                request.remove(self.a1)
                request.add(self.a2)
                plan = self.plan(request)
                self.assertPlanOk(plan)
                self.assertEqual(sorted(plan.get_updates()),
                    [(self.a1, self.a2), (self.b1, self.b2)])

        def test_05_keep_unrequired(self):
                """Installed units nothing requires are kept."""

                e = iu("e", "1")
                self.create_repository([e], "mem:other")
                profile = self.create_profile(installed=[self.b1, self.c1],
                    roots=[self.a1])
                request = ProfileChangeRequest(profile)
                request.add(e)
                plan = self.plan(request)
                self.assertPlanOk(plan)
                self.assertFutureState(plan, [("a", "1.0.0"),
                    ("b", "1.0.0"), ("c", "1.0.0"), ("e", "1.0.0")])

        def test_06_side_effects(self):
                """An optional root which has to go is reported as a side
                effect of the request."""

                s1 = iu("s", "1", singleton=True)
                s2 = iu("s", "2", singleton=True)
                x = iu("x", "1", reqs=[req("s", "[1,1]")])
                y = iu("y", "1", reqs=[req("s", "[2,2]")])
                self.create_repository([s1, s2, x, y], "mem:other")
                profile = self.create_profile(installed=[s1], roots=[x],
                    rule=pkgdefs.INCLUSION_OPTIONAL)

                plan = self.install(profile, y)
                self.assertPlanOk(plan)
                self.assertFutureState(plan, [("s", "2.0.0"),
                    ("y", "1.0.0")])
                self.assertEqual(plan.get_updates(), [(s1, s2)])
                rs = plan.status.side_effects[x]
                self.assertEqual(rs.kind, plandesc.REQUEST_REMOVED)
                self.assertEqual(rs.severity, pkgdefs.STATUS_INFO)
                self.assertEqual(plan.status.severity, pkgdefs.STATUS_OK)

        def test_07_inclusion_rule(self):
                """Changing a root's inclusion rule to optional lets the
                request drop it."""

                s1 = iu("s", "1", singleton=True)
                s2 = iu("s", "2", singleton=True)
                x = iu("x", "1", reqs=[req("s", "[1,1]")])
                y = iu("y", "1", reqs=[req("s", "[2,2]")])
                self.create_repository([s1, s2, x, y], "mem:other")
                profile = self.create_profile(installed=[s1], roots=[x])

                plan = self.install(profile, y)
                self.assertPlanError(plan)
                self.assertTrue(explanation.IUInstalled(x)
                    in plan.status.explanations)

                request = ProfileChangeRequest(profile)
                request.add(y)
                request.set_inclusion_rule(x, pkgdefs.INCLUSION_OPTIONAL)
                plan = self.plan(request)
                self.assertPlanOk(plan)
                self.assertFutureState(plan, [("s", "2.0.0"),
                    ("y", "1.0.0")])

        def test_08_properties(self):
                """Property changes become operands carrying the old and
                new values."""

                profile = self.create_profile(installed=[self.b1],
                    roots=[self.a1], properties={"k1": "v1", "k2": "v2"})
                request = ProfileChangeRequest(profile)
                request.remove_profile_property("k1")
                request.set_profile_property("k2", "new")
                request.set_iu_property(self.b1, "note", "kept")
                plan = self.plan(request)
                self.assertPlanOk(plan)
                self.assertEqual(list(plan.get_operands()), [
                    plandesc.PropertyOperand("k1", "v1", None),
                    plandesc.PropertyOperand("k2", "v2", "new"),
                    plandesc.InstallableUnitPropertyOperand(self.b1, "note",
                        None, "kept"),
                ])

        def test_09_absolute(self):
                """Absolute requests are applied as they are."""

                broken = iu("broken", "1", reqs=[req("nowhere")])
                request = ProfileChangeRequest(self.profile)
                request.absolute = True
                request.remove(self.a1)
                request.add(broken)
                plan = self.plan(request)
                self.assertPlanOk(plan)
                self.assertFutureState(plan, [("b", "1.0.0"),
                    ("broken", "1.0.0")])
                self.assertEqual(plan.iu_operands(), [
                    plandesc.InstallableUnitOperand(self.a1, None),
                    plandesc.InstallableUnitOperand(None, broken)])
                for unit in (self.a1, broken):
                        self.assertEqual(
                            plan.status.request_changes[unit].severity,
                            pkgdefs.STATUS_OK)

        def test_10_invalid(self):
                request = ProfileChangeRequest(self.profile)
                request.add(self.c1)
                request.remove(self.c1)
                plan = self.plan(request)
                self.assertPlanError(plan, pkgdefs.CODE_INVALID_REQUEST)

        def test_11_cancel(self):
                """Verify that planning stops when asked to."""

                request = ProfileChangeRequest(self.profile)
                request.add(self.c1)
                plan = self.plan(request, check_cancel=lambda: True)
                self.assertEqual(plan.status.severity, pkgdefs.STATUS_CANCEL)
                self.assertEqual(plan.status.code, pkgdefs.CODE_CANCELED)
                self.assertTrue(plan.is_empty())

                calls = []
                def check_cancel():
                        calls.append(True)
                        return len(calls) > 2
                plan = self.plan(request, check_cancel=check_cancel)
                self.assertEqual(plan.status.severity, pkgdefs.STATUS_CANCEL)

        def test_12_unreadable_repository(self):
                """Repositories which can't be read are skipped."""

                self.repo_manager.add_repository("/nonexistent/repo.json")
                plan = self.install(self.profile, self.c1)
                self.assertPlanOk(plan)

        def test_13_updates_for(self):
                patch = iu("p", "1", patch=metadata.PatchInfo(
                    scope=[[req("a")]]))
                self.create_repository([patch], "mem:patches")
                self.assertEqual(self.planner.updates_for(self.a1),
                    [self.a2, patch])
                self.assertEqual(self.planner.updates_for(self.a2), [patch])

                context = ProvisioningContext(repositories=["mem:patches"])
                self.assertEqual(self.planner.updates_for(self.a1, context),
                    [patch])

        def test_14_diff(self):
                """Verify the plan between two profiles."""

                target = self.create_profile(installed=[self.b2],
                    roots=[self.a2], properties={"k": "v"})
                plan = self.planner.get_diff_plan(self.profile, target)
                self.assertPlanOk(plan)
                self.assertEqual(sorted(plan.get_updates()),
                    [(self.a1, self.a2), (self.b1, self.b2)])
                self.assertTrue(plandesc.PropertyOperand("k", None, "v")
                    in plan.get_operands())

                plan = self.planner.get_diff_plan(self.profile,
                    self.profile.copy())
                self.assertTrue(plan.is_empty(), str(plan))

        def test_15_apply(self):
                """A profile with a plan applied plans to nothing."""

                plan = self.install(self.profile, self.c1)
                after = self.apply_plan(self.profile, plan)
                self.assertEqual(after.get_iu_property(self.c1,
                    pkgdefs.INCLUSION_RULES), pkgdefs.INCLUSION_STRICT)
                self.assertEqual(after.marked_ius(),
                    frozenset([self.a1, self.c1]))
                plan = self.plan(ProfileChangeRequest(after))
                self.assertTrue(plan.is_empty(), str(plan))

        def test_16_repeatable(self):
                """Verify that planning the same request twice against the
                same profile and repositories gives the same changes."""

                e = iu("e", "1", reqs=[req("c")])
                self.create_repository([e], "mem:other")

                plans = []
                for i in range(2):
                        request = ProfileChangeRequest(self.profile)
                        request.remove(self.a1)
                        request.add(self.a2)
                        request.add(e)
                        plans.append(self.plan(request))

                first, second = plans
                self.assertPlanOk(first)
                self.assertPlanOk(second)
                self.assertEqual(ids(first.get_additions()),
                    ids(second.get_additions()))
                self.assertEqual(ids(first.get_removals()),
                    ids(second.get_removals()))
                self.assertEqual(sorted(first.get_updates()),
                    sorted(second.get_updates()))
                self.assertEqual(ids(first.get_future_state()),
                    ids(second.get_future_state()))
                self.assertEqual(sorted(first.get_updates()),
                    [(self.a1, self.a2), (self.b1, self.b2)])


class TestPlannerPatch(plannertest.PlannerTestCase):
        """Patches added to a profile which already has the units they
        apply to."""

        def setUp(self):
                plannertest.PlannerTestCase.setUp(self)
                self.c10 = iu("c", "1.0", singleton=True)
                self.c15 = iu("c", "1.5", singleton=True)
                self.c20 = iu("c", "2.0", singleton=True)
                self.d = iu("d", "1", reqs=[req("c", "[1,1]")])
                self.patch = iu("p", "1", patch=metadata.PatchInfo(
                    changes=[metadata.RequirementChange(req("c", "[1,1]"),
                        req("c", "[1,2)"))],
                    scope=[[req("d")]]))
                self.create_repository([self.c10, self.c15, self.c20,
                    self.d, self.patch])
                self.profile = self.create_profile(installed=[self.c10],
                    roots=[self.d])

        def test_01_patch_alone(self):
                """Verify that a patch can be installed on its own over the
                unit it applies to."""

                plan = self.install(self.profile, self.patch)
                self.assertPlanOk(plan)
                self.assertFutureState(plan, [("c", "1.0.0"),
                    ("d", "1.0.0"), ("p", "1.0.0")])
                self.assertEqual(ids(plan.get_additions()),
                    set([("p", "1.0.0")]))
                self.assertEqual(len(plan.get_removals()), 0)
                self.assertEqual(
                    plan.status.request_changes[self.patch].severity,
                    pkgdefs.STATUS_OK)

        def test_02_patched_range(self):
                """Verify that the patched requirement replaces the original
                one: a version only the patch allows can be installed with
                the patch, and not without it."""

                plan = self.install(self.profile, self.c15)
                self.assertPlanError(plan)

                plan = self.install(self.profile, self.patch, self.c15)
                self.assertPlanOk(plan)
                self.assertFutureState(plan, [("c", "1.5.0"),
                    ("d", "1.0.0"), ("p", "1.0.0")])
                self.assertEqual(plan.get_updates(), [(self.c10, self.c15)])

                # 2.0 is outside the patched range too
                plan = self.install(self.profile, self.patch, self.c20)
                self.assertPlanError(plan)


class TestInstallerPlan(plannertest.PlannerTestCase):
        """Units with meta-requirements need an installer plan."""

        def setUp(self):
                plannertest.PlannerTestCase.setUp(self)
                self.touchpoint = iu("touchpoint", "1")
                self.c = iu("c", "1",
                    meta_requirements=[req("touchpoint")])
                self.create_repository([self.touchpoint, self.c])

        def test_01_cohosted(self):
                """The installer runs from the profile being changed: the
                prerequisites are installed first."""

                profile = self.create_profile()
                context = ProvisioningContext(agent_profile=profile)
                plan = self.install(profile, self.c, context=context)
                self.assertPlanOk(plan)

                installer = plan.installer_plan
                self.assertTrue(installer is not None)
                self.assertEqual(ids(installer.get_additions()),
                    set([("touchpoint", "1.0.0")]))
                self.assertEqual(ids(plan.get_additions()),
                    set([("c", "1.0.0")]))
                self.assertFutureState(plan, [("c", "1.0.0"),
                    ("touchpoint", "1.0.0")])

        def test_02_cohosted_met(self):
                """No installer plan is needed when the prerequisites are
                already there."""

                profile = self.create_profile(installed=[self.touchpoint])
                context = ProvisioningContext(agent_profile=profile)
                plan = self.install(profile, self.c, context=context)
                self.assertPlanOk(plan)
                self.assertTrue(plan.installer_plan is None)

        def test_03_out_of_sync(self):
                profile = self.create_profile()
                agent = profile.copy(timestamp=profile.timestamp + 1)
                context = ProvisioningContext(agent_profile=agent)
                plan = self.install(profile, self.c, context=context)
                self.assertPlanError(plan, pkgdefs.CODE_PROFILE_OUT_OF_SYNC)

        def test_04_external(self):
                """The installer runs from a profile of its own: the
                prerequisites are installed there."""

                profile = self.create_profile(properties={
                    pkgdefs.PROP_RESOLVE_META: "false"})
                agent = self.create_profile("agent")
                context = ProvisioningContext(agent_profile=agent)
                plan = self.install(profile, self.c, context=context)
                self.assertPlanOk(plan)
                self.assertFutureState(plan, [("c", "1.0.0")])

                installer = plan.installer_plan
                self.assertEqual(installer.profile_id, "agent")
                additions = installer.get_additions()
                self.assertEqual(len(self.find(additions, "touchpoint")), 1)
                self.assertEqual(len(self.find(additions,
                    pkgdefs.ACTIONS_ROOT_PREFIX + "test")), 1)

        def test_05_external_failure(self):
                """Failing to install the prerequisites fails the plan."""

                d = iu("d", "1", meta_requirements=[req("nowhere")])
                self.create_repository([d], "mem:other")
                profile = self.create_profile(properties={
                    pkgdefs.PROP_RESOLVE_META: "false"})
                agent = self.create_profile("agent")
                context = ProvisioningContext(agent_profile=agent)
                plan = self.install(profile, d, context=context)
                self.assertPlanError(plan,
                    pkgdefs.CODE_NESTED_BOOTSTRAP_FAILURE)
                self.assertTrue(str(plan.status).startswith(
                    "Cannot install the prerequisites"))
                self.assertEqual(plan.installer_plan.profile_id, "agent")


if __name__ == "__main__":
        unittest.main()
