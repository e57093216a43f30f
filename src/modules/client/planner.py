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

"""The planner turns a change request against a profile into a
provisioning plan.

Planning a request goes through these phases:

    gather      the units of the request, the profile and the context's
                repositories are collected into one universe

    slice       the part of the universe reachable from the request is
                computed

    project     the slice is encoded as boolean constraints and solved

    generate    the solution is diffed against the profile's current state

If the units in the solution have meta-requirements which the installer
doesn't meet yet, a second, nested resolution computes the installer
plan which must be run before the main one.

The planner never raises for problems with the request, the metadata or
the solver, and never modifies the profile: the outcome of planning is
always described by the status of the returned plan."""

from collections import deque

import iuplanner.client.api_errors as api_errors
import iuplanner.client.attachment as attachment
import iuplanner.client.explanation as explanation
import iuplanner.client.pkgdefs as pkgdefs
import iuplanner.client.plandesc as plandesc
import iuplanner.client.progress as progress
import iuplanner.metadata as metadata
import iuplanner.query as query
import iuplanner.repository as repository
import iuplanner.version as version

from iuplanner.client import global_settings
from iuplanner.client.debugvalues import DebugValues
from iuplanner.client.opgen import OperationGenerator
from iuplanner.client.profile import ProfileChangeRequest, ProvisioningContext
from iuplanner.client.projector import Projector
from iuplanner.client.slicer import Slicer
from iuplanner.client.variant import Environment
from iuplanner.misc import EmptyI, sorted_units, timestamp_ms

logger = global_settings.logger


def _resolve_meta(properties):
        """Whether meta-requirements are part of the resolution for a
        profile with 'properties'."""
        val = properties.get(pkgdefs.PROP_RESOLVE_META)
        return val is None or str(val).lower() == "true"


def _strict_requirement(iu):
        return metadata.iu_requirement(iu.id,
            version.VersionRange.exact(iu.version))


def _optional_requirement(iu):
        return metadata.iu_requirement(iu.id,
            version.VersionRange.exact(iu.version), optional=True)


def _inclusion_requirement(iu, rule):
        if rule == pkgdefs.INCLUSION_STRICT:
                return _strict_requirement(iu)
        if rule == pkgdefs.INCLUSION_OPTIONAL:
                return _optional_requirement(iu)
        return None


class _ResolutionInfo(object):
        """What the planner knows about a request before slicing: the unit
        standing for the whole target profile, the explanation of each of
        its requirements, and the installed units to keep."""

        def __init__(self, root, reasons, installed, orphans):
                self.root = root
                self.reasons = reasons
                self.installed = installed
                self.orphans = orphans


class Planner(object):
        """Plans change requests against profiles using the units of the
        repositories known to 'repo_manager'."""

        def __init__(self, repo_manager=None):
                if repo_manager is None:
                        repo_manager = repository.RepositoryManager()
                self.__repo_manager = repo_manager

        @property
        def repo_manager(self):
                return self.__repo_manager

        def get_provisioning_plan(self, request, context=None,
            check_cancel=None, progtrack=None):
                """Return the ProvisioningPlan for change request 'request'.

                'context' is the ProvisioningContext to plan in; by default
                every known repository is consulted.  'check_cancel' is a
                callable polled during planning; once it returns True
                planning stops and a plan with a CANCEL status is returned.
                'progtrack' is a ProgressTracker."""

                if context is None:
                        context = ProvisioningContext()
                if progtrack is None:
                        progtrack = progress.NullProgressTracker()

                progtrack.plan_all_start()
                try:
                        request.validate()
                        # The request's bookkeeping is updated while
                        # planning; the caller's copy is left alone.
                        request = request.copy()
                        if request.absolute:
                                return self.__absolute_plan(request, context)
                        self.__check_cancel(check_cancel)
                        return self.__resolve(request, context, check_cancel,
                            progtrack)
                except api_errors.CanceledException:
                        logger.info(_("Planning for profile {0} was "
                            "canceled.").format(request.profile))
                        return plandesc.ProvisioningPlan(request.profile,
                            context, plandesc.PlannerStatus(
                            plandesc.cancel_status()))
                except api_errors.InvalidRequestError as e:
                        return plandesc.ProvisioningPlan(request.profile,
                            context, plandesc.PlannerStatus(
                            plandesc.error_status(e)))
                finally:
                        progtrack.plan_all_done()

        def updates_for(self, iu, context=None, check_cancel=None):
                """Return the units in the context's repositories which are
                an update of 'iu'.  No resolution takes place."""

                if context is None:
                        context = ProvisioningContext()
                collector = query.UnitCollector()
                q = query.UpdateQuery(iu)
                for repo in self.__repositories(context, check_cancel):
                        collector.update(repo.query(q))
                return collector.values()

        def get_diff_plan(self, current_profile, target_profile,
            check_cancel=None, progtrack=None):
                """Return the plan turning 'current_profile' into
                'target_profile', using only the target's units."""

                request = ProfileChangeRequest(current_profile)
                current = current_profile.ius()
                target = target_profile.ius()
                request.remove_all(sorted_units(current - target))
                request.add_all(sorted_units(target - current))

                props = current_profile.get_properties()
                for k, v in sorted(target_profile.get_properties().items()):
                        if props.get(k) != v:
                                request.set_profile_property(k, v)
                for k in sorted(props):
                        if target_profile.get_property(k) is None:
                                request.remove_profile_property(k)

                for iu in sorted_units(target):
                        old = current_profile.get_iu_properties(iu)
                        new = target_profile.get_iu_properties(iu)
                        for k, v in sorted(new.items()):
                                if old.get(k) != v:
                                        request.set_iu_property(iu, k, v)
                        if iu not in current:
                                continue
                        for k in sorted(old):
                                if k not in new:
                                        request.remove_iu_property(iu, k)

                context = ProvisioningContext(repositories=EmptyI,
                    extra_ius=sorted_units(target))
                context.set_property(pkgdefs.CTX_INCLUDE_PROFILE_IUS, "false")
                return self.get_provisioning_plan(request, context,
                    check_cancel=check_cancel, progtrack=progtrack)

        @staticmethod
        def __check_cancel(check_cancel):
                if check_cancel is not None and check_cancel():
                        raise api_errors.CanceledException()

        def __repositories(self, context, check_cancel):
                """Yield the repositories of 'context' which can be read;
                the others are logged and skipped."""

                locations = context.repositories
                if locations is None:
                        locations = self.__repo_manager.get_known_repositories()
                for loc in locations:
                        self.__check_cancel(check_cancel)
                        try:
                                repo = self.__repo_manager.load_repository(loc)
                        except api_errors.RepositoryUnreadable as e:
                                logger.warning(str(e))
                                continue
                        yield repo

        def __gather(self, extra_ius, context, check_cancel, progtrack):
                """Return a Queryable of 'extra_ius' and the units of the
                context's repositories."""

                collector = query.UnitCollector()
                collector.update(extra_ius)
                collector.update(context.extra_ius)

                locations = context.repositories
                if locations is None:
                        locations = self.__repo_manager.get_known_repositories()
                progtrack.plan_start(progtrack.PLAN_GATHER,
                    goal=len(locations))
                for loc in locations:
                        self.__check_cancel(check_cancel)
                        try:
                                repo = self.__repo_manager.load_repository(loc)
                                collector.update(repo.query(query.AllQuery()))
                        except api_errors.RepositoryUnreadable as e:
                                logger.warning(str(e))
                        progtrack.plan_add_progress(progtrack.PLAN_GATHER)
                progtrack.plan_done(progtrack.PLAN_GATHER)
                return collector.queryable()

        @staticmethod
        def __find_orphans(profile, removals, roots):
                """Return the installed units which only came in to satisfy
                the units being removed: everything reachable from the
                removals through the profile which isn't a root."""

                installed = query.Queryable(profile.ius())
                orphans = set()
                seen = set(removals)
                pending = deque(removals)
                while pending:
                        iu = pending.popleft()
                        for req in iu.all_requirements(meta=True):
                                for dep in installed.find(req):
                                        if dep in seen:
                                                continue
                                        seen.add(dep)
                                        if dep not in roots:
                                                orphans.add(dep)
                                                pending.append(dep)
                return orphans

        def __update_planner_info(self, request, context):
                """Record the inclusion rules implied by 'request' in it and
                build the unit standing for the target profile.  Its
                requirements are the additions and the units already marked
                as roots, each according to its inclusion rule, plus any
                extra requirements."""

                profile = request.profile
                marked = set(profile.marked_ius())

                for iu, keys in request.iu_property_removals.items():
                        if pkgdefs.INCLUSION_RULES in keys:
                                request.set_inclusion_rule(iu,
                                    pkgdefs.INCLUSION_STRICT)

                removals = set(request.removals)
                for iu in sorted_units(marked & removals):
                        request.remove_inclusion_rule(iu)
                        marked.discard(iu)

                reqs = []
                reasons = {}
                for iu in request.additions:
                        req = _inclusion_requirement(iu,
                            request.get_inclusion_rule(iu))
                        if req is None:
                                request.set_inclusion_rule(iu,
                                    pkgdefs.INCLUSION_STRICT)
                                req = _strict_requirement(iu)
                        reqs.append(req)
                        reasons[req] = explanation.IUToInstall(iu)

                for iu in sorted_units(marked):
                        req = _inclusion_requirement(iu,
                            request.get_inclusion_rule(iu))
                        if req is None:
                                req = _inclusion_requirement(iu,
                                    profile.get_iu_property(iu,
                                    pkgdefs.INCLUSION_RULES))
                        if req is None or req in reasons:
                                continue
                        reqs.append(req)
                        reasons[req] = explanation.IUInstalled(iu)

                roots = marked | set(request.additions)
                orphans = self.__find_orphans(profile, removals, roots)
                installed = [iu for iu in sorted_units(profile.ius())
                    if iu not in removals and iu not in orphans]

                # Installed units nothing requires are brought into the
                # slice through optional requirements.
                for iu in installed:
                        if iu in roots:
                                continue
                        req = _optional_requirement(iu)
                        reqs.append(req)
                        reasons[req] = explanation.IUInstalled(iu)

                for req in list(request.extra_requirements) + \
                    list(context.additional_requirements):
                        reqs.append(req)

                ts = str(timestamp_ms())
                root = metadata.InstallableUnit(
                    pkgdefs.PROFILE_ROOT_PREFIX + ts, "0.0.0." + ts,
                    requirements=reqs)
                return _ResolutionInfo(root, reasons, installed,
                    sorted_units(orphans))

        def __get_solution(self, request, context, check_cancel, progtrack):
                """Resolve 'request' and return the units of the solution
                together with the fragment association for them.

                UnsatisfiableError is raised if there is no solution, and
                CanceledException if planning is canceled."""

                profile = request.profile
                props = request.get_profile_properties()
                env = Environment.from_properties(props)
                meta = _resolve_meta(props)

                info = self.__update_planner_info(request, context)

                extra = list(request.additions) + list(request.removals)
                if context.include_profile_ius:
                        extra.extend(sorted_units(profile.ius()))
                universe = self.__gather(extra, context, check_cancel,
                    progtrack)

                self.__check_cancel(check_cancel)
                progtrack.plan_start(progtrack.PLAN_SLICE)
                slicer = Slicer(universe, env, meta)
                cut = slicer.slice([info.root], check_cancel=check_cancel,
                    progtrack=progtrack)
                progtrack.plan_done(progtrack.PLAN_SLICE)
                if cut is None:
                        status = slicer.get_status()
                        raise api_errors.UnsatisfiableError(
                            getattr(status, "explanations", EmptyI))

                self.__check_cancel(check_cancel)
                progtrack.plan_start(progtrack.PLAN_PROJECT)
                projector = Projector(cut, env, meta,
                    check_cancel=check_cancel, progtrack=progtrack)
                try:
                        projector.encode(info.root, info.installed,
                            info.orphans, info.reasons)
                        progtrack.plan_done(progtrack.PLAN_PROJECT)

                        progtrack.plan_start(progtrack.PLAN_SOLVE)
                        status = projector.invoke_solver()
                        progtrack.plan_done(progtrack.PLAN_SOLVE)
                        if status.severity == pkgdefs.STATUS_ERROR:
                                reasons = EmptyI
                                if context.explain:
                                        progtrack.plan_start(
                                            progtrack.PLAN_EXPLAIN)
                                        reasons = projector.get_explanation()
                                        progtrack.plan_done(
                                            progtrack.PLAN_EXPLAIN)
                                raise api_errors.UnsatisfiableError(
                                    sorted(reasons))

                        solution = projector.extract_solution()
                        association = projector.get_fragment_association()
                finally:
                        projector.cleanup()
                return solution, association

        def __resolve(self, request, context, check_cancel, progtrack,
            bootstrapping=False):
                """Plan 'request'.  Unless 'bootstrapping' is set, the
                installer plan is computed as well."""

                try:
                        solution, association = self.__get_solution(request,
                            context, check_cancel, progtrack)
                except api_errors.UnsatisfiableError as e:
                        return self.__error_plan(request, context, e)

                new_state = attachment.attach_fragments(solution, association)
                initial_state = attachment.attach_fragments(
                    request.profile.ius())
                plan = self.__generate_plan(initial_state, new_state,
                    request, None, context, progtrack)
                if bootstrapping:
                        return plan
                return self.__create_installer_plan(request, solution,
                    new_state, plan, context, check_cancel, progtrack)

        @staticmethod
        def __error_plan(request, context, e):
                """Return the plan describing failure 'e' to plan
                'request'."""

                if e.explanations:
                        status = explanation.explanation_to_status(
                            e.explanations)
                else:
                        status = plandesc.error_status(e)
                logger.debug(str(e))

                changes = {}
                for iu in request.additions:
                        changes[iu] = plandesc.RequestStatus(iu,
                            plandesc.REQUEST_ADDED, pkgdefs.STATUS_ERROR)
                for iu in request.removals:
                        changes[iu] = plandesc.RequestStatus(iu,
                            plandesc.REQUEST_REMOVED, pkgdefs.STATUS_ERROR)
                conflicts = plandesc.RequestStatus(None,
                    plandesc.REQUEST_REMOVED, pkgdefs.STATUS_ERROR,
                    frozenset(e.explanations))
                return plandesc.ProvisioningPlan(request.profile, context,
                    plandesc.PlannerStatus(status, conflicts, changes))

        @staticmethod
        def __plan_property_operations(plan, request):
                for key in request.property_removals:
                        plan.set_profile_property(key, None)
                for key, value in sorted(request.property_changes.items()):
                        plan.set_profile_property(key, value)

                for iu, props in sorted(request.iu_property_changes.items()):
                        for key, value in sorted(props.items()):
                                plan.set_iu_property(iu, key, value)
                for iu, keys in sorted(
                    request.iu_property_removals.items()):
                        for key in keys:
                                plan.set_iu_property(iu, key, None)

        @staticmethod
        def __compute_actual_change_request(to_state, request):
                """Return the status of every addition and removal in
                'request' given the planned state 'to_state', and the
                side effects on the profile's roots."""

                planned = set(metadata.unwrap(u) for u in to_state)
                changes = {}
                for iu in request.additions:
                        sev = pkgdefs.STATUS_OK if iu in planned else \
                            pkgdefs.STATUS_ERROR
                        changes[iu] = plandesc.RequestStatus(iu,
                            plandesc.REQUEST_ADDED, sev)
                for iu in request.removals:
                        sev = pkgdefs.STATUS_ERROR if iu in planned else \
                            pkgdefs.STATUS_OK
                        changes[iu] = plandesc.RequestStatus(iu,
                            plandesc.REQUEST_REMOVED, sev)

                side_effects = {}
                for iu in request.profile.marked_ius():
                        if iu not in planned and iu not in changes:
                                side_effects[iu] = plandesc.RequestStatus(iu,
                                    plandesc.REQUEST_REMOVED,
                                    pkgdefs.STATUS_INFO)
                return changes, side_effects

        def __generate_plan(self, from_state, to_state, request,
            installer_plan, context, progtrack=None):
                """Return the plan moving the profile from 'from_state' to
                'to_state'."""

                if progtrack is None:
                        progtrack = progress.NullProgressTracker()
                progtrack.plan_start(progtrack.PLAN_OPGEN)

                plan = plandesc.ProvisioningPlan(request.profile, context)
                for op in OperationGenerator().generate(from_state, to_state):
                        plan.add_operand(op)
                self.__plan_property_operations(plan, request)

                # Value 'DebugValues' is unsubscriptable;
                # pylint: disable=E1136
                if DebugValues["plan"]:
                        for op in plan.get_operands():
                                logger.info(str(op))

                changes, side_effects = self.__compute_actual_change_request(
                    to_state, request)
                plan.set_future_state(to_state)
                plan.status = plandesc.PlannerStatus(plandesc.ok_status(),
                    None, changes, side_effects, plan.get_future_state())
                plan.installer_plan = installer_plan
                progtrack.plan_done(progtrack.PLAN_OPGEN)
                return plan

        def __absolute_plan(self, request, context):
                """Plan a request whose additions and removals are applied
                as given, without any resolution."""

                from_state = set(request.profile.ius())
                to_state = (from_state - set(request.removals)) | \
                    set(request.additions)
                return self.__generate_plan(from_state, to_state, request,
                    None, context)

        @staticmethod
        def __extract_meta_requirements(units, plan):
                """The meta-requirements of 'units' and of the units 'plan'
                removes."""

                reqs = []
                for iu in sorted_units(metadata.unwrap(u) for u in units):
                        reqs.extend(r for r in iu.meta_requirements
                            if r not in reqs)
                for iu in plan.get_removals():
                        reqs.extend(r for r in iu.meta_requirements
                            if r not in reqs)
                return reqs

        def __unsatisfied_meta_requirements(self, profile, units, plan):
                """Return all the meta-requirements of 'units' and 'plan' if
                any of them isn't met by 'profile', otherwise None."""

                reqs = self.__extract_meta_requirements(units, plan)
                for req in reqs:
                        if not profile.query(query.RequirementQuery(req)):
                                return reqs
                return None

        @staticmethod
        def __actions_iu(profile, meta_requirements):
                """The unit gathering the meta-requirements to install into
                the installer for 'profile'."""
                return metadata.InstallableUnit(
                    pkgdefs.ACTIONS_ROOT_PREFIX + profile.profile_id,
                    "1.0.0.{0}".format(profile.timestamp),
                    requirements=meta_requirements)

        @staticmethod
        def __previous_actions_iu(profile, iu_id):
                found = profile.query(query.IUQuery(iu_id))
                if not found:
                        return None
                return found[0]

        def __create_installer_plan(self, request, unattached, expected,
            initial_plan, context, check_cancel, progtrack):
                """Attach the installer plan needed to carry out
                'initial_plan', if any, and return the resulting plan."""

                agent = context.agent_profile
                if agent is None:
                        return initial_plan

                profile = request.profile
                if agent.profile_id == profile.profile_id:
                        if agent.timestamp != profile.timestamp:
                                e = api_errors.ProfileOutOfSyncError(
                                    profile.profile_id, profile.timestamp,
                                    agent.timestamp)
                                return plandesc.ProvisioningPlan(profile,
                                    context, plandesc.PlannerStatus(
                                    plandesc.error_status(e)))
                        return self.__cohosted_installer_plan(request,
                            unattached, expected, initial_plan, context,
                            check_cancel, progtrack)

                return self.__external_installer_plan(request, expected,
                    initial_plan, context, agent, check_cancel, progtrack)

        @staticmethod
        def __bootstrap_failure(profile, agent, context, nested, cohosted):
                e = api_errors.NestedBootstrapFailure(nested, cohosted)
                status = plandesc.Status(pkgdefs.STATUS_ERROR, str(e),
                    e.status_code, [nested])
                plan = plandesc.ProvisioningPlan(profile, context,
                    plandesc.PlannerStatus(status))
                plan.installer_plan = plandesc.ProvisioningPlan(agent,
                    context, plandesc.PlannerStatus(status))
                return plan

        def __external_installer_plan(self, request, expected, initial_plan,
            context, agent, check_cancel, progtrack):
                """The installer runs from a profile of its own: install the
                meta-requirements it lacks into that profile."""

                profile = request.profile
                meta = self.__unsatisfied_meta_requirements(agent, expected,
                    initial_plan)
                if not meta:
                        return initial_plan

                actions = self.__actions_iu(profile, meta)
                previous = self.__previous_actions_iu(agent, actions.id)

                agent_request = ProfileChangeRequest(agent)
                agent_request.add(actions)
                if previous is not None:
                        agent_request.remove(previous)

                logger.debug("installing the prerequisites for {0} into "
                    "{1}".format(profile, agent))
                nested = self.__resolve(agent_request, context, check_cancel,
                    progtrack, bootstrapping=True)
                if nested.status.severity == pkgdefs.STATUS_ERROR:
                        return self.__bootstrap_failure(profile, agent,
                            context, nested.status, False)

                initial_plan.installer_plan = nested
                return initial_plan

        def __cohosted_installer_plan(self, request, unattached, expected,
            initial_plan, context, check_cancel, progtrack):
                """The installer runs from the profile being changed: first
                bring the profile to a state which satisfies the new
                meta-requirements, using only units of the solution, then
                move from there to the expected state."""

                profile = request.profile
                if request.removals:
                        meta = self.__extract_meta_requirements(expected,
                            initial_plan)
                else:
                        meta = self.__unsatisfied_meta_requirements(profile,
                            expected, initial_plan)
                if not meta:
                        return initial_plan

                actions = self.__actions_iu(profile, meta)
                previous = self.__previous_actions_iu(profile, actions.id)

                agent_request = ProfileChangeRequest(profile)
                for key, value in sorted(request.property_changes.items()):
                        agent_request.set_profile_property(key, value)
                for key in request.property_removals:
                        agent_request.remove_profile_property(key)
                for iu, keys in request.iu_property_removals.items():
                        for key in keys:
                                agent_request.remove_iu_property(iu, key)
                if previous is not None:
                        agent_request.remove(previous)
                agent_request.add(actions)

                agent_context = ProvisioningContext(repositories=EmptyI,
                    extra_ius=unattached)
                try:
                        solution, association = self.__get_solution(
                            agent_request, agent_context, check_cancel,
                            progtrack)
                except api_errors.UnsatisfiableError as e:
                        nested = self.__error_plan(agent_request,
                            agent_context, e)
                        return self.__bootstrap_failure(profile, profile,
                            context, nested.status, True)

                agent_units = [u for u in solution if u != actions]
                agent_state = attachment.attach_fragments(agent_units,
                    association)
                initial_state = attachment.attach_fragments(profile.ius())

                agent_plan = self.__generate_plan(initial_state, agent_state,
                    request, None, context, progtrack)
                return self.__generate_plan(agent_state, expected, request,
                    agent_plan, context, progtrack)
