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

"""Projects a slice onto propositional logic, solves it and reads the
solution back.

Every unit in the slice gets a variable; a true variable means the unit
is part of the resulting state.  The constraints are:

    - the root unit is installed;
    - for every applicable requirement of an installed unit, at least
      'min' units satisfying it are installed (or, for requirements with
      max 0, none of them is);
    - at most one version of a singleton unit is installed;
    - requirements of units covered by a patch are replaced by the
      patch's versions of them whenever the patch is installed.

Each group of hard constraints is guarded by a selector variable which
is assumed true while solving, so that a failed solve can be explained
in terms of a minimal set of groups.  Optional requirements and the
preferences among solutions are handled by a series of greedy
assumption-based passes once a first solution has been found:

    1. keep installed units
    2. keep the current version of orphaned units that are still needed
    3. satisfy the optional requirements of the request, then all other
       optional requirements
    4. drop units nothing needs
    5. prefer the newest version of each unit
    6. drop anything that became unnecessary
"""

import time

from collections import defaultdict

import iuplanner.client.attachment as attachment
import iuplanner.client.explanation as explanation
import iuplanner.client.pkgdefs as pkgdefs
import iuplanner.client.progress as progress
import iuplanner.query as query

from iuplanner.client import global_settings
from iuplanner.client.debugvalues import DebugValues
from iuplanner.client.plandesc import Status
from iuplanner.client.solver import SatSolver, SOLVER_UNSAT
from iuplanner.misc import EmptyI

logger = global_settings.logger


class Projector(object):
    """Encodes a slice for the SAT solver and solves it."""

    def __init__(self, slice, environment, consider_meta_requirements=True,
        check_cancel=None, progtrack=None):
        # Redefining built-in; pylint: disable=W0622
        if progtrack is None:
            progtrack = progress.NullProgressTracker()

        self.__slice = slice
        self.__env = environment
        self.__meta = consider_meta_requirements
        self.__check_cancel = check_cancel
        self.__progtrack = progtrack
        self.__progitem = None

        self.__solver = None
        self.__iu2id = {}
        self.__id2iu = {}
        self.__selectors = []          # in creation order
        self.__sel2reason = {}         # selector -> explanation
        self.__optional = []           # (iu, req, candidate ids, guard)
        self.__root = None
        self.__installed = []
        self.__orphans = []
        self.__root_reasons = {}

        self.__solution = None
        self.__core = None
        self.__status = None

        self.__subphasename = None
        self.__start_time = None
        self.__timings = []

    def __str__(self):
        s = "Projector: [{0:d} units, {1:d} constraint groups".format(
            len(self.__iu2id), len(self.__selectors))
        if self.__status is not None:
            s += ", {0!r}".format(self.__status)
        s += "]"
        if self.__solver is not None:
            s += "\n{0}".format(self.__solver)

        s += "\nTimings: ["
        s += ", ".join([
            "{0}: {1: 6.3f}".format(*a)
            for a in self.__timings
        ])
        s += "]"
        return s

    def __progress(self):
        """Bump progress tracker to indicate processing is active."""
        assert self.__progitem
        self.__progtrack.plan_add_progress(self.__progitem)

    def __start_subphase(self, subphase=None, reset=False):
        """Add timing records and tickle progress tracker.  Ends
        previous subphase if ongoing."""
        if reset:
            self.__timings = []
        if self.__subphasename is not None:
            self.__end_subphase()
        self.__start_time = time.time()
        self.__subphasename = "phase {0:d}".format(subphase)
        self.__progress()

    def __end_subphase(self):
        """Mark the end of a solver subphase, recording time taken."""
        now = time.time()
        self.__timings.append((self.__subphasename,
            now - self.__start_time))
        self.__start_time = None
        self.__subphasename = None

    def __getid(self, iu):
        return self.__iu2id[iu]

    def __getiu(self, var):
        return self.__id2iu.get(var)

    def encode(self, root_iu, installed=EmptyI, orphans=EmptyI,
        root_reasons=None):
        """Generate the constraints for the slice.

        'root_iu' is the unit representing the request; it is always
        installed.  'installed' are the currently installed units the
        solution should keep if it can, and 'orphans' the installed
        units which are only kept, at their current version, if
        something still requires them.  'root_reasons' maps the root's
        requirements to the explanation reported when they can't be
        met."""

        self.__progitem = self.__progtrack.PLAN_PROJECT
        self.__start_subphase(1, reset=True)

        self.__solver = SatSolver(check_cancel=self.__check_cancel)
        self.__root = root_iu
        self.__root_reasons = dict(root_reasons or {})

        units = list(self.__slice)
        if root_iu not in self.__slice:
            units.insert(0, root_iu)

        # Variables follow the slice order: id ascending, then version
        # descending.
        for iu in units:
            var = self.__solver.new_var()
            self.__iu2id[iu] = var
            self.__id2iu[var] = iu

        self.__installed = [iu for iu in installed if iu in self.__iu2id]
        self.__orphans = [iu for iu in orphans if iu in self.__iu2id]

        self.__solver.add_clause([self.__getid(root_iu)])

        self.__start_subphase(2)
        patches = [iu for iu in units if iu.is_patch]
        for iu in units:
            self.__encode_unit(iu, patches)

        self.__start_subphase(3)
        versions = defaultdict(list)
        for iu in units:
            if iu.singleton:
                versions[iu.id].append(iu)
        for iu_id in sorted(versions):
            group = versions[iu_id]
            if len(group) < 2:
                continue
            self.__add_hard(self.__gen_highlander_clauses(group),
                explanation.SingletonConflict(iu_id, group))

        self.__end_subphase()

        # Value 'DebugValues' is unsubscriptable;
        # pylint: disable=E1136
        if DebugValues["plan"]:
            logger.debug("encoded: {0}".format(self.__solver))

    def __encode_unit(self, iu, patches):
        """Generate the constraints for the requirements of 'iu'."""

        applicable = [p for p in patches
            if p != iu and p.patch.applies_to(iu)]

        for req in iu.requirements:
            if not self.__env.allow_requirement(req):
                continue
            changes = [(p, c) for p in applicable
                for c in p.patch.changes_for(req)]
            if not changes:
                self.__encode_requirement(iu, req)
                continue

            # The original requirement holds unless one of the patches
            # changing it is installed; each of those patches brings
            # its own version of it.
            escape = []
            for p, c in changes:
                if self.__getid(p) not in escape:
                    escape.append(self.__getid(p))
            self.__encode_requirement(iu, req, guard=escape)
            for p, c in changes:
                if c.new_value is not None and \
                    self.__env.allow_requirement(c.new_value):
                    self.__encode_requirement(iu, c.new_value,
                        guard=[-self.__getid(p)], patch=p)

        for p in applicable:
            for req in p.patch.additions():
                if self.__env.allow_requirement(req):
                    self.__encode_requirement(iu, req,
                        guard=[-self.__getid(p)], patch=p)

        extra = list(iu.host_requirements or EmptyI)
        if iu.is_patch and iu.patch.lifecycle is not None:
            extra.append(iu.patch.lifecycle)
        if self.__meta:
            extra.extend(iu.meta_requirements)
        for req in extra:
            if self.__env.allow_requirement(req):
                self.__encode_requirement(iu, req)

    def __encode_requirement(self, iu, req, guard=EmptyI, patch=None):
        """Generate the constraints for requirement 'req' of 'iu'.  The
        literals in 'guard' relax the constraints: they hold whenever
        one of them does."""

        var = self.__getid(iu)
        guard = list(guard)
        candidates = [c for c in self.__slice.find(req)
            if c in self.__iu2id]

        if iu == self.__root and req in self.__root_reasons:
            reason = self.__root_reasons[req]
        elif patch is not None:
            reason = explanation.PatchedRequirement(iu, req, patch)
        else:
            reason = explanation.HardRequirement(iu, req)

        if req.negative:
            excluded = [c for c in candidates if c != iu]
            if excluded:
                self.__add_hard([[-var, -self.__getid(c)] + guard
                    for c in excluded], reason)
            return

        if req.optional:
            if candidates:
                self.__optional.append((iu, req,
                    [self.__getid(c) for c in candidates], guard))
            return

        if not candidates:
            missing = explanation.explain_missing(iu, req,
                self.__slice.universe, self.__env,
                self.__slice.filtered_out)
            self.__add_hard([[-var] + guard], missing)
            return

        ids = [self.__getid(c) for c in candidates]
        if req.min <= 1:
            self.__add_hard([[-var] + guard + ids], reason)
        elif req.min > len(ids):
            self.__add_hard([[-var] + guard], reason)
        else:
            sel = self.__new_selector(reason)
            self.__solver.add_atleast(ids, req.min,
                guard=[-sel, -var] + guard)

    def __gen_highlander_clauses(self, units):
        """Return the clauses allowing at most one of 'units'."""
        ids = [self.__getid(u) for u in units]
        return [
            [-a, -b]
            for i, a in enumerate(ids)
            for b in ids[i + 1:]
        ]

    def __new_selector(self, reason):
        sel = self.__solver.new_var()
        self.__selectors.append(sel)
        self.__sel2reason[sel] = reason
        return sel

    def __add_hard(self, clauses, reason):
        """Add the group of 'clauses', guarded by a new selector tagged
        with 'reason'."""
        sel = self.__new_selector(reason)
        for c in clauses:
            self.__solver.add_clause([-sel] + c)

    def __attempt(self, fixed, lits):
        """Try to add 'lits' to the assumptions in 'fixed'.  On success
        'fixed' is extended and the new model returned; otherwise None
        is returned."""

        if not self.__solver.solve(fixed + lits):
            return None
        fixed.extend(lits)
        return self.__solver.get_model()

    def __versions(self, iu_id):
        return [self.__getid(u)
            for u in self.__slice.query(query.IUQuery(iu_id))
            if u in self.__iu2id]

    def invoke_solver(self):
        """Solve the encoded problem.  Returns an OK status if a solution
        was found and an ERROR status otherwise; CanceledException is
        raised if planning was canceled while solving."""

        assert self.__solver is not None
        self.__progitem = self.__progtrack.PLAN_SOLVE
        self.__start_subphase(4)

        solver = self.__solver
        fixed = list(self.__selectors)
        if not solver.solve(fixed):
            self.__core = solver.get_core()
            self.__end_subphase()
            self.__status = Status(pkgdefs.STATUS_ERROR,
                _("No solution found."), pkgdefs.CODE_UNSATISFIABLE)
            return self.__status

        model = solver.get_model()
        root = self.__getid(self.__root)

        self.__start_subphase(5)
        pinned = set([root])
        for iu in self.__installed:
            rv = self.__attempt(fixed, [self.__getid(iu)])
            if rv is not None:
                model = rv
                pinned.add(self.__getid(iu))
        for iu in self.__orphans:
            others = [-v for v in self.__versions(iu.id)
                if v != self.__getid(iu)]
            if others:
                model = self.__attempt(fixed, others) or model

        self.__start_subphase(6)
        # The request's own optional requirements come first.
        pending = [o for o in self.__optional if o[0] == self.__root]
        pending += [o for o in self.__optional if o[0] != self.__root]
        for iu, req, ids, guard in pending:
            var = self.__getid(iu)
            if var not in model:
                continue
            aux = solver.new_var()
            solver.add_clause([-aux, -var] + guard + ids)
            model = self.__attempt(fixed, [aux]) or model

        self.__start_subphase(7)
        for iu_id in self.__selected_ids(model, pinned):
            vs = [-v for v in self.__versions(iu_id) if v not in pinned]
            model = self.__attempt(fixed, vs) or model

        # Rule out versions oldest first, so that the newest version
        # which still allows a solution remains.
        self.__start_subphase(8)
        for iu_id in self.__selected_ids(model, pinned):
            for v in reversed(self.__versions(iu_id)):
                if v not in pinned:
                    model = self.__attempt(fixed, [-v]) or model

        self.__start_subphase(9)
        chosen = set(l for l in fixed if l > 0)
        for v in sorted(model):
            if v in self.__id2iu and v not in pinned and v not in chosen:
                model = self.__attempt(fixed, [-v]) or model

        self.__end_subphase()

        self.__solution = [self.__getiu(v) for v in sorted(model)
            if v in self.__id2iu and v != root]
        self.__status = Status()

        # Value 'DebugValues' is unsubscriptable;
        # pylint: disable=E1136
        if DebugValues["plan"]:
            logger.debug(str(self))
        return self.__status

    def __selected_ids(self, model, pinned):
        """The ids of the units selected in 'model' which are not kept
        installed units."""

        return sorted(set(
            self.__getiu(v).id for v in model
            if v in self.__id2iu and v not in pinned
        ))

    def extract_solution(self):
        """The units of the solution, excluding the root unit."""
        assert self.__solution is not None
        return list(self.__solution)

    def get_fragment_association(self):
        """Map each host in the solution to the fragments attached to
        it."""
        return attachment.compute_association(self.extract_solution())

    def get_explanation(self):
        """Return the set of explanations for a failed solve: one for
        each group of constraints in a minimal conflicting subset."""

        if self.__core is None:
            return frozenset()

        self.__progitem = self.__progtrack.PLAN_EXPLAIN
        self.__start_subphase(10)
        assert self.__solver.state == SOLVER_UNSAT
        core = self.__solver.minimize_core(self.__core)
        self.__end_subphase()

        return frozenset(self.__sel2reason[s] for s in core
            if s in self.__sel2reason)

    def get_status(self):
        return self.__status

    def cleanup(self):
        if self.__solver is not None:
            self.__solver.delete()
