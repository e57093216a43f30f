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

"""A thin layer over the python-sat solvers.

Clauses are lists of non-zero integers; a positive integer is a variable
and a negative one its negation.  Solving happens under assumptions, in
slices of at most 'conflict_budget' conflicts; between slices the
caller's cancellation check is polled."""

import time

from pysat.card import CardEnc, EncType
from pysat.solvers import Solver

import iuplanner.client.api_errors as api_errors

from iuplanner.client import global_settings
from iuplanner.misc import EmptyI

logger = global_settings.logger

SOLVER_INIT = "Initialized"
SOLVER_SAT = "Satisfiable"
SOLVER_UNSAT = "Unsatisfiable"
SOLVER_CANCELLED = "Cancelled"


class SatSolver(object):
    """Wraps one python-sat solver instance."""

    def __init__(self, name=None, check_cancel=None, conflict_budget=None):
        if name is None:
            name = global_settings.sat_solver
        if conflict_budget is None:
            conflict_budget = global_settings.conflict_budget
        self.__name = name
        self.__solver = Solver(name=name)
        self.__check_cancel = check_cancel
        self.__budget = conflict_budget
        self.__top = 0
        self.__clauses = 0
        self.__iterations = 0
        self.__addclause_failure = False
        self.__state = SOLVER_INIT
        self.__elapsed = 0.0

    def __str__(self):
        s = "SatSolver({0}): [".format(self.__name)
        s += (" Variables: {0:d} Clauses: {1:d} Iterations: "
            "{2:d}").format(self.__top, self.__clauses, self.__iterations)
        s += " State: {0} Time: {1:.3f}]".format(self.__state,
            self.__elapsed)
        return s

    @property
    def state(self):
        return self.__state

    @property
    def top(self):
        """The highest variable allocated so far."""
        return self.__top

    def new_var(self):
        self.__top += 1
        return self.__top

    def reserve(self, top):
        """Mark every variable up to 'top' as allocated."""
        self.__top = max(self.__top, top)

    def add_clause(self, clause):
        """Add a clause to the solver; an empty clause makes the problem
        unsatisfiable."""

        try:
            clause = [int(l) for l in clause]
        except (TypeError, ValueError):
            raise TypeError(_("List of integers, not {0}, "
                "expected").format(clause))
        assert 0 not in clause
        if clause:
            self.__top = max(self.__top, max(abs(l) for l in clause))
        if self.__solver.add_clause(clause, no_return=False) is False:
            self.__addclause_failure = True
        self.__clauses += 1

    def add_clauses(self, clauses):
        for c in clauses:
            self.add_clause(c)

    def add_atleast(self, lits, bound, guard=EmptyI):
        """Add clauses requiring at least 'bound' of 'lits' to hold,
        unless one of the literals in 'guard' holds."""

        cnf = CardEnc.atleast(lits=list(lits), bound=bound,
            top_id=self.__top, encoding=EncType.seqcounter)
        self.reserve(cnf.nv)
        for c in cnf.clauses:
            self.add_clause(list(guard) + c)

    def solve(self, assumptions=EmptyI):
        """Returns True if the clauses are satisfiable under
        'assumptions', False otherwise.  Raises CanceledException if the
        cancellation check fires while solving."""

        self.__iterations += 1
        start = time.time()
        try:
            if self.__addclause_failure:
                rv = False
            elif self.__check_cancel is None:
                rv = self.__solver.solve(assumptions=list(assumptions))
            else:
                rv = None
                while rv is None:
                    if self.__check_cancel():
                        self.__state = SOLVER_CANCELLED
                        raise api_errors.CanceledException()
                    self.__solver.conf_budget(self.__budget)
                    rv = self.__solver.solve_limited(
                        assumptions=list(assumptions))
        finally:
            self.__elapsed += time.time() - start

        self.__state = SOLVER_SAT if rv else SOLVER_UNSAT
        return rv

    def get_model(self):
        """The set of variables true in the last satisfying
        assignment."""
        assert self.__state == SOLVER_SAT
        return frozenset(l for l in self.__solver.get_model() if l > 0)

    def get_core(self):
        """The assumptions responsible for the last failed solve."""
        assert self.__state == SOLVER_UNSAT
        if self.__addclause_failure:
            return []
        return list(self.__solver.get_core() or EmptyI)

    def minimize_core(self, core):
        """Shrink unsatisfiable set of assumptions 'core' until removing
        any one of them makes the rest satisfiable."""

        core = list(core)
        i = 0
        while i < len(core):
            trial = core[:i] + core[i + 1:]
            if self.solve(trial):
                i += 1
                continue
            smaller = set(self.get_core())
            core = [l for l in trial if l in smaller]
        self.__state = SOLVER_UNSAT
        logger.debug("minimal core has {0:d} members".format(len(core)))
        return core

    def delete(self):
        if self.__solver is not None:
            self.__solver.delete()
            self.__solver = None
