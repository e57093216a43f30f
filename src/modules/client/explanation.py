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

"""Explanations of why a request could not be satisfied.

Every group of constraints the projector gives the solver is tagged with
one of the explanation objects below; when resolution fails, the tags of
a minimal conflicting set of groups make up the explanation returned to
the caller."""

import iuplanner.client.pkgdefs as pkgdefs
import iuplanner.metadata as metadata

from iuplanner.client.plandesc import Status
from iuplanner.misc import EmptyI

# explanation kinds
EXPLAIN_MISSING = "missing"
EXPLAIN_VERSION = "version-mismatch"
EXPLAIN_FILTERED = "filtered-out"
EXPLAIN_SINGLETON = "singleton"
EXPLAIN_HARD = "hard-requirement"
EXPLAIN_PATCHED = "patched-requirement"
EXPLAIN_TO_INSTALL = "to-install"
EXPLAIN_INSTALLED = "installed"

# order in which explanations are reported
_kind_order = [
    EXPLAIN_TO_INSTALL,
    EXPLAIN_INSTALLED,
    EXPLAIN_MISSING,
    EXPLAIN_VERSION,
    EXPLAIN_FILTERED,
    EXPLAIN_SINGLETON,
    EXPLAIN_PATCHED,
    EXPLAIN_HARD,
]


class Explanation(object):
        """Base class for explanations.  Explanations are values: two
        explanations of the same kind about the same things are equal."""

        kind = None

        def _key(self):
                raise NotImplementedError()

        def __eq__(self, other):
                if type(self) != type(other):
                        return False
                return self._key() == other._key()

        def __ne__(self, other):
                return not self.__eq__(other)

        def __hash__(self):
                return hash((self.kind, self._key()))

        def __lt__(self, other):
                return (_kind_order.index(self.kind), str(self)) < \
                    (_kind_order.index(other.kind), str(other))

        def __repr__(self):
                return "<{0} '{1}'>".format(type(self).__name__, self)


class MissingIU(Explanation):
        """No unit anywhere satisfies 'requirement' of 'iu'."""

        kind = EXPLAIN_MISSING

        def __init__(self, iu, requirement):
                self.iu = iu
                self.requirement = requirement

        def _key(self):
                return (self.iu, self.requirement)

        def __str__(self):
                return _("Missing requirement: {iu} requires '{req}' but it "
                    "could not be found").format(iu=self.iu,
                    req=self.requirement)


class VersionMismatch(Explanation):
        """Units named by 'requirement' of 'iu' exist, but none of them in
        a version within the required range."""

        kind = EXPLAIN_VERSION

        def __init__(self, iu, requirement, available=EmptyI):
                self.iu = iu
                self.requirement = requirement
                self.available = tuple(available)

        def _key(self):
                return (self.iu, self.requirement)

        def __str__(self):
                return _("Version mismatch: {iu} requires '{req}' but only "
                    "{avail} are available").format(iu=self.iu,
                    req=self.requirement,
                    avail=", ".join(str(v) for v in self.available))


class FilteredOut(Explanation):
        """'unit' would satisfy a requirement but its filter excludes it
        from the environment being resolved for."""

        kind = EXPLAIN_FILTERED

        def __init__(self, unit, filter, environment=None):
                # Redefining built-in; pylint: disable=W0622
                self.unit = unit
                self.filter = filter
                self.environment = dict(environment or {})

        def _key(self):
                return (self.unit, str(self.filter))

        def __str__(self):
                return _("{unit} is not applicable in the current "
                    "environment (filter {filter})").format(unit=self.unit,
                    filter=self.filter)


class SingletonConflict(Explanation):
        """More than one version of singleton unit 'id' is required."""

        kind = EXPLAIN_SINGLETON

        def __init__(self, iu_id, candidates):
                self.id = iu_id
                self.candidates = tuple(candidates)

        def _key(self):
                return (self.id, self.candidates)

        def __str__(self):
                return _("Only one of the following can be installed at "
                    "once: {0}").format(", ".join(str(c)
                    for c in self.candidates))


class HardRequirement(Explanation):
        kind = EXPLAIN_HARD

        def __init__(self, iu, requirement):
                self.iu = iu
                self.requirement = requirement

        def _key(self):
                return (self.iu, self.requirement)

        def __str__(self):
                return _("{iu} requires '{req}'").format(iu=self.iu,
                    req=self.requirement)


class PatchedRequirement(Explanation):
        kind = EXPLAIN_PATCHED

        def __init__(self, iu, requirement, patch):
                self.iu = iu
                self.requirement = requirement
                self.patch = patch

        def _key(self):
                return (self.iu, self.requirement, self.patch)

        def __str__(self):
                return _("{iu} requires '{req}' because of patch "
                    "{patch}").format(iu=self.iu, req=self.requirement,
                    patch=self.patch)


class IUToInstall(Explanation):
        kind = EXPLAIN_TO_INSTALL

        def __init__(self, iu):
                self.iu = iu

        def _key(self):
                return (self.iu,)

        def __str__(self):
                return _("{0} is requested to be installed").format(self.iu)


class IUInstalled(Explanation):
        kind = EXPLAIN_INSTALLED

        def __init__(self, iu):
                self.iu = iu

        def _key(self):
                return (self.iu,)

        def __str__(self):
                return _("{0} is already installed").format(self.iu)


def explain_missing(iu, req, universe, environment, filtered_out=EmptyI):
        """Return the explanation for requirement 'req' of 'iu' having no
        candidate: a filtered out unit which would have satisfied it, other
        versions of the required capability or nothing at all."""

        filtered = [u for u in filtered_out if req.is_match(u)]
        if not filtered and universe is not None:
                filtered = [u for u in universe.find(req)
                    if not environment.allow_unit(u)]
        if filtered:
                u = filtered[0]
                return FilteredOut(u, u.filter, environment)

        if universe is not None:
                any_version = metadata.Requirement(req.namespace, req.name)
                available = []
                for u in universe.find(any_version):
                        for cap in u.provides:
                                if cap.namespace == req.namespace and \
                                    cap.name == req.name and \
                                    cap.version not in available:
                                        available.append(cap.version)
                if available:
                        return VersionMismatch(iu, req, available)
        return MissingIU(iu, req)


def explanation_to_status(explanations):
        """Convert a set of explanations into an ERROR status whose message
        names the most significant kind of problem found."""

        explanations = sorted(explanations)
        kinds = set(e.kind for e in explanations)
        if kinds & set([EXPLAIN_MISSING, EXPLAIN_VERSION, EXPLAIN_FILTERED]):
                msg = _("Cannot complete the install because some "
                    "dependencies are not satisfiable")
        elif EXPLAIN_SINGLETON in kinds:
                msg = _("Cannot complete the install because of a "
                    "conflicting dependency.")
        else:
                msg = _("Cannot complete the request.  Generating details.")

        return Status(pkgdefs.STATUS_ERROR, msg, pkgdefs.CODE_UNSATISFIABLE,
            [Status(pkgdefs.STATUS_ERROR, str(e), pkgdefs.CODE_UNSATISFIABLE)
                for e in explanations])
