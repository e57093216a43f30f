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

"""Queries over collections of installable units, and the Queryable
collection which answers them using a capability index."""

from collections import defaultdict

import iuplanner.metadata as metadata
import iuplanner.version as version

from iuplanner.misc import EmptyI, sorted_units


class Query(object):
        """Base class for unit queries.  Subclasses implement matches();
        those which can be answered from the capability index also return
        a (namespace, name) pair from index_key()."""

        def matches(self, iu):
                raise NotImplementedError()

        def index_key(self):
                return None

        def __call__(self, iu):
                return self.matches(iu)


class AllQuery(Query):
        def matches(self, iu):
                return True


class IUQuery(Query):
        """Matches units by id and, optionally, version range."""

        def __init__(self, iu_id, range=None):
                # Redefining built-in; pylint: disable=W0622
                Query.__init__(self)
                self.iu_id = iu_id
                self.range = version.VersionRange.parse(range)

        def matches(self, iu):
                return iu.id == self.iu_id and self.range.includes(iu.version)

        def index_key(self):
                return (metadata.NAMESPACE_IU_ID, self.iu_id)


class RequirementQuery(Query):
        """Matches units which satisfy a requirement."""

        def __init__(self, req):
                Query.__init__(self)
                self.req = req

        def matches(self, iu):
                return self.req.is_match(iu)

        def index_key(self):
                return (self.req.namespace, self.req.name)


class PropertyQuery(Query):
        """Matches units having property 'key'; if 'value' is given the
        property must also have that value."""

        def __init__(self, key, value=None):
                Query.__init__(self)
                self.key = key
                self.value = value

        def matches(self, iu):
                v = iu.get_property(self.key)
                if v is None:
                        return False
                return self.value is None or v == self.value


class UpdateQuery(Query):
        """Matches units which are an update of 'iu': newer versions of the
        same unit, units whose update descriptor names it, and patches
        whose applicability scope covers it."""

        def __init__(self, iu):
                Query.__init__(self)
                self.iu = metadata.unwrap(iu)

        def matches(self, candidate):
                if candidate == self.iu:
                        return False
                if candidate.is_patch:
                        return candidate.patch.applies_to(self.iu)
                if candidate.id == self.iu.id and \
                    candidate.version <= self.iu.version:
                        return False
                ud = candidate.update_descriptor
                if ud is not None:
                        return ud.is_update_of(self.iu)
                return candidate.id == self.iu.id


class PredicateQuery(Query):
        """Matches units for which 'func' returns True."""

        def __init__(self, func):
                Query.__init__(self)
                self.func = func

        def matches(self, iu):
                return bool(self.func(iu))


class Queryable(object):
        """An unordered collection of installable units indexed by the
        capabilities they provide.  Query results are returned in the
        planner's deterministic order (id ascending, version descending)."""

        def __init__(self, units=EmptyI):
                self.__units = set()
                self.__index = defaultdict(set)
                for iu in units:
                        self.add(iu)

        def add(self, iu):
                if iu in self.__units:
                        return
                self.__units.add(iu)
                for cap in iu.provides:
                        self.__index[(cap.namespace, cap.name)].add(iu)

        def __iter__(self):
                return iter(sorted_units(self.__units))

        def __len__(self):
                return len(self.__units)

        def __contains__(self, iu):
                return iu in self.__units

        def query(self, q):
                """Return the list of units matching query 'q', which may be
                a Query or any callable taking a unit."""

                key = None
                if isinstance(q, Query):
                        key = q.index_key()
                if key is None:
                        pool = self.__units
                else:
                        pool = self.__index.get(key, EmptyI)
                return sorted_units(iu for iu in pool if q(iu))

        def find(self, req):
                """Return the units satisfying requirement 'req'."""
                return self.query(RequirementQuery(req))

        def get(self, iu_id, ver):
                """Return the unit with the given id and version, or None."""
                v = version.Version.parse(ver)
                for iu in self.__index.get((metadata.NAMESPACE_IU_ID, iu_id),
                    EmptyI):
                        if iu.version == v:
                                return iu
                return None

        def ids(self):
                return set(iu.id for iu in self.__units)

        def units(self):
                return frozenset(self.__units)


class UnitCollector(object):
        """Accumulates units from several sources, keeping one unit per
        (id, version).  A unit with complete metadata replaces a partial
        one; otherwise the first unit seen wins."""

        def __init__(self):
                self.__units = {}

        def add(self, iu):
                key = (iu.id, iu.version)
                prev = self.__units.get(key)
                if prev is None or has_higher_fidelity(iu, prev):
                        self.__units[key] = iu

        def update(self, units):
                for iu in units:
                        self.add(iu)

        def __len__(self):
                return len(self.__units)

        def values(self):
                return sorted_units(self.__units.values())

        def queryable(self):
                return Queryable(self.__units.values())


def has_higher_fidelity(iu, other):
        """Returns True if 'iu' carries more complete metadata than
        'other', which describes the same unit."""
        return other.is_partial and not iu.is_partial
