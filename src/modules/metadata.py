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

"""Installable unit metadata: units, the capabilities they provide, the
requirements they express, patches, fragments and update descriptors.

All of the objects defined here are immutable values; they are created
when repository metadata is parsed (see fromstate()) or built in memory,
and never modified afterwards."""

import sys
from collections import namedtuple

import iuplanner.version as version

from iuplanner.filter import compile_filter, FilterError
from iuplanner.misc import EmptyI, EmptyDict, ImmutableDict

# The namespace of the identity capability every unit provides.
NAMESPACE_IU_ID = "iu.id"

# well known unit properties
PROP_PARTIAL_IU = "iu.partial"
PROP_TYPE_PATCH = "iu.type.patch"
PROP_TYPE_FRAGMENT = "iu.type.fragment"
PROP_NAME = "iu.name"

# upper bound used for "multiple" requirements
MAX_CARDINALITY = sys.maxsize


class MetadataError(Exception):
        """Used to indicate that serialized unit metadata is invalid."""

        def __init__(self, data, reason=None):
                Exception.__init__(self)
                self.data = data
                self.reason = reason

        def __str__(self):
                return _("Invalid installable unit metadata: {reason}: "
                    "{data!r}").format(reason=self.reason, data=self.data)


class ProvidedCapability(namedtuple("ProvidedCapability",
    "namespace name version")):
        """A capability, a (namespace, name, version) triple, provided by
        an installable unit."""

        __slots__ = ()

        def __new__(cls, namespace, name, ver):
                return super(ProvidedCapability, cls).__new__(cls, namespace,
                    name, version.Version.parse(ver))

        def __str__(self):
                return "{0}/{1}/{2}".format(*self)


class Requirement(object):
        """A requirement on some capability: (namespace, name, range)
        qualified by a filter, cardinality (min, max) and greediness.

        min == 0 makes the requirement optional; max == 0 makes it a
        negative requirement, meaning no matching unit may be installed
        alongside the requiring one.  Non-greedy requirements are only
        satisfied by units that something else brought into consideration.
        """

        __slots__ = ["namespace", "name", "range", "filter", "min", "max",
            "greedy"]

        def __init__(self, namespace, name, range=None, filter=None,
            optional=False, multiple=False, greedy=True, min=None, max=None):
                # Redefining built-in; pylint: disable=W0622

                if not namespace or not name:
                        raise ValueError("namespace and name are required")

                self.namespace = namespace
                self.name = name
                self.range = version.VersionRange.parse(range)
                self.filter = compile_filter(filter)
                self.greedy = bool(greedy)

                if min is None:
                        min = 0 if optional else 1
                if max is None:
                        max = MAX_CARDINALITY if multiple else 1
                if max == 0:
                        min = 0
                if min < 0 or max < 0 or (max and min > max):
                        raise ValueError("invalid cardinality "
                            "[{0:d}, {1:d}]".format(min, max))
                self.min = min
                self.max = max

        @property
        def optional(self):
                return self.min == 0

        @property
        def multiple(self):
                return self.max > 1

        @property
        def negative(self):
                return self.max == 0

        def matches_capability(self, cap):
                """Returns True if the provided capability 'cap' satisfies
                this requirement's namespace, name and range."""
                return cap.namespace == self.namespace and \
                    cap.name == self.name and self.range.includes(cap.version)

        def is_match(self, iu):
                """Returns True if installable unit 'iu' provides a capability
                which satisfies this requirement."""
                for cap in iu.provides:
                        if self.matches_capability(cap):
                                return True
                return False

        def applies(self, env):
                """Returns True if this requirement's filter holds in
                'env'."""
                return self.filter is None or self.filter.match(env)

        def __key(self):
                return (self.namespace, self.name, self.range, self.filter,
                    self.min, self.max, self.greedy)

        def __eq__(self, other):
                if not isinstance(other, Requirement):
                        return False
                return self.__key() == other.__key()

        def __ne__(self, other):
                return not self.__eq__(other)

        def __hash__(self):
                return hash(self.__key())

        def __str__(self):
                s = "{0}/{1} {2}".format(self.namespace, self.name,
                    self.range)
                if self.negative:
                        s += " (excluded)"
                elif self.optional:
                        s += " (optional)"
                if self.filter is not None:
                        s += " {0}".format(self.filter)
                return s

        def __repr__(self):
                return "<Requirement {0}>".format(self)

        @staticmethod
        def getstate(obj, je_state=None):
                """Returns the serialized state of this object in a format
                that that can be easily stored using JSON, pickle, etc."""
                return {
                    "namespace": obj.namespace,
                    "name": obj.name,
                    "range": str(obj.range),
                    "filter": obj.filter is not None and str(obj.filter) or
                        None,
                    "min": obj.min,
                    "max": obj.max,
                    "greedy": obj.greedy,
                }

        @staticmethod
        def fromstate(state, jd_state=None):
                """Allocate a new object using previously serialized state
                obtained via getstate()."""
                try:
                        return Requirement(state["namespace"], state["name"],
                            range=state.get("range"),
                            filter=state.get("filter"),
                            greedy=state.get("greedy", True),
                            min=state.get("min", 1), max=state.get("max", 1))
                except (KeyError, TypeError, ValueError) as e:
                        raise MetadataError(state, str(e))


def iu_requirement(iu_id, range=None, **kwargs):
        """Convenience: a requirement on the identity capability of the
        unit named 'iu_id'."""
        # Redefining built-in; pylint: disable=W0622
        return Requirement(NAMESPACE_IU_ID, iu_id, range, **kwargs)


class RequirementChange(namedtuple("RequirementChange",
    "apply_on new_value")):
        """A change made by a patch to the requirements of the units it
        applies to.  'apply_on' is the requirement being replaced or
        removed and 'new_value' its replacement; a change with no
        'apply_on' adds 'new_value', one with no 'new_value' removes
        'apply_on'."""

        __slots__ = ()

        def __new__(cls, apply_on=None, new_value=None):
                if apply_on is None and new_value is None:
                        raise ValueError("a requirement change must have "
                            "either an original or a new value")
                return super(RequirementChange, cls).__new__(cls, apply_on,
                    new_value)

        def matches(self, req):
                """Returns True if this change applies to requirement
                'req'."""
                if self.apply_on is None:
                        return False
                if req.namespace != self.apply_on.namespace or \
                    req.name != self.apply_on.name:
                        return False
                return not req.range.intersect(self.apply_on.range).is_empty()

        def __str__(self):
                return "{0} -> {1}".format(self.apply_on, self.new_value)


class PatchInfo(object):
        """The patch specific part of a unit's metadata."""

        __slots__ = ["changes", "scope", "lifecycle"]

        def __init__(self, changes=EmptyI, scope=EmptyI, lifecycle=None):
                self.changes = tuple(changes)
                self.scope = tuple(tuple(group) for group in scope)
                self.lifecycle = lifecycle

        def applies_to(self, iu):
                """The applicability scope is a disjunction of conjunctions;
                an empty scope applies to every unit."""

                if not self.scope:
                        return True
                for group in self.scope:
                        if all(r.is_match(iu) for r in group):
                                return True
                return False

        def changes_for(self, req):
                """Return the changes in this patch which apply to 'req'."""
                return [c for c in self.changes if c.matches(req)]

        def additions(self):
                return [c.new_value for c in self.changes
                    if c.apply_on is None]

        @staticmethod
        def getstate(obj, je_state=None):
                """Returns the serialized state of this object in a format
                that that can be easily stored using JSON, pickle, etc."""
                rs = Requirement.getstate
                return {
                    "changes": [
                        [c.apply_on is not None and rs(c.apply_on) or None,
                         c.new_value is not None and rs(c.new_value) or None]
                        for c in obj.changes
                    ],
                    "scope": [[rs(r) for r in g] for g in obj.scope],
                    "lifecycle": obj.lifecycle is not None and
                        rs(obj.lifecycle) or None,
                }

        @staticmethod
        def fromstate(state, jd_state=None):
                """Allocate a new object using previously serialized state
                obtained via getstate()."""
                def req(s):
                        if s is None:
                                return None
                        return Requirement.fromstate(s)

                return PatchInfo(
                    changes=[RequirementChange(req(a), req(b))
                        for a, b in state.get("changes", EmptyI)],
                    scope=[[req(r) for r in g]
                        for g in state.get("scope", EmptyI)],
                    lifecycle=req(state.get("lifecycle")))


class UpdateDescriptor(namedtuple("UpdateDescriptor",
    "id range severity description")):
        """Declares which units a unit is an update of."""

        __slots__ = ()

        def __new__(cls, id, range=None, severity=0, description=None):
                # Redefining built-in; pylint: disable=W0622
                return super(UpdateDescriptor, cls).__new__(cls, id,
                    version.VersionRange.parse(range), severity, description)

        def is_update_of(self, iu):
                return iu.id == self.id and self.range.includes(iu.version)


class InstallableUnit(object):
        """An installable unit: the atom of provisioning.  Units are
        identified by (id, version); two units with the same id and
        version are the same unit."""

        __slots__ = ["id", "version", "provides", "requirements",
            "meta_requirements", "filter", "singleton", "properties",
            "patch", "host_requirements", "update_descriptor"]

        def __init__(self, id, ver, provides=EmptyI, requirements=EmptyI,
            meta_requirements=EmptyI, filter=None, singleton=False,
            properties=None, patch=None, host_requirements=None,
            update_descriptor=None):
                # Redefining built-in; pylint: disable=W0622

                if not id:
                        raise ValueError("installable unit id is required")

                self.id = id
                self.version = version.Version.parse(ver)
                self.filter = compile_filter(filter)
                self.singleton = bool(singleton)
                self.requirements = tuple(requirements)
                self.meta_requirements = tuple(meta_requirements)
                self.patch = patch
                self.update_descriptor = update_descriptor
                self.host_requirements = None
                if host_requirements is not None:
                        self.host_requirements = tuple(host_requirements)

                if properties:
                        self.properties = ImmutableDict(properties)
                else:
                        self.properties = EmptyDict

                # Every unit provides its own identity.
                ident = ProvidedCapability(NAMESPACE_IU_ID, id, self.version)
                caps = [ident]
                caps.extend(c for c in provides if c != ident)
                self.provides = tuple(caps)

        @property
        def is_patch(self):
                return self.patch is not None

        @property
        def is_fragment(self):
                return self.host_requirements is not None

        @property
        def is_partial(self):
                return self.properties.get(PROP_PARTIAL_IU, "false") == "true"

        def get_property(self, key, default=None):
                return self.properties.get(key, default)

        def applies(self, env):
                """Returns True if this unit's filter holds in 'env'."""
                return self.filter is None or self.filter.match(env)

        def satisfies(self, req):
                return req.is_match(self)

        def all_requirements(self, meta=False):
                """The requirements to follow when computing this unit's
                closure: its own, the host requirements of a fragment, the
                lifecycle and replacement requirements of a patch and, if
                'meta' is set, its meta-requirements."""

                reqs = list(self.requirements)
                if self.host_requirements:
                        reqs.extend(self.host_requirements)
                if self.patch is not None:
                        if self.patch.lifecycle is not None:
                                reqs.append(self.patch.lifecycle)
                        reqs.extend(c.new_value for c in self.patch.changes
                            if c.new_value is not None)
                if meta:
                        reqs.extend(self.meta_requirements)
                return reqs

        def __eq__(self, other):
                if isinstance(other, ResolvedInstallableUnit):
                        return False
                if not isinstance(other, InstallableUnit):
                        return False
                return self.id == other.id and self.version == other.version

        def __ne__(self, other):
                return not self.__eq__(other)

        def __lt__(self, other):
                if not isinstance(other, InstallableUnit):
                        return NotImplemented
                return (self.id, self.version) < (other.id, other.version)

        def __hash__(self):
                return hash((self.id, self.version))

        def __str__(self):
                return "{0} {1}".format(self.id, self.version)

        def __repr__(self):
                return "<InstallableUnit '{0}'>".format(self)

        @staticmethod
        def getstate(obj, je_state=None):
                """Returns the serialized state of this object in a format
                that that can be easily stored using JSON, pickle, etc."""

                rs = Requirement.getstate
                state = {
                    "id": obj.id,
                    "version": str(obj.version),
                    "provides": [
                        [c.namespace, c.name, str(c.version)]
                        for c in obj.provides[1:]
                    ],
                    "requirements": [rs(r) for r in obj.requirements],
                    "meta_requirements": [rs(r)
                        for r in obj.meta_requirements],
                    "singleton": obj.singleton,
                    "properties": dict(obj.properties),
                }
                if obj.filter is not None:
                        state["filter"] = str(obj.filter)
                if obj.patch is not None:
                        state["patch"] = PatchInfo.getstate(obj.patch)
                if obj.host_requirements is not None:
                        state["host_requirements"] = [rs(r)
                            for r in obj.host_requirements]
                ud = obj.update_descriptor
                if ud is not None:
                        state["update_descriptor"] = [ud.id, str(ud.range),
                            ud.severity, ud.description]
                return state

        @staticmethod
        def fromstate(state, jd_state=None):
                """Allocate a new object using previously serialized state
                obtained via getstate()."""

                rf = Requirement.fromstate
                try:
                        patch = state.get("patch")
                        if patch is not None:
                                patch = PatchInfo.fromstate(patch)
                        hosts = state.get("host_requirements")
                        if hosts is not None:
                                hosts = [rf(r) for r in hosts]
                        ud = state.get("update_descriptor")
                        if ud is not None:
                                ud = UpdateDescriptor(*ud)
                        return InstallableUnit(state["id"], state["version"],
                            provides=[ProvidedCapability(*c)
                                for c in state.get("provides", EmptyI)],
                            requirements=[rf(r)
                                for r in state.get("requirements", EmptyI)],
                            meta_requirements=[rf(r) for r in
                                state.get("meta_requirements", EmptyI)],
                            filter=state.get("filter"),
                            singleton=state.get("singleton", False),
                            properties=state.get("properties"),
                            patch=patch, host_requirements=hosts,
                            update_descriptor=ud)
                except (KeyError, TypeError, ValueError,
                    version.VersionError, FilterError) as e:
                        raise MetadataError(state, str(e))


class ResolvedInstallableUnit(object):
        """An installable unit together with the fragments attached to it
        by a resolution.  Two resolved units are equal only if both the
        unit and the attached fragments are equal, so an attachment change
        shows up as a difference between two states."""

        __slots__ = ["unit", "fragments"]

        def __init__(self, unit, fragments=EmptyI):
                self.unit = unwrap(unit)
                self.fragments = tuple(sorted(set(unwrap(f)
                    for f in fragments)))

        def __getattr__(self, name):
                if name in ResolvedInstallableUnit.__slots__:
                        raise AttributeError(name)
                return getattr(self.unit, name)

        def __eq__(self, other):
                if not isinstance(other, ResolvedInstallableUnit):
                        return False
                return self.unit == other.unit and \
                    self.fragments == other.fragments

        def __ne__(self, other):
                return not self.__eq__(other)

        def __hash__(self):
                return hash(self.unit)

        def __str__(self):
                if not self.fragments:
                        return str(self.unit)
                return "{0} [{1}]".format(self.unit,
                    ", ".join(str(f) for f in self.fragments))

        def __repr__(self):
                return "<ResolvedInstallableUnit '{0}'>".format(self)


def unwrap(iu):
        """Return the plain installable unit for 'iu'."""
        if isinstance(iu, ResolvedInstallableUnit):
                return iu.unit
        return iu
