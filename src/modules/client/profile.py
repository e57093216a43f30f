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

"""Profiles, the change requests made against them and the context in
which a change request is planned."""

import copy

import iuplanner.client.api_errors as api_errors
import iuplanner.client.pkgdefs as pkgdefs
import iuplanner.metadata as metadata
import iuplanner.query as query

from iuplanner.client import global_settings
from iuplanner.client.variant import Environment
from iuplanner.misc import EmptyI, timestamp_ms


class Profile(object):
        """A named set of installed units together with per-unit and
        profile-wide string properties.  The planner only ever reads
        profiles; the methods which modify one are for the profile's
        owner."""

        def __init__(self, profile_id, ius=EmptyI, properties=None,
            iu_properties=None, timestamp=None):
                self.profile_id = profile_id
                if timestamp is None:
                        timestamp = timestamp_ms()
                self.timestamp = timestamp
                self.__ius = set()
                self.__properties = dict(properties or {})
                self.__iu_properties = {}
                for iu in ius:
                        self.add_iu(iu)
                for iu, props in (iu_properties or {}).items():
                        for k, v in props.items():
                                self.set_iu_property(iu, k, v)

        def __contains__(self, iu):
                return metadata.unwrap(iu) in self.__ius

        def __len__(self):
                return len(self.__ius)

        def __str__(self):
                return self.profile_id

        def ius(self):
                """The installed units as a frozenset."""
                return frozenset(self.__ius)

        def query(self, q):
                return query.Queryable(self.__ius).query(q)

        def add_iu(self, iu, properties=None):
                iu = metadata.unwrap(iu)
                self.__ius.add(iu)
                for k, v in (properties or {}).items():
                        self.set_iu_property(iu, k, v)

        def remove_iu(self, iu):
                iu = metadata.unwrap(iu)
                self.__ius.discard(iu)
                self.__iu_properties.pop(iu, None)

        def get_property(self, key, default=None):
                return self.__properties.get(key, default)

        def get_properties(self):
                return dict(self.__properties)

        def set_property(self, key, value):
                self.__properties[key] = value

        def remove_property(self, key):
                self.__properties.pop(key, None)

        def get_iu_property(self, iu, key, default=None):
                props = self.__iu_properties.get(metadata.unwrap(iu))
                if props is None:
                        return default
                return props.get(key, default)

        def get_iu_properties(self, iu):
                return dict(self.__iu_properties.get(metadata.unwrap(iu), {}))

        def set_iu_property(self, iu, key, value):
                self.__iu_properties.setdefault(metadata.unwrap(iu),
                    {})[key] = value

        def remove_iu_property(self, iu, key):
                props = self.__iu_properties.get(metadata.unwrap(iu))
                if props is not None:
                        props.pop(key, None)

        def marked_ius(self):
                """The installed units carrying an inclusion rule, i.e. the
                ones which were explicitly requested."""
                return frozenset(iu for iu in self.__ius
                    if self.get_iu_property(iu,
                        pkgdefs.INCLUSION_RULES) is not None)

        def environment(self):
                return Environment.from_properties(self.__properties)

        def resolve_meta_requirements(self):
                """Whether meta-requirements are taken into account for this
                profile; they are unless the profile says otherwise."""
                return self.get_property(pkgdefs.PROP_RESOLVE_META,
                    "true").lower() != "false"

        def copy(self, profile_id=None, timestamp=None):
                p = Profile(profile_id or self.profile_id, self.__ius,
                    self.__properties, self.__iu_properties,
                    timestamp=timestamp or self.timestamp)
                return p


class ProfileChangeRequest(object):
        """The changes requested against one profile: units to add and
        remove, and profile or per-unit properties to set and remove.

        If 'absolute' is set, the additions and removals describe the
        complete target state and the planner does no resolution at
        all."""

        def __init__(self, profile):
                self.profile = profile
                self.absolute = False
                self.__additions = []
                self.__removals = []
                self.__extra_requirements = []
                self.__prop_changes = {}
                self.__prop_removals = []
                self.__iu_prop_changes = {}
                self.__iu_prop_removals = {}

        @property
        def additions(self):
                return tuple(self.__additions)

        @property
        def removals(self):
                return tuple(self.__removals)

        @property
        def extra_requirements(self):
                return tuple(self.__extra_requirements)

        @property
        def property_changes(self):
                return dict(self.__prop_changes)

        @property
        def property_removals(self):
                return tuple(self.__prop_removals)

        @property
        def iu_property_changes(self):
                return dict((iu, dict(props))
                    for iu, props in self.__iu_prop_changes.items())

        @property
        def iu_property_removals(self):
                return dict((iu, tuple(keys))
                    for iu, keys in self.__iu_prop_removals.items())

        def add(self, iu):
                iu = metadata.unwrap(iu)
                if iu not in self.__additions:
                        self.__additions.append(iu)

        def add_all(self, ius):
                for iu in ius:
                        self.add(iu)

        def remove(self, iu):
                iu = metadata.unwrap(iu)
                if iu not in self.__removals:
                        self.__removals.append(iu)

        def remove_all(self, ius):
                for iu in ius:
                        self.remove(iu)

        def add_extra_requirements(self, reqs):
                """Requirements the target state must satisfy in addition to
                those of the requested units."""
                self.__extra_requirements.extend(reqs)

        def set_profile_property(self, key, value):
                if key in self.__prop_removals:
                        self.__prop_removals.remove(key)
                self.__prop_changes[key] = value

        def remove_profile_property(self, key):
                self.__prop_changes.pop(key, None)
                if key not in self.__prop_removals:
                        self.__prop_removals.append(key)

        def set_iu_property(self, iu, key, value):
                iu = metadata.unwrap(iu)
                removals = self.__iu_prop_removals.get(iu)
                if removals and key in removals:
                        removals.remove(key)
                self.__iu_prop_changes.setdefault(iu, {})[key] = value

        def remove_iu_property(self, iu, key):
                iu = metadata.unwrap(iu)
                changes = self.__iu_prop_changes.get(iu)
                if changes:
                        changes.pop(key, None)
                removals = self.__iu_prop_removals.setdefault(iu, [])
                if key not in removals:
                        removals.append(key)

        def set_inclusion_rule(self, iu, rule):
                self.set_iu_property(iu, pkgdefs.INCLUSION_RULES, rule)

        def remove_inclusion_rule(self, iu):
                self.remove_iu_property(iu, pkgdefs.INCLUSION_RULES)

        def get_inclusion_rule(self, iu):
                """The inclusion rule requested for 'iu' by this request, or
                None."""
                return self.__iu_prop_changes.get(metadata.unwrap(iu),
                    {}).get(pkgdefs.INCLUSION_RULES)

        def get_profile_properties(self):
                """The profile's properties as they will be once this
                request has been applied."""
                props = self.profile.get_properties()
                for k in self.__prop_removals:
                        props.pop(k, None)
                props.update(self.__prop_changes)
                return props

        def validate(self):
                """Raise InvalidRequestError if this request is malformed."""

                bad_units = [u for u in self.__additions + self.__removals
                    if not isinstance(u, metadata.InstallableUnit)]
                conflicting = [u for u in self.__additions
                    if u in self.__removals]
                bad_rules = []
                for iu, props in self.__iu_prop_changes.items():
                        rule = props.get(pkgdefs.INCLUSION_RULES)
                        if rule is not None and \
                            rule not in pkgdefs.inclusion_values:
                                bad_rules.append((iu, rule))
                if bad_units or conflicting or bad_rules:
                        raise api_errors.InvalidRequestError(
                            conflicting=conflicting, bad_rules=bad_rules,
                            bad_units=bad_units)

        def copy(self):
                """A deep copy of the request's bookkeeping; the profile and
                the units themselves are shared."""
                rv = copy.copy(self)
                # Access to protected member; pylint: disable=W0212
                rv.__additions = list(self.__additions)
                rv.__removals = list(self.__removals)
                rv.__extra_requirements = list(self.__extra_requirements)
                rv.__prop_changes = dict(self.__prop_changes)
                rv.__prop_removals = list(self.__prop_removals)
                rv.__iu_prop_changes = dict((k, dict(v))
                    for k, v in self.__iu_prop_changes.items())
                rv.__iu_prop_removals = dict((k, list(v))
                    for k, v in self.__iu_prop_removals.items())
                return rv

        def __str__(self):
                res = ["==Additions=="]
                res += ["\t{0}".format(u) for u in self.__additions]
                res += ["==Removals=="]
                res += ["\t{0}".format(u) for u in self.__removals]
                res += ["==Property changes=="]
                res += ["\t{0}={1}".format(k, v)
                    for k, v in sorted(self.__prop_changes.items())]
                res += ["\t-{0}".format(k) for k in self.__prop_removals]
                return "\n".join(res)


class ProvisioningContext(object):
        """The context a change request is planned in: where units come
        from and how the planner should behave.

        'repositories' lists the repository locations to consult; None
        means every repository known to the repository manager.
        'extra_ius' are units made available in addition to those.
        'additional_requirements' must be met by the planned state on top
        of what the request asks for.  'agent_profile' is the profile of
        the installer which will carry out the plan, if it is known."""

        def __init__(self, repositories=None, extra_ius=EmptyI,
            properties=None, agent_profile=None,
            additional_requirements=EmptyI):
                self.repositories = repositories
                self.extra_ius = tuple(extra_ius)
                self.additional_requirements = tuple(
                    additional_requirements)
                self.properties = dict(properties or {})
                self.agent_profile = agent_profile

        def get_property(self, key, default=None):
                return self.properties.get(key, default)

        def set_property(self, key, value):
                self.properties[key] = value

        @property
        def include_profile_ius(self):
                return str(self.properties.get(
                    pkgdefs.CTX_INCLUDE_PROFILE_IUS, "true")).lower() != \
                    "false"

        @property
        def explain(self):
                val = self.properties.get(pkgdefs.CTX_EXPLANATION)
                if val is None:
                        return global_settings.explain
                return str(val).lower() != "false"
