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

"""
ProvisioningPlan and its statuses are the result of planning a change
request.  A plan holds the ordered operands an engine executes to move a
profile from its current state to the planned one, the status of the
planning itself, and, when the installer first has to provision itself,
a nested installer plan which must be executed before this one.

A plan is never modified once the planner has returned it.  Plans can be
saved to and loaded from JSON with _save() and _load().
"""

from collections import namedtuple

import simplejson as json

import iuplanner.client.api_errors as apx
import iuplanner.client.pkgdefs as pkgdefs
import iuplanner.metadata as metadata
import iuplanner.query as query

from iuplanner.misc import EmptyI

# request status kinds
REQUEST_ADDED = "added"
REQUEST_REMOVED = "removed"


class Status(object):
        """The outcome of an operation: a severity, a message and a code,
        optionally with child statuses.  The severity of a status is the
        highest severity found among itself and its children."""

        def __init__(self, severity=pkgdefs.STATUS_OK, message=None,
            code=pkgdefs.CODE_NONE, children=EmptyI, exception=None):
                assert severity in pkgdefs.status_values
                self.__severity = severity
                self.message = message
                self.code = code
                self.children = list(children)
                self.exception = exception

        @property
        def severity(self):
                sev = self.__severity
                for c in self.children:
                        sev = max(sev, c.severity)
                return sev

        def add(self, child):
                self.children.append(child)

        def is_ok(self):
                return self.severity in (pkgdefs.STATUS_OK,
                    pkgdefs.STATUS_INFO, pkgdefs.STATUS_WARNING)

        def __str__(self):
                res = [self.message or ""]
                for c in self.children:
                        res.extend("\t" + l for l in str(c).splitlines())
                return "\n".join(res)

        def __repr__(self):
                return "<{0} severity={1:#x} code={2:d} '{3}'>".format(
                    type(self).__name__, self.severity, self.code,
                    self.message)

        @staticmethod
        def getstate(obj, je_state=None):
                """Returns the serialized state of this object in a format
                that that can be easily stored using JSON, pickle, etc."""
                # Access to protected member; pylint: disable=W0212
                return {
                    "severity": obj.__severity,
                    "message": obj.message,
                    "code": obj.code,
                    "children": [Status.getstate(c) for c in obj.children],
                }

        @staticmethod
        def fromstate(state, jd_state=None):
                """Allocate a new object using previously serialized state
                obtained via getstate()."""
                return Status(state["severity"], state.get("message"),
                    state.get("code", pkgdefs.CODE_NONE),
                    [Status.fromstate(c)
                        for c in state.get("children", EmptyI)])


def ok_status():
        return Status()


def cancel_status():
        return Status(pkgdefs.STATUS_CANCEL, _("Planning was canceled."),
            pkgdefs.CODE_CANCELED)


def error_status(exc, code=None):
        """Return an ERROR status describing exception 'exc'."""
        if code is None:
                code = getattr(exc, "status_code", pkgdefs.CODE_NONE)
        return Status(pkgdefs.STATUS_ERROR, str(exc), code, exception=exc)


class RequestStatus(object):
        """The fate of one unit named by a change request (or removed as a
        side effect of one)."""

        def __init__(self, iu, kind, severity, explanations=None):
                assert kind in (REQUEST_ADDED, REQUEST_REMOVED)
                self.iu = iu
                self.kind = kind
                self.severity = severity
                self.explanations = explanations

        def __str__(self):
                return "{0} {1} {2:#x}".format(self.kind, self.iu,
                    self.severity)

        def __repr__(self):
                return "<RequestStatus {0}>".format(self)


class PlannerStatus(Status):
        """The status of a planning operation.  In addition to the overall
        outcome it records, for every unit the request named, whether the
        request could be honored ('request_changes'); which previously
        requested units go away as a side effect ('side_effects'); the
        explanation of a failure; and the planned future state."""

        def __init__(self, status, conflicts=None, request_changes=None,
            side_effects=None, planned_state=None):
                Status.__init__(self, status.severity, status.message,
                    status.code, status.children, status.exception)
                self.conflicts = conflicts
                self.request_changes = dict(request_changes or {})
                self.side_effects = dict(side_effects or {})
                self.planned_state = planned_state

        @property
        def explanations(self):
                if self.conflicts is None or not self.conflicts.explanations:
                        return frozenset()
                return frozenset(self.conflicts.explanations)


class InstallableUnitOperand(namedtuple("InstallableUnitOperand",
    "first second")):
        """Replaces 'first' with 'second' in the profile; 'first' is None
        for an addition and 'second' is None for a removal."""

        __slots__ = ()

        @property
        def kind(self):
                if self.first is None:
                        return pkgdefs.OP_ADD
                if self.second is None:
                        return pkgdefs.OP_REMOVE
                return pkgdefs.OP_UPDATE

        def __str__(self):
                return "{0} --> {1}".format(self.first, self.second)


class PropertyOperand(namedtuple("PropertyOperand", "key first second")):
        """Changes profile property 'key' from 'first' to 'second'; None
        stands for an absent property."""

        __slots__ = ()

        kind = pkgdefs.OP_PROPERTY

        def __str__(self):
                return "{0} = {1} --> {2}".format(self.key, self.first,
                    self.second)


class InstallableUnitPropertyOperand(namedtuple(
    "InstallableUnitPropertyOperand", "iu key first second")):
        """Changes property 'key' of unit 'iu' in the profile from 'first'
        to 'second'; None stands for an absent property."""

        __slots__ = ()

        kind = pkgdefs.OP_IU_PROPERTY

        def __str__(self):
                return "[{0}] {1} = {2} --> {3}".format(self.iu, self.key,
                    self.first, self.second)


def _unit_state(iu):
        if iu is None:
                return None
        if isinstance(iu, metadata.ResolvedInstallableUnit):
                return {
                    "unit": metadata.InstallableUnit.getstate(iu.unit),
                    "fragments": [metadata.InstallableUnit.getstate(f)
                        for f in iu.fragments],
                }
        return {"unit": metadata.InstallableUnit.getstate(iu)}


def _unit_fromstate(state):
        if state is None:
                return None
        iu = metadata.InstallableUnit.fromstate(state["unit"])
        if "fragments" not in state:
                return iu
        return metadata.ResolvedInstallableUnit(iu, [
            metadata.InstallableUnit.fromstate(f)
            for f in state["fragments"]
        ])


class ProvisioningPlan(object):
        """A class which describes the changes a plan will make to a
        profile."""

        def __init__(self, profile, context=None, status=None):
                self.profile = profile
                self.context = context
                self.__status = status
                self.__operands = []
                self.__installer_plan = None
                self.__future_state = None

        def __str__(self):
                res = ["Plan for profile {0}: {1!r}".format(
                    self.profile_id, self.__status)]
                res += ["\t{0}".format(o) for o in self.__operands]
                if self.__installer_plan is not None:
                        res += ["Installer plan:"]
                        res += ["\t" + l for l in
                            str(self.__installer_plan).splitlines()]
                return "\n".join(res)

        @property
        def profile_id(self):
                if self.profile is None:
                        return None
                return self.profile.profile_id

        def get_status(self):
                return self.__status

        def set_status(self, status):
                self.__status = status

        status = property(get_status, set_status)

        def get_installer_plan(self):
                return self.__installer_plan

        def set_installer_plan(self, plan):
                self.__installer_plan = plan

        installer_plan = property(get_installer_plan, set_installer_plan)

        def get_future_state(self):
                """The units of the planned state as a Queryable, or None
                if planning failed."""
                return self.__future_state

        def set_future_state(self, units):
                self.__future_state = query.Queryable(
                    metadata.unwrap(u) for u in units)

        def add_operand(self, operand):
                self.__operands.append(operand)

        def add_iu(self, iu):
                self.add_operand(InstallableUnitOperand(None, iu))

        def remove_iu(self, iu):
                self.add_operand(InstallableUnitOperand(iu, None))

        def update_iu(self, old, new):
                self.add_operand(InstallableUnitOperand(old, new))

        def set_profile_property(self, key, value):
                old = None
                if self.profile is not None:
                        old = self.profile.get_property(key)
                self.add_operand(PropertyOperand(key, old, value))

        def set_iu_property(self, iu, key, value):
                old = None
                if self.profile is not None:
                        old = self.profile.get_iu_property(iu, key)
                self.add_operand(InstallableUnitPropertyOperand(
                    metadata.unwrap(iu), key, old, value))

        def get_operands(self):
                """The plan's operands, in execution order."""
                return tuple(self.__operands)

        def iu_operands(self):
                return [o for o in self.__operands
                    if isinstance(o, InstallableUnitOperand)]

        def get_additions(self):
                """The units this plan installs, including the new side of
                updates, as a Queryable."""
                return query.Queryable(metadata.unwrap(o.second)
                    for o in self.iu_operands() if o.second is not None)

        def get_removals(self):
                """The units this plan uninstalls, including the old side
                of updates, as a Queryable."""
                return query.Queryable(metadata.unwrap(o.first)
                    for o in self.iu_operands() if o.first is not None)

        def get_updates(self):
                """(old, new) pairs for every update in this plan."""
                return [(metadata.unwrap(o.first), metadata.unwrap(o.second))
                    for o in self.iu_operands()
                    if o.kind == pkgdefs.OP_UPDATE]

        def is_empty(self):
                return not self.__operands

        @staticmethod
        def getstate(obj, je_state=None):
                """Returns the serialized state of this object in a format
                that that can be easily stored using JSON, pickle, etc."""
                # Access to protected member; pylint: disable=W0212

                operands = []
                for o in obj.__operands:
                        if isinstance(o, InstallableUnitOperand):
                                operands.append([pkgdefs.OP_UPDATE,
                                    _unit_state(o.first),
                                    _unit_state(o.second)])
                        elif isinstance(o, PropertyOperand):
                                operands.append([pkgdefs.OP_PROPERTY, o.key,
                                    o.first, o.second])
                        else:
                                operands.append([pkgdefs.OP_IU_PROPERTY,
                                    _unit_state(o.iu), o.key, o.first,
                                    o.second])

                state = {
                    "profile_id": obj.profile_id,
                    "operands": operands,
                    "status": None,
                    "installer_plan": None,
                    "future_state": None,
                }
                if obj.__status is not None:
                        state["status"] = Status.getstate(obj.__status)
                if obj.__installer_plan is not None:
                        state["installer_plan"] = ProvisioningPlan.getstate(
                            obj.__installer_plan)
                if obj.__future_state is not None:
                        state["future_state"] = [
                            metadata.InstallableUnit.getstate(u)
                            for u in obj.__future_state
                        ]

                # add a state version encoding identifier
                state[ProvisioningPlan.__name__] = 0
                return state

        @staticmethod
        def setstate(obj, state, jd_state=None):
                """Update the state of this object using previously serialized
                state obtained via getstate()."""
                # Access to protected member; pylint: disable=W0212

                name = ProvisioningPlan.__name__
                if state.get(name) != 0:
                        raise apx.InvalidPlanError(
                            _("unknown plan version"))

                obj.__operands = []
                for o in state["operands"]:
                        kind = o[0]
                        if kind == pkgdefs.OP_UPDATE:
                                obj.__operands.append(InstallableUnitOperand(
                                    _unit_fromstate(o[1]),
                                    _unit_fromstate(o[2])))
                        elif kind == pkgdefs.OP_PROPERTY:
                                obj.__operands.append(PropertyOperand(*o[1:]))
                        elif kind == pkgdefs.OP_IU_PROPERTY:
                                obj.__operands.append(
                                    InstallableUnitPropertyOperand(
                                    _unit_fromstate(o[1]), *o[2:]))
                        else:
                                raise apx.InvalidPlanError(
                                    _("unknown operand '{0}'").format(kind))

                obj.__status = None
                if state.get("status") is not None:
                        obj.__status = Status.fromstate(state["status"])
                obj.__installer_plan = None
                if state.get("installer_plan") is not None:
                        obj.__installer_plan = ProvisioningPlan.fromstate(
                            state["installer_plan"])
                obj.__future_state = None
                if state.get("future_state") is not None:
                        obj.set_future_state(
                            metadata.InstallableUnit.fromstate(s)
                            for s in state["future_state"])

        @staticmethod
        def fromstate(state, jd_state=None, profile=None):
                """Allocate a new object using previously serialized state
                obtained via getstate()."""
                rv = ProvisioningPlan(profile)
                ProvisioningPlan.setstate(rv, state, jd_state)
                return rv

        def _save(self, fobj):
                """Save a json encoded representation of this plan into the
                specified file object."""

                state = ProvisioningPlan.getstate(self)
                fobj.truncate()
                json.dump(state, fobj)
                fobj.flush()
                del state

        def _load(self, fobj):
                """Load a json encoded representation of a plan from the
                specified file object."""

                assert not self.__operands

                try:
                        fobj.seek(0)
                        state = json.load(fobj)
                except ValueError as e:
                        raise apx.InvalidPlanError(e)

                try:
                        ProvisioningPlan.setstate(self, state)
                except (KeyError, TypeError, IndexError,
                    metadata.MetadataError) as e:
                        raise apx.InvalidPlanError(e)
