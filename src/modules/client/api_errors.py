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

# pkg classes
import iuplanner.client.pkgdefs as pkgdefs

# EmptyI for argument defaults; can't import from misc due to circular
# dependency.
EmptyI = tuple()

class ApiException(Exception):
        def __init__(self, *args):
                Exception.__init__(self)
                self.__verbose_info = []

        def add_verbose_info(self, info):
                self.__verbose_info.extend(info)

        @property
        def verbose_info(self):
                return self.__verbose_info

        # the status code the planner reports for this error
        status_code = pkgdefs.CODE_NONE


class CanceledException(ApiException):
        status_code = pkgdefs.CODE_CANCELED

        def __str__(self):
                return _("The planning operation was canceled.")


class InvalidRequestError(ApiException):
        """Used to indicate that a change request is malformed and was
        rejected before any resolution took place."""

        status_code = pkgdefs.CODE_INVALID_REQUEST

        def __init__(self, conflicting=EmptyI, bad_rules=EmptyI,
            bad_units=EmptyI):
                ApiException.__init__(self)
                self.conflicting = conflicting
                self.bad_rules = bad_rules
                self.bad_units = bad_units

        def __str__(self):
                res = []
                if self.conflicting:
                        s = _("The following units were requested for both "
                            "addition and removal:")
                        res += [s]
                        res += ["\t{0}".format(u) for u in self.conflicting]
                if self.bad_rules:
                        s = _("The following inclusion rules are not "
                            "valid:")
                        res += [s]
                        res += ["\t{0}: {1}".format(u, r)
                            for u, r in self.bad_rules]
                if self.bad_units:
                        s = _("The following request entries are not "
                            "installable units:")
                        res += [s]
                        res += ["\t{0!r}".format(u) for u in self.bad_units]
                return "\n".join(res)


class RepositoryUnreadable(ApiException):
        """Used to indicate that a metadata repository could not be
        loaded."""

        def __init__(self, location, reason=None):
                ApiException.__init__(self)
                self.location = location
                self.reason = reason

        def __str__(self):
                if self.reason:
                        return _("Unable to read repository '{loc}': "
                            "{reason}").format(loc=self.location,
                            reason=self.reason)
                return _("Unable to read repository '{0}'.").format(
                    self.location)


class UnsatisfiableError(ApiException):
        """Used to indicate that no set of units satisfies all of the
        constraints of a change request.  'explanations' is the (minimal)
        set of reasons found; see iuplanner.client.explanation."""

        status_code = pkgdefs.CODE_UNSATISFIABLE

        def __init__(self, explanations=EmptyI):
                ApiException.__init__(self)
                self.explanations = tuple(explanations)

        def __str__(self):
                res = [_("Cannot complete the request.  No solution was "
                    "found for the following reasons:")]
                if not self.explanations:
                        res += ["\t" + _("No explanation is available.")]
                res += ["\t{0}".format(e) for e in self.explanations]
                return "\n".join(res)


class NestedBootstrapFailure(ApiException):
        """Used to indicate that the meta-requirements of the target state
        could not be installed into the profile running the installer.
        'status' is the status of the nested resolution."""

        status_code = pkgdefs.CODE_NESTED_BOOTSTRAP_FAILURE

        def __init__(self, status, cohosted=True):
                ApiException.__init__(self)
                self.status = status
                self.cohosted = cohosted

        def __str__(self):
                if self.cohosted:
                        return _("The actions required by the requested "
                            "units are incompatible with the installer.")
                return _("Cannot install the prerequisites needed to "
                    "perform the requested operation.")


class ProfileOutOfSyncError(ApiException):
        """Used to indicate that the agent profile changed between the time
        the request was built and the time it was planned."""

        status_code = pkgdefs.CODE_PROFILE_OUT_OF_SYNC

        def __init__(self, profile_id, expected=None, actual=None):
                ApiException.__init__(self)
                self.profile_id = profile_id
                self.expected = expected
                self.actual = actual

        def __str__(self):
                return _("The profile '{pid}' is out of sync with the "
                    "request (expected timestamp {exp}, found {act}).  "
                    "Please build the request again.").format(
                    pid=self.profile_id, exp=self.expected, act=self.actual)


class InvalidPlanError(ApiException):
        """Used to indicate that a saved plan could not be loaded."""

        def __init__(self, reason=None):
                ApiException.__init__(self)
                self.reason = reason

        def __str__(self):
                return _("The saved plan is not valid: {0}").format(
                    self.reason)
