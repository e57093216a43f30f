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
Definitions for values used by the planner.
"""

# status severities; values can be or'ed together and compared, the
# highest severity of a tree of statuses is the severity of its root
STATUS_OK      = 0x00 # Planning succeeded.
STATUS_INFO    = 0x01 # Informational, e.g. a side effect of a request.
STATUS_WARNING = 0x02 # Planning succeeded with something to report.
STATUS_ERROR   = 0x04 # Planning failed.
STATUS_CANCEL  = 0x08 # Planning was canceled.
status_values  = frozenset([
    STATUS_OK,
    STATUS_INFO,
    STATUS_WARNING,
    STATUS_ERROR,
    STATUS_CANCEL,
])

# status codes
CODE_NONE                     = 0
CODE_UNSATISFIABLE            = 1 # No consistent set of units exists.
CODE_INVALID_REQUEST          = 2 # The change request is malformed.
CODE_CANCELED                 = 3 # The caller canceled planning.
CODE_NESTED_BOOTSTRAP_FAILURE = 4 # Meta-requirements could not be met.
CODE_PROFILE_OUT_OF_SYNC      = 5 # Agent profile changed since the request.

# per-unit property naming the rule by which a root was requested
INCLUSION_RULES        = "iuplanner.inclusion.rules"
INCLUSION_STRICT       = "STRICT"
INCLUSION_OPTIONAL     = "OPTIONAL"
inclusion_values       = frozenset([
    INCLUSION_STRICT,
    INCLUSION_OPTIONAL,
])

# profile properties
PROP_ENVIRONMENTS      = "iuplanner.environments"
PROP_RESOLVE_META      = "iuplanner.resolve.meta"

# provisioning context properties
CTX_INCLUDE_PROFILE_IUS = "iuplanner.include.profile.ius"
CTX_EXPLANATION         = "iuplanner.explanation"

# id prefix of the synthetic unit carrying outstanding meta-requirements
ACTIONS_ROOT_PREFIX    = "iuplanner.actions.root."

# id prefix of the synthetic unit standing for the whole profile
PROFILE_ROOT_PREFIX    = "iuplanner.profile.root."

# operand kinds
OP_ADD                 = "add"
OP_REMOVE              = "remove"
OP_UPDATE              = "update"
OP_PROPERTY            = "property"
OP_IU_PROPERTY         = "iu-property"
op_values              = frozenset([
    OP_ADD,
    OP_REMOVE,
    OP_UPDATE,
    OP_PROPERTY,
    OP_IU_PROPERTY,
])
