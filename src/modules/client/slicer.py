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

"""The slicer computes the part of the available units which can matter
for a request: the transitive closure of the roots' requirements,
restricted to the units and requirements applicable in the environment
being resolved for.  Only the slice is encoded for the solver."""

from collections import deque

import iuplanner.client.api_errors as api_errors
import iuplanner.client.explanation as explanation
import iuplanner.client.pkgdefs as pkgdefs
import iuplanner.client.progress as progress
import iuplanner.query as query

from iuplanner.client import global_settings
from iuplanner.client.plandesc import Status
from iuplanner.misc import EmptyI

logger = global_settings.logger


class Slice(query.Queryable):
        """The units selected by the slicer.  'filtered_out' holds the
        units which would have been considered but for their filter, and
        'universe' the collection the slice was cut from."""

        def __init__(self, units=EmptyI, filtered_out=EmptyI, universe=None,
            environment=None):
                query.Queryable.__init__(self, units)
                self.filtered_out = query.Queryable(filtered_out)
                self.universe = universe
                self.environment = environment


class Slicer(object):
        def __init__(self, universe, environment,
            consider_meta_requirements=True):
                self.__universe = universe
                self.__env = environment
                self.__meta = consider_meta_requirements
                self.__status = None

        def get_status(self):
                """The status of the last slice() call."""
                return self.__status

        def slice(self, roots, check_cancel=None, progtrack=None):
                """Return the Slice reachable from 'roots', or None if one of
                the roots has a requirement which nothing can satisfy.

                Optional requirements are followed like any other one;
                requirements which are not greedy are not followed."""

                if progtrack is None:
                        progtrack = progress.NullProgressTracker()
                batch = max(global_settings.slicer_batch_size, 1)

                self.__status = Status()
                considered = set()
                filtered_out = set()
                to_process = deque()
                roots = list(roots)

                for root in roots:
                        if not self.__env.allow_unit(root):
                                filtered_out.add(root)
                                continue
                        if root not in considered:
                                considered.add(root)
                                to_process.append(root)

                problems = []
                processed = 0
                while to_process:
                        if processed % batch == 0:
                                if check_cancel is not None and \
                                    check_cancel():
                                        self.__status = Status(
                                            pkgdefs.STATUS_CANCEL,
                                            _("Slicing was canceled."),
                                            pkgdefs.CODE_CANCELED)
                                        raise api_errors.CanceledException()
                                progtrack.plan_add_progress(
                                    progtrack.PLAN_SLICE)
                        processed += 1

                        iu = to_process.popleft()
                        for req in iu.all_requirements(meta=self.__meta):
                                if not self.__env.allow_requirement(req):
                                        continue
                                if not req.greedy or req.negative:
                                        continue
                                candidates = []
                                for match in self.__universe.find(req):
                                        if not self.__env.allow_unit(match):
                                                filtered_out.add(match)
                                                continue
                                        candidates.append(match)
                                        if match not in considered:
                                                considered.add(match)
                                                to_process.append(match)
                                if not candidates and not req.optional and \
                                    iu in roots:
                                        problems.append(
                                            explanation.explain_missing(iu,
                                            req, self.__universe, self.__env,
                                            filtered_out))

                logger.debug("slice: {0:d} of {1:d} units, {2:d} filtered "
                    "out".format(len(considered), len(self.__universe),
                    len(filtered_out)))

                if problems:
                        self.__status = explanation.explanation_to_status(
                            problems)
                        self.__status.explanations = frozenset(problems)
                        return None

                return Slice(considered, filtered_out, self.__universe,
                    self.__env)
