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

import inspect
import math
import time

from functools import wraps

from iuplanner.client import global_settings
logger = global_settings.logger


def format_pair(format1, v1, v2):
        """Format a pair of numbers 'v1' and 'v2' representing a fraction, such
        as v1=3 v2=200, such that for all anticipated values of v1 (0 through
        v2) , the result is padded to the same width."""

        v2str = format1.format(v2)
        return format1.format(v1).rjust(len(v2str)) + "/" + v2str


class TrackerItem(object):
        """This class describes an item of interest in tracking progress
        against some "bucket" of work (for example, slicing the units
        reachable from a request).

        This provides a way to wrap together begin and end times of the
        operation, the operation's name, and 'curinfo'-- some additional
        tidbit of information (such as the unit currently being visited)."""

        def __init__(self, name):
                self.starttime = -1 # signal setattr that we're in __init__.
                self.name = name
                self.endtime = None
                self.items = 0
                #
                # Used by clients to track if this item has been printed yet.
                # The object itself does not care about the value of this
                # attribute but will clear it on reset()
                #
                self.printed = False
                self.curinfo = None
                self.starttime = None # done constructing

        def reset(self):
                self.__init__(self.name)

        def __setattr__(self, attrname, value):
                #
                # Start 'starttime' when 'items' is first set (even to zero)
                # Note that starttime is initially set to -1 to avoid starting
                # the timer during __init__().
                #
                if attrname != "items" or self.starttime == -1:
                        self.__dict__[attrname] = value
                        return

                if self.starttime is None:
                        assert not getattr(self, "endtime", None), \
                            "can't set items after explicit done(). " \
                            "Tried to set {0}={1} (is {2})".format(
                            attrname, value, self.__dict__[attrname])
                        self.starttime = time.time()
                self.__dict__[attrname] = value

        def start(self):
                assert self.endtime is None
                if not self.starttime:
                        self.starttime = time.time()

        def done(self):
                self.endtime = time.time()

        def elapsed(self):
                if not self.starttime:
                        return 0.0
                endtime = self.endtime
                if endtime is None:
                        endtime = time.time()
                return endtime - self.starttime

        def __str__(self):
                info = ""
                if self.curinfo:
                        info = " ({0})".format(str(self.curinfo))
                return "<{0}: {1}{2}>".format(self.name, self.items, info)


class GoalTrackerItem(TrackerItem):
        """This class extends TrackerItem to include the notion of progress
        towards some goal which is known in advance of beginning the operation
        (such as reading 3 repositories)."""

        def __init__(self, name):
                TrackerItem.__init__(self, name)
                self.goalitems = None

        def reset(self):
                # See comment in superclass.
                self.__init__(self.name)

        def __setattr__(self, attrname, value):
                # Special behavior only for 'items' and only when not resetting
                if attrname != "items" or self.starttime == -1:
                        self.__dict__[attrname] = value
                        return

                assert not getattr(self, "endtime", None), \
                    "can't set values after explicit done(). " \
                    "Tried to set {0}={1} (is {2})".format(
                    attrname, value, self.__dict__[attrname])

                # see if this is the first time we're setting items
                if self.starttime is None:
                        if self.goalitems is None:
                                raise RuntimeError(
                                    "Cannot alter items until goalitems is set")
                        self.starttime = time.time()
                self.__dict__[attrname] = value

        def done(self, goalcheck=True):
                # Arguments number differs from overridden method;
                #     pylint: disable=W0221
                TrackerItem.done(self)

                # See if we indeed met our goal.
                if goalcheck and not self.metgoal():
                        exstr = _("Goal mismatch '{name}': "
                            "expected goal: {expected}, "
                            "current value: {current}").format(
                            name=self.name,
                            expected=self.goalitems,
                            current=self.items)
                        logger.error("\n" + exstr)
                        assert self.metgoal(), exstr

        def metgoal(self):
                if self.items == 0 and self.goalitems is None:
                        return True
                return self.items == self.goalitems

        def pair(self):
                if self.goalitems is None:
                        assert self.items == 0
                        return format_pair("{0:d}", 0, 0)
                return format_pair("{0:d}", self.items, self.goalitems)

        def pctdone(self):
                """Returns progress towards a goal as a percentage.
                i.e. 37 / 100 would yield 37.0"""
                if self.goalitems is None or self.goalitems == 0:
                        return 0
                return math.floor(100.0 * self.items / self.goalitems)

        def __str__(self):
                info = ""
                if self.curinfo:
                        info = " ({0})".format(str(self.curinfo))
                return "<{0}: {1}{2}>".format(self.name, self.pair(), info)


def pt_abstract(func):
        # Unused argument 'args', 'kwargs'; pylint: disable=W0613
        @wraps(func)
        def enforce_abstract(*args, **kwargs):
                raise NotImplementedError("{0} is abstract in "
                    "superclass; you must implement it in your "
                    "subclass.".format(func.__name__))

        return enforce_abstract


class ProgressTrackerBackend(object):
        """The interfaces a progress tracker must implement to render
        output."""

        def __init__(self):
                pass

        @pt_abstract
        def _plan_output(self, planitem, last=False): pass

        @pt_abstract
        def _plan_output_all_done(self): pass


class ProgressTracker(ProgressTrackerBackend):
        """This class is used by the planner to track progress through the
        phases of a resolution: gathering units, slicing, encoding,
        solving, explaining failures and generating operations.

        Subclasses render output by implementing the methods of
        ProgressTrackerBackend."""

        PLAN_GATHER = 100
        PLAN_SLICE = 101
        PLAN_PROJECT = 102
        PLAN_SOLVE = 103
        PLAN_EXPLAIN = 104
        PLAN_OPGEN = 105

        def __init__(self):
                ProgressTrackerBackend.__init__(self)
                self.reset()

        def reset(self):
                # Attribute defined outside __init__; pylint: disable=W0201

                # Used to measure elapsed time of entire planning; not
                # otherwise rendered to the user.
                self.plan_generic = TrackerItem("")

                self._planitems = {
                        self.PLAN_GATHER:
                            GoalTrackerItem(_("Reading repositories")),
                        self.PLAN_SLICE:
                            TrackerItem(_("Computing slice")),
                        self.PLAN_PROJECT:
                            TrackerItem(_("Encoding constraints")),
                        self.PLAN_SOLVE:
                            TrackerItem(_("Running solver")),
                        self.PLAN_EXPLAIN:
                            TrackerItem(_("Explaining failure")),
                        self.PLAN_OPGEN:
                            TrackerItem(_("Generating operations")),
                }

        def plan_all_start(self):
                self.plan_generic.reset()
                self.plan_generic.start()

        def plan_start(self, planid, goal=None):
                planitem = self._planitems[planid]
                planitem.reset()
                if goal:
                        if not isinstance(planitem, GoalTrackerItem):
                                raise RuntimeError(
                                    "can't set goal on non-goal tracker")
                        planitem.goalitems = goal
                planitem.start()

        def plan_add_progress(self, planid, nitems=1):
                planitem = self._planitems[planid]
                planitem.items += nitems
                self._plan_output(planitem)
                planitem.printed = True

        def plan_done(self, planid):
                planitem = self._planitems[planid]
                planitem.done()
                if planitem.printed:
                        self._plan_output(planitem, last=True)

        def plan_all_done(self):
                self.plan_generic.done()
                self._plan_output_all_done()

        def plan_item(self, planid):
                return self._planitems[planid]


class QuietProgressTracker(ProgressTracker):
        """This progress tracker outputs nothing, but is semantically
        intended to be "quiet."  See also NullProgressTracker below."""

        #
        # At construction, we inspect the ProgressTrackerBackend abstract
        # superclass, and implement all of its methods as empty stubs.
        #
        def __init__(self):
                ProgressTracker.__init__(self)

                def __donothing(*args, **kwargs):
                        # Unused argument 'args', 'kwargs';
                        #     pylint: disable=W0613
                        pass

                for methname in ProgressTrackerBackend.__dict__:
                        if methname == "__init__":
                                continue
                        boundmeth = getattr(self, methname)
                        if not inspect.ismethod(boundmeth):
                                continue
                        setattr(self, methname, __donothing)


class NullProgressTracker(QuietProgressTracker):
        """This ProgressTracker is semantically intended to be a no-op
        progress tracker; it is what the planner uses when the caller
        supplies none."""


class LoggingProgressTracker(ProgressTracker):
        """Reports planning progress to the planner's logger at debug
        level."""

        def _plan_output(self, planitem, last=False):
                if last:
                        logger.debug("{0} done in {1:.3f}s".format(
                            planitem.name, planitem.elapsed()))
                elif not planitem.printed:
                        logger.debug("{0} ...".format(planitem.name))

        def _plan_output_all_done(self):
                logger.debug(_("Planning completed in {0:.3f} seconds").format(
                    self.plan_generic.elapsed()))
