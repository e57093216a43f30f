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

# Missing docstring; pylint: disable=C0111

import logging
import os
import sys

__all__ = ["global_settings"]

class _LogFilter(logging.Filter):
        def __init__(self, max_level=logging.CRITICAL):
                logging.Filter.__init__(self)
                self.max_level = max_level

        def filter(self, record):
                return record.levelno <= self.max_level


class _StreamHandler(logging.StreamHandler):
        """Simple subclass to ignore exceptions raised during logging output."""

        def handleError(self, record):
                # Ignore exceptions raised during output to stdout/stderr.
                return


class GlobalSettings(object):
        """ This class defines settings which are global
            to the planner instance """

        def __init__(self):
                object.__init__(self)
                self.__info_log_handler = None
                self.__error_log_handler = None
                self.__verbose = False

                # Name of the python-sat solver backing the planner.
                self.sat_solver_default = "m22"
                self.sat_solver = os.environ.get("IUPLANNER_SAT_SOLVER",
                    self.sat_solver_default)

                # Number of conflicts the solver may run into before control
                # returns to the planner to check for cancellation.
                self.conflict_budget_default = 1000
                try:
                        self.conflict_budget = int(os.environ.get(
                            "IUPLANNER_CONFLICT_BUDGET",
                            self.conflict_budget_default))
                        if self.conflict_budget <= 0:
                                raise ValueError(self.conflict_budget)
                except ValueError:
                        self.conflict_budget = self.conflict_budget_default

                # Number of units the slicer visits between checks for
                # cancellation.
                self.slicer_batch_size_default = 64
                try:
                        self.slicer_batch_size = int(os.environ.get(
                            "IUPLANNER_SLICER_BATCH",
                            self.slicer_batch_size_default))
                        if self.slicer_batch_size <= 0:
                                raise ValueError(self.slicer_batch_size)
                except ValueError:
                        self.slicer_batch_size = \
                            self.slicer_batch_size_default

                # Whether explanations are computed for failed resolutions
                # unless the provisioning context says otherwise.
                self.explain_default = True
                try:
                        self.explain = bool(int(os.environ.get(
                            "IUPLANNER_EXPLAIN", 1)))
                except ValueError:
                        self.explain = self.explain_default

                self.reset_logging()

        def __get_error_log_handler(self):
                return self.__error_log_handler

        def __get_info_log_handler(self):
                return self.__info_log_handler

        def __get_verbose(self):
                return self.__verbose

        def __set_error_log_handler(self, val):
                logger = logging.getLogger("iuplanner")
                if self.__error_log_handler:
                        logger.removeHandler(self.__error_log_handler)
                self.__error_log_handler = val
                if val:
                        logger.addHandler(val)

        def __set_info_log_handler(self, val):
                logger = logging.getLogger("iuplanner")
                if self.__info_log_handler:
                        logger.removeHandler(self.__info_log_handler)
                self.__info_log_handler = val
                if val:
                        logger.addHandler(val)

        def __set_verbose(self, val):
                if self.__info_log_handler:
                        if val:
                                level = logging.DEBUG
                        else:
                                level = logging.INFO
                        self.__info_log_handler.setLevel(level)
                self.__verbose = val

        @property
        def logger(self):
                # Method could be a function; pylint: disable=R0201
                return logging.getLogger("iuplanner")

        def reset_logging(self):
                """Resets planner logging to its default state.  This will
                cause all logging.INFO entries to go to sys.stdout, and all
                entries of logging.WARNING or higher to go to sys.stderr."""

                logger = logging.getLogger("iuplanner")
                logger.setLevel(logging.DEBUG)

                # Don't pass messages that are rejected to the root logger.
                logger.propagate = 0

                # By default, log all informational messages, but not warnings
                # and above to stdout.
                info_h = _StreamHandler(sys.stdout)

                # Minimum logging level for informational messages.
                if self.verbose:
                        info_h.setLevel(logging.DEBUG)
                else:
                        info_h.setLevel(logging.INFO)

                log_fmt = logging.Formatter()

                # Enforce maximum logging level for informational messages.
                info_f = _LogFilter(logging.INFO)
                info_h.addFilter(info_f)
                info_h.setFormatter(log_fmt)

                # By default, log all warnings and above to stderr.
                error_h = _StreamHandler(sys.stderr)
                error_h.setFormatter(log_fmt)
                error_h.setLevel(logging.WARNING)

                # Stash the handles so they can be removed later.
                self.info_log_handler = info_h
                self.error_log_handler = error_h

        error_log_handler = property(__get_error_log_handler,
            __set_error_log_handler)

        info_log_handler = property(__get_info_log_handler,
            __set_info_log_handler)

        verbose = property(__get_verbose, __set_verbose)


global_settings = GlobalSettings()
