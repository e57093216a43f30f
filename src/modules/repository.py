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

"""Metadata repositories: sources of installable units the planner reads
through queries.  Repositories either live in memory or are read from a
JSON document of the form:

    {
        "version": 1,
        "name": "...",
        "units": [ <InstallableUnit state>, ... ]
    }
"""

import simplejson as json

import iuplanner.client.api_errors as api_errors
import iuplanner.metadata as metadata
import iuplanner.query as query

from iuplanner.misc import EmptyI

CURRENT_VERSION = 1


def parse(data=None, fileobj=None, location=None):
        """Reads the JSON repository document from 'data', the file-like
        object 'fileobj' or the file at path 'location' and returns a
        tuple of (name, [units]).

        RepositoryUnreadable is raised if the document can't be read or
        isn't a valid repository document."""

        if data is None and location is None and fileobj is None:
                raise api_errors.RepositoryUnreadable(location,
                    _("no repository data was provided"))

        try:
                if data is not None:
                        dump_struct = json.loads(data)
                elif fileobj is not None:
                        dump_struct = json.load(fileobj)
                else:
                        with open(location, "r") as f:
                                dump_struct = json.load(f)
        except EnvironmentError as e:
                raise api_errors.RepositoryUnreadable(location, e)
        except ValueError as e:
                # Not a valid JSON file.
                raise api_errors.RepositoryUnreadable(location, e)

        try:
                ver = int(dump_struct["version"])
        except (KeyError, TypeError):
                raise api_errors.RepositoryUnreadable(location,
                    _("missing version"))
        except ValueError:
                raise api_errors.RepositoryUnreadable(location,
                    _("invalid version"))

        if ver > CURRENT_VERSION:
                raise api_errors.RepositoryUnreadable(location,
                    _("unsupported version {0:d}").format(ver))

        try:
                units = [
                    metadata.InstallableUnit.fromstate(s)
                    for s in dump_struct.get("units", EmptyI)
                ]
        except (metadata.MetadataError, AttributeError) as e:
                raise api_errors.RepositoryUnreadable(location, e)
        return dump_struct.get("name", location), units


def write(fileobj, units, name=None):
        """Writes the JSON repository document for 'units' to the file-like
        object 'fileobj'."""

        dump_struct = {
            "version": CURRENT_VERSION,
            "name": name,
            "units": [metadata.InstallableUnit.getstate(u) for u in units],
        }
        json.dump(dump_struct, fileobj, ensure_ascii=False,
            allow_nan=False, indent=2, sort_keys=True)
        fileobj.write("\n")


class MetadataRepository(object):
        """A read-only source of installable units."""

        def __init__(self, location, units=EmptyI, name=None):
                self.location = location
                self.name = name or location
                self.__units = query.Queryable(units)

        def query(self, q):
                """Return the units in this repository matching 'q'."""
                return self.__units.query(q)

        def __len__(self):
                return len(self.__units)

        def __str__(self):
                return self.name

        @staticmethod
        def load(location):
                name, units = parse(location=location)
                return MetadataRepository(location, units, name=name)


class RepositoryManager(object):
        """Keeps track of the repositories the planner may consult.
        Repositories can be registered with their contents already in
        memory, or by location alone in which case they are read from
        disk the first time they're loaded."""

        def __init__(self):
                self.__known = []
                self.__loaded = {}

        def add_repository(self, location, repo=None):
                if location not in self.__known:
                        self.__known.append(location)
                if repo is not None:
                        self.__loaded[location] = repo
                else:
                        self.__loaded.pop(location, None)

        def remove_repository(self, location):
                if location in self.__known:
                        self.__known.remove(location)
                self.__loaded.pop(location, None)

        def get_known_repositories(self):
                return tuple(self.__known)

        def load_repository(self, location):
                """Return the repository at 'location'; raises
                RepositoryUnreadable if it can't be read."""

                repo = self.__loaded.get(location)
                if repo is not None:
                        return repo
                repo = MetadataRepository.load(location)
                self.__loaded[location] = repo
                return repo
