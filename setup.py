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
# Copyright (c) 2026, Oracle and/or its affiliates. All rights reserved.
#

from setuptools import setup

packages = [
        'iuplanner',
        'iuplanner.client',
]

install_requires = [
        'python-sat',
        'simplejson',
]

setup(
    name = 'iuplanner',
    version = '0.1',
    description = 'Dependency resolution and provisioning planner',
    package_dir = {
        'iuplanner':'src/modules',
        'iuplanner.client':'src/modules/client',
    },
    packages = packages,
    install_requires = install_requires,
    extras_require = {'test': ['pytest']},
    python_requires = '>=3.6',
    )
