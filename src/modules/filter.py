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

"""LDAP style filter expressions used to limit installable units and
requirements to the environments they apply to, e.g.:

    (&(osgi.os=linux)(|(osgi.arch=x86_64)(osgi.arch=aarch64)))
"""

import re

import iuplanner.version as version

# operators
_OP_EQ = "="
_OP_APPROX = "~="
_OP_GE = ">="
_OP_LE = "<="
_OP_PRESENT = "=*"

class FilterError(Exception):
        """Used to indicate that a filter expression is malformed."""

        def __init__(self, text, pos=None, reason=None):
                Exception.__init__(self)
                self.text = text
                self.pos = pos
                self.reason = reason

        def __str__(self):
                if self.pos is None:
                        return _("Invalid filter '{0}': {1}").format(
                            self.text, self.reason)
                return _("Invalid filter '{text}' at position {pos:d}: "
                    "{reason}").format(text=self.text, pos=self.pos,
                    reason=self.reason)


class _Parser(object):
        """Recursive descent parser producing a tree of tuples:

            ("&", [node, ...]) ("|", [node, ...]) ("!", node)
            (op, key, value) where value is a list of literal strings
            separated by wildcards for _OP_EQ.
        """

        def __init__(self, text):
                self.text = text
                self.pos = 0

        def error(self, reason):
                raise FilterError(self.text, self.pos, reason)

        def skip_ws(self):
                while self.pos < len(self.text) and \
                    self.text[self.pos].isspace():
                        self.pos += 1

        def expect(self, c):
                self.skip_ws()
                if self.pos >= len(self.text) or self.text[self.pos] != c:
                        self.error(_("expected '{0}'").format(c))
                self.pos += 1

        def parse(self):
                node = self.parse_filter()
                self.skip_ws()
                if self.pos != len(self.text):
                        self.error(_("trailing characters"))
                return node

        def parse_filter(self):
                self.expect("(")
                self.skip_ws()
                if self.pos >= len(self.text):
                        self.error(_("unexpected end of filter"))
                c = self.text[self.pos]
                if c in "&|":
                        self.pos += 1
                        children = []
                        self.skip_ws()
                        while self.pos < len(self.text) and \
                            self.text[self.pos] == "(":
                                children.append(self.parse_filter())
                                self.skip_ws()
                        if not children:
                                self.error(_("empty filter list"))
                        node = (c, children)
                elif c == "!":
                        self.pos += 1
                        node = ("!", self.parse_filter())
                else:
                        node = self.parse_item()
                self.expect(")")
                return node

        def parse_item(self):
                start = self.pos
                while self.pos < len(self.text) and \
                    self.text[self.pos] not in "=~<>()":
                        self.pos += 1
                key = self.text[start:self.pos].strip()
                if not key:
                        self.error(_("missing attribute name"))

                op = self.text[self.pos:self.pos + 2]
                if op in (_OP_APPROX, _OP_GE, _OP_LE):
                        self.pos += 2
                elif op[:1] == _OP_EQ:
                        op = _OP_EQ
                        self.pos += 1
                else:
                        self.error(_("invalid operator"))

                value = self.parse_value()
                if op == _OP_EQ:
                        if value == ["", ""]:
                                return (_OP_PRESENT, key.lower(), None)
                        return (op, key.lower(), value)
                if len(value) != 1:
                        self.error(_("wildcards are only allowed with '='"))
                return (op, key.lower(), value[0])

        def parse_value(self):
                """Return the value as a list of literal segments; the list
                has one more entry than the number of wildcards."""
                segments = []
                cur = []
                while self.pos < len(self.text):
                        c = self.text[self.pos]
                        if c == ")":
                                break
                        if c == "(":
                                self.error(_("unescaped '('"))
                        if c == "\\":
                                self.pos += 1
                                if self.pos >= len(self.text):
                                        self.error(_("dangling escape"))
                                cur.append(self.text[self.pos])
                        elif c == "*":
                                segments.append("".join(cur))
                                cur = []
                        else:
                                cur.append(c)
                        self.pos += 1
                segments.append("".join(cur))
                return segments


def _compare(actual, wanted):
        """Ordering comparison used by '>=' and '<='; versions compare as
        versions, everything else as strings."""
        try:
                a = version.Version(actual)
                w = version.Version(wanted)
        except version.IllegalVersion:
                a, w = actual, wanted
        if a < w:
                return -1
        if a > w:
                return 1
        return 0


def _normalize(s):
        return "".join(s.split()).lower()


class Filter(object):
        """A compiled filter expression.  Filters are immutable and compare
        equal when their text is equal."""

        __slots__ = ["__text", "__tree", "__regexps"]

        def __init__(self, text):
                self.__text = text.strip()
                self.__tree = _Parser(self.__text).parse()
                self.__regexps = {}

        def __str__(self):
                return self.__text

        def __repr__(self):
                return "<Filter '{0}'>".format(self.__text)

        def __eq__(self, other):
                if not isinstance(other, Filter):
                        return False
                return self.__text == str(other)

        def __ne__(self, other):
                return not self.__eq__(other)

        def __hash__(self):
                return hash(self.__text)

        def __wildcard_re(self, segments):
                key = tuple(segments)
                rx = self.__regexps.get(key)
                if rx is None:
                        rx = re.compile("^" + ".*".join(
                            re.escape(s) for s in segments) + "$", re.DOTALL)
                        self.__regexps[key] = rx
                return rx

        def __eval(self, node, env):
                op = node[0]
                if op == "&":
                        return all(self.__eval(n, env) for n in node[1])
                if op == "|":
                        return any(self.__eval(n, env) for n in node[1])
                if op == "!":
                        return not self.__eval(node[1], env)

                key = node[1]
                actual = env.get(key)
                if op == _OP_PRESENT:
                        return actual is not None
                if actual is None:
                        return False
                actual = str(actual)
                if op == _OP_EQ:
                        if len(node[2]) == 1:
                                return actual == node[2][0]
                        return self.__wildcard_re(node[2]).match(actual) \
                            is not None
                if op == _OP_APPROX:
                        return _normalize(actual) == _normalize(node[2])
                if op == _OP_GE:
                        return _compare(actual, node[2]) >= 0
                return _compare(actual, node[2]) <= 0

        def match(self, env):
                """Evaluate this filter against 'env', a dictionary of
                environment properties.  Property names are matched without
                regard to case."""

                if env is None:
                        env = {}
                lenv = dict((k.lower(), v) for k, v in env.items())
                return self.__eval(self.__tree, lenv)


def compile_filter(text):
        """Compile 'text' into a Filter; None and empty strings yield None,
        which matches every environment."""

        if text is None:
                return None
        if isinstance(text, Filter):
                return text
        if not text.strip():
                return None
        return Filter(text)


def apply_filters(env, filters):
        """Returns True if every filter in 'filters' matches 'env'.  None
        entries always match."""

        for f in filters:
                if f is not None and not f.match(env):
                        return False
        return True
