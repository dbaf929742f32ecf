# Copyright 2014 Matt Chaput. All rights reserved.
#
# Redistribution and use in source and binary forms, with or without
# modification, are permitted provided that the following conditions are met:
#
#    1. Redistributions of source code must retain the above copyright notice,
#       this list of conditions and the following disclaimer.
#
#    2. Redistributions in binary form must reproduce the above copyright
#       notice, this list of conditions and the following disclaimer in the
#       documentation and/or other materials provided with the distribution.
#
# THIS SOFTWARE IS PROVIDED BY MATT CHAPUT ``AS IS'' AND ANY EXPRESS OR
# IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE IMPLIED WARRANTIES OF
# MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO
# EVENT SHALL MATT CHAPUT OR CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT,
# INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT
# LIMITED TO, PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA,
# OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF
# LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING
# NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE,
# EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.
#
# The views and conclusions contained in the software and documentation are
# those of the authors and should not be interpreted as representing official
# policies, either expressed or implied, of Matt Chaput.

from collections import namedtuple
from enum import Enum


class ErrorKind(Enum):
    """
    The closed set of reasons an automaton operation or a recognition run
    can fail.

    Construction-time kinds (``DUPLICATE_NAME``, ``FOREIGN_REFERENCE`` and
    ``MISSING_TRANSITION`` on removal) are reported by the call that caused
    them. Run-time kinds end a recognition run with a negative verdict.
    """

    DUPLICATE_NAME = "duplicate name"
    FOREIGN_REFERENCE = "foreign reference"
    MISSING_TRANSITION = "missing transition"
    UNKNOWN_SYMBOL = "unknown symbol"
    EMPTY_STACK = "empty stack"
    STACK_MISMATCH = "stack mismatch"
    STACK_NOT_EMPTY = "stack not empty"
    NO_CURRENT_STATE = "no current state"
    NOT_ACCEPTED = "not accepted"


class AutomatonError(Exception):
    """
    Raised by automata created with ``strict=True`` when a structural
    mutation fails.

    Attributes:
        kind (ErrorKind): The reason for the failure.
    """

    def __init__(self, kind, message):
        super().__init__(message)
        self.kind = kind


class Letter:
    """
    An alphabet symbol, identified by name.

    Letters are compared by identity: two automata never share letters, even
    when their names match. The name may be longer than one character, but
    such letters are only reachable through pre-resolved letter sequences.

    Example:
        >>> letter = Letter("a")
        >>> letter.name
        'a'
        >>> repr(letter)
        "<Letter 'a'>"
    """

    def __init__(self, name):
        self._name = name

    @property
    def name(self):
        return self._name

    def __repr__(self):
        return f"<Letter {self._name!r}>"

    def __str__(self):
        return self._name


class State:
    """
    An automaton state: a name plus a mutable terminal (accepting) flag.

    Attributes:
        terminal (bool): Whether the state is accepting.
    """

    def __init__(self, name, terminal=False):
        self._name = name
        self.terminal = terminal

    @property
    def name(self):
        return self._name

    def is_terminal(self):
        return self.terminal

    def __repr__(self):
        mark = "||" if self.terminal else ""
        return f"<State {self._name!r}{mark}>"

    def __str__(self):
        return self._name


class Verdict(namedtuple("Verdict", "accepted error position symbol")):
    """
    The detailed outcome of a recognition run.

    Attributes:
        accepted (bool): Whether the input was accepted.
        error (ErrorKind): ``None`` when accepted, otherwise the reason the
            run was rejected.
        position (int): The index of the symbol that ended the run, or the
            length of the input when the whole input was consumed.
        symbol (str): The name of the offending symbol, or ``None``.

    A verdict is truthy exactly when the input was accepted.
    """

    __slots__ = ()

    def __bool__(self):
        return self.accepted


def accepted(length):
    return Verdict(True, None, length, None)


def rejected(error, position, symbol=None):
    return Verdict(False, error, position, symbol)
