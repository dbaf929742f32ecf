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

from cached_property import cached_property
from loguru import logger

from statecraft.automata.fsa import DFA
from statecraft.automata.symbols import ErrorKind, accepted, rejected

# Returned by PDA.pop_stack() when there is nothing to pop
EMPTY = ""


class StackPolicy:
    """
    Decides how a :class:`PDA` uses its stack while reading input, and when
    a finished run is accepted.

    The base policy leaves the stack alone and accepts whenever the
    automaton stopped in a terminal state, so a PDA with this policy behaves
    like a plain DFA.
    """

    def consume(self, pda, symbol):
        """
        Called for every input symbol before the base transition fires.

        Args:
            pda (PDA): The automaton being run.
            symbol (str): The name of the letter just read.

        Returns:
            ErrorKind: ``None`` to continue the run, or the reason to reject
                the input.
        """
        return None

    def accept(self, pda):
        """
        Returns True if the final configuration of ``pda`` is accepting.
        """
        return pda.is_in_terminal()


class BracketPolicy(StackPolicy):
    """
    Checks that brackets are balanced and properly nested.

    Reading an opening bracket pushes the matching closer. Reading a closing
    bracket pops the stack and rejects the input unless the popped value is
    the character just read. A run is accepted when the automaton is in a
    terminal state *and* the stack is empty.

    Args:
        pairs (iterable, optional): Two-character strings, opener followed by
            closer. Defaults to ``("()", "{}", "[]")``.

    Raises:
        ValueError: If a pair is not exactly two characters long.
    """

    def __init__(self, pairs=("()", "{}", "[]")):
        pairs = tuple(pairs)
        for pair in pairs:
            if len(pair) != 2:
                raise ValueError(f"Bracket pairs must be two characters, got {pair!r}")
        self.pairs = pairs

    def __repr__(self):
        return f"{self.__class__.__name__}({self.pairs!r})"

    @cached_property
    def closer_for(self):
        return {pair[0]: pair[1] for pair in self.pairs}

    @cached_property
    def closers(self):
        return frozenset(pair[1] for pair in self.pairs)

    def consume(self, pda, symbol):
        if symbol in self.closer_for:
            pda.push_stack(self.closer_for[symbol])
        elif symbol in self.closers:
            popped = pda.pop_stack()
            if popped == EMPTY:
                return ErrorKind.EMPTY_STACK
            if popped != symbol:
                return ErrorKind.STACK_MISMATCH
        return None

    def accept(self, pda):
        return pda.is_in_terminal() and pda.is_stack_empty()


class PDA(DFA):
    """
    Pushdown Automaton (PDA): a deterministic transition table plus a
    last-in-first-out stack of strings.

    The stack is driven by a :class:`StackPolicy`. By default the automaton
    validates bracket nesting with :class:`BracketPolicy`: the input is
    accepted only if every character has a transition, the brackets balance,
    and the run ends in a terminal state.

    Example:
        >>> pda = PDA(states=1)
        >>> for ch in "()":
        ...     _ = pda.add_letter(ch)
        ...     _ = pda.set_transition("s0", "s0", ch)
        >>> pda.set_start_state("s0") and pda.set_end_state("s0")
        True
        >>> pda.accepts("(())"), pda.accepts("(()"), pda.accepts(")(")
        (True, False, False)
    """

    def __init__(self, states=0, prefix="s", strict=False, policy=None):
        """
        Args:
            states (int, optional): The number of states to pre-populate.
            prefix (str, optional): The name prefix of pre-populated states.
            strict (bool, optional): Whether structural failures raise.
            policy (StackPolicy, optional): How the stack is used. Defaults
                to a :class:`BracketPolicy` over ``()``, ``{}`` and ``[]``.
        """
        self.policy = policy if policy is not None else BracketPolicy()
        super().__init__(states=states, prefix=prefix, strict=strict)

    @property
    def stack(self):
        """A snapshot of the stack, bottom first."""
        return tuple(self._stack)

    def reset(self):
        """
        Clears the stack and resets the current state to the start state.
        """
        self._stack = []
        super().reset()

    def push_stack(self, value):
        self._stack.append(value)
        logger.trace("push {!r}", value)

    def pop_stack(self):
        """
        Pops the top of the stack.

        Returns:
            str: The popped value, or the empty string if the stack is empty.
                Callers must treat the empty string as "nothing to pop".
        """
        if not self._stack:
            return self._fail(
                ErrorKind.EMPTY_STACK, "pop from an empty stack", EMPTY, structural=False
            )
        value = self._stack.pop()
        logger.trace("pop {!r}", value)
        return self._succeed(value)

    def peek_stack(self):
        return self._stack[-1] if self._stack else EMPTY

    def is_stack_empty(self):
        return not self._stack

    def _consume(self, symbol):
        error = self.policy.consume(self, symbol.name)
        if error is not None:
            return error
        return super()._consume(symbol)

    def _conclude(self, count):
        if self.current is None:
            return rejected(ErrorKind.NO_CURRENT_STATE, count)
        if self.policy.accept(self):
            return accepted(count)
        if self.is_in_terminal() and not self.is_stack_empty():
            return rejected(ErrorKind.STACK_NOT_EMPTY, count)
        return rejected(ErrorKind.NOT_ACCEPTED, count)
