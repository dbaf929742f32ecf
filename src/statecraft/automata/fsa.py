import sys

from loguru import logger

from statecraft.automata.symbols import (
    AutomatonError,
    ErrorKind,
    Letter,
    State,
    accepted,
    rejected,
)


# Base class
class FSA:
    """
    Finite State Automaton (FSA) base class.

    An automaton owns a registry of named states and letters and a transition
    table keyed by (source state, letter). Subclasses decide what a table
    entry holds (one target for a DFA, a list of targets for an NFA) and how
    the run configuration advances.

    Every structural operation reports failure through its return value
    (``False`` or ``None``) and records the reason in ``last_error``. When the
    automaton is created with ``strict=True`` those failures raise
    :class:`AutomatonError` instead.

    States and letters may be referred to either by name or by the objects
    returned from :meth:`add_state` and :meth:`add_letter`. An object that
    belongs to another automaton is foreign, even if its name matches.

    Instances are not thread-safe: concurrent use of one automaton must be
    serialized by the caller.

    Attributes:
        initial (State): The start state, or ``None``.
        transitions (dict): Maps each state to a dictionary of letters and
            table entries.
        last_error (ErrorKind): The reason the most recent operation failed,
            or ``None`` if it succeeded.
        strict (bool): Whether structural failures raise.

    Methods:
        add_state(name, terminal=False): Adds a new state.
        remove_state(state): Removes a state and every transition touching it.
        add_letter(name): Adds a new letter to the alphabet.
        remove_letter(letter): Removes a letter and every transition keyed by it.
        remove_transition(src, letter, dest=None): Removes a transition.
        set_start_state(state): Designates the start state and resets the run.
        set_end_state(state): Marks a state as terminal.
        reset(): Re-initializes the run configuration.
        step(letter): Consumes one letter.
        is_in_terminal(): Checks the run configuration for acceptance.
        accepts(text): Checks if a string is accepted.
        check_chain(letters): Checks if a sequence of letters is accepted.
        explain(symbols): Runs the automaton and returns a detailed verdict.
    """

    def __init__(self, states=0, prefix="s", strict=False):
        """
        Initializes an empty automaton, optionally pre-populated with
        non-terminal states.

        Args:
            states (int, optional): The number of states to create, named
                ``prefix + index``. Defaults to 0.
            prefix (str, optional): The name prefix for the pre-populated
                states. Defaults to ``"s"``.
            strict (bool, optional): Whether structural failures raise
                :class:`AutomatonError`. Defaults to False.

        Raises:
            ValueError: If ``states`` is negative.
        """
        if states < 0:
            raise ValueError(f"State count must not be negative, got {states}")

        self.strict = strict
        self.initial = None
        self.last_error = None
        self.transitions = {}
        self._states = {}
        self._letters = {}
        # state -> set of (src, letter) pairs whose entry targets it
        self._incoming = {}
        # letter -> set of states with an entry for it
        self._keyed = {}
        self.reset()

        for i in range(states):
            self.add_state(f"{prefix}{i}")

    def __len__(self):
        return len(self._states)

    def __contains__(self, item):
        if isinstance(item, str):
            return item in self._states or item in self._letters
        return self._state(item) is not None or self._letter(item) is not None

    @property
    def states(self):
        """The states of the automaton, in insertion order."""
        return list(self._states.values())

    @property
    def letters(self):
        """The alphabet of the automaton, in insertion order."""
        return list(self._letters.values())

    def find_state(self, name):
        return self._states.get(name)

    def find_letter(self, name):
        return self._letters.get(name)

    def start(self):
        """
        Returns the start state of the automaton.

        Returns:
            State: The start state, or ``None`` if none was designated.
        """
        return self.initial

    get_start_state = start

    def triples(self):
        """
        Generates every (source state, letter, destination state) triple in
        the transition table.

        Duplicate NFA entries are yielded once per occurrence.
        """
        for src, row in self.transitions.items():
            for letter, value in row.items():
                for dest in self._targets(value):
                    yield src, letter, dest

    def dump(self, stream=sys.stdout):
        """
        Prints a textual representation of the automaton to the specified
        stream.

        The start state is prefixed with ``@`` and terminal states are
        suffixed with ``||``.

        Args:
            stream (file-like object, optional): The stream to print to.
                Defaults to sys.stdout.

        Example:
            >>> dfa = DFA(states=2)
            >>> dfa.add_letter("a")
            <Letter 'a'>
            >>> dfa.set_transition("s0", "s1", "a")
            True
            >>> dfa.set_start_state("s0")
            True
            >>> dfa.set_end_state("s1")
            True
            >>> dfa.dump()
            @ s0
               a -> s1
              s1||
        """
        for state in self._states.values():
            beg = "@" if state is self.initial else " "
            end = "||" if state.terminal else ""
            print(beg, state.name + end, file=stream)
            for letter, value in self.transitions[state].items():
                for dest in self._targets(value):
                    print("  ", letter.name, "->", dest.name, file=stream)

    # Lookup and failure reporting

    def _state(self, ref):
        if isinstance(ref, State):
            return ref if self._states.get(ref.name) is ref else None
        if isinstance(ref, str):
            return self._states.get(ref)
        return None

    def _letter(self, ref):
        if isinstance(ref, Letter):
            return ref if self._letters.get(ref.name) is ref else None
        if isinstance(ref, str):
            return self._letters.get(ref)
        return None

    def _fail(self, kind, message, result=False, structural=True):
        self.last_error = kind
        logger.debug("{}: {}", kind.value, message)
        if structural and self.strict:
            raise AutomatonError(kind, message)
        return result

    def _succeed(self, result=True):
        self.last_error = None
        return result

    @staticmethod
    def _check_name(name):
        if not isinstance(name, str):
            raise TypeError(f"Names must be strings, got {type(name).__name__}")

    # Construction surface

    def add_state(self, name, terminal=False):
        """
        Adds a new state.

        Args:
            name (str): The name of the state. Must be unique within this
                automaton.
            terminal (bool, optional): Whether the state is accepting.
                Defaults to False.

        Returns:
            State: The new state, or ``None`` if a state with that name
                already exists. The existing state is left untouched.

        Raises:
            TypeError: If ``name`` is not a string.
            AutomatonError: On a duplicate name, if the automaton is strict.
        """
        self._check_name(name)
        if name in self._states:
            return self._fail(
                ErrorKind.DUPLICATE_NAME, f"state {name!r} already exists", None
            )
        state = State(name, terminal)
        self._states[name] = state
        self.transitions[state] = {}
        self._incoming[state] = set()
        logger.debug("Added state {!r} (terminal={})", name, terminal)
        return self._succeed(state)

    def remove_state(self, state):
        """
        Removes a state together with its outgoing row and every transition
        that points into it.

        If the state was the start state, or part of the current run
        configuration, that reference is cleared.

        Args:
            state (State or str): The state to remove.

        Returns:
            bool: True if the state was removed, False if it does not belong
                to this automaton.
        """
        target = self._state(state)
        if target is None:
            return self._fail(ErrorKind.FOREIGN_REFERENCE, f"no state {state!r}")

        for src, letter in list(self._incoming[target]):
            self._unlink(src, letter, target, every=True)
        del self._incoming[target]
        for letter, value in self.transitions.pop(target).items():
            self._keyed[letter].discard(target)
            for dest in self._targets(value):
                if dest is not target:
                    self._incoming[dest].discard((target, letter))

        del self._states[target.name]
        if self.initial is target:
            self.initial = None
        self._forget(target)
        logger.debug("Removed state {!r}", target.name)
        return self._succeed()

    def add_letter(self, name):
        """
        Adds a new letter to the alphabet.

        Args:
            name (str): The name of the letter. Names longer than one
                character are allowed but can only be matched through
                :meth:`check_chain`.

        Returns:
            Letter: The new letter, or ``None`` if the name is taken.
        """
        self._check_name(name)
        if name in self._letters:
            return self._fail(
                ErrorKind.DUPLICATE_NAME, f"letter {name!r} already exists", None
            )
        letter = Letter(name)
        self._letters[name] = letter
        self._keyed[letter] = set()
        logger.debug("Added letter {!r}", name)
        return self._succeed(letter)

    def remove_letter(self, letter):
        """
        Removes a letter and every transition keyed by it.

        Args:
            letter (Letter or str): The letter to remove.

        Returns:
            bool: True if the letter was removed, False if it does not belong
                to this automaton.
        """
        symbol = self._letter(letter)
        if symbol is None:
            return self._fail(ErrorKind.FOREIGN_REFERENCE, f"no letter {letter!r}")

        for src in self._keyed.pop(symbol):
            for dest in self._targets(self.transitions[src].pop(symbol)):
                self._incoming[dest].discard((src, symbol))
        del self._letters[symbol.name]
        logger.debug("Removed letter {!r}", symbol.name)
        return self._succeed()

    def _connect(self, src, dest, letter):
        source = self._state(src)
        target = self._state(dest)
        symbol = self._letter(letter)
        if source is None or target is None or symbol is None:
            return self._fail(
                ErrorKind.FOREIGN_REFERENCE,
                f"transition {src!r} --{letter!r}--> {dest!r} names a foreign member",
            )
        self._link(source, symbol, target)
        self._incoming[target].add((source, symbol))
        self._keyed[symbol].add(source)
        logger.debug(
            "Added transition {} --{}--> {}", source.name, symbol.name, target.name
        )
        return self._succeed()

    def remove_transition(self, src, letter, dest=None):
        """
        Removes a transition.

        Args:
            src (State or str): The source state.
            letter (Letter or str): The letter the transition is keyed by.
            dest (State or str, optional): Only remove the entry pointing to
                this state. For an NFA a single occurrence is removed. If
                omitted, the whole (src, letter) entry is removed.

        Returns:
            bool: True if a transition was removed, False if a reference is
                foreign or no such transition exists.
        """
        source = self._state(src)
        symbol = self._letter(letter)
        target = None if dest is None else self._state(dest)
        if source is None or symbol is None or (dest is not None and target is None):
            return self._fail(
                ErrorKind.FOREIGN_REFERENCE,
                f"transition from {src!r} on {letter!r} names a foreign member",
            )

        row = self.transitions[source]
        if symbol not in row:
            return self._fail(
                ErrorKind.MISSING_TRANSITION,
                f"no transition from {source.name!r} on {symbol.name!r}",
            )

        if target is None:
            for each in set(self._targets(row[symbol])):
                self._unlink(source, symbol, each, every=True)
        elif not self._unlink(source, symbol, target):
            return self._fail(
                ErrorKind.MISSING_TRANSITION,
                f"no transition {source.name} --{symbol.name}--> {target.name}",
            )
        logger.debug("Removed transition from {} on {}", source.name, symbol.name)
        return self._succeed()

    def set_start_state(self, state):
        """
        Designates the start state and re-initializes the run configuration.

        Args:
            state (State or str): The new start state. Replaces any previous
                one.

        Returns:
            bool: True on success, False if the state is foreign.
        """
        target = self._state(state)
        if target is None:
            return self._fail(ErrorKind.FOREIGN_REFERENCE, f"no state {state!r}")
        self.initial = target
        self.reset()
        logger.debug("Start state is now {!r}", target.name)
        return self._succeed()

    def set_end_state(self, state):
        """
        Marks an existing state as terminal.

        Returns:
            bool: True on success, False if the state is foreign.
        """
        target = self._state(state)
        if target is None:
            return self._fail(ErrorKind.FOREIGN_REFERENCE, f"no state {state!r}")
        target.terminal = True
        return self._succeed()

    # Table entry hooks

    def _targets(self, value):
        raise NotImplementedError

    def _link(self, source, symbol, target):
        raise NotImplementedError

    def _unlink(self, source, symbol, target, every=False):
        raise NotImplementedError

    def _forget(self, state):
        raise NotImplementedError

    # Recognition surface

    def reset(self):
        raise NotImplementedError

    def step(self, letter):
        raise NotImplementedError

    def is_in_terminal(self):
        raise NotImplementedError

    def _has_configuration(self):
        raise NotImplementedError

    def _consume(self, symbol):
        raise NotImplementedError

    def _conclude(self, count):
        if not self._has_configuration():
            return rejected(ErrorKind.NO_CURRENT_STATE, count)
        if self.is_in_terminal():
            return accepted(count)
        return rejected(ErrorKind.NOT_ACCEPTED, count)

    def explain(self, symbols):
        """
        Runs the automaton over a sequence of symbols and reports the
        outcome in detail.

        The run configuration is reset first. Each item is resolved to a
        letter of this automaton: strings are looked up by name (a plain
        string is therefore tokenized one character at a time), letter
        objects must belong to this automaton. The run stops at the first
        symbol that cannot be resolved or consumed.

        Args:
            symbols (str or iterable): The input.

        Returns:
            Verdict: ``accepted`` is True if the input is in the language.
                Otherwise ``error`` tells whether the input ran into an
                unknown symbol, a foreign letter, a missing transition or a
                rejecting final configuration.

        Example:
            >>> verdict = dfa.explain("ab")
            >>> verdict.accepted, verdict.error
            (False, <ErrorKind.UNKNOWN_SYMBOL: 'unknown symbol'>)
        """
        self.reset()
        count = 0
        for item in symbols:
            symbol = self._letter(item)
            if symbol is None:
                if isinstance(item, str):
                    kind = ErrorKind.UNKNOWN_SYMBOL
                else:
                    kind = ErrorKind.FOREIGN_REFERENCE
                logger.debug("Rejected at {}: {} {!r}", count, kind.value, item)
                return rejected(kind, count, str(item))

            error = self._consume(symbol)
            if error is not None:
                logger.debug("Rejected at {}: {} {!r}", count, error.value, symbol.name)
                return rejected(error, count, symbol.name)
            count += 1

        verdict = self._conclude(count)
        logger.debug("Run over {} symbols ended with {}", count, verdict.error)
        return verdict

    def accepts(self, text):
        """
        Checks if a given string is accepted by the automaton.

        Each character is resolved to the letter with that exact name. An
        unknown character or a missing transition rejects the input
        immediately; there is no partial matching.

        Args:
            text (str): The string to check.

        Returns:
            bool: True if the string is accepted, False otherwise.
        """
        return self.explain(text).accepted

    def check_chain(self, letters):
        """
        Checks if a sequence of pre-resolved letters is accepted.

        This is the only way to feed letters whose names are longer than a
        single character.

        Args:
            letters (iterable): Letters of this automaton, or their names.

        Returns:
            bool: True if the sequence is accepted, False otherwise.
        """
        return self.explain(list(letters)).accepted


# Implementations


class DFA(FSA):
    """
    Deterministic Finite Automaton (DFA).

    Each (state, letter) pair has at most one successor. Setting a transition
    on an occupied pair replaces the previous target.

    Attributes:
        current (State): The state the current run is in, or ``None``.

    Example:
        >>> dfa = DFA(states=3)
        >>> a = dfa.add_letter("a")
        >>> dfa.set_transition("s0", "s1", a)
        True
        >>> dfa.set_transition("s1", "s2", a)
        True
        >>> dfa.set_start_state("s0") and dfa.set_end_state("s2")
        True
        >>> dfa.accepts("aa"), dfa.accepts("a")
        (True, False)
    """

    def get_current_state(self):
        return self.current

    def reset(self):
        """
        Resets the current state to the start state.
        """
        self.current = self.initial

    def set_transition(self, src, dest, letter):
        """
        Sets the transition from ``src`` on ``letter`` to ``dest``.

        Args:
            src (State or str): The source state.
            dest (State or str): The destination state.
            letter (Letter or str): The letter.

        Returns:
            bool: True on success, False if any of the three is foreign to
                this automaton.
        """
        return self._connect(src, dest, letter)

    def next_state(self, state, letter):
        """
        Returns the successor of ``state`` on ``letter`` without touching
        the run configuration, or ``None`` if there is none.
        """
        source = self._state(state)
        symbol = self._letter(letter)
        if source is None or symbol is None:
            return None
        return self.transitions[source].get(symbol)

    def step(self, letter):
        """
        Moves the current state along the transition for ``letter``.

        Args:
            letter (Letter or str): The letter to consume.

        Returns:
            State: The new current state, or ``None`` if there is no current
                state, the letter is foreign, or no transition is defined.
                The current state is unchanged in that case.
        """
        if self.current is None:
            return self._fail(
                ErrorKind.NO_CURRENT_STATE, "no current state", None, structural=False
            )
        symbol = self._letter(letter)
        if symbol is None:
            return self._fail(
                ErrorKind.FOREIGN_REFERENCE,
                f"no letter {letter!r}",
                None,
                structural=False,
            )
        dest = self.transitions[self.current].get(symbol)
        if dest is None:
            return self._fail(
                ErrorKind.MISSING_TRANSITION,
                f"no transition from {self.current.name!r} on {symbol.name!r}",
                None,
                structural=False,
            )
        logger.trace("{} --{}--> {}", self.current.name, symbol.name, dest.name)
        self.current = dest
        return self._succeed(dest)

    def is_in_terminal(self):
        return self.current is not None and self.current.terminal

    def _has_configuration(self):
        return self.current is not None

    def _consume(self, symbol):
        if self.step(symbol) is None:
            return self.last_error
        return None

    def _targets(self, value):
        return (value,)

    def _link(self, source, symbol, target):
        old = self.transitions[source].get(symbol)
        if old is not None and old is not target:
            self._incoming[old].discard((source, symbol))
        self.transitions[source][symbol] = target

    def _unlink(self, source, symbol, target, every=False):
        row = self.transitions[source]
        if row.get(symbol) is not target:
            return False
        del row[symbol]
        self._keyed[symbol].discard(source)
        self._incoming[target].discard((source, symbol))
        return True

    def _forget(self, state):
        if self.current is state:
            self.current = None


class NFA(FSA):
    """
    Non-Deterministic Finite Automaton (NFA).

    A (state, letter) pair may lead to several states. The automaton is run
    by tracking the set of currently active states: each step replaces the
    active set with the union of the successors of its members. There are no
    epsilon transitions, so an empty active set stays empty.

    Attributes:
        current (frozenset): The active set of the current run.
    """

    def get_current_states(self):
        return self.current

    def reset(self):
        """
        Resets the active set to ``{start}``, or to the empty set if no start
        state was designated.
        """
        if self.initial is None:
            self.current = frozenset()
        else:
            self.current = frozenset((self.initial,))

    def add_transition(self, src, dest, letter):
        """
        Adds ``dest`` to the targets of ``src`` on ``letter``.

        Adding the same target twice stores a duplicate entry. Duplicates do
        not change which states become active.

        Returns:
            bool: True on success, False if any of the three is foreign to
                this automaton.
        """
        return self._connect(src, dest, letter)

    set_transition = add_transition

    def next_states(self, states, letter):
        """
        Returns the set of states reachable from any of ``states`` on
        ``letter``, without touching the run configuration.

        Args:
            states (iterable): The states to start from.
            letter (Letter or str): The letter.

        Returns:
            frozenset: The union of the successors, possibly empty.

        Example:
            >>> nfa.next_states({p, q}, "x") == (
            ...     nfa.next_states({p}, "x") | nfa.next_states({q}, "x")
            ... )
            True
        """
        symbol = self._letter(letter)
        if symbol is None:
            return frozenset()
        transitions = self.transitions
        dest_states = set()
        for state in states:
            if state in transitions:
                xs = transitions[state]
                if symbol in xs:
                    dest_states.update(xs[symbol])
        return frozenset(dest_states)

    def step(self, letter):
        """
        Replaces the active set with the states reachable on ``letter``.

        Args:
            letter (Letter or str): The letter to consume. A foreign letter
                empties the active set.

        Returns:
            frozenset: The new active set.
        """
        symbol = self._letter(letter)
        if symbol is None:
            self.current = frozenset()
            return self._fail(
                ErrorKind.FOREIGN_REFERENCE,
                f"no letter {letter!r}",
                self.current,
                structural=False,
            )
        if not self.current:
            return self._fail(
                ErrorKind.NO_CURRENT_STATE,
                "active set is empty",
                self.current,
                structural=False,
            )
        self.current = self.next_states(self.current, symbol)
        if not self.current:
            return self._fail(
                ErrorKind.MISSING_TRANSITION,
                f"no transition on {symbol.name!r} from the active set",
                self.current,
                structural=False,
            )
        logger.trace("--{}--> {}", symbol.name, sorted(s.name for s in self.current))
        return self._succeed(self.current)

    def is_in_terminal(self):
        return any(state.terminal for state in self.current)

    def _has_configuration(self):
        return bool(self.current)

    def _consume(self, symbol):
        # The active set can never grow back once empty, so stop here.
        if not self.step(symbol):
            return self.last_error
        return None

    def recognize(self, text):
        return self.accepts(text)

    def recognize_array(self, letters):
        return self.check_chain(letters)

    def _targets(self, value):
        return value

    def _link(self, source, symbol, target):
        self.transitions[source].setdefault(symbol, []).append(target)

    def _unlink(self, source, symbol, target, every=False):
        row = self.transitions[source]
        dests = row.get(symbol, [])
        if target not in dests:
            return False
        if every:
            dests[:] = [d for d in dests if d is not target]
        else:
            dests.remove(target)
        if target not in dests:
            self._incoming[target].discard((source, symbol))
        if not dests:
            del row[symbol]
            self._keyed[symbol].discard(source)
        return True

    def _forget(self, state):
        self.current = self.current - {state}
