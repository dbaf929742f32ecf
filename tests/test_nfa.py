from statecraft.automata import NFA, ErrorKind


def endings_nfa():
    nfa = NFA()
    s0 = nfa.add_state("s0")
    s1 = nfa.add_state("s1")
    s2 = nfa.add_state("s2")
    s3 = nfa.add_state("s3", True)

    root = nfa.add_letter("черн")
    for name in "аеиоя":
        nfa.add_letter(name)

    nfa.add_transition(s0, s1, root)
    for name in "аои":
        nfa.add_transition(s1, s2, name)
    for name in "ея":
        nfa.add_transition(s2, s3, name)

    nfa.set_start_state(s0)
    return nfa


def xy_nfa():
    nfa = NFA(states=4)
    nfa.add_letter("x")
    nfa.add_letter("y")
    nfa.add_transition("s0", "s1", "x")
    nfa.add_transition("s0", "s2", "x")
    nfa.add_transition("s1", "s3", "y")
    nfa.add_transition("s2", "s2", "y")
    nfa.add_transition("s2", "s3", "x")
    nfa.set_start_state("s0")
    nfa.set_end_state("s3")
    return nfa


def test_multichar_letters():
    nfa = endings_nfa()
    assert nfa.recognize_array(["черн", "о", "е"])
    assert nfa.check_chain([nfa.find_letter("черн"), nfa.find_letter("а"), nfa.find_letter("я")])
    assert not nfa.recognize_array(["черн", "о", "и", "я"])
    assert not nfa.recognize_array(["черн", "о"])

    # Text is split one character at a time
    assert not nfa.recognize("черное")
    assert nfa.explain("черное").error == ErrorKind.UNKNOWN_SYMBOL


def test_accepts_text():
    nfa = xy_nfa()
    assert nfa.accepts("xy")
    assert nfa.accepts("xx")
    assert nfa.accepts("xyyyx")
    assert not nfa.accepts("x")
    assert not nfa.accepts("y")
    assert not nfa.accepts("xz")
    assert not nfa.accepts("")


def test_empty_input():
    nfa = NFA(states=1)
    assert not nfa.accepts("")
    assert nfa.explain("").error == ErrorKind.NO_CURRENT_STATE

    nfa.set_start_state("s0")
    assert not nfa.accepts("")
    nfa.set_end_state("s0")
    assert nfa.accepts("")


def test_active_set():
    nfa = xy_nfa()
    s0, s1, s2, s3 = nfa.states
    assert nfa.get_current_states() == {s0}
    assert nfa.step("x") == {s1, s2}
    assert not nfa.is_in_terminal()
    assert nfa.step("y") == {s2, s3}
    assert nfa.is_in_terminal()
    assert nfa.step("x") == {s3}

    nfa.reset()
    assert nfa.get_current_states() == {s0}


def test_union():
    nfa = xy_nfa()
    s0, s1, s2, s3 = nfa.states
    for letter in nfa.letters:
        both = nfa.next_states({s1, s2}, letter)
        assert both == nfa.next_states({s1}, letter) | nfa.next_states({s2}, letter)
    assert nfa.next_states({s1, s2}, "y") == {s2, s3}


def test_dead_end():
    nfa = xy_nfa()
    assert nfa.step("y") == frozenset()
    assert nfa.last_error == ErrorKind.MISSING_TRANSITION
    for name in "xyx":
        assert nfa.step(name) == frozenset()
        assert nfa.last_error == ErrorKind.NO_CURRENT_STATE
    assert not nfa.is_in_terminal()

    verdict = nfa.explain("yx")
    assert verdict.error == ErrorKind.MISSING_TRANSITION
    assert verdict.position == 0


def test_foreign_letter_empties():
    nfa = xy_nfa()
    other = NFA()
    stranger = other.add_letter("x")
    assert nfa.step(stranger) == frozenset()
    assert nfa.last_error == ErrorKind.FOREIGN_REFERENCE
    assert not nfa.check_chain([stranger])


def test_duplicate_targets():
    nfa = NFA(states=2)
    nfa.add_letter("a")
    assert nfa.add_transition("s0", "s1", "a")
    assert nfa.set_transition("s0", "s1", "a")
    assert len(list(nfa.triples())) == 2

    nfa.set_start_state("s0")
    nfa.set_end_state("s1")
    assert nfa.step("a") == {nfa.find_state("s1")}

    assert nfa.remove_transition("s0", "a", "s1")
    assert len(list(nfa.triples())) == 1
    assert nfa.accepts("a")

    assert nfa.remove_transition("s0", "a", "s1")
    assert list(nfa.triples()) == []
    assert not nfa.accepts("a")

    assert not nfa.remove_transition("s0", "a", "s1")
    assert nfa.last_error == ErrorKind.MISSING_TRANSITION


def test_remove_transition():
    nfa = xy_nfa()
    assert not nfa.remove_transition("s0", "y")
    assert not nfa.remove_transition("s0", "x", "s3")
    assert not nfa.remove_transition("s0", "x", "s7")
    assert nfa.last_error == ErrorKind.FOREIGN_REFERENCE

    assert nfa.remove_transition("s0", "x")
    assert nfa.next_states(nfa.states, "x") == {nfa.find_state("s3")}
    assert not nfa.accepts("xy")


def test_remove_state_cascade():
    nfa = xy_nfa()
    s0, s1, s2, s3 = nfa.states
    nfa.step("x")

    assert nfa.remove_state(s1)
    assert nfa.get_current_states() == {s2}
    assert all(s1 not in (src, dest) for src, _, dest in nfa.triples())
    assert nfa.next_states({s0}, "x") == {s2}
    assert not nfa.accepts("xy")
    assert nfa.accepts("xx")

    assert nfa.remove_state(s0)
    assert nfa.start() is None
    assert s0 not in nfa.get_current_states()
    nfa.reset()
    assert nfa.get_current_states() == frozenset()
    assert not nfa.accepts("xx")


def test_remove_letter_cascade():
    nfa = xy_nfa()
    assert nfa.remove_letter("y")
    assert {letter.name for _, letter, _ in nfa.triples()} == {"x"}
    assert nfa.accepts("xx")
    assert not nfa.accepts("xy")
    assert not nfa.remove_letter("y")


def test_duplicate_add():
    nfa = xy_nfa()
    assert nfa.add_state("s0", True) is None
    assert not nfa.find_state("s0").terminal
    assert nfa.add_letter("x") is None
    assert nfa.last_error == ErrorKind.DUPLICATE_NAME
