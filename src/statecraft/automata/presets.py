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

"""
Ready-made automata and alphabet helpers.
"""

import string

from statecraft.automata.fsa import DFA
from statecraft.automata.pda import PDA, BracketPolicy


def latin_letters():
    return list(string.ascii_lowercase)


def digit_letters():
    return list(string.digits)


def add_alphabet(fsa, names):
    """
    Adds every name in ``names`` that the automaton does not know yet.

    Args:
        fsa (FSA): The automaton to extend.
        names (iterable): Letter names.

    Returns:
        list: The letters that were added.
    """
    added = []
    for name in names:
        if fsa.find_letter(name) is None:
            added.append(fsa.add_letter(name))
    return added


def email_dfa():
    """
    Builds a DFA accepting simple e-mail addresses ending in ``.com`` or
    ``.ru``.

    The local part starts with a lowercase latin letter and continues with
    latin letters, digits, ``_`` and ``-``. The domain is made of the same
    characters and is followed by a dot and the top-level domain.

    Returns:
        DFA: A 9-state automaton, start ``s0``, terminal ``s6`` and ``s8``.
    """
    dfa = DFA(states=9)
    latin = latin_letters()
    digits = digit_letters()
    add_alphabet(dfa, latin + digits + [".", "@", "_", "-"])

    for ch in latin:
        dfa.set_transition("s0", "s1", ch)
    for ch in latin + digits + ["_", "-"]:
        dfa.set_transition("s1", "s1", ch)
        dfa.set_transition("s2", "s2", ch)

    dfa.set_transition("s1", "s2", "@")
    dfa.set_transition("s2", "s3", ".")

    for src, ch, dest in (
        ("s3", "c", "s4"),
        ("s4", "o", "s5"),
        ("s5", "m", "s6"),
        ("s3", "r", "s7"),
        ("s7", "u", "s8"),
    ):
        dfa.set_transition(src, dest, ch)

    dfa.set_start_state("s0")
    dfa.set_end_state("s6")
    dfa.set_end_state("s8")
    return dfa


def email_check(text):
    if not text:
        return False
    return email_dfa().accepts(text)


def bracket_pda(alphabet=None, pairs=("()", "{}", "[]")):
    """
    Builds a one-state PDA that accepts any text over ``alphabet`` whose
    brackets are balanced.

    Every letter, brackets included, loops on the single state ``s0``, which
    is both the start and a terminal state, so only the stack decides.

    Args:
        alphabet (iterable, optional): The non-bracket characters. Defaults
            to the lowercase latin letters.
        pairs (iterable, optional): The bracket pairs, see
            :class:`BracketPolicy`.

    Returns:
        PDA: The automaton.
    """
    policy = BracketPolicy(pairs)
    pda = PDA(states=1, policy=policy)
    names = latin_letters() if alphabet is None else list(alphabet)
    names += [ch for pair in policy.pairs for ch in pair]
    add_alphabet(pda, names)
    for letter in pda.letters:
        pda.set_transition("s0", "s0", letter)
    pda.set_start_state("s0")
    pda.set_end_state("s0")
    return pda
