from loguru import logger

from statecraft.automata.fsa import DFA, FSA, NFA
from statecraft.automata.pda import PDA, BracketPolicy, StackPolicy
from statecraft.automata.symbols import (
    AutomatonError,
    ErrorKind,
    Letter,
    State,
    Verdict,
)

# Library code stays quiet until the application calls
# logger.enable("statecraft")
logger.disable("statecraft")
