"""Simply-typed lambda calculus interpreter.

For reference:
- "Pure" code (tlcalc/pure): parsing, type checking and reduction. Pure functions over immutable trees; never prints.
- "Lang" code (tlcalc/lang): sessions, the interactive shell and error reporting built on top of the pure core.

Basic program flow:
    1. Parser: Lark parses the source against tlcalc/pure/grammar.lark, and the parse tree is folded into a syntax tree
       of Variables, Abstractions and Applications (tlcalc/pure/lexical.py)
    2. Type checking: walks the syntax tree under a context of visible bindings (tlcalc/pure/typecheck.py)
        - Will fail on the first unbound variable, non-function application or argument of the wrong type
    3. Evaluation: normal-order beta reduction to beta-normal form (tlcalc/pure/reduction.py)
    4. Printing: str() of terms and types inverts the parser, with the fewest parentheses possible

The three functions below are the public entry points; errors are raised as GenericException subclasses
(tlcalc/lang/error.py).
"""

from tlcalc.pure.lexical import generate_tree
from tlcalc.pure.reduction import NormalOrderReducer
from tlcalc.pure import typecheck as _typecheck


def parse(source):
    """Parses source into a LambdaTerm. Raises LambdaSyntaxError."""
    return generate_tree(source)


def typecheck(term, context=None):
    """Returns the LambdaType of term. Raises UnboundVariable, NotAFunction or TypeMismatch."""
    return _typecheck.typecheck(term, context)


def evaluate(term, step_limit=NormalOrderReducer.STEP_LIMIT):
    """Returns the beta-normal form of term. Raises StepLimitExceeded after step_limit reductions."""
    return NormalOrderReducer(term, step_limit).beta_reduce()
