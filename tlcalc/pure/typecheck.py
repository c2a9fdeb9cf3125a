"""Type checking for the simply-typed lambda calculus.

Only abstractions carry annotations, so checking is a single bottom-up pass: the type of a variable comes from the
context, the type of an abstraction is built from its annotation and the type of its body, and the type of an
application is the result of its function's type, provided the argument has exactly the parameter type. Base types are
compared by name; nothing is ever coerced.
"""

from tlcalc.lang.error import NotAFunction, TypeMismatch, UnboundVariable
from tlcalc.pure.lexical import Abstraction, Application, FunctionType, Variable


class Context:
    """Ordered name: type bindings visible at some point of a term.

    A Context is never mutated: extend returns a new Context whose parent is the old one, so sibling scopes share
    their common bindings and leaving a scope simply means going back to the parent.
    """

    def __init__(self, name=None, type_=None, parent=None):
        self.name = name
        self.type = type_
        self.parent = parent

    @classmethod
    def from_bindings(cls, bindings):
        """Builds a Context from (name, type) pairs or a dict, later pairs shadowing earlier ones."""
        if isinstance(bindings, dict):
            bindings = bindings.items()

        context = cls()
        for name, type_ in bindings:
            context = context.extend(name, type_)
        return context

    def extend(self, name, type_):
        """Returns a new Context where name has type_, shadowing any outer binding of name."""
        return Context(name, type_, self)

    def lookup(self, name):
        """Returns the type of the innermost binding of name, or None if name is unbound."""
        context = self
        while context is not None and context.parent is not None:
            if context.name == name:
                return context.type
            context = context.parent
        return None

    def require(self, name, term=None):
        """Like lookup, but raises UnboundVariable if name is unbound."""
        type_ = self.lookup(name)
        if type_ is None:
            raise UnboundVariable(name, term)
        return type_

    def items(self):
        """Visible (name, type) pairs, outermost first. Shadowed bindings are left out."""
        seen = set()
        bindings = []
        context = self
        while context.parent is not None:
            if context.name not in seen:
                seen.add(context.name)
                bindings.append((context.name, context.type))
            context = context.parent
        return bindings[::-1]

    def __contains__(self, name):
        return self.lookup(name) is not None

    def __len__(self):
        return len(self.items())

    def __iter__(self):
        return (name for name, __ in self.items())

    def __repr__(self):
        return "Context({})".format(", ".join(f"{name}: {type_}" for name, type_ in self.items()))


EMPTY = Context()


def check(term, context):
    """Returns the LambdaType of term under context, or raises a LambdaTypeError for the first ill-typed subterm."""
    if isinstance(term, Variable):
        return context.require(term.name, term)

    if isinstance(term, Abstraction):
        result = check(term.body, context.extend(term.param, term.param_type))
        return FunctionType(term.param_type, result)

    if isinstance(term, Application):
        head, applications = term.spine()
        function_type = check(head, context)

        for app in applications:
            if not isinstance(function_type, FunctionType):
                raise NotAFunction(function_type, app, app.function, app.argument)

            argument_type = check(app.argument, context)
            if argument_type != function_type.param:
                raise TypeMismatch(function_type.param, argument_type, app, app.function, app.argument)

            function_type = function_type.result

        return function_type

    raise TypeError(f"expected a LambdaTerm, got '{type(term).__name__}'")


def typecheck(term, context=None):
    """Type of a closed term, or of a term whose free variables are declared in context (a Context, a dict or
    (name, type) pairs).
    """
    if context is None:
        context = EMPTY
    elif not isinstance(context, Context):
        context = Context.from_bindings(context)
    return check(term, context)
