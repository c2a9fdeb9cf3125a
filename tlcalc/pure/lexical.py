"""Simply-typed lambda calculus abstract syntax tree and parser.

The `pure` directory contains the language core: parsing, type checking and reduction. It never prints; everything
user-facing lives in `lang`.

Formally, the accepted language can be defined as

```
<λ-term> ::= <variable>                         ; "variable"
                                                ; - [A-Za-z_][A-Za-z0-9_]*, longest match
           | "λ" <variable> ":" <type> "." <λ-term>
                                                ; "abstraction"
                                                ; - "\\" may be used instead of "λ"
                                                ; - abstraction bodies are greedy: λx:A.x y = λx:A.(x y)
           | <λ-term> <λ-term>                  ; "application"
                                                ; - associating by left: a b c d = (((a b) c) d)

<type>   ::= <base type>                        ; uninterpreted, compared by name
           | <type> "→" <type>                  ; "function type"
                                                ; - "->" may be used instead of "→"
                                                ; - associating by right: A → B → C = A → (B → C)
```

Parentheses may surround any term or type. The concrete grammar lives in grammar.lark; Lark produces the parse tree
and TreeBuilder folds it into the immutable nodes defined here.

Sources: https://plato.stanford.edu/entries/lambda-calculus/#Com,
         https://www.cis.upenn.edu/~bcpierce/tapl/ (chapter 9, simply typed lambda calculus)
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import reduce

from lark import Lark, Transformer, v_args
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedInput, UnexpectedToken

from tlcalc.lang.error import LambdaSyntaxError

LAMBDA = "λ"
ARROW = "→"
ASCII_LAMBDA = "\\"
ASCII_ARROW = "->"


class LambdaType(ABC):
    """A type of the simply-typed lambda calculus. Types are immutable and compared structurally."""

    @abstractmethod
    def pretty(self, ascii_only=False):
        """Returns the type with the fewest parentheses that still parses back to it."""

    def __str__(self):
        return self.pretty()


@dataclass(frozen=True)
class BaseType(LambdaType):
    """Atomic, uninterpreted named type."""
    name: str

    def pretty(self, ascii_only=False):
        return self.name


@dataclass(frozen=True)
class FunctionType(LambdaType):
    """Type of abstractions taking a param and returning a result."""
    param: LambdaType
    result: LambdaType

    def pretty(self, ascii_only=False):
        arrow = ASCII_ARROW if ascii_only else ARROW

        params = []
        type_ = self
        while isinstance(type_, FunctionType):
            param = type_.param.pretty(ascii_only)
            params.append(f"({param})" if isinstance(type_.param, FunctionType) else param)
            type_ = type_.result
        return f" {arrow} ".join(params + [type_.pretty(ascii_only)])


class LambdaTerm(ABC):
    """Represents a valid λ-term: variable, abstraction, or application. Terms are immutable once built: every
    operation that "changes" a term returns a new one, sharing unchanged subterms with the old one.
    """

    @property
    @abstractmethod
    def nodes(self):
        """Direct subterms, left to right."""

    @abstractmethod
    def free_variables(self):
        """Names occurring in self that are not bound by an enclosing abstraction of self."""

    @abstractmethod
    def names(self):
        """Every name occurring in self, free or bound."""

    @abstractmethod
    def sub(self, var, new_term, fresh):
        """Returns self with every free occurrence of var replaced by new_term. Bound variables that would capture a
        free variable of new_term are renamed using fresh, a callable returning an unused name given the old one.
        """

    @abstractmethod
    def alpha_equals(self, other, mapping=None, other_mapping=None):
        """Whether or not two LambdaTerms are alpha-equivalent. mapping maps each bound variable of self to the stack
        of variables of other bound at the same abstractions; other_mapping is the same from the perspective of other.
        """

    @abstractmethod
    def pretty(self, ascii_only=False, last=True):
        """Returns self with the fewest parentheses that still parse back to self. last tells whether self ends the
        enclosing term, in which case a trailing abstraction needs no parentheses.
        """

    def display(self, indents=0):
        """Recursively displays LambdaTerm tree with readable format.

        Format:
        <LambdaTerm>(expr='<expr>', nodes=[
            <LambdaTerm>(expr='<expr>', nodes=[
                ...
                <LambdaTerm>(expr='<expr>')  # <-- if nodes is empty
            ])
        ])
        """
        result = f"{'    ' * indents}{type(self).__name__}(expr='{self}'"
        if self.nodes:
            result += ", nodes=["
            for node in self.nodes:
                result += "\n" + node.display(indents + 1) + ","
            result = result[:-1] + f"\n{'    ' * indents}]"
        return result + ")"

    def __str__(self):
        return self.pretty()


@dataclass(frozen=True)
class Variable(LambdaTerm):
    """Reference to the nearest enclosing abstraction binding name, or a free variable."""
    name: str

    @property
    def nodes(self):
        return ()

    def free_variables(self):
        return frozenset([self.name])

    def names(self):
        return frozenset([self.name])

    def sub(self, var, new_term, fresh):
        if self.name == var:
            return new_term
        return self

    def alpha_equals(self, other, mapping=None, other_mapping=None):
        if mapping is None:
            mapping = {}
        if other_mapping is None:
            other_mapping = {}

        if not isinstance(other, Variable):
            return False

        mine = mapping.get(self.name)
        theirs = other_mapping.get(other.name)
        if mine or theirs:
            return bool(mine and theirs) and mine[-1] == other.name and theirs[-1] == self.name
        return self.name == other.name

    def pretty(self, ascii_only=False, last=True):
        return self.name


@dataclass(frozen=True)
class Abstraction(LambdaTerm):
    """Abstraction: binds param, of type param_type, within body."""
    param: str
    param_type: LambdaType
    body: LambdaTerm

    @property
    def nodes(self):
        return (self.body,)

    def free_variables(self):
        return self.body.free_variables() - {self.param}

    def names(self):
        return self.body.names() | {self.param}

    def sub(self, var, new_term, fresh):
        if self.param == var or var not in self.body.free_variables():
            return self

        if self.param in new_term.free_variables():
            param = fresh(self.param)
            body = self.body.sub(self.param, Variable(param), fresh)
            return Abstraction(param, self.param_type, body.sub(var, new_term, fresh))

        return Abstraction(self.param, self.param_type, self.body.sub(var, new_term, fresh))

    def alpha_equals(self, other, mapping=None, other_mapping=None):
        if mapping is None:
            mapping = {}
        if other_mapping is None:
            other_mapping = {}

        if not isinstance(other, Abstraction) or self.param_type != other.param_type:
            return False

        mapping.setdefault(self.param, []).append(other.param)
        other_mapping.setdefault(other.param, []).append(self.param)

        result = self.body.alpha_equals(other.body, mapping, other_mapping)

        mapping[self.param].pop()
        other_mapping[other.param].pop()
        return result

    def pretty(self, ascii_only=False, last=True):
        bind = ASCII_LAMBDA if ascii_only else LAMBDA

        expr = f"{bind}{self.param}:{self.param_type.pretty(ascii_only)}.{self.body.pretty(ascii_only)}"
        return expr if last else f"({expr})"


@dataclass(frozen=True)
class Application(LambdaTerm):
    """Application of function to argument."""
    function: LambdaTerm
    argument: LambdaTerm

    @property
    def nodes(self):
        return (self.function, self.argument)

    def spine(self):
        """Unrolls the left-nested applications of self without recursing. Returns the head (the innermost function,
        never an Application) and the Applications from the innermost to self.
        """
        applications = []
        term = self
        while isinstance(term, Application):
            applications.append(term)
            term = term.function
        return term, applications[::-1]

    def free_variables(self):
        head, applications = self.spine()
        return head.free_variables().union(*(app.argument.free_variables() for app in applications))

    def names(self):
        head, applications = self.spine()
        return head.names().union(*(app.argument.names() for app in applications))

    def sub(self, var, new_term, fresh):
        head, applications = self.spine()

        function = head.sub(var, new_term, fresh)
        changed = function is not head
        for app in applications:
            argument = app.argument.sub(var, new_term, fresh)
            if changed or argument is not app.argument:
                function, changed = Application(function, argument), True
            else:
                function = app
        return function

    def alpha_equals(self, other, mapping=None, other_mapping=None):
        if mapping is None:
            mapping = {}
        if other_mapping is None:
            other_mapping = {}

        if not isinstance(other, Application):
            return False

        head, applications = self.spine()
        other_head, other_applications = other.spine()
        if len(applications) != len(other_applications) or not head.alpha_equals(other_head, mapping, other_mapping):
            return False

        for app, other_app in zip(applications, other_applications):
            if not app.argument.alpha_equals(other_app.argument, mapping, other_mapping):
                return False
        return True

    def pretty(self, ascii_only=False, last=True):
        head, applications = self.spine()

        exprs = [head.pretty(ascii_only, last=False)]
        for app in applications:
            if isinstance(app.argument, Application):
                exprs.append(f"({app.argument.pretty(ascii_only)})")
            else:
                # only the outermost argument can end the enclosing term
                exprs.append(app.argument.pretty(ascii_only, last and app is self))
        return " ".join(exprs)

    @property
    def is_redex(self):
        """Whether or not self can be beta-reduced in one step, i.e. its function is an Abstraction."""
        return isinstance(self.function, Abstraction)


@v_args(inline=True)
class TreeBuilder(Transformer):
    """Folds the parse tree produced by PARSER into LambdaTerms and LambdaTypes. Purely structural: no names are
    resolved and no types are checked.
    """

    def variable(self, name):
        return Variable(str(name))

    def abstraction(self, param, param_type, body):
        return Abstraction(str(param), param_type, body)

    def application(self, *atoms):
        return reduce(Application, atoms)

    def base_type(self, name):
        return BaseType(str(name))

    def function_type(self, *types):
        *params, result = types
        return reduce(lambda result, param: FunctionType(param, result), reversed(params), result)

    def declaration(self, name, type_):
        return str(name), type_


PARSER = Lark.open(
    "grammar.lark",
    rel_to=__file__,
    parser="earley",
    lexer="basic",
    start=["program", "type", "declaration"],
)

TERMINALS = {
    "IDENT": "identifier",
    "_LAMBDA": f"'{LAMBDA}'",
    "_ARROW": f"'{ARROW}'",
    "LPAR": "'('",
    "RPAR": "')'",
    "COLON": "':'",
    "DOT": "'.'",
    "$END": "end of input",
}

SAMPLES = {
    "IDENT": "x",
    "_LAMBDA": LAMBDA,
    "_ARROW": ARROW,
    "LPAR": "(",
    "RPAR": ")",
    "COLON": ":",
    "DOT": ".",
}


def _describe(terminal):
    """Human-readable name of a grammar terminal."""
    if terminal in TERMINALS:
        return TERMINALS[terminal]
    try:
        return f"'{PARSER.get_terminal(terminal).pattern.value}'"
    except KeyError:
        return terminal


def _expected_after(prefix, start):
    """Terminals that may follow prefix. The lexer allows every terminal anywhere, so each one is tried by parsing
    prefix followed by a sample of it; prefix is always a valid beginning, since tokens are lexed as they are parsed.
    """
    expected = set()
    try:
        PARSER.parse(prefix, start=start)
        expected.add("$END")
    except UnexpectedInput:
        pass

    for terminal, sample in SAMPLES.items():
        try:
            PARSER.parse(f"{prefix} {sample}", start=start)
        except UnexpectedToken:
            continue
        except UnexpectedInput:
            pass  # sample accepted, but the input ends too early
        expected.add(terminal)
    return expected


def _syntax_error(source, error, start):
    """Converts a Lark UnexpectedInput into a LambdaSyntaxError pointing at the first non-matching token."""
    if isinstance(error, UnexpectedEOF) or error.pos_in_stream is None or error.pos_in_stream < 0:
        pos = len(source.rstrip())
        found, width = "end of input", 1
        expected = getattr(error, "expected", ())
    elif isinstance(error, UnexpectedCharacters):
        pos = error.pos_in_stream
        found, width = f"'{error.char}'", 1
        expected = _expected_after(source[:pos], start)
    else:
        pos = error.pos_in_stream
        found, width = f"'{error.token}'", len(error.token)
        expected = error.expected

    return LambdaSyntaxError(source, pos, found, sorted(_describe(terminal) for terminal in expected), width)


def _parse(source, start):
    try:
        tree = PARSER.parse(source, start=start)
    except UnexpectedInput as error:
        raise _syntax_error(source, error, start) from None
    return TreeBuilder().transform(tree)


def generate_tree(source):
    """Parses source into a LambdaTerm, raises LambdaSyntaxError if source is not exactly one valid λ-term."""
    return _parse(source, "program")


def generate_type(source):
    """Parses source into a LambdaType, raises LambdaSyntaxError if source is not exactly one valid type."""
    return _parse(source, "type")


def generate_declaration(source):
    """Parses 'name : type' into a (name, LambdaType) pair."""
    return _parse(source, "declaration")
