"""Normal-order beta reduction with capture-avoiding substitution.

Normal order always contracts the leftmost outermost redex first, so an argument is substituted unevaluated
(call-by-name) and reduction continues under abstractions until no redex is left. In the simply-typed calculus every
well-typed term has a beta-normal form, so the step limit only matters for terms that were never type-checked.

Sources: http://pages.cs.wisc.edu/~horwitz/CS704-NOTES/1.LAMBDA-CALCULUS.html#NOR
"""

from tlcalc.lang.error import StepLimitExceeded
from tlcalc.pure.lexical import Abstraction, Application


class FreshNames:
    """Supply of variable names that collide with nothing in used. Every name handed out is added to used, so one
    supply never returns the same name twice.

    A fresh name is the old name without its trailing digits, followed by the smallest positive counter giving an
    unused name: y -> y1, y1 -> y2 (if y2 is unused), x_3 -> x_1.
    """

    def __init__(self, used=()):
        self.used = set(used)

    def __call__(self, name):
        base = name.rstrip("0123456789") or name
        counter = 1
        while f"{base}{counter}" in self.used:
            counter += 1

        new_name = f"{base}{counter}"
        self.used.add(new_name)
        return new_name


def substitute(term, var, new_term, fresh=None):
    """Capture-avoiding term[var := new_term]."""
    if fresh is None:
        fresh = FreshNames(term.names() | new_term.names())
    return term.sub(var, new_term, fresh)


def _reapply(function, applications):
    """Applies function to the arguments of applications, in order."""
    for app in applications:
        function = Application(function, app.argument)
    return function


class NormalOrderReducer:
    """Implements normal-order beta reduction of a syntax tree. One reducer is one evaluation: the fresh-name supply
    and the recorded steps belong to it, so separate reducers can run concurrently.
    """
    STEP_LIMIT = 1000

    def __init__(self, tree, step_limit=None):
        self.original_tree = tree
        self.tree = tree
        self.step_limit = step_limit if step_limit is not None else NormalOrderReducer.STEP_LIMIT

        self.fresh = FreshNames(tree.names())
        self.steps = []

        self.reduced = False

    def step(self, term):
        """Contracts the leftmost outermost redex of term. Returns None if term is in beta-normal form."""
        if isinstance(term, Application):
            head, applications = term.spine()

            if isinstance(head, Abstraction):
                first = applications[0]
                return _reapply(head.body.sub(head.param, first.argument, self.fresh), applications[1:])

            # the head is a variable: the leftmost redex is in the first argument that has one
            for i, app in enumerate(applications):
                argument = self.step(app.argument)
                if argument is not None:
                    return _reapply(Application(app.function, argument), applications[i + 1:])

        elif isinstance(term, Abstraction):
            body = self.step(term.body)
            if body is not None:
                return Abstraction(term.param, term.param_type, body)

        return None

    def beta_reduce(self):
        """Reduces self.tree to beta-normal form and returns it. Raises StepLimitExceeded if that takes more than
        self.step_limit steps.
        """
        if self.reduced:
            return self.tree

        reduced = self.step(self.tree)
        while reduced is not None:
            if len(self.steps) >= self.step_limit:
                raise StepLimitExceeded(self.step_limit, self.original_tree)

            self.tree = reduced
            self.steps.append(reduced)
            reduced = self.step(self.tree)

        self.reduced = True
        return self.tree

    def __repr__(self):
        return f"{type(self).__name__}({self.tree!r})"

    def __str__(self):
        return self.tree.display()
