import unittest

from tlcalc.lang.error import StepLimitExceeded
from tlcalc.pure.lexical import Abstraction, BaseType, Variable, generate_tree
from tlcalc.pure.reduction import FreshNames, NormalOrderReducer, substitute
from tlcalc.pure.typecheck import typecheck

T = BaseType("T")


def reduce(expr, step_limit=None):
    return NormalOrderReducer(generate_tree(expr), step_limit).beta_reduce()


class FreshNamesTestCase(unittest.TestCase):

    def test_call(self):
        cases = {
            ("y", frozenset({"y"})): "y1",
            ("y", frozenset({"y", "y1"})): "y2",
            ("y1", frozenset({"y1"})): "y2",
            ("x_3", frozenset({"x_3"})): "x_1",
            ("x", frozenset()): "x1",
        }
        for (name, used), expected in cases.items():
            self.assertEqual(expected, FreshNames(used)(name), (name, used))

    def test_never_repeats(self):
        fresh = FreshNames({"y"})
        self.assertEqual(["y1", "y2", "y3"], [fresh("y"), fresh("y"), fresh("y1")])


class SubstituteTestCase(unittest.TestCase):

    def test_substitute(self):
        cases = {
            ("x", "x", "y"): "y",
            ("z", "x", "y"): "z",
            ("f x x", "x", "λz:T.z"): "f (λz:T.z) λz:T.z",
            ("λx:T.x", "x", "y"): "λx:T.x",  # x is bound, nothing to replace
            ("λz:T.x z", "x", "y"): "λz:T.y z",
        }
        for (term, var, new_term), expected in cases.items():
            result = substitute(generate_tree(term), var, generate_tree(new_term))
            self.assertEqual(generate_tree(expected), result, (term, var, new_term))

    def test_capture_is_avoided(self):
        result = substitute(generate_tree("λy:T.x y"), "x", Variable("y"))
        self.assertEqual(generate_tree("λy1:T.y y1"), result)

    def test_unchanged_terms_are_shared(self):
        term = generate_tree("λz:T.z")
        self.assertIs(term, substitute(term, "x", Variable("y")))


class NormalOrderReducerTestCase(unittest.TestCase):

    def test_beta_reduce(self):
        cases = {
            "x": "x",
            "λx:T.x": "λx:T.x",
            "(λx:T.x) y": "y",
            "(λx:T.λy:T.x) a b": "a",
            "(λx:T.λy:T.y) a b": "b",
            "λx:T.(λy:T.y) x": "λx:T.x",
            "f ((λx:T.x) y)": "f y",
            "(λf:T -> T.λx:T.f (f x)) (λz:T.z)": "λx:T.x",
            "(λf:T -> T.λx:T.f (f x)) g": "λx:T.g (g x)",
            "(λx:T.x) (λy:T.y) (λz:T.z) w": "w",
        }
        for case, expected in cases.items():
            self.assertEqual(generate_tree(expected), reduce(case), case)

    def test_capture_avoidance(self):
        result = reduce("(λx:T.λy:T.x) y")
        self.assertEqual(Abstraction("y1", T, Variable("y")), result)
        self.assertFalse(result.alpha_equals(generate_tree("λy:T.y")))
        self.assertTrue(result.alpha_equals(generate_tree("λz:T.y")))

    def test_fresh_names_avoid_every_name(self):
        self.assertEqual(generate_tree("λy2:T.λy1:T.y"), reduce("(λx:T.λy:T.λy1:T.x) y"))

    def test_normal_order(self):
        # the argument has no normal form, but it is never evaluated
        omega = "((λw:T.w w) (λw:T.w w))"
        self.assertEqual(Variable("y"), reduce(f"(λx:T.y) {omega}", step_limit=1))

    def test_step_limit(self):
        omega = generate_tree("(λw:T.w w) (λw:T.w w)")
        with self.assertRaises(StepLimitExceeded) as context:
            NormalOrderReducer(omega, 10).beta_reduce()
        self.assertEqual(10, context.exception.limit)
        self.assertEqual(omega, context.exception.term)

        self.assertEqual(Variable("y"), reduce("(λx:T.x) y", step_limit=1))
        self.assertRaises(StepLimitExceeded, reduce, "(λx:T.x) y", 0)
        self.assertEqual(Variable("y"), reduce("y", step_limit=0))

    def test_default_step_limit(self):
        self.assertEqual(NormalOrderReducer.STEP_LIMIT, NormalOrderReducer(Variable("x")).step_limit)

    def test_steps(self):
        reducer = NormalOrderReducer(generate_tree("(λx:T.λy:T.x) a b"))
        reducer.beta_reduce()

        self.assertEqual([generate_tree("(λy:T.a) b"), Variable("a")], reducer.steps)
        self.assertTrue(reducer.reduced)
        self.assertEqual(Variable("a"), reducer.beta_reduce())  # already reduced

    def test_reducers_are_independent(self):
        term = generate_tree("(λx:T.λy:T.x) y")
        first, second = NormalOrderReducer(term), NormalOrderReducer(term)
        self.assertEqual(first.beta_reduce(), second.beta_reduce())
        self.assertIsNot(first.fresh, second.fresh)

    def test_preserves_types(self):
        cases = [
            "(λf:T -> T.λx:T.f (f x)) (λz:T.z)",
            "(λx:T -> T.λy:T.x y) (λy:T.y)",
            "(λm:(T -> T) -> T -> T.λf:T -> T.λx:T.f (m f x)) (λf:T -> T.λx:T.f x)",
            "λy:T.(λx:T -> T.λy:T.x y) (λz:T.y)",
        ]
        for case in cases:
            term = generate_tree(case)
            self.assertEqual(typecheck(term), typecheck(NormalOrderReducer(term).beta_reduce()), case)


if __name__ == '__main__':
    unittest.main()
