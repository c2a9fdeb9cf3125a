import unittest

from tlcalc.lang.error import LambdaTypeError, NotAFunction, TypeMismatch, UnboundVariable
from tlcalc.pure.lexical import BaseType, FunctionType, Variable, generate_tree, generate_type
from tlcalc.pure.typecheck import Context, check, typecheck

A, B = BaseType("A"), BaseType("B")


class TypecheckTestCase(unittest.TestCase):

    def test_well_typed(self):
        cases = {
            "λx:A.x": "A → A",
            "λx:A.λy:B.x": "A → B → A",
            "λf:A -> B.λx:A.f x": "(A → B) → A → B",
            "(λx:A.x)": "A → A",
            "(λf:A -> A.f) (λx:A.x)": "A → A",
            "λx:A.λx:B.x": "A → B → B",
            "λf:A -> B -> A.λx:A.λy:B.f x y": "(A → B → A) → A → B → A",
            "λg:(A -> A) -> B.g (λx:A.x)": "((A → A) → B) → B",
        }
        for case, expected in cases.items():
            with self.subTest(input=case):
                self.assertEqual(generate_type(expected), typecheck(generate_tree(case)))

    def test_unbound_variable(self):
        cases = {"x": "x", "λx:A.y": "y", "(λx:A.x) y": "y", "λx:A.(λy:A.y) z": "z"}
        for case, name in cases.items():
            with self.subTest(input=case):
                with self.assertRaises(UnboundVariable) as context:
                    typecheck(generate_tree(case))
                self.assertEqual(name, context.exception.name)
                self.assertEqual(Variable(name), context.exception.term)

    def test_not_a_function(self):
        with self.assertRaises(NotAFunction) as context:
            typecheck(generate_tree("λx:A.x x"))

        error = context.exception
        self.assertEqual(A, error.found)
        self.assertEqual(generate_tree("x x"), error.term)
        self.assertIn("cannot be applied", str(error))

    def test_type_mismatch(self):
        with self.assertRaises(TypeMismatch) as context:
            typecheck(generate_tree("(λx:A.x) (λy:B.y)"))

        error = context.exception
        self.assertEqual(A, error.expected)
        self.assertEqual(FunctionType(B, B), error.found)
        self.assertEqual(generate_tree("λx:A.x"), error.function)
        self.assertEqual(generate_tree("λy:B.y"), error.argument)
        self.assertEqual("attempted to apply 'λx:A.x' (expects 'A') to 'λy:B.y' of type 'B → B'", str(error))

    def test_base_types_are_nominal(self):
        for case in ["λf:A -> A.λx:B.f x", "λf:(A -> B) -> A.λg:A -> A.f g"]:
            with self.subTest(input=case):
                self.assertRaises(TypeMismatch, typecheck, generate_tree(case))

    def test_errors_share_a_superclass(self):
        for case in ["x", "λx:A.x x", "(λx:A.x) (λy:B.y)"]:
            self.assertRaises(LambdaTypeError, typecheck, generate_tree(case))

    def test_first_error_wins(self):
        with self.assertRaises(UnboundVariable) as context:
            typecheck(generate_tree("a b"))
        self.assertEqual("a", context.exception.name)

    def test_errors_inside_application_chains(self):
        context = {"f": FunctionType(A, FunctionType(B, A)), "a": A, "b": B}
        self.assertEqual(A, typecheck(generate_tree("f a b"), context))

        with self.assertRaises(NotAFunction) as error:
            typecheck(generate_tree("f a b a"), context)
        self.assertEqual(generate_tree("f a b"), error.exception.function)

        with self.assertRaises(TypeMismatch) as error:
            typecheck(generate_tree("f a a b"), context)
        self.assertEqual(generate_tree("f a a"), error.exception.term)
        self.assertEqual((B, A), (error.exception.expected, error.exception.found))

    def test_context(self):
        term = generate_tree("f y")
        self.assertEqual(B, typecheck(term, {"f": FunctionType(A, B), "y": A}))
        self.assertEqual(B, typecheck(term, [("f", FunctionType(A, B)), ("y", A)]))
        self.assertEqual(B, typecheck(term, Context.from_bindings({"f": FunctionType(A, B), "y": A})))
        self.assertRaises(TypeMismatch, typecheck, term, {"f": FunctionType(A, B), "y": B})

    def test_check_does_not_leak_bindings(self):
        context = Context().extend("y", A)
        self.assertEqual(FunctionType(B, B), check(generate_tree("λy:B.y"), context))
        self.assertEqual(A, check(Variable("y"), context))


class ContextTestCase(unittest.TestCase):

    def test_extend_returns_new_context(self):
        empty = Context()
        outer = empty.extend("x", A)
        inner = outer.extend("x", B)

        self.assertIsNone(empty.lookup("x"))
        self.assertEqual(A, outer.lookup("x"))
        self.assertEqual(B, inner.lookup("x"))
        self.assertNotIn("x", empty)
        self.assertIn("x", inner)

    def test_items(self):
        context = Context.from_bindings([("x", A), ("y", B), ("x", B)])
        self.assertEqual([("y", B), ("x", B)], context.items())
        self.assertEqual(["y", "x"], list(context))
        self.assertEqual(2, len(context))
        self.assertEqual("Context(y: B, x: B)", repr(context))

    def test_require(self):
        self.assertEqual(A, Context().extend("x", A).require("x"))
        self.assertRaises(UnboundVariable, Context().require, "x")


if __name__ == '__main__':
    unittest.main()
