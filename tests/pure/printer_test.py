import unittest

from stlc.pure.printer import locate_term, pprint_term, pprint_type
from stlc.pure.syntax import (Abstraction, Application, BOOL_TYPE, Conditional, FALSE, FunctionType, TRUE, UNIT,
                              UNIT_TYPE, Variable)

f, x, y, z = Variable("f"), Variable("x"), Variable("y"), Variable("z")
BOOL_TO_BOOL = FunctionType(BOOL_TYPE, BOOL_TYPE)


def fun(param, body, ty=BOOL_TYPE):
    return Abstraction(param, ty, body)


nested = Application(fun("x", x), Application(fun("y", y), Application(fun("z", z), TRUE)))
branching = Conditional(Application(fun("x", TRUE), FALSE), fun("y", TRUE), fun("z", z))


class PprintTypeTestCase(unittest.TestCase):

    def test_pprint_type(self):
        cases = {
            UNIT_TYPE: "()",
            BOOL_TYPE: "Bool",
            BOOL_TO_BOOL: "Bool -> Bool",
            FunctionType(FunctionType(UNIT_TYPE, BOOL_TYPE), BOOL_TYPE): "(() -> Bool) -> Bool",
            FunctionType(UNIT_TYPE, BOOL_TO_BOOL): "() -> Bool -> Bool",
            FunctionType(BOOL_TO_BOOL, FunctionType(BOOL_TO_BOOL, UNIT_TYPE)): "(Bool -> Bool) -> (Bool -> Bool) -> ()",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, pprint_type(case), case)


class PprintTermTestCase(unittest.TestCase):

    def test_pprint_term(self):
        cases = {
            UNIT: "()",
            TRUE: "True",
            FALSE: "False",
            x: "x",
            fun("x", x): r"\x -> x",
            fun("x", fun("y", x)): r"\x -> \y -> x",
            fun("x", Application(x, x)): r"\x -> x x",
            Application(Application(f, x), y): "f x y",
            Application(f, Application(x, y)): "f (x y)",
            Application(f, fun("x", x)): r"f (\x -> x)",
            Conditional(x, y, z): "ite x y z",
            Application(Conditional(x, f, f), TRUE): "ite x f f True",
            Application(f, Conditional(x, y, z)): "f (ite x y z)",
            nested: r"(\x -> x) ((\y -> y) ((\z -> z) True))",
            branching: r"ite ((\x -> True) False) (\y -> True) (\z -> z)",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, pprint_term(case), case)

    def test_pprint_term_annotated(self):
        cases = {
            fun("x", x): r"\(x :: Bool) -> x",
            fun("f", Application(f, UNIT), FunctionType(UNIT_TYPE, BOOL_TYPE)): r"\(f :: () -> Bool) -> f ()",
            nested: r"(\(x :: Bool) -> x) ((\(y :: Bool) -> y) ((\(z :: Bool) -> z) True))",
            branching: r"ite ((\(x :: Bool) -> True) False) (\(y :: Bool) -> True) (\(z :: Bool) -> z)",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, pprint_term(case, annotate=True), case)

    def test_deterministic(self):
        self.assertEqual(pprint_term(branching, True), pprint_term(branching, True))


class LocateTermTestCase(unittest.TestCase):

    def test_locate_term(self):
        bound, free = Variable("y"), Variable("y")
        binder = fun("y", bound)
        term = Application(binder, free)  # (\y -> y) y

        # equal subterms are told apart by identity, so cases are kept in a list
        cases = [
            (free, False, (10, 11)),
            (bound, False, (7, 8)),
            (binder, False, (0, 9)),
            (term, False, (0, 11)),
            (free, True, (20, 21)),
            (binder, True, (0, 19)),
            (Variable("y"), False, None),
        ]
        for subterm, annotate, expected in cases:
            self.assertEqual(expected, locate_term(term, subterm, annotate), (subterm, annotate))

    def test_spans_match_printed_text(self):
        argument = Application(f, x)
        term = Application(Conditional(y, f, f), argument)
        start, end = locate_term(term, argument)
        self.assertEqual("(f x)", pprint_term(term)[start:end])


if __name__ == '__main__':
    unittest.main()
