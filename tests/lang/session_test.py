import io
import os
import tempfile
import unittest
from contextlib import redirect_stdout

from stlc.lang.codec import dumps
from stlc.lang.error import ErrorHandler, GenericException
from stlc.lang.session import Session
from stlc.lang.shell import Shell
from stlc.main import main
from stlc.pure.syntax import (Abstraction, Application, BOOL_TYPE, Conditional, FALSE, FunctionType, TRUE, UNIT,
                              Variable)
from stlc.pure.typechecker import UnboundVariable

x, y = Variable("x"), Variable("y")
identity = Abstraction("x", BOOL_TYPE, x)
negation = Abstraction("x", BOOL_TYPE, Conditional(x, FALSE, TRUE))


class SessionTestCase(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)

    def write(self, *lines):
        path = os.path.join(self.tmp.name, "terms.jsonl")
        with open(path, "w", encoding="utf-8") as file:
            file.write("\n".join(lines) + "\n")
        return path

    def test_run_file(self):
        path = self.write(";; identity applied to True",
                          dumps(Application(identity, TRUE)),
                          "",
                          dumps(negation))
        sess = Session(ErrorHandler(fatal=False), path, cmd_line=False)
        self.assertEqual([2, 4], list(sess.to_exec))

        sess.run()
        self.assertEqual({}, sess.to_exec)
        self.assertEqual([(TRUE, 1), (negation, 0)], [(r.value, r.steps) for r in sess.results])
        self.assertEqual(FunctionType(BOOL_TYPE, BOOL_TYPE), sess.results[1].type)

        self.assertEqual(r"\x -> ite x False True : Bool -> Bool  (0 steps)", sess.pop())
        self.assertEqual("True : Bool  (1 step)", sess.pop())

    def test_annotate(self):
        sess = Session(ErrorHandler(fatal=False), self.write(dumps(identity)), cmd_line=False, annotate=True)
        sess.run()
        self.assertEqual(r"\(x :: Bool) -> x : Bool -> Bool  (0 steps)", sess.pop())

    def test_type_errors(self):
        sess = Session(ErrorHandler(fatal=False), self.write(dumps(Application(identity, y))), cmd_line=False)
        with self.assertRaises(UnboundVariable):
            sess.run()
        self.assertEqual([], sess.results)

    def test_type_errors_are_reported(self):
        handler = ErrorHandler(fatal=False)
        sess = Session(handler, self.write(dumps(Application(identity, y))), cmd_line=False)

        out = io.StringIO()
        with redirect_stdout(out), handler:
            sess.run()

        self.assertIn("error: ", out.getvalue())
        self.assertIn("is not bound in context", out.getvalue())
        self.assertIn("line 1", out.getvalue())

    def test_diagnosis_points_at_culprit(self):
        term = Application(Abstraction("y", BOOL_TYPE, Variable("y")), y)
        cases = {
            False: 10,  # (\y -> y) y
            True: 20,   # (\(y :: Bool) -> y) y
        }
        for annotate, column in cases.items():
            handler = ErrorHandler(fatal=False)
            sess = Session(handler, self.write(dumps(term)), cmd_line=False, annotate=annotate)

            out = io.StringIO()
            with redirect_stdout(out), handler:
                sess.run()

            caret = next(line for line in out.getvalue().splitlines() if "^" in line)
            self.assertEqual(2 + column, len(caret) - len(caret.lstrip(" ")), annotate)

    def test_unchecked_stuck_terms_warn(self):
        term = Application(TRUE, UNIT)
        sess = Session(ErrorHandler(fatal=False), self.write(dumps(term)), cmd_line=False, check=False)

        out = io.StringIO()
        with redirect_stdout(out):
            sess.run()

        self.assertIn("warning: ", out.getvalue())
        self.assertIn("is stuck", out.getvalue())
        self.assertEqual(term, sess.results[0].value)
        self.assertIsNone(sess.results[0].type)
        self.assertEqual("True ()  (1 step)", sess.pop())

    def test_bad_input(self):
        handler = ErrorHandler(fatal=False)
        self.assertRaises(GenericException, Session, handler, os.path.join(self.tmp.name, "missing"), False)
        self.assertRaises(GenericException, Session, handler, self.write('{"tag": "TyBool"}'), False)
        self.assertRaises(GenericException, Session, handler, self.write("True"), False)
        self.assertRaises(GenericException, Session, handler, self.write('{"tag": ["TmTrue"]}'), False)
        self.assertRaises(GenericException, Session, handler, Session.SH_FILE, False)

    def test_cmd_line_is_not_fatal(self):
        handler = ErrorHandler()
        Session(handler, Session.SH_FILE, cmd_line=True)
        self.assertFalse(handler.fatal)


class ShellTestCase(unittest.TestCase):

    def setUp(self):
        self.shell = Shell(Session(ErrorHandler(), Session.SH_FILE, cmd_line=True))

    def run_cmd(self, line):
        out = io.StringIO()
        with redirect_stdout(out):
            stop = self.shell.onecmd(line)
        return out.getvalue(), stop

    def test_evaluate(self):
        out, __ = self.run_cmd(dumps(Application(negation, TRUE)))
        self.assertEqual("False : Bool  (2 steps)\n", out)

    def test_errors_do_not_exit(self):
        out, stop = self.run_cmd(dumps(y))
        self.assertIn("error: ", out)
        self.assertFalse(stop)

        out, __ = self.run_cmd(dumps(TRUE))
        self.assertEqual("True : Bool  (0 steps)\n", out)

    def test_commands(self):
        out, __ = self.run_cmd("type " + dumps(identity))
        self.assertEqual("Bool -> Bool\n", out)

        out, __ = self.run_cmd("tree " + dumps(identity))
        self.assertEqual("Abstraction(param='x', param_type=BoolType(), nodes=[\n    Variable(name='x')\n])\n", out)

        out, __ = self.run_cmd("annotate")
        self.assertEqual("annotations on\n", out)
        out, __ = self.run_cmd(dumps(identity))
        self.assertEqual("\\(x :: Bool) -> x : Bool -> Bool  (0 steps)\n", out)

        self.assertTrue(self.run_cmd("exit")[1])


class MainTestCase(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)

    def write(self, *terms):
        path = os.path.join(self.tmp.name, "terms.jsonl")
        with open(path, "w", encoding="utf-8") as file:
            file.write("\n".join(dumps(term) for term in terms))
        return path

    def test_main(self):
        out = io.StringIO()
        with redirect_stdout(out):
            main([self.write(Application(identity, FALSE), Conditional(TRUE, UNIT, UNIT))])
        self.assertEqual("False : Bool  (1 step)\n() : ()  (1 step)\n", out.getvalue())

    def test_main_exits_on_error(self):
        out = io.StringIO()
        with redirect_stdout(out), self.assertRaises(SystemExit) as raised:
            main([self.write(Application(TRUE, FALSE))])
        self.assertEqual(1, raised.exception.code)
        self.assertIn("is not a function", out.getvalue())

    def test_main_max_steps(self):
        omega = Abstraction("x", BOOL_TYPE, Application(x, x))
        out = io.StringIO()
        with redirect_stdout(out), self.assertRaises(SystemExit):
            main(["--no-check", "--max-steps", "10", self.write(Application(omega, omega))])
        self.assertIn("did not reach a value within", out.getvalue())


if __name__ == '__main__':
    unittest.main()
