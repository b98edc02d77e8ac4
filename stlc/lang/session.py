"""Session control for stlc. Runs files of encoded terms, or terms typed one at a time in command-line mode.

Input files hold one tagged term record (see `lang.codec`) per line. Blank lines and lines starting with ";;" are
ignored.
"""

from collections import namedtuple

from stlc.lang.codec import loads
from stlc.lang.error import GenericException
from stlc.pure.printer import locate_term, pprint_term, pprint_type
from stlc.pure.reducer import CallByNameReducer
from stlc.pure.syntax import Term
from stlc.pure.typechecker import TypeCheckError, typecheck

Result = namedtuple("Result", ["term", "type", "value", "steps"])


class Session:
    """Governs a stlc session: terms are queued with add and checked/evaluated when run is called."""
    SH_FILE = "<in>"  # command-line interpreter filename
    COMMENT = ";;"

    def __init__(self, error_handler, path, cmd_line, annotate=False, check=True, max_steps=None):
        self.error_handler = error_handler
        self.error_handler.register_file(path)

        self.path = path            # used for error messages
        self.cmd_line = cmd_line    # whether or not in command-line mode
        self.annotate = annotate    # whether or not to print abstraction parameter types
        self.check = check          # whether or not to typecheck before evaluating
        self.max_steps = max_steps  # step bound passed to CallByNameReducer

        self.to_exec = {}  # dict of line num: Terms to run
        self.results = []  # Results of run terms, in order

        if self.cmd_line:
            self.error_handler.fatal = False

        if path != Session.SH_FILE:
            try:
                with open(path, "r", encoding="utf-8") as file:
                    for line_num, line in enumerate(file):
                        self.add(line, line_num + 1)
            except OSError:
                raise GenericException("'{}' could not be opened", path, diagnosis=False)

        elif not cmd_line:
            raise GenericException("'<in>' is a reserved filename")

    @staticmethod
    def preprocess_line(line):
        """Strips surrounding whitespace and comments. Returns an empty string if nothing is left to run."""
        line = line.strip()
        if line.startswith(Session.COMMENT):
            return ""
        return line

    @staticmethod
    def load(line):
        """Decodes the term encoded on line."""
        term = loads(line)
        if not isinstance(term, Term):
            raise GenericException("'{}' encodes a type, not a term", line, diagnosis=False)
        return term

    def add(self, line, line_num):
        """Decodes the term on line and queues it. Evaluation is lazy and is delayed until run is called."""
        line = Session.preprocess_line(line)
        if not line:
            return

        self.error_handler.register_line(self.path, line, line_num)  # in case error is raised

        self.to_exec[line_num] = Session.load(line)

        self.error_handler.remove_line(self.path)  # error was not raised

    def run(self):
        """Typechecks (unless disabled) and evaluates every queued term, appending a Result for each. Will raise any
        errors that are encountered.
        """
        for line_num, term in list(self.to_exec.items()):
            self.error_handler.register_line(self.path, self.format(term), line_num)

            try:
                self.results.append(self.execute(term))
            except TypeCheckError as error:
                if error.culprit is not None:
                    error.span = locate_term(term, error.culprit, self.annotate)
                raise
            finally:
                del self.to_exec[line_num]

            self.error_handler.remove_line(self.path)

    def execute(self, term):
        """Checks and evaluates a single term."""
        ty = typecheck(term) if self.check else None
        value, steps = CallByNameReducer(self.max_steps).run(term)

        if not value.is_value:
            self.error_handler.warn("'{}' is stuck and cannot be reduced to a value", self.format(value))

        return Result(term, ty, value, steps)

    def format(self, term):
        return pprint_term(term, self.annotate)

    def describe(self, result):
        """Formats result as `value : type  (n steps)`."""
        description = self.format(result.value)
        if result.type is not None:
            description += f" : {pprint_type(result.type)}"
        plural = "" if result.steps == 1 else "s"
        return description + f"  ({result.steps} step{plural})"

    def pop(self):
        """Removes and describes the most recent result."""
        return self.describe(self.results.pop())
