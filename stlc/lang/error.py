"""Error handling for the stlc command line. Only GenericExceptions should be encountered during running: if another type
of error is raised and makes it all the way to ErrorHandler, it is assumed to be an internal issue.
"""

import sys

from termcolor import colored


class GenericException(Exception):
    """Templates an error/warning message so that it can be used to throw a stlc error/warning. The message is formatted
    with exprs, each of which is bolded. exprs[0] should be the offending expr.
    """

    def __init__(self, msg, exprs=None, start=0, end=-1, diagnosis=True, internal=False):
        """Parses args for GenericException or warning."""
        if exprs is None:
            exprs = ""
        if isinstance(exprs, str):
            exprs = [exprs]

        super().__init__(msg.format(*exprs))

        self.msg = msg.format(*(colored(expr, attrs=["bold"]) for expr in exprs))  # color expr snippets
        self.expr = exprs[0] if exprs else ""
        self.end = end if end != -1 else start + len(self.expr)  # needed for error display

        self.start = start
        self.diagnosis = diagnosis
        self.internal = internal
        self.span = None  # (start, end) within the traceback line, if already known


class ErrorHandler:
    """Context manager that will silently suppress Python errors and raise custom stlc errors/warnings."""
    ERROR = "red"
    WARNING = "magenta"

    def __init__(self, fatal=True):
        self.fatal = fatal
        self.traceback = {}

    def register_file(self, path):
        """Registers path in traceback."""
        self.traceback[path] = (None, None)

    def register_line(self, path, line, line_num):
        """Registers line in traceback given path. line is the printed term being worked on, so that diagnoses can
        point at the offending subterm. Should be called prior to Session add/run.
        """
        self.traceback[path] = (line, line_num)

    def remove_line(self, path):
        """Removes line from traceback given path. Should be called after successful Session add/run."""
        self.traceback[path] = (None, None)

    def _current_line(self):
        for line, line_num in self.traceback.values():
            if line:
                return line, line_num
        return None, None

    @staticmethod
    def locate(error, line):
        """Returns (start, end) of error.expr within line, or None if it cannot be found. A span set on error takes
        precedence over searching line.
        """
        if error.span is not None:
            return error.span
        if not line or not error.expr:
            return None
        offset = line.find(error.expr)
        if offset == -1:
            return None
        return offset + error.start, offset + max(error.end, error.start + 1)

    @staticmethod
    def diagnose(line, span, warning=False):
        """Returns line with the span (start, end) highlighted, bolded and underlined with a caret."""
        color = ErrorHandler.WARNING if warning else ErrorHandler.ERROR
        start, end = span

        diagnosis = "  " + line[:start]
        diagnosis += colored(line[start:end], color, attrs=["bold"])
        diagnosis += line[end:] + "\n"

        diagnosis += "  " + " " * start
        diagnosis += colored("^" + "~" * (end - start - 1), color, attrs=["bold"])

        return diagnosis

    def warn(self, *args, **kwargs):
        """Generates and prints runtime warning message based on args."""
        error = GenericException(*args, **kwargs)

        file = next(iter(self.traceback), "<stlc>")
        line, line_num = self._current_line()
        span = ErrorHandler.locate(error, line)
        col = span[0] if span else 0

        error_msg = colored(f"{file}:{line_num}:{col}: ", attrs=["bold"])
        error_msg += colored("warning: ", ErrorHandler.WARNING, attrs=["bold"]) + error.msg

        print(error_msg)

        if not error.internal and error.diagnosis and span:
            print(ErrorHandler.diagnose(line, span, warning=True))

    def throw(self, error):
        """Throws error using error and self.traceback. error must be a GenericException, and self.traceback must be a
        dict of file: (line, line_num) representing origination of error.
        """
        error_msg = ""
        lines = 0
        for file, (line, line_num) in self.traceback.items():  # assumes dict is insertion-ordered
            if line:
                error_msg += f"  File '{file}', line {line_num}:\n"
                error_msg += f"    {line}\n"
                lines += 1

        if lines > 1:
            error_msg = "Traceback:\n" + error_msg

        if error.internal:
            error_msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])

        error_msg += colored("error: ", ErrorHandler.ERROR, attrs=["bold"]) + error.msg
        print(error_msg)

        line, __ = self._current_line()
        span = ErrorHandler.locate(error, line)
        if not error.internal and error.diagnosis and span:
            print(ErrorHandler.diagnose(line, span))

        if self.fatal:
            sys.exit(1)
        self.traceback = {file: (None, None) for file in self.traceback}  # if error occurred, reset traceback

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(GenericException("keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(GenericException("term is too deeply nested: maximum recursion depth exceeded"))
        elif exc_type is not None and issubclass(exc_type, GenericException):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(GenericException("unknown error: '{}'", f"{exc_type.__name__}: {exc_val}", internal=True))
            do_exit = True

        return not do_exit
