"""Error handling for tlcalc. Only GenericExceptions should be encountered during running: if another type of error is
raised and makes it all the way to ErrorHandler, it is assumed to be an internal issue.

The core (tlcalc.pure) only ever raises; reporting is done by ErrorHandler, which is used by the session, the shell and
the command-line entry point.
"""

import sys

from termcolor import colored


class GenericException(Exception):
    """Templates an error/warning message so that it can be used to throw a tlcalc error/warning.

    msg is a format string whose fields are filled with exprs. exprs[0] is the offending expr that caused the error,
    and start/end delimit the part of it that gets underlined in the diagnosis. source overrides the text that is
    diagnosed when the offending part is not exprs[0] itself (e.g. the source line of a syntax error).
    """

    def __init__(self, msg, exprs=None, start=0, end=-1, diagnosis=True, internal=False, source=None):
        if exprs is None:
            exprs = ""
        if isinstance(exprs, str):
            exprs = [exprs]
        exprs = [str(expr) for expr in exprs]

        self.template = msg
        self.exprs = exprs
        self.msg = msg.format(*exprs)
        self.expr = source if source is not None else (exprs[0] if exprs else "")
        self.end = end if end != -1 else len(self.expr)  # needed for error display

        self.start = start
        self.diagnosis = diagnosis
        self.internal = internal

        super().__init__(self.msg)

    @property
    def kind(self):
        """Name of the error kind, as shown to the user."""
        return type(self).__name__


class LambdaSyntaxError(GenericException):
    """Malformed or incomplete input. pos is the character offset of the first non-matching token, byte_pos its
    offset in the UTF-8 encoding of source; line and column are 1-based.
    """

    def __init__(self, source, pos, found, expected=(), width=1):
        self.source = source
        self.pos = pos
        self.byte_pos = len(source[:pos].encode("utf-8"))
        self.line = source.count("\n", 0, pos) + 1

        line_start = source.rfind("\n", 0, pos) + 1
        line_end = source.find("\n", pos)
        self.column = pos - line_start + 1

        self.found = found
        self.expected = tuple(expected)

        start = pos - line_start
        super().__init__(
            "unexpected {} at line {}, column {} (expected {})",
            (found, self.line, self.column, ", ".join(self.expected) or "nothing"),
            start=start,
            end=start + max(width, 1),
            source=source[line_start:line_end if line_end != -1 else len(source)],
        )


class LambdaTypeError(GenericException):
    """Superclass of errors raised by the type checker. term is the offending subterm."""

    def __init__(self, msg, exprs, term):
        self.term = term
        super().__init__(msg, exprs, diagnosis=False)


class UnboundVariable(LambdaTypeError):

    def __init__(self, name, term=None):
        self.name = name
        super().__init__("unbound variable '{}'", name, term if term is not None else name)


class NotAFunction(LambdaTypeError):

    def __init__(self, found, term, function=None, argument=None):
        self.found = found
        self.function = function
        self.argument = argument
        super().__init__(
            "'{}' has type '{}' and cannot be applied to '{}'",
            (function if function is not None else term, found, argument if argument is not None else term),
            term,
        )


class TypeMismatch(LambdaTypeError):

    def __init__(self, expected, found, term, function=None, argument=None):
        self.expected = expected
        self.found = found
        self.function = function
        self.argument = argument
        super().__init__(
            "attempted to apply '{}' (expects '{}') to '{}' of type '{}'",
            (function if function is not None else term, expected, argument if argument is not None else term, found),
            term,
        )


class EvalError(GenericException):
    """Superclass of errors raised during beta reduction."""


class StepLimitExceeded(EvalError):

    def __init__(self, limit, term):
        self.limit = limit
        self.term = term
        super().__init__("'{}' did not reach beta normal form within {} steps", (term, limit), diagnosis=False)


class ErrorHandler:
    """Context manager that will silently suppress Python errors and raise custom tlcalc errors/warnings."""
    ERROR = "red"
    WARNING = "magenta"

    def __init__(self, fatal=True, out=None):
        self.fatal = fatal
        self.out = out if out is not None else sys.stdout
        self.traceback = {}

    def register_file(self, path):
        """Registers path in traceback."""
        self.traceback[path] = (None, None)

    def register_line(self, path, line, line_num):
        """Registers line in traceback given path. Should be called prior to Session add/run."""
        self.traceback[path] = (line, line_num)

    def remove_line(self, path):
        """Removes line from traceback given path. Should be called after successful Session add/run."""
        self.traceback[path] = (None, None)

    @staticmethod
    def highlight(error):
        """Returns error.msg with the exprs that fill its template in bold."""
        return error.template.format(*(colored(expr, attrs=["bold"]) for expr in error.exprs))

    @staticmethod
    def diagnose(error, warning=False):
        """Returns offending part of error.expr highlighted and bolded."""
        color = ErrorHandler.WARNING if warning else ErrorHandler.ERROR

        diagnosis = "  " + error.expr[:error.start]

        end = max(error.end, error.start + 1)
        diagnosis += colored(error.expr[error.start:end], color, attrs=["bold"])
        diagnosis += error.expr[end:] + "\n"

        diagnosis += "  " + " " * error.start
        diagnosis += colored("^" + "~" * (end - error.start - 1), color, attrs=["bold"])

        return diagnosis

    def _location(self, error):
        """Returns 'file:line:col: ' for the registered file, or an empty string if no file is registered."""
        for file, (__, line_num) in self.traceback.items():
            if isinstance(error, LambdaSyntaxError):
                line = error.line + (line_num - 1 if line_num else 0)
                return colored(f"{file}:{line}:{error.column}: ", attrs=["bold"])
            if line_num is not None:
                return colored(f"{file}:{line_num}: ", attrs=["bold"])
            return colored(f"{file}: ", attrs=["bold"])
        return ""

    def warn(self, *args, **kwargs):
        """Generates and prints runtime warning message based on args."""
        error = GenericException(*args, **kwargs)

        error_msg = self._location(error)
        error_msg += colored("warning: ", ErrorHandler.WARNING, attrs=["bold"]) + ErrorHandler.highlight(error)
        print(error_msg, file=self.out)

        if not error.internal and error.expr and error.diagnosis:
            print(ErrorHandler.diagnose(error, warning=True), file=self.out)

    def throw(self, error):
        """Throws error using error and self.traceback. error must be a GenericException, and self.traceback must be a
        dict of file: (line, line_num) representing origination of error.
        """
        error_msg = self._location(error)

        if error.internal:
            error_msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])

        error_msg += colored("error: ", ErrorHandler.ERROR, attrs=["bold"])
        if isinstance(error, (LambdaSyntaxError, LambdaTypeError, EvalError)):
            error_msg += colored(f"{error.kind}: ", attrs=["bold"])
        error_msg += ErrorHandler.highlight(error)
        print(error_msg, file=self.out)

        if not error.internal and error.expr and error.diagnosis:
            print(ErrorHandler.diagnose(error), file=self.out)

        if self.fatal:
            sys.exit(1)
        for path in self.traceback:  # if error occurred, reset traceback (no need if error is fatal)
            self.remove_line(path)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(GenericException("keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(GenericException("beta normal form might exist, but maximum recursion depth exceeded"))
        elif exc_type is not None and issubclass(exc_type, GenericException):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(GenericException("unknown error: '{}'", f"{exc_type.__name__}: {exc_val}", internal=True))
            do_exit = True

        return not do_exit
