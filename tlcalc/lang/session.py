"""Session control for tlcalc. Runs λ-terms through the pure core (parse, type check, beta-reduce), either from a file or
line by line from the interactive shell.
"""

from dataclasses import dataclass, field

from tlcalc.lang.error import GenericException
from tlcalc.pure.lexical import Application, LambdaTerm, LambdaType, generate_declaration, generate_tree
from tlcalc.pure.reduction import NormalOrderReducer
from tlcalc.pure.typecheck import Context, check


@dataclass
class Result:
    """Outcome of running one λ-term: its beta-normal form, its type and the intermediate terms."""
    original: LambdaTerm
    term: LambdaTerm
    type: LambdaType
    steps: list = field(default_factory=list)

    def pretty(self, ascii_only=False):
        """Output format of the command-line tool: '(term):type', which parses back as the term alone."""
        return f"({self.term.pretty(ascii_only)}):{self.type.pretty(ascii_only)}"

    def display(self):
        """Structural version of pretty, used in debug mode."""
        return f"{self.term.display()}\n:{self.type!r}"

    def __str__(self):
        return self.pretty()


def read_file(path):
    """Returns the contents of path as text."""
    try:
        with open(path, "r", encoding="utf-8") as file:
            return file.read()
    except OSError:
        raise GenericException("'{}' could not be opened", path, diagnosis=False)


class Session:
    """Governs a tlcalc session, with control over the declared free variables."""
    SH_FILE = "<in>"  # command-line interpreter filename

    def __init__(self, error_handler, path, cmd_line, step_limit=None, arg_path=None):
        self.error_handler = error_handler
        self.error_handler.register_file(path)

        self.path = path                # used for error messages
        self.cmd_line = cmd_line        # whether or not in command-line mode
        self.step_limit = step_limit if step_limit is not None else NormalOrderReducer.STEP_LIMIT

        self.context = Context()  # free variables declared in this session
        self.to_exec = {}         # dict of line num: LambdaTerms to execute
        self.results = []

        if self.cmd_line:
            self.error_handler.fatal = False

        if path != Session.SH_FILE:
            argument = read_file(arg_path) if arg_path is not None else None
            self.add(read_file(path), 1, argument)

        elif not cmd_line:
            raise GenericException("'<in>' is a reserved filename", diagnosis=False)

    @staticmethod
    def preprocess_line(line):
        """Preprocesses a line from the command-line. Returns the stripped line and whether or not it needs a line
        continuation (unbalanced parentheses).
        """
        line = line.strip()
        return line, line.count("(") > line.count(")")

    def add(self, expr, line_num=1, argument=None):
        """Parses expr and queues it for run. If argument is given, the queued term is expr applied to argument."""
        self.error_handler.register_line(self.path, expr, line_num)  # in case error is raised

        term = generate_tree(expr)
        if argument is not None:
            term = Application(term, generate_tree(argument))
        self.to_exec[line_num] = term

        self.error_handler.remove_line(self.path)  # error was not raised
        return term

    def declare(self, expr, line_num=1):
        """Declares a free variable from 'name : type', warning if it shadows an earlier declaration."""
        self.error_handler.register_line(self.path, expr, line_num)

        name, type_ = generate_declaration(expr)
        if name in self.context:
            self.error_handler.warn("'{}' shadows an earlier declaration of type '{}'", (name, self.context.lookup(name)),
                                    diagnosis=False)
        self.context = self.context.extend(name, type_)

        self.error_handler.remove_line(self.path)
        return name, type_

    def type_of(self, expr, line_num=1):
        """Type of expr under this session's declarations, without reducing it."""
        self.error_handler.register_line(self.path, expr, line_num)

        type_ = check(generate_tree(expr), self.context)

        self.error_handler.remove_line(self.path)
        return type_

    def run(self):
        """Runs this session's queued terms by type checking and then beta-reducing them. Will raise any errors that
        are encountered; terms are dequeued even if they fail.
        """
        for line_num, term in list(self.to_exec.items()):
            self.error_handler.register_line(self.path, str(term), line_num)

            try:
                type_ = check(term, self.context)

                reducer = NormalOrderReducer(term, self.step_limit)
                self.results.append(Result(term, reducer.beta_reduce(), type_, reducer.steps))
            finally:
                del self.to_exec[line_num]

            self.error_handler.remove_line(self.path)

    def pop(self):
        """Removes and returns the latest Result."""
        return self.results.pop()
