"""Handles interactive/command-line mode for tlcalc interpreter. Uses cmd as backend.

Every line is either a λ-term or a meta command starting with ':', so that any identifier (including 'help' or
'exit') can be declared and used in terms. The only line cmd handles itself is its end-of-input marker 'EOF'.
"""

import cmd


class Shell(cmd.Cmd):
    """Simply-typed lambda calculus interpreter shell."""
    intro = "Simply-typed lambda calculus interpreter :: Python backend\nType ':help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # used for line continutations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, ascii_only=False, trace=False, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess
        self.ascii_only = ascii_only
        self.trace = trace

        self._tmp_line = ""
        self.line_num = 0

        self.meta_commands = {
            ":type": self.meta_type,
            ":declare": self.meta_declare,
            ":context": self.meta_context,
            ":help": self.meta_help,
            ":exit": self.meta_exit,
            ":quit": self.meta_exit,
        }

    def parseline(self, line):
        """Sends everything but end of input to default, instead of to the do_* methods."""
        line = line.strip()
        if line == "EOF":
            return line, "", line
        return "", line, line

    def default(self, line):
        """Executes arbitrary tlcalc command. Returns True if the shell should exit."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            self.line_num += 1
            line, add_to_prev = self.sess.preprocess_line(f"{self._tmp_line} {line}")

            if add_to_prev:
                self._tmp_line = line
                self.prompt = self.secondary_prompt
                return None

            self._tmp_line = ""
            self.prompt = self._tmp_prompt

            if not line:
                return None

            command, __, arg = line.partition(" ")
            if command in self.meta_commands:
                return self.meta_commands[command](arg.strip())

            self.sess.add(line, self.line_num)
            self.sess.run()

            if self.sess.results:
                result = self.sess.pop()
                if self.trace:
                    for step in result.steps:
                        self.stdout.write(f"  β  {step.pretty(self.ascii_only)}\n")
                self.stdout.write(result.pretty(self.ascii_only) + "\n")
        return None

    def meta_type(self, arg):
        """:type TERM -- prints the type of TERM without reducing it."""
        self.stdout.write(self.sess.type_of(arg, self.line_num).pretty(self.ascii_only) + "\n")

    def meta_declare(self, arg):
        """:declare NAME : TYPE -- declares a free variable usable in later terms."""
        name, type_ = self.sess.declare(arg, self.line_num)
        self.stdout.write(f"{name} : {type_.pretty(self.ascii_only)}\n")

    def meta_context(self, arg):
        """:context -- lists the declared free variables."""
        for name, type_ in self.sess.context.items():
            self.stdout.write(f"{name} : {type_.pretty(self.ascii_only)}\n")

    def meta_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        self.stdout.write(
            "Welcome to the tlcalc interpreter!\n\n"
            "Terms are written λx:T.body (or \\x:T.body), and types are base names like A or\n"
            "arrows like A → B (or A -> B). Every term is type checked, then reduced to its\n"
            "beta-normal form and printed as (term):type.\n\n"
            "Try it out by typing '(λx:A -> A.x) (λy:A.y)'. Free variables must be declared first:\n"
            "':declare y : A' lets you type '(λx:A.x) y', giving 'y'.\n\n"
            "  :type TERM           print the type of TERM without reducing it\n"
            "  :declare NAME : TYPE declare a free variable\n"
            "  :context             list declared free variables\n"
            "  :help                show this message\n"
            "  :exit, :quit         leave the interpreter (so does end of input)\n"
        )

    def meta_exit(self, arg):
        """:exit -- leaves the interpreter."""
        return True

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        self.stdout.write("\n")
        return True
