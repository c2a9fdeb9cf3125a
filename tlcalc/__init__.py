"""Simply-typed lambda calculus: parser, type checker and normal-order evaluator."""

from tlcalc.interpreter import evaluate, parse, typecheck
from tlcalc.lang.error import (
    EvalError,
    GenericException,
    LambdaSyntaxError,
    LambdaTypeError,
    NotAFunction,
    StepLimitExceeded,
    TypeMismatch,
    UnboundVariable,
)
from tlcalc.pure.lexical import Abstraction, Application, BaseType, FunctionType, LambdaTerm, LambdaType, Variable
from tlcalc.pure.typecheck import Context
