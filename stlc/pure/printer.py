"""Pretty-printing of λ-terms and types to a canonical functional syntax.

Terms are first converted to a small, language-agnostic expression tree (names, lambdas, signatures, prefix application
and arrows), which is then rendered with the usual precedence rules. The concrete syntax is

```
()  True  False  x                  ; literals and variables
\\x -> body                          ; abstraction, or \\(x :: T) -> body with annotations
ite c t e                           ; conditional, printed as a call to a 3-argument function
f a b                               ; application, associating by left
() -> Bool -> Bool                  ; types, arrows associating by right
```

Conditionals are printed as calls to `ite`, never with if-then-else syntax.

>>> from stlc.pure.syntax import Abstraction, Application, BOOL_TYPE, TRUE, Variable
>>> pprint_term(Application(Abstraction("x", BOOL_TYPE, Variable("x")), TRUE))
'(\\\\x -> x) True'
"""

from abc import abstractmethod, ABC

from stlc.pure.syntax import (Abstraction, Application, BoolType, Conditional, FalseTerm, FunctionType, TrueTerm,
                              UnitTerm, UnitType, Variable)

# precedence levels of the position an expression is rendered in
TOP = 0       # whole output, lambda body, codomain of an arrow
FUNCTION = 1  # head of an application, domain of an arrow
ARGUMENT = 2  # argument of an application


class Expr(ABC):
    """Superclass of renderable expressions."""

    @abstractmethod
    def render(self, level=TOP):
        """Returns this expression as text, parenthesized if needed at the given precedence level."""

    def __str__(self):
        return self.render()


class Name(Expr):
    """Atomic expression: identifiers, constructors and the empty tuple."""

    def __init__(self, text):
        self.text = text

    def render(self, level=TOP):
        return self.text


class Signature(Expr):
    """Pattern annotated with a type, as in `(x :: Bool)`. Always parenthesized."""

    def __init__(self, expr, ty):
        self.expr = expr
        self.ty = ty

    def render(self, level=TOP):
        return f"({self.expr.render()} :: {self.ty.render()})"


class Lambda(Expr):
    """Anonymous function. Bodies extend as far right as possible, so lambdas are parenthesized anywhere but on top."""

    def __init__(self, pattern, body):
        self.pattern = pattern
        self.body = body

    def render(self, level=TOP):
        result = f"\\{self.pattern.render(ARGUMENT)} -> {self.body.render(TOP)}"
        return f"({result})" if level > TOP else result


class Apply(Expr):
    """Prefix application of a function to one or more arguments."""

    def __init__(self, function, *arguments):
        if isinstance(function, Apply):  # f a b == (f a) b
            function, arguments = function.function, function.arguments + arguments

        self.function = function
        self.arguments = arguments

    def render(self, level=TOP):
        parts = [self.function.render(FUNCTION)] + [arg.render(ARGUMENT) for arg in self.arguments]
        result = " ".join(parts)
        return f"({result})" if level >= ARGUMENT else result


class Mark(Expr):
    """Wraps an expression with sentinel characters so that its position in the rendered text can be recovered."""
    START = "\x02"
    END = "\x03"

    def __init__(self, expr):
        self.expr = expr

    def render(self, level=TOP):
        return Mark.START + self.expr.render(level) + Mark.END


class Arrow(Expr):
    """Infix function type constructor, associating by right."""

    def __init__(self, domain, codomain):
        self.domain = domain
        self.codomain = codomain

    def render(self, level=TOP):
        result = f"{self.domain.render(FUNCTION)} -> {self.codomain.render(TOP)}"
        return f"({result})" if level > TOP else result


def type_to_expr(ty):
    """Converts a type to an expression tree."""
    if isinstance(ty, UnitType):
        return Name("()")
    elif isinstance(ty, BoolType):
        return Name("Bool")
    elif isinstance(ty, FunctionType):
        return Arrow(type_to_expr(ty.domain), type_to_expr(ty.codomain))
    raise TypeError(f"not a type: {ty!r}")


def term_to_expr(term, annotate=False, mark=None):
    """Converts a term to an expression tree. If annotate, abstraction parameters carry their types. The subterm that
    is mark (by identity) is wrapped in a Mark.
    """
    expr = _term_to_expr(term, annotate, mark)
    return Mark(expr) if term is mark else expr


def _term_to_expr(term, annotate, mark):
    if isinstance(term, UnitTerm):
        return Name("()")
    elif isinstance(term, TrueTerm):
        return Name("True")
    elif isinstance(term, FalseTerm):
        return Name("False")
    elif isinstance(term, Variable):
        return Name(term.name)

    elif isinstance(term, Abstraction):
        pattern = Name(term.param)
        if annotate:
            pattern = Signature(pattern, type_to_expr(term.param_type))
        return Lambda(pattern, term_to_expr(term.body, annotate, mark))

    elif isinstance(term, Conditional):
        return Apply(Name("ite"), *(term_to_expr(node, annotate, mark) for node in term.nodes))

    elif isinstance(term, Application):
        return Apply(term_to_expr(term.function, annotate, mark), term_to_expr(term.argument, annotate, mark))

    raise TypeError(f"not a λ-term: {term!r}")


def pprint_term(term, annotate=False):
    """Pretty-prints term. If annotate, every abstraction parameter is printed with its type: `\\(x :: Bool) -> x`."""
    return term_to_expr(term, annotate).render()


def pprint_type(ty):
    """Pretty-prints ty, e.g. `(() -> Bool) -> Bool`."""
    return type_to_expr(ty).render()


def locate_term(term, subterm, annotate=False):
    """Returns the span (start, end) of subterm within pprint_term(term, annotate), or None if subterm does not occur
    in term. Subterms are matched by identity, so equal subterms at different positions are told apart.
    """
    text = term_to_expr(term, annotate, mark=subterm).render()
    start = text.find(Mark.START)
    if start == -1:
        return None
    return start, text.find(Mark.END, start) - 1
