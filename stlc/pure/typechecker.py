"""Static type checking of λ-terms.

Checking is structural and syntax-directed: every term has at most one type, computed from the types of its subterms
under a Context of the bindings in scope. The walk is left-to-right and depth-first, and the first failure is raised as
a TypeCheckError naming the offending subterm(s); there is no error recovery and no partial result.
"""

from stlc.lang.error import GenericException
from stlc.pure.printer import pprint_term
from stlc.pure.syntax import (Abstraction, Application, BOOL_TYPE, Conditional, FalseTerm, FunctionType, TrueTerm,
                              UNIT_TYPE, UnitTerm, Variable)


class Context:
    """Ordered sequence of (identifier, type) bindings, most recently pushed first.

    Contexts are persistent linked lists: push returns a new context whose tail is this one, so a context extended on
    entering an abstraction body shares structure with, and never modifies, the caller's context. Lookup returns the
    first match, so a later binding shadows earlier ones with the same identifier.
    """

    def __init__(self, binding=None, parent=None):
        self.binding = binding
        self.parent = parent

    @classmethod
    def of(cls, bindings):
        """Builds a context from an iterable of (identifier, type) pairs, most recent first."""
        context = cls()
        for name, ty in reversed(list(bindings)):
            context = context.push(name, ty)
        return context

    def push(self, name, ty):
        """Returns this context extended with name: ty as the most recent binding."""
        return Context((name, ty), self)

    def lookup(self, name):
        """Type of the innermost binding of name, or None if name is unbound."""
        context = self
        while context.binding is not None:
            bound, ty = context.binding
            if bound == name:
                return ty
            context = context.parent
        return None

    def __iter__(self):
        context = self
        while context.binding is not None:
            yield context.binding
            context = context.parent

    def __len__(self):
        return sum(1 for __ in self)

    def __eq__(self, other):
        return isinstance(other, Context) and list(self) == list(other)

    def __hash__(self):
        return hash(tuple(self))

    def __repr__(self):
        return f"Context({list(self)!r})"


class TypeCheckError(GenericException):
    """Superclass of typecheck failures. Errors are compared by class and by the terms (or identifier) they carry, so
    they can be matched against expected failures.
    """
    template = "'{}' is ill-typed"

    def __init__(self, *payload, culprit=None):
        self.payload = payload
        self.culprit = culprit  # offending subterm, used to point at it in diagnoses
        super().__init__(self.template, [p if isinstance(p, str) else pprint_term(p) for p in payload])

    def __eq__(self, other):
        return type(self) is type(other) and self.payload == other.payload

    def __hash__(self):
        return hash((type(self), self.payload))

    def __repr__(self):
        return f"{type(self).__name__}({', '.join(repr(p) for p in self.payload)})"


class UnboundVariable(TypeCheckError):
    """A variable reference has no binding in context."""
    template = "variable '{}' is not bound in context"

    @property
    def name(self):
        return self.payload[0]


class BadGuard(TypeCheckError):
    """The condition of a conditional is not a boolean."""
    template = "condition '{}' is not of type Bool"

    @property
    def condition(self):
        return self.payload[0]


class BranchMismatch(TypeCheckError):
    """The two branches of a conditional disagree in type."""
    template = "branches '{}' and '{}' do not have the same type"

    @property
    def then_branch(self):
        return self.payload[0]

    @property
    def else_branch(self):
        return self.payload[1]


class NotApplicable(TypeCheckError):
    """The left side of an application is not a function."""
    template = "'{}' is not a function and cannot be applied"

    @property
    def function(self):
        return self.payload[0]


class ArgMismatch(TypeCheckError):
    """The left side of an application is a function whose domain disagrees with the argument's type."""
    template = "'{}' cannot be applied to argument '{}' of the wrong type"

    @property
    def function(self):
        return self.payload[0]

    @property
    def argument(self):
        return self.payload[1]


def typecheck(term, context=None):
    """Returns the type of term under context, or raises the first TypeCheckError found.

    context may be a Context or any iterable of (identifier, type) bindings, most recent first. Defaults to the empty
    context.
    """
    if context is None:
        context = Context()
    elif not isinstance(context, Context):
        context = Context.of(context)

    if isinstance(term, UnitTerm):
        return UNIT_TYPE

    elif isinstance(term, (TrueTerm, FalseTerm)):
        return BOOL_TYPE

    elif isinstance(term, Variable):
        ty = context.lookup(term.name)
        if ty is None:
            raise UnboundVariable(term.name, culprit=term)
        return ty

    elif isinstance(term, Abstraction):
        body_type = typecheck(term.body, context.push(term.param, term.param_type))
        return FunctionType(term.param_type, body_type)

    elif isinstance(term, Conditional):
        if typecheck(term.condition, context) != BOOL_TYPE:
            raise BadGuard(term.condition, culprit=term.condition)

        then_type = typecheck(term.then_branch, context)
        else_type = typecheck(term.else_branch, context)
        if then_type != else_type:
            raise BranchMismatch(term.then_branch, term.else_branch, culprit=term)
        return then_type

    elif isinstance(term, Application):
        function_type = typecheck(term.function, context)
        argument_type = typecheck(term.argument, context)

        if not isinstance(function_type, FunctionType):
            raise NotApplicable(term.function, culprit=term.function)
        elif function_type.domain != argument_type:
            raise ArgMismatch(term.function, term.argument, culprit=term.argument)
        return function_type.codomain

    raise TypeError(f"not a λ-term: {term!r}")
