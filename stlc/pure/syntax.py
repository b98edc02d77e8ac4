"""Simply-typed lambda calculus abstract syntax: types, terms and the structural operations over them.

The `pure` directory contains the language itself (syntax, typing, reduction, printing) and nothing about files,
sessions or the command line.

Formally, the simply-typed lambda calculus implemented here can be defined as

```
<type>   ::= "()"                             ; "unit type"
           | "Bool"                           ; "boolean type"
           | <type> "->" <type>               ; "function type", associating by right

<λ-term> ::= "()" | "True" | "False"          ; "literals"
           | <id>                             ; "variable"
           | "λ" <id> ":" <type> "." <λ-term> ; "abstraction", binds <id> in its body
           | "ite" <λ-term> <λ-term> <λ-term> ; "conditional"
           | <λ-term> <λ-term>                ; "application", associating by left
```

There is no parser for this grammar: terms are built as values and printed with `pure.printer`. Every term and type is
an immutable, hashable tree compared structurally.

Sources: B. C. Pierce, Types and Programming Languages, ch. 9;
         https://plato.stanford.edu/entries/lambda-calculus/#Com
"""

from abc import abstractmethod, ABC
from dataclasses import dataclass, fields, replace
from itertools import count


class Type(ABC):
    """Superclass of the STLC types: unit, booleans and functions between types."""


@dataclass(frozen=True)
class UnitType(Type):
    """Type of the unit literal."""


@dataclass(frozen=True)
class BoolType(Type):
    """Type of True and False."""


@dataclass(frozen=True)
class FunctionType(Type):
    """Type of abstractions taking a domain value to a codomain value."""
    domain: Type
    codomain: Type


UNIT_TYPE = UnitType()
BOOL_TYPE = BoolType()


class FreshSupply:
    """Cursor into the infinite supply of fresh identifiers #0, #1, #2, ...

    Fresh identifiers are '#'-prefixed, so they are disjoint in form from any name a user would choose. The supply is
    consumed prefix-first: draw returns the identifier under the cursor and advances it, so one supply never hands out
    the same identifier twice.
    """
    PREFIX = "#"

    def __init__(self, cursor=0):
        self.cursor = cursor

    @classmethod
    def identifier(cls, index):
        """Returns the index-th identifier of the supply."""
        return f"{cls.PREFIX}{index}"

    def draw(self):
        """Returns the next unused identifier and advances the cursor past it."""
        name = FreshSupply.identifier(self.cursor)
        self.cursor += 1
        return name

    def __repr__(self):
        return f"FreshSupply(cursor={self.cursor})"


def identifiers():
    """Infinite stream of fresh identifiers, in the order a FreshSupply draws them.

    >>> from itertools import islice
    >>> list(islice(identifiers(), 3))
    ['#0', '#1', '#2']
    """
    return (FreshSupply.identifier(index) for index in count())


class Term(ABC):
    """Superclass that represents any λ-term. Also abstractly defines the structural operations every term must provide:
    a subclass that leaves one of them out cannot be instantiated.
    """

    @abstractmethod
    def free_vars(self):
        """Returns the frozenset of identifiers occurring unbound in this term."""

    @abstractmethod
    def alpha_convert(self, old, new):
        """Returns this term with every occurrence of identifier old replaced by new, binders included. Conversion does
        not stop at binders that shadow old: it is only used by sub, on abstractions whose own parameter is being
        renamed to a fresh identifier.
        """

    @abstractmethod
    def sub(self, var, new_term, supply):
        """Returns this term with new_term substituted for every free occurrence of var. Bound variables that would
        capture a free variable of new_term are first renamed to identifiers drawn from supply, a FreshSupply shared by
        the whole substitution (and, during evaluation, by the whole reduction).
        """

    @property
    @abstractmethod
    def nodes(self):
        """Tuple of direct subterms, in declaration order."""

    @property
    def is_value(self):
        """Whether or not this term is a value: a literal or an abstraction."""
        return False

    def display(self, indents=0):
        """Recursively displays the term tree with readable format.

        Format:
        <Term>(<non-term fields>, nodes=[
            <Term>(<non-term fields>, nodes=[
                ...
                <Term>(<non-term fields>)  # <-- if nodes is empty
            ])
        ])
        """
        attrs = [f"{f.name}={getattr(self, f.name)!r}" for f in fields(self)
                 if not isinstance(getattr(self, f.name), Term)]

        result = f"{'    ' * indents}{type(self).__name__}({', '.join(attrs)}"
        if self.nodes:
            result += ", nodes=[" if attrs else "nodes=["
            for node in self.nodes:
                result += "\n" + node.display(indents + 1) + ","
            result = result[:-1] + f"\n{'    ' * indents}]"
        return result + ")"

    def __str__(self):
        return self.display()


class Literal(Term):
    """Superclass of the constant terms. Literals have no subterms, so every structural operation leaves them as-is."""

    def free_vars(self):
        return frozenset()

    def alpha_convert(self, old, new):
        return self

    def sub(self, var, new_term, supply):
        return self

    @property
    def nodes(self):
        return ()

    @property
    def is_value(self):
        return True


@dataclass(frozen=True)
class UnitTerm(Literal):
    """The unit literal."""


@dataclass(frozen=True)
class TrueTerm(Literal):
    """The boolean literal True."""


@dataclass(frozen=True)
class FalseTerm(Literal):
    """The boolean literal False."""


UNIT = UnitTerm()
TRUE = TrueTerm()
FALSE = FalseTerm()


@dataclass(frozen=True)
class Variable(Term):
    """Variable in lambda calculus: a reference to the nearest enclosing abstraction binding name."""
    name: str

    def free_vars(self):
        return frozenset([self.name])

    def alpha_convert(self, old, new):
        if self.name == old:
            return Variable(new)
        return self

    def sub(self, var, new_term, supply):
        if self.name == var:
            return new_term
        return self

    @property
    def nodes(self):
        return ()


@dataclass(frozen=True)
class Abstraction(Term):
    """Single-argument function λparam:param_type.body, where param is bound within body."""
    param: str
    param_type: Type
    body: Term

    def free_vars(self):
        return self.body.free_vars() - {self.param}

    def alpha_convert(self, old, new):
        param = new if self.param == old else self.param
        return Abstraction(param, self.param_type, self.body.alpha_convert(old, new))

    def sub(self, var, new_term, supply):
        if self.param == var:
            return self  # var is shadowed by this binder

        if self.param in new_term.free_vars():
            renamed = self.alpha_convert(self.param, supply.draw())
            return replace(renamed, body=renamed.body.sub(var, new_term, supply))

        return replace(self, body=self.body.sub(var, new_term, supply))

    @property
    def nodes(self):
        return (self.body,)

    @property
    def is_value(self):
        return True


@dataclass(frozen=True)
class Conditional(Term):
    """if condition then then_branch else else_branch."""
    condition: Term
    then_branch: Term
    else_branch: Term

    def free_vars(self):
        return self.condition.free_vars() | self.then_branch.free_vars() | self.else_branch.free_vars()

    def alpha_convert(self, old, new):
        return Conditional(self.condition.alpha_convert(old, new),
                           self.then_branch.alpha_convert(old, new),
                           self.else_branch.alpha_convert(old, new))

    def sub(self, var, new_term, supply):
        condition = self.condition.sub(var, new_term, supply)
        then_branch = self.then_branch.sub(var, new_term, supply)
        else_branch = self.else_branch.sub(var, new_term, supply)
        return Conditional(condition, then_branch, else_branch)

    @property
    def nodes(self):
        return self.condition, self.then_branch, self.else_branch


@dataclass(frozen=True)
class Application(Term):
    """Application of function to argument."""
    function: Term
    argument: Term

    def free_vars(self):
        return self.function.free_vars() | self.argument.free_vars()

    def alpha_convert(self, old, new):
        return Application(self.function.alpha_convert(old, new), self.argument.alpha_convert(old, new))

    def sub(self, var, new_term, supply):
        function = self.function.sub(var, new_term, supply)
        argument = self.argument.sub(var, new_term, supply)
        return Application(function, argument)

    @property
    def nodes(self):
        return self.function, self.argument


def free_vars(term):
    """Identifiers occurring unbound in term."""
    return term.free_vars()


def rename(old, new, term):
    """Alpha-converts every occurrence of old in term to new."""
    return term.alpha_convert(old, new)
