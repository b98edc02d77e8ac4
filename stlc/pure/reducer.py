"""Call-by-name reduction of λ-terms to values.

A CallByNameReducer carries the two pieces of state threaded through one reduction: the FreshSupply consumed by
capture-avoiding substitution, and the count of reduction steps taken. Each top-level call (evaluate, substitute) uses
its own reducer, so no state is ever shared between two calls.
"""

from stlc.lang.error import GenericException
from stlc.pure.printer import pprint_term
from stlc.pure.syntax import Abstraction, Application, Conditional, FalseTerm, FreshSupply, TrueTerm


class CallByNameReducer:
    """Implements call-by-name reduction of a term, reducing the leftmost outermost redex first and substituting
    arguments unevaluated.

    Rules, checked in order, one per step:
        1. ite True t e   => t
        2. ite False t e  => e
        3. ite c t e      => ite c' t e, where c evaluates to c'
        4. (λx.body) arg  => body[x := arg]
        5. f arg          => f' arg, where f evaluates to f'
        6. anything else is returned as-is: values, and stuck terms such as free variables

    Stuck terms are not errors: a conditional whose guard, or an application whose function, evaluates to something
    that still cannot progress is returned rebuilt with the evaluated part. Well-typed closed terms never get stuck.
    """

    def __init__(self, max_steps=None):
        """max_steps bounds the number of steps taken before giving up with a GenericException. None means unbounded,
        which is safe for well-typed terms.
        """
        self.max_steps = max_steps

        self.supply = FreshSupply()
        self.steps = 0

    def step(self, term):
        """Counts one reduction step of term."""
        self.steps += 1
        if self.max_steps is not None and self.steps > self.max_steps:
            msg = "'{}' did not reach a value within {} steps"
            raise GenericException(msg, (pprint_term(term), str(self.max_steps)))

    def substitute(self, var, new_term, term):
        """Capture-avoiding term[var := new_term], drawing fresh identifiers from this reducer's supply."""
        return term.sub(var, new_term, self.supply)

    def evaluate(self, term):
        """Reduces term until no rule applies, counting steps on self.steps."""
        while True:
            if isinstance(term, Conditional):
                condition, then_branch, else_branch = term.nodes
                self.step(term)

                if isinstance(condition, TrueTerm):
                    term = then_branch
                elif isinstance(condition, FalseTerm):
                    term = else_branch
                else:
                    condition = self.evaluate(condition)
                    term = Conditional(condition, then_branch, else_branch)
                    if not isinstance(condition, (TrueTerm, FalseTerm)):
                        return term  # stuck guard

            elif isinstance(term, Application):
                function, argument = term.nodes
                self.step(term)

                if isinstance(function, Abstraction):
                    term = self.substitute(function.param, argument, function.body)
                else:
                    function = self.evaluate(function)
                    term = Application(function, argument)
                    if not isinstance(function, Abstraction):
                        return term  # stuck function

            else:
                return term

    def run(self, term):
        """Evaluates term, returning (value, steps)."""
        return self.evaluate(term), self.steps


def substitute(var, new_term, term):
    """Capture-avoiding substitution term[var := new_term]. Bound variables that would capture a free variable of
    new_term are renamed to fresh identifiers #0, #1, ..., drawn in left-to-right order.
    """
    return CallByNameReducer().substitute(var, new_term, term)


def evaluate(term, max_steps=None):
    """Call-by-name evaluation of term. Returns (value, steps), where steps counts every reduction rule applied."""
    return CallByNameReducer(max_steps).run(term)


def evaluate_value(term):
    """Like evaluate, but only returns the value."""
    value, __ = evaluate(term)
    return value
