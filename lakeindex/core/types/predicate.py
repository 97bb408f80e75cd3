import operator
from enum import Enum


class Predicate(Enum):
    """Predicate operations for column comparisons."""
    EQUALS = "="
    NOT_EQUALS = "!="
    GREATER_THAN = ">"
    LESS_THAN = "<"
    GREATER_THAN_OR_EQ = ">="
    LESS_THAN_OR_EQ = "<="

    def evaluate(self, left, right) -> bool:
        """Apply the comparison. Any comparison involving None is false."""
        if left is None or right is None:
            return False
        return _OPERATORS[self](left, right)


_OPERATORS = {
    Predicate.EQUALS: operator.eq,
    Predicate.NOT_EQUALS: operator.ne,
    Predicate.GREATER_THAN: operator.gt,
    Predicate.LESS_THAN: operator.lt,
    Predicate.GREATER_THAN_OR_EQ: operator.ge,
    Predicate.LESS_THAN_OR_EQ: operator.le,
}
