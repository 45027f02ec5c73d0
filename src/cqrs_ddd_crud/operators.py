from enum import Enum


class FilterOperator(str, Enum):
    """Predicate operators understood by the planner and the backends."""

    # Request operators (``<field>_<op>`` keys)
    EQ = "eq"
    NE = "ne"
    LT = "lt"
    GT = "gt"
    LTE = "lte"
    GTE = "gte"
    IN = "in"
    PREFIX = "prefix"
    SUFFIX = "suffix"
    SUBSTR = "substr"

    # Lifecycle operators, added by the planner only
    IS_NULL = "is_null"
    IS_CURRENT = "is_current"


REQUEST_OPERATORS: frozenset[FilterOperator] = frozenset(
    {
        FilterOperator.EQ,
        FilterOperator.NE,
        FilterOperator.LT,
        FilterOperator.GT,
        FilterOperator.LTE,
        FilterOperator.GTE,
        FilterOperator.IN,
        FilterOperator.PREFIX,
        FilterOperator.SUFFIX,
        FilterOperator.SUBSTR,
    }
)
