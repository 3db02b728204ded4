"""
Run filter expressions.

Run searches are filtered with a boolean predicate language over dotted field
paths, supporting ``in [...]`` membership and ``and`` conjunction.
"""

import json
from collections.abc import Iterable

EXPERIMENT_FIELD = "run.experiment"


def quote_literal(value: str) -> str:
    """Quote a value as a double-quoted string literal with escapes."""
    return json.dumps(value, ensure_ascii=False)


def build_run_filter(experiments: Iterable[str], query: str = "") -> str:
    """Build the filter expression for a run search.

    Args:
        experiments: Names of the selected experiments
        query: Committed free-text query; blank queries are ignored

    Returns:
        Expression like ``run.experiment in ["a","b"] and (<query>)``

    Examples:
        >>> build_run_filter(["a", "b"])
        'run.experiment in ["a","b"]'
    """
    members = ",".join(quote_literal(name) for name in experiments)
    expression = f"{EXPERIMENT_FIELD} in [{members}]"
    query = query.strip()
    if query:
        expression += f" and ({query})"
    return expression
