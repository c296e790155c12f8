# lehrplan_mcp/sparql/formatting.py
from rdflib.query import Result

NO_RESULTS = "No results."
SEPARATOR = " | "
DIVIDER = "---"


def format_value(value) -> str:
    """Raw lexical value of a term: no angle brackets, language tag or datatype."""
    if value is None:
        return ""
    return str(value)


def format_results(result: Result) -> str:
    """Format SPARQL query results as a pipe-separated text table.

    Args:
        result: Parsed SELECT (or ASK) result

    Returns:
        Header line, divider and one line per row, or ``"No results."``
    """
    if result.type == "ASK":
        return "true" if result.askAnswer else "false"

    bindings = result.bindings
    if not bindings:
        return NO_RESULTS

    variables = list(result.vars or [])
    rows = [SEPARATOR.join(format_value(row.get(var)) for var in variables) for row in bindings]
    return "\n".join([SEPARATOR.join(str(var) for var in variables), DIVIDER, *rows])
