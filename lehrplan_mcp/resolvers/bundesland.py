# lehrplan_mcp/resolvers/bundesland.py
import logging
import re
import unicodedata
from typing import NamedTuple

from lehrplan_mcp.errors import ResolutionError
from lehrplan_mcp.graph.ontology import LP

logger = logging.getLogger(__name__)


class Bundesland(NamedTuple):
    code: str
    uri: str
    name: str


class ResolvedBundesland(NamedTuple):
    code: str
    uri: str


BUNDESLAENDER = (
    Bundesland("BW", str(LP.LP_3000049), "Baden-Württemberg"),
    Bundesland("BY", str(LP.LP_3000051), "Bayern"),
    Bundesland("BE", str(LP.LP_3000048), "Berlin"),
    Bundesland("BB", str(LP.LP_3000057), "Brandenburg"),
    Bundesland("HB", str(LP.LP_3000056), "Bremen"),
    Bundesland("HH", str(LP.LP_3000045), "Hamburg"),
    Bundesland("HE", str(LP.LP_3000050), "Hessen"),
    Bundesland("MV", str(LP.LP_3000052), "Mecklenburg-Vorpommern"),
    Bundesland("NI", str(LP.LP_3000043), "Niedersachsen"),
    Bundesland("NW", str(LP.LP_3000044), "Nordrhein-Westfalen"),
    Bundesland("RP", str(LP.LP_3000046), "Rheinland-Pfalz"),
    Bundesland("SL", str(LP.LP_3000055), "Saarland"),
    Bundesland("SN", str(LP.LP_3000047), "Sachsen"),
    Bundesland("ST", str(LP.LP_3000053), "Sachsen-Anhalt"),
    Bundesland("SH", str(LP.LP_3000054), "Schleswig-Holstein"),
    Bundesland("TH", str(LP.LP_3000031), "Thüringen"),
)

_BY_CODE = {bl.code: bl for bl in BUNDESLAENDER}
_BY_NAME = {bl.name.lower(): bl for bl in BUNDESLAENDER}
_BY_URI = {bl.uri: bl for bl in BUNDESLAENDER}

_URI_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:")


def resolve_bundesland(value: str) -> ResolvedBundesland:
    """Resolve a Bundesland code, German name or URI to ``(code, uri)``.

    Matching is exact after trimming and case normalization. A URI that is not
    in the table is passed through with an empty code, so it can still be
    queried (without a state graph in scope).
    """
    trimmed = unicodedata.normalize("NFC", value.strip())

    bl = _BY_CODE.get(trimmed.upper())
    if bl is None:
        bl = _BY_NAME.get(trimmed.lower())
    if bl is not None:
        return ResolvedBundesland(bl.code, bl.uri)

    if _URI_SCHEME.match(trimmed):
        bl = _BY_URI.get(trimmed)
        if bl is not None:
            return ResolvedBundesland(bl.code, bl.uri)
        logger.debug(f"Bundesland URI {trimmed} is not in the known table")
        return ResolvedBundesland("", trimmed)

    raise ResolutionError(
        f'Unknown Bundesland: "{value}". '
        "Use a code (BY, SN, RP, ...) or name (Bayern, Sachsen, ...)."
    )
