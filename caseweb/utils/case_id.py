"""Case identifier extraction from request targets.

The case id normally arrives as the ``caseId`` query parameter. Viewers that
were configured with ``?caseId=...`` baked into their DICOMweb root send it
embedded in the path instead (``/?caseId=abc/studies?...`` or
``/studies/caseId=abc/series``). For those requests the fragment is cut out
of the target and re-attached as a regular query parameter.
"""

import re
from urllib.parse import parse_qsl, unquote, urlencode

CASE_ID_PARAM = "caseId"

_CASE_ID_FRAGMENT = re.compile(r"[?&;]?caseId=([^/?&;#]+)")


def _query_case_id(query_string: str) -> str | None:
    for key, value in parse_qsl(query_string, keep_blank_values=True):
        if key == CASE_ID_PARAM and value and "/" not in value:
            return value
    return None


def split_case_id(path: str, query_string: str = "") -> tuple[str, str, str | None]:
    """Find the case id of a request and normalize its target.

    Args:
        path: Request path
        query_string: Raw query string without the leading ``?``

    Returns:
        Tuple of (path, query string, case id). Path and query are returned
        unchanged when the id comes from the query string or is absent.
    """
    case_id = _query_case_id(query_string)
    if case_id is not None:
        return path, query_string, case_id

    target = f"{path}?{query_string}" if query_string else path
    match = _CASE_ID_FRAGMENT.search(target)
    if match is None:
        return path, query_string, None

    case_id = unquote(match.group(1))
    stripped = target[: match.start()] + target[match.end() :]
    new_path, _, new_query = stripped.partition("?")
    new_path = "/" + "/".join(segment for segment in new_path.split("/") if segment)

    params = [
        (key, value)
        for key, value in parse_qsl(new_query, keep_blank_values=True)
        if key != CASE_ID_PARAM
    ]
    params.append((CASE_ID_PARAM, case_id))
    return new_path, urlencode(params), case_id
