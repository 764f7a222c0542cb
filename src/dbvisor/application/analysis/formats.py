from __future__ import annotations

from collections.abc import Collection

EMAIL = "Email"
URL = "URL"

_URL_PREFIXES = ("http", "www")


def classify(value: str, already_detected: Collection[str] = ()) -> list[str]:
    """Return format labels newly suggested by ``value`` for its column.

    Heuristic only: anything holding both ``@`` and ``.`` counts as an email,
    anything starting with ``http`` or ``www`` as a URL.
    """
    labels: list[str] = []
    if EMAIL not in already_detected and "@" in value and "." in value:
        labels.append(EMAIL)
    if URL not in already_detected and value.startswith(_URL_PREFIXES):
        labels.append(URL)
    return labels
