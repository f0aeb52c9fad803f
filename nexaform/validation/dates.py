"""
NexaForm Date Formats
=====================

Translation between client-side Moment.js format tokens
(``YYYY-MM-DD``) and server-side ``strftime``/``strptime``
directives (``%Y-%m-%d``).

The table is ordered: when translating to Moment.js the first pair
for a directive wins, so padded tokens come before their unpadded
variants.
"""

from __future__ import annotations

from typing import Dict, List, Tuple


FORMAT_MAPPINGS: List[Tuple[str, str]] = [
    # Day
    ("%d", "DD"),
    ("%a", "ddd"),
    ("%A", "dddd"),
    ("%u", "E"),
    ("%w", "d"),
    ("%j", "DDDD"),
    # Week
    ("%W", "ww"),
    ("%V", "WW"),
    ("%G", "GGGG"),
    # Month
    ("%B", "MMMM"),
    ("%b", "MMM"),
    ("%m", "MM"),
    # Year
    ("%Y", "YYYY"),
    ("%y", "YY"),
    # Time
    ("%p", "A"),
    ("%I", "hh"),
    ("%H", "HH"),
    ("%M", "mm"),
    ("%S", "ss"),
    ("%f", "SSSSSS"),
    # Timezone
    ("%z", "ZZ"),
    ("%Z", "z"),
    # Unpadded client tokens (strptime accepts one or two digits)
    ("%d", "D"),
    ("%j", "DDD"),
    ("%m", "M"),
    ("%I", "h"),
    ("%H", "H"),
    ("%M", "m"),
    ("%S", "s"),
    ("%p", "a"),
    ("%f", "SSS"),
]

TO_SERVER: Dict[str, str] = {}
TO_CLIENT: Dict[str, str] = {}

for _server, _client in FORMAT_MAPPINGS:
    TO_SERVER.setdefault(_client, _server)
    TO_CLIENT.setdefault(_server, _client)

# Longest first so "YYYY" is not read as "YY" + "YY"
_CLIENT_TOKENS = sorted(TO_SERVER, key=len, reverse=True)


def to_server_format(client_format: str) -> str:
    """
    Translate a Moment.js format into a strptime format.

    Text in square brackets is literal, and literal "%" is escaped.

    Example:
        >>> to_server_format("DD/MM/YYYY [at] HH:mm")
        '%d/%m/%Y at %H:%M'
    """
    result: List[str] = []
    index = 0

    while index < len(client_format):
        char = client_format[index]

        if char == "[":
            end = client_format.find("]", index + 1)
            if end != -1:
                result.append(client_format[index + 1:end].replace("%", "%%"))
                index = end + 1
                continue

        for token in _CLIENT_TOKENS:
            if client_format.startswith(token, index):
                result.append(TO_SERVER[token])
                index += len(token)
                break
        else:
            result.append("%%" if char == "%" else char)
            index += 1

    return "".join(result)


def to_client_format(server_format: str) -> str:
    """
    Translate a strftime format into a Moment.js format.

    Literal letters are bracketed so Moment.js does not read them as
    tokens. Directives without a Moment.js equivalent are kept as-is.

    Example:
        >>> to_client_format("%Y-%m-%dT%H:%M")
        'YYYY-MM-DD[T]HH:mm'
    """
    result: List[str] = []
    literal: List[str] = []

    def flush() -> None:
        if literal:
            text = "".join(literal)
            result.append(f"[{text}]" if any(c.isalpha() for c in text) else text)
            literal.clear()

    index = 0
    while index < len(server_format):
        directive = server_format[index:index + 2]

        if directive == "%%":
            literal.append("%")
            index += 2
        elif directive in TO_CLIENT:
            flush()
            result.append(TO_CLIENT[directive])
            index += 2
        else:
            literal.append(server_format[index])
            index += 1

    flush()
    return "".join(result)
