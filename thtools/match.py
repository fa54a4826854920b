"""Shell-style glob matching supporting ``*`` and ``?``."""

from __future__ import annotations


def glob_match(pattern: str, string: str) -> bool:
    """Return True if ``string`` matches ``pattern`` in full.

    ``*`` matches any run of characters and ``?`` matches exactly one.
    Backtracks only to the most recent ``*``.
    """
    p = s = 0
    retry_p: int | None = None
    retry_s: int | None = None
    plen, slen = len(pattern), len(string)
    while p < plen or s < slen:
        if p < plen:
            c = pattern[p]
            if c == "*":
                retry_p = p
                p += 1
                retry_s = s + 1 if s < slen else None
                continue
            if c == "?":
                if s < slen:
                    p += 1
                    s += 1
                    continue
            elif s < slen and string[s] == c:
                p += 1
                s += 1
                continue
        if retry_s is not None and retry_p is not None:
            p = retry_p
            s = retry_s
            continue
        return False
    return True