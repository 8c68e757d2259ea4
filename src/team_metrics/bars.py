from __future__ import annotations

from collections.abc import Mapping


def bars(m: Mapping[str, int]) -> str:
    """
    Render a label -> count mapping as an ASCII bar chart:

        alice	3	...
        bob  	1	.

    Lines are sorted by count descending; ties keep insertion order.
    """
    if not m:
        return ""

    width = max(len(k) for k in m)
    items = sorted(m.items(), key=lambda kv: -kv[1])

    lines: list[str] = []
    for label, n in items:
        lines.append(f"{label.ljust(width)}\t{n}\t{'.' * n}\n")
    return "".join(lines)
