from __future__ import annotations

from typing import Sequence

PLACEHOLDER = "%"


def render_rate(rate: float) -> str:
    # shortest text that round-trips, so the child sees the cached key exactly
    return repr(float(rate))


def instantiate(template: Sequence[str], rate: float) -> list[str]:
    text = render_rate(rate)
    return [token.replace(PLACEHOLDER, text) for token in template]


def has_placeholder(template: Sequence[str]) -> bool:
    return any(PLACEHOLDER in token for token in template)
