"""Rune name helpers."""

from __future__ import annotations

import re

_SPACERS = re.compile(r"[•.]")


def normalize_rune_name(name: str) -> str:
    """Strip spacer characters (bullet, dot) before hitting upstream APIs."""

    return _SPACERS.sub("", name)


__all__ = ["normalize_rune_name"]
