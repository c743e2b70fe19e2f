"""Validating step (lint / format checks).

A tool like `gofmt -l` exits 0 even when it finds problems; the findings go
to stdout. So: process failure first, then any stdout at all is a failure.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..errors import StepError
from .base import Step

_ESCAPES = {
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
    "\\": "\\\\",
    '"': '\\"',
}


def quote(text: str) -> str:
    """Double-quote `text` with Go-style escapes (\\n, \\x1b, \\u00ad, ...)."""
    out = []
    for ch in text:
        code = ord(ch)
        if ch in _ESCAPES:
            out.append(_ESCAPES[ch])
        elif ch.isprintable():
            out.append(ch)
        elif code < 0x80:
            out.append(f"\\x{code:02x}")
        elif code <= 0xFFFF:
            out.append(f"\\u{code:04x}")
        else:
            out.append(f"\\U{code:08x}")
    return '"' + "".join(out) + '"'


@dataclass(frozen=True)
class ValidatingStep(Step):
    async def execute(self) -> str:
        res = await self._spawn()
        if res.stdout:
            raise StepError(self.name, f"invalid format: {quote(res.stdout)}")
        return self.message
