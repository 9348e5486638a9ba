"""
Identifier generation for the ``nanoid`` and ``uuid`` expression functions.

These are the only non-deterministic parts of the evaluator; tests inject a
fixed generator through ``ExpressionEvaluator(id_generator=...)``.
"""

import secrets
import uuid
from typing import Protocol

# URL-safe alphabet used by nanoid
NANOID_ALPHABET = "useandom-26T198340PX75pxJACKVERYMINDBUSHWOLF_GQZbfghjklqvwyzrict"
NANOID_DEFAULT_SIZE = 21


class IdGenerator(Protocol):
    def nanoid(self, size: int = NANOID_DEFAULT_SIZE) -> str: ...

    def uuid(self) -> str: ...


class RandomIdGenerator:
    """Cryptographically random ids backed by :mod:`secrets` and :mod:`uuid`."""

    def nanoid(self, size: int = NANOID_DEFAULT_SIZE) -> str:
        return "".join(secrets.choice(NANOID_ALPHABET) for _ in range(size))

    def uuid(self) -> str:
        return str(uuid.uuid4())
