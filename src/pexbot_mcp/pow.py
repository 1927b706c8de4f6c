"""Proof-of-work solver for account registration.

The server issues a nonce; a solution is the smallest non-negative integer
``i`` such that ``sha256(nonce + str(i))`` starts with ``difficulty`` zero
hex digits.
"""

import hashlib
import logging
from typing import Optional

from .types import PowExhausted

logger = logging.getLogger(__name__)

DEFAULT_DIFFICULTY = 4


def _digest(nonce: str, solution: str) -> str:
    return hashlib.sha256((nonce + solution).encode()).hexdigest()


def verify_solution(nonce: str, solution: str, difficulty: int = DEFAULT_DIFFICULTY) -> bool:
    """Check that a solution satisfies the challenge."""
    return _digest(nonce, solution).startswith("0" * difficulty)


def solve_challenge(
    nonce: str,
    difficulty: int = DEFAULT_DIFFICULTY,
    max_attempts: Optional[int] = None,
) -> str:
    """Solve a proof-of-work challenge.

    Args:
        nonce: Nonce from GET /auth/challenge
        difficulty: Number of leading zero hex digits required (default: 4)
        max_attempts: Give up after this many candidates (default: unbounded)

    Returns:
        The solution as a decimal string.

    Raises:
        PowExhausted: If max_attempts candidates were tried without success.
    """
    prefix = "0" * difficulty

    i = 0
    while max_attempts is None or i < max_attempts:
        candidate = str(i)
        if _digest(nonce, candidate).startswith(prefix):
            logger.debug("Solved challenge after %d attempts", i + 1)
            return candidate
        i += 1

    raise PowExhausted(nonce, max_attempts)
