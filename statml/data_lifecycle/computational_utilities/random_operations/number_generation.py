from typing import List, Optional
import numpy as np
LCG_MULTIPLIER = 9301
LCG_INCREMENT = 49297
LCG_MODULUS = 233280

class LinearCongruentialGenerator:
    """
    Seeded linear congruential generator ``s <- (9301 s + 49297) mod 233280``.

    Every random decision in the toolkit (shuffles, bootstrap draws, initial
    centroids and power-iteration start vectors) comes from this generator, so
    results depend only on the seed. The state is a plain integer and the
    update uses exact integer arithmetic.

    Attributes:
        seed (int): Seed the generator was created with.
        state (int): Current state.
    """

    def __init__(self, seed: int=42):
        self.seed = int(seed)
        self.state = self.seed % LCG_MODULUS

    def random(self) -> float:
        """Advance the state and return a float in [0, 1)."""
        self.state = (self.state * LCG_MULTIPLIER + LCG_INCREMENT) % LCG_MODULUS
        return self.state / LCG_MODULUS

    def randint(self, upper: int) -> int:
        """Integer in [0, upper) as ``floor(random() * upper)``."""
        return int(self.random() * upper)

    def uniform_vector(self, size: int) -> np.ndarray:
        """``size`` consecutive draws in [0, 1)."""
        return np.array([self.random() for _ in range(size)], dtype=float)

    def permutation(self, n: int) -> List[int]:
        """
        Fisher-Yates shuffle of ``range(n)``.

        For ``i`` from ``n - 1`` down to 1, swap position ``i`` with ``floor(random() * (i + 1))``.
        """
        indices = list(range(n))
        for i in range(n - 1, 0, -1):
            j = self.randint(i + 1)
            (indices[i], indices[j]) = (indices[j], indices[i])
        return indices

def lcg_sequence(n: int, seed: Optional[int]=42) -> List[float]:
    """First ``n`` draws of a generator seeded with ``seed``."""
    generator = LinearCongruentialGenerator(42 if seed is None else seed)
    return [generator.random() for _ in range(n)]
