from typing import Protocol

import numpy as np


class Embedder(Protocol):
    """Turns entry text into a vector for the embedding similarity signals."""

    def embed(self, text: str) -> np.ndarray: ...
