import numpy as np

from chatarchive.embedders.base import Embedder


class FakeEmbedder(Embedder):
    """Fake embedder returning a fixed vector per keyword found in the text."""

    def __init__(self, vectors: dict[str, list[float]] | None = None, fail: bool = False) -> None:
        self.vectors = vectors or {}
        self.fail = fail
        self.calls: list[str] = []

    def embed(self, text: str) -> np.ndarray:
        self.calls.append(text)
        if self.fail:
            raise ConnectionError("embedding service unreachable")
        for keyword, vector in self.vectors.items():
            if keyword in text:
                return np.array(vector, dtype=np.float32)
        return np.ones(4, dtype=np.float32)
