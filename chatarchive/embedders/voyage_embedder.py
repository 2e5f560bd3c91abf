import numpy as np
import voyageai

from chatarchive.embedders.truncation import TokenTruncator


class VoyageEmbedder:
    def __init__(self, api_key: str, max_tokens: int = 8000):
        self.client = voyageai.Client(api_key=api_key)
        self.truncator = TokenTruncator(max_tokens=max_tokens)

    def embed(self, text: str) -> np.ndarray:
        result = self.client.embed(
            texts=[self.truncator.truncate(text)], model="voyage-3", input_type="document"
        )
        embedding = result.embeddings[0]
        return np.array(embedding, dtype=np.float32)
