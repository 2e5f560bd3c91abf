import numpy as np
from openai import OpenAI

from chatarchive.embedders.truncation import TokenTruncator


class OpenAIEmbedder:
    def __init__(self, api_key: str, max_tokens: int = 8000):
        self.openai_client = OpenAI(api_key=api_key)
        self.truncator = TokenTruncator(max_tokens=max_tokens, model="text-embedding-3-large")

    def embed(self, text: str) -> np.ndarray:
        embedding = (
            self.openai_client.embeddings.create(
                input=self.truncator.truncate(text), model="text-embedding-3-large"
            )
            .data[0]
            .embedding
        )
        return np.array(embedding, dtype=np.float32)
