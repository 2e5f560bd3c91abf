"""Keep embedding inputs within the provider's token limit."""

import tiktoken


class TokenTruncator:
    """Cuts text down to a maximum number of tokens."""

    def __init__(self, max_tokens: int = 8000, model: str = "gpt-3.5-turbo"):
        """Initialize the truncator.

        Args:
            max_tokens: Maximum tokens kept from the input
            model: Model name for tokenizer
        """
        self.max_tokens = max_tokens
        self.enc = tiktoken.encoding_for_model(model)

    def truncate(self, text: str) -> str:
        tokens = self.enc.encode(text)
        if len(tokens) <= self.max_tokens:
            return text
        return self.enc.decode(tokens[: self.max_tokens])
