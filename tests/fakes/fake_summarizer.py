from chatarchive.llms.base import Summarizer
from chatarchive.llms.schemas import EntrySummary


class FakeSummarizer(Summarizer):
    """Fake summarizer that returns a predefined title and tags."""

    def __init__(self, title: str = "Generated title", tags: list[str] | None = None) -> None:
        self.summary = EntrySummary(title=title, tags=tags or ["generated"])
        self.calls: list[str] = []

    def summarize(self, text: str) -> EntrySummary:
        self.calls.append(text)
        return self.summary
