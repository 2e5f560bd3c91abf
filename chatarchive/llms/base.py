from typing import Protocol

from chatarchive.llms.schemas import EntrySummary


class Summarizer(Protocol):
    def summarize(self, text: str) -> EntrySummary: ...
