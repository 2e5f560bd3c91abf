from tests.fakes.fake_backend import FailingRelationshipBackend
from tests.fakes.fake_embedder import FakeEmbedder
from tests.fakes.fake_summarizer import FakeSummarizer

__all__ = ["FakeEmbedder", "FakeSummarizer", "FailingRelationshipBackend"]
