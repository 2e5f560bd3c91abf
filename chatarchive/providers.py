"""Construction of the scorer and the optional LLM collaborators from settings."""

import instructor
from anthropic import Anthropic
from loguru import logger

from chatarchive.config import Settings
from chatarchive.embedders.base import Embedder
from chatarchive.embedders.openai_embedder import OpenAIEmbedder
from chatarchive.embedders.voyage_embedder import VoyageEmbedder
from chatarchive.llms.base import Summarizer
from chatarchive.llms.instructor_summarizer import InstructorSummarizer
from chatarchive.relationships.scorer import ScoringWeights, SimilarityScorer


def build_embedder(settings: Settings) -> Embedder | None:
    """The configured embedder, or None when it is disabled or has no API key."""
    if settings.embedder == "voyage" and settings.voyage_ai_api_key:
        return VoyageEmbedder(
            api_key=settings.voyage_ai_api_key, max_tokens=settings.embedding_max_tokens
        )
    if settings.embedder == "openai" and settings.openai_api_key:
        return OpenAIEmbedder(
            api_key=settings.openai_api_key, max_tokens=settings.embedding_max_tokens
        )
    logger.info("No embedder configured, relationships will be scored lexically")
    return None


def build_summarizer(settings: Settings) -> Summarizer | None:
    if not settings.anthropic_api_key:
        logger.info("No Anthropic API key, imported titles and tags are kept as they are")
        return None
    anthropic_client = Anthropic(api_key=settings.anthropic_api_key)
    instructor_client = instructor.from_anthropic(
        anthropic_client, mode=instructor.Mode.ANTHROPIC_TOOLS
    )
    return InstructorSummarizer(instructor_client, model=settings.summarizer_model)


def build_scorer(settings: Settings) -> SimilarityScorer:
    """Scorer for persisted relationships, with the embedding signal at its configured weight."""
    weights = ScoringWeights(embedding=settings.relationship_embedding_weight)
    if weights.embedding > 0:
        logger.info(f"Embedding signal enabled with weight {weights.embedding}")
    return SimilarityScorer(weights)
