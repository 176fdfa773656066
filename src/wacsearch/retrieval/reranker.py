"""Cross-encoder reranking of fused candidates."""

import asyncio
from typing import Optional

from wacsearch.utils.config import RerankConfig, SearchConfig
from wacsearch.utils.logging import get_logger

from .base import BaseReranker
from .document import QAPair, SearchResult

logger = get_logger(__name__)


def rerank_text(result: SearchResult, max_chars: int = 512) -> str:
    """Text a cross-encoder sees for one result: section title, then body."""
    document = result.document
    if isinstance(document, QAPair):
        body = f"{document.question} {document.answer}"
    else:
        body = document.content
    return f"{result.section_title} {body}"[:max_chars]


class CrossEncoderReranker(BaseReranker):
    """Reranker using a cross-encoder model.

    Scores each (query, result text) pair jointly with a sentence-transformers
    ``CrossEncoder``, which is more precise than comparing embeddings but
    too slow to run over the whole corpus.

    Note: Requires the 'local' extra to be installed.
    """

    def __init__(
        self,
        model_name: str = "cross-encoder/ms-marco-MiniLM-L-6-v2",
        device: Optional[str] = None,
        max_chars: int = 512,
    ):
        """Initialize the cross-encoder reranker.

        Args:
            model_name: Name of the cross-encoder model
            device: Device to run on (cuda, cpu, mps)
            max_chars: Result text is cut to this many characters
        """
        self.model_name = model_name
        self.device = device
        self.max_chars = max_chars
        self._model = None

    def _get_model(self):
        """Get or load the cross-encoder model."""
        if self._model is None:
            try:
                from sentence_transformers import CrossEncoder

                self._model = CrossEncoder(self.model_name, device=self.device)
                logger.info(f"Loaded cross-encoder model: {self.model_name}")
            except ImportError:
                raise ImportError(
                    "Cross-encoder reranking requires 'sentence-transformers'. "
                    "Install it with: pip install wac-search[local]"
                )
        return self._model

    async def rerank(self, query: str, results: list[SearchResult]) -> list[SearchResult]:
        """Reorder results by cross-encoder relevance."""
        if not results:
            return []

        model = self._get_model()
        pairs = [(query, rerank_text(result, self.max_chars)) for result in results]

        # Score in thread pool
        loop = asyncio.get_running_loop()
        scores = await loop.run_in_executor(None, lambda: model.predict(pairs))

        reranked = [
            result.model_copy(update={"rerank_score": float(score)})
            for result, score in zip(results, scores)
        ]
        reranked.sort(key=lambda r: r.rerank_score, reverse=True)
        return reranked


def create_reranker(config: SearchConfig) -> Optional[BaseReranker]:
    """Create the reranker ``config.rerank`` asks for, or None when disabled."""
    settings: RerankConfig = config.rerank
    if not settings.enabled:
        return None

    return CrossEncoderReranker(
        model_name=settings.model,
        device=settings.device,
        max_chars=settings.max_chars,
    )
