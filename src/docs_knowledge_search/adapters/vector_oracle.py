"""Vector similarity oracle abstractions and implementations.

The embedding model and nearest-neighbour backend live outside this project.
The core treats them as an oracle: text in, ranked ``VectorCandidate`` list
out. Transport failures surface as ``VectorUnavailableError`` so callers can
degrade to keyword-only search.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
import logging
from typing import Any

import httpx

from docs_knowledge_search.exceptions import VectorUnavailableError
from docs_knowledge_search.search.models import VectorCandidate


logger = logging.getLogger(__name__)


class AbstractVectorOracle(ABC):
    """Abstract nearest-neighbour lookup."""

    @abstractmethod
    async def query(self, text: str, top_k: int) -> list[VectorCandidate]:
        """Return up to ``top_k`` candidates, most similar first.

        Raises:
            VectorUnavailableError: the backend cannot answer right now.
        """
        raise NotImplementedError

    @property
    def available(self) -> bool:
        """Whether the oracle is worth calling at all."""
        return True

    async def aclose(self) -> None:
        """Optional hook for releasing network resources."""
        return


class NullVectorOracle(AbstractVectorOracle):
    """Oracle used when no vector backend is configured."""

    @property
    def available(self) -> bool:
        return False

    async def query(self, text: str, top_k: int) -> list[VectorCandidate]:
        raise VectorUnavailableError("No vector oracle configured", reason="unconfigured")


class StaticVectorOracle(AbstractVectorOracle):
    """Oracle answering every query with a fixed ranking (fixtures, offline mode)."""

    def __init__(self, candidates: Sequence[VectorCandidate]) -> None:
        self.candidates = list(candidates)
        self.calls: list[tuple[str, int]] = []

    async def query(self, text: str, top_k: int) -> list[VectorCandidate]:
        self.calls.append((text, top_k))
        return self.candidates[:top_k]


class HttpVectorOracle(AbstractVectorOracle):
    """Vector oracle backed by a JSON HTTP endpoint.

    Sends ``{"query": text, "top_k": n}`` and expects
    ``{"results": [{"title", "category", "score", ...}]}`` back.
    """

    def __init__(
        self,
        endpoint: str,
        *,
        timeout: float = 10.0,
        headers: dict[str, str] | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.endpoint = endpoint
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout, connect=min(timeout, 5.0)),
            headers=headers,
        )

    async def query(self, text: str, top_k: int) -> list[VectorCandidate]:
        try:
            resp = await self._client.post(self.endpoint, json={"query": text, "top_k": top_k})
            resp.raise_for_status()
            candidates = self._parse(resp.json())
        except httpx.TimeoutException as exc:
            raise VectorUnavailableError(f"Vector oracle timed out: {exc}", reason="timeout") from exc
        except httpx.HTTPStatusError as exc:
            raise VectorUnavailableError(
                f"Vector oracle returned HTTP {exc.response.status_code}", reason="http_status"
            ) from exc
        except httpx.HTTPError as exc:
            raise VectorUnavailableError(f"Vector oracle transport error: {exc}", reason="transport") from exc
        except (TypeError, ValueError) as exc:
            raise VectorUnavailableError(f"Vector oracle sent an unusable payload: {exc}", reason="decode") from exc

        logger.debug("Vector oracle returned %d candidates", len(candidates))
        return candidates[:top_k]

    @staticmethod
    def _parse(payload: Any) -> list[VectorCandidate]:
        """Turn a response body into candidates, raising ValueError on a malformed shape."""
        if not isinstance(payload, dict):
            raise ValueError(f"expected a JSON object, got {type(payload).__name__}")
        results = payload.get("results", [])
        if not isinstance(results, list):
            raise ValueError(f"'results' must be a list, got {type(results).__name__}")
        # Non-object rows are noise from the backend, not a failed query.
        return [VectorCandidate.from_dict(item) for item in results if isinstance(item, dict)]

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
