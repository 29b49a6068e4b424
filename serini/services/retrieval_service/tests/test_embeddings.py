"""Tests for the embedding client and text chunking."""
import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from serini.shared.errors import EmbeddingServiceError
from serini.services.retrieval_service.embeddings import (
    EmbeddingConfig,
    OpenAIEmbeddingClient,
    chunk_text,
)


def _response(*vectors_with_index, total_tokens=12):
    data = [SimpleNamespace(index=i, embedding=v) for i, v in vectors_with_index]
    return SimpleNamespace(data=data, usage=SimpleNamespace(total_tokens=total_tokens))


@pytest.fixture
def mock_client():
    client = MagicMock()
    client.embeddings.create = AsyncMock()
    return client


@pytest.fixture
def embedder(mock_client):
    config = EmbeddingConfig(api_key="test", timeout_seconds=1.0)
    return OpenAIEmbeddingClient(config=config, client=mock_client)


class TestEmbeddingConfig:
    """Tests for EmbeddingConfig."""

    def test_defaults(self):
        config = EmbeddingConfig()

        assert config.model_name == "text-embedding-3-small"
        assert config.max_retries == 1

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        monkeypatch.setenv("EMBEDDING_TIMEOUT_SECONDS", "3.5")

        config = EmbeddingConfig.from_env()

        assert config.api_key == "sk-test"
        assert config.timeout_seconds == 3.5


class TestEmbed:
    """Tests for embed() and embed_batch()."""

    @pytest.mark.asyncio
    async def test_embed_single(self, embedder, mock_client):
        mock_client.embeddings.create.return_value = _response((0, [0.1, 0.2]))

        vector = await embedder.embed("hello")

        assert vector == [0.1, 0.2]
        kwargs = mock_client.embeddings.create.call_args.kwargs
        assert kwargs["model"] == "text-embedding-3-small"
        assert kwargs["input"] == ["hello"]

    @pytest.mark.asyncio
    async def test_batch_preserves_input_order(self, embedder, mock_client):
        # Response items arrive out of order
        mock_client.embeddings.create.return_value = _response(
            (2, [3.0]), (0, [1.0]), (1, [2.0])
        )

        vectors = await embedder.embed_batch(["a", "b", "c"])

        assert vectors == [[1.0], [2.0], [3.0]]

    @pytest.mark.asyncio
    async def test_empty_batch_makes_no_call(self, embedder, mock_client):
        assert await embedder.embed_batch([]) == []
        mock_client.embeddings.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_empty_text_rejected(self, embedder, mock_client):
        with pytest.raises(EmbeddingServiceError):
            await embedder.embed("   ")
        mock_client.embeddings.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_count_mismatch(self, embedder, mock_client):
        mock_client.embeddings.create.return_value = _response((0, [1.0]))

        with pytest.raises(EmbeddingServiceError):
            await embedder.embed_batch(["a", "b"])

    @pytest.mark.asyncio
    async def test_transient_error_retried_once(self, embedder, mock_client):
        mock_client.embeddings.create.side_effect = [
            asyncio.TimeoutError(),
            _response((0, [0.5])),
        ]

        vector = await embedder.embed("hello")

        assert vector == [0.5]
        assert mock_client.embeddings.create.await_count == 2

    @pytest.mark.asyncio
    async def test_persistent_timeout_raises(self, embedder, mock_client):
        mock_client.embeddings.create.side_effect = asyncio.TimeoutError()

        with pytest.raises(EmbeddingServiceError) as exc_info:
            await embedder.embed("hello")

        assert isinstance(exc_info.value.cause, asyncio.TimeoutError)
        assert mock_client.embeddings.create.await_count == 2

    @pytest.mark.asyncio
    async def test_slow_endpoint_times_out(self, mock_client):
        async def slow(**kwargs):
            await asyncio.sleep(1)
            return _response((0, [1.0]))

        mock_client.embeddings.create = slow
        embedder = OpenAIEmbeddingClient(
            config=EmbeddingConfig(api_key="test", timeout_seconds=0.01, max_retries=0),
            client=mock_client,
        )

        with pytest.raises(EmbeddingServiceError):
            await embedder.embed("hello")

    @pytest.mark.asyncio
    async def test_non_transient_error_not_retried(self, embedder, mock_client):
        mock_client.embeddings.create.side_effect = ValueError("bad request")

        with pytest.raises(EmbeddingServiceError):
            await embedder.embed("hello")

        assert mock_client.embeddings.create.await_count == 1


class TestChunkText:
    """Tests for chunk_text()."""

    def test_short_text_single_chunk(self):
        assert chunk_text("One sentence.") == ["One sentence."]

    def test_empty_text(self):
        assert chunk_text("") == []

    def test_breaks_at_sentence_boundary(self):
        text = ("A" * 60 + ". ") * 5

        chunks = chunk_text(text, max_chunk_size=100, overlap=10)

        assert len(chunks) > 1
        assert all(len(c) <= 100 for c in chunks)
        assert chunks[0].endswith(".")

    def test_terminates_without_boundaries(self):
        text = "x" * 2500

        chunks = chunk_text(text, max_chunk_size=1000, overlap=100)

        assert [len(c) for c in chunks] == [1000, 1000, 700]

    def test_overlap_must_be_smaller(self):
        with pytest.raises(ValueError):
            chunk_text("abc", max_chunk_size=10, overlap=10)
