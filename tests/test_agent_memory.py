import json
from pathlib import Path

import pytest

from agentmem.config.schema import Config
from agentmem.errors import PersistenceError, SummarizationError
from agentmem.memory.backends import InlineTextBackend, VectorIndexBackend
from agentmem.memory.factory import build_backend, create_agent_memory
from agentmem.memory.persistence import AgentState

from conftest import FakeEmbedder, FakeIndex, FakeSummarizer


def _config(tmp_path: Path, **memory) -> Config:
    memory.setdefault("max_messages", 4)
    memory.setdefault("summary_chunk_size", 2)
    return Config.model_validate({"memory": {"bots_dir": str(tmp_path), **memory}})


class TestFactory:
    def test_inline_by_default(self, tmp_path: Path, summarizer) -> None:
        backend = build_backend(_config(tmp_path), summarizer)
        assert isinstance(backend, InlineTextBackend)
        assert backend.max_chars == 1024

    def test_vector_when_collaborators_present(self, tmp_path: Path, summarizer, embedder, index) -> None:
        backend = build_backend(_config(tmp_path, backend="vector", top_k=5), summarizer, embedder, index)
        assert isinstance(backend, VectorIndexBackend)
        assert backend.top_k == 5

    def test_vector_without_embedder_falls_back_to_inline(self, tmp_path: Path, summarizer, index) -> None:
        backend = build_backend(_config(tmp_path, backend="vector"), summarizer, None, index)
        assert isinstance(backend, InlineTextBackend)

    def test_persistence_follows_backend(self, tmp_path: Path, summarizer, embedder, index) -> None:
        inline = create_agent_memory("andy", _config(tmp_path), summarizer)
        vector = create_agent_memory("bob", _config(tmp_path, backend="vector"), summarizer, embedder, index)
        assert inline.persistence.persist_memory_text is True
        assert vector.persistence.persist_memory_text is False


@pytest.mark.asyncio
async def test_consolidation_stores_summary_and_writes_audit(tmp_path: Path) -> None:
    summ = FakeSummarizer(reply="steve wants a house")
    memory = create_agent_memory("andy", _config(tmp_path), summ)

    await memory.add("system", "boot")
    await memory.add("steve", "build a house")
    await memory.add("andy", "sure")
    await memory.add("steve", "thanks")

    assert memory.memory_text == "steve wants a house"
    assert [t.role for t in summ.calls[0][0]] == ["system", "user", "assistant"]
    assert [t.content for t in memory.get_history()] == ["steve: thanks"]

    entries = json.loads(memory.persistence.audit_file.read_text(encoding="utf-8"))
    assert [e["role"] for e in entries] == ["system", "user", "assistant"]


@pytest.mark.asyncio
async def test_summarization_failure_loses_chunk_without_audit(tmp_path: Path) -> None:
    summ = FakeSummarizer(error=SummarizationError("llm down"))
    memory = create_agent_memory("andy", _config(tmp_path), summ)

    await memory.add("steve", "a")
    await memory.add("andy", "b")
    await memory.add("steve", "c")
    with pytest.raises(SummarizationError):
        await memory.add("andy", "d")

    assert memory.persistence.audit_file is None
    assert [t.content for t in memory.get_history()] == ["steve: c", "d"]
    assert len(memory.get_history()) <= 4


@pytest.mark.asyncio
async def test_audit_failure_surfaces_after_store(tmp_path: Path, monkeypatch) -> None:
    summ = FakeSummarizer(reply="kept")
    memory = create_agent_memory("andy", _config(tmp_path), summ)

    def _fail(chunk):
        raise PersistenceError("disk full")

    monkeypatch.setattr(memory.persistence, "append_audit", _fail)
    for sender in ("steve", "andy", "steve"):
        await memory.add(sender, "x")
    with pytest.raises(PersistenceError):
        await memory.add("andy", "y")
    assert memory.memory_text == "kept"


@pytest.mark.asyncio
async def test_vector_upsert_failure_still_records_audit(tmp_path: Path, summarizer, embedder) -> None:
    from agentmem.errors import VectorIndexError

    index = FakeIndex(upsert_error=VectorIndexError("down"))
    memory = create_agent_memory("andy", _config(tmp_path, backend="vector"), summarizer, embedder, index)
    for sender in ("steve", "andy", "steve", "andy"):
        await memory.add(sender, "x")

    assert memory.persistence.audit_file is not None
    assert index.records == []


@pytest.mark.asyncio
async def test_inline_save_load_round_trip(tmp_path: Path) -> None:
    config = _config(tmp_path, max_messages=10)
    memory = create_agent_memory("andy", config, FakeSummarizer())
    await memory.add("steve", "hello")
    await memory.add("andy", "hi")
    memory.backend.restore("steve is friendly")
    memory.save(AgentState(self_prompt="explore", last_sender="steve"))

    fresh = create_agent_memory("andy", config, FakeSummarizer())
    snapshot = fresh.load()

    assert snapshot is not None
    assert snapshot.state.self_prompt == "explore"
    assert snapshot.state.last_sender == "steve"
    assert fresh.get_history() == memory.get_history()
    assert fresh.memory_text == "steve is friendly"
    assert await fresh.recall("anything") == "steve is friendly"


@pytest.mark.asyncio
async def test_vector_load_yields_empty_memory(tmp_path: Path, summarizer, embedder, index) -> None:
    inline_cfg = _config(tmp_path, max_messages=10)
    inline = create_agent_memory("andy", inline_cfg, FakeSummarizer())
    await inline.add("steve", "hello")
    inline.backend.restore("on disk memory")
    inline.save()

    vector = create_agent_memory("andy", _config(tmp_path, max_messages=10, backend="vector"), summarizer, embedder, index)
    snapshot = vector.load()

    assert snapshot.memory_text == ""
    assert vector.memory_text == ""
    assert [t.content for t in vector.get_history()] == ["steve: hello"]


@pytest.mark.asyncio
async def test_vector_recall_goes_through_index(tmp_path: Path, summarizer, embedder) -> None:
    index = FakeIndex(results=[{"score": 0.4, "payload": {"memory": "shop at spawn"}}])
    memory = create_agent_memory("andy", _config(tmp_path, backend="vector"), summarizer, embedder, index)
    assert await memory.recall("where to trade") == "shop at spawn"
    assert index.queries[0][0] == "andy"


def test_load_without_file_returns_none(tmp_path: Path, summarizer) -> None:
    memory = create_agent_memory("andy", _config(tmp_path), summarizer)
    assert memory.load() is None
    assert memory.get_history() == []


@pytest.mark.asyncio
async def test_clear_resets_window_and_memory(tmp_path: Path, summarizer) -> None:
    memory = create_agent_memory("andy", _config(tmp_path), summarizer)
    await memory.add("steve", "x")
    memory.backend.restore("mem")
    memory.clear()
    assert memory.get_history() == []
    assert memory.memory_text == ""


@pytest.mark.asyncio
async def test_start_resumes_saved_window_when_enabled(tmp_path: Path, summarizer) -> None:
    config = _config(tmp_path, max_messages=10)
    first = create_agent_memory("andy", config, summarizer)
    await first.add("steve", "hello")
    first.backend.restore("steve is friendly")
    first.save()

    resumed = create_agent_memory("andy", config, summarizer)
    snapshot = resumed.start()

    assert snapshot is not None
    assert [t.content for t in resumed.get_history()] == ["steve: hello"]
    assert resumed.memory_text == "steve is friendly"


@pytest.mark.asyncio
async def test_start_ignores_saved_window_when_disabled(tmp_path: Path, summarizer) -> None:
    first = create_agent_memory("andy", _config(tmp_path, max_messages=10), summarizer)
    await first.add("steve", "hello")
    first.backend.restore("steve is friendly")
    first.save()

    fresh = create_agent_memory("andy", _config(tmp_path, max_messages=10, load_memory=False), summarizer)

    assert fresh.start() is None
    assert fresh.get_history() == []
    assert fresh.memory_text == ""
