import pytest

from devtools_assistant.knowledge.base import (
    KnowledgeBase,
    SearchMethod,
    extract_keywords,
    wants_full_content,
)
from devtools_assistant.knowledge.cache import CAGCache


def test_extract_keywords_drops_stop_words_and_duplicates() -> None:
    assert extract_keywords("The quick brown fox and the quick dog") == ["quick", "brown", "fox", "dog"]
    assert len(extract_keywords(" ".join(f"word{i}" for i in range(50)))) == 20


def test_added_documents_carry_derived_metadata() -> None:
    kb = KnowledgeBase()
    doc_id = kb.add_document("Docker compose runs multi container apps", {"filename": "docker.md"})

    document = kb.get_document(doc_id)

    assert document.filename == "docker.md"
    assert "docker" in document.keywords
    assert "uploaded_at" in document.metadata


def test_more_occurrences_rank_first() -> None:
    kb = KnowledgeBase()
    once = kb.add_document("docker is mentioned here a single time")
    thrice = kb.add_document("docker builds images; docker runs them; docker pushes them")

    results = kb.keyword_search("docker")

    assert [document.doc_id for document in results] == [thrice, once]


def test_derived_keyword_outscores_plain_substring() -> None:
    kb = KnowledgeBase()
    substring_only = kb.add_document("dockerfile syntax reference")
    keyword = kb.add_document("docker networking guide")

    results = kb.keyword_search("docker")

    assert [document.doc_id for document in results] == [keyword, substring_only]


def test_keyword_search_skips_non_matching_documents() -> None:
    kb = KnowledgeBase()
    kb.add_document("kubernetes pods and services")

    assert kb.keyword_search("postgres") == []


def test_metadata_search_through_json_query() -> None:
    kb = KnowledgeBase()
    markdown = kb.add_document("release notes", {"type": "markdown"})
    kb.add_document("raw log", {"type": "text"})

    results = kb.search('{"type": "markdown"}', method=SearchMethod.METADATA)

    assert [document.doc_id for document in results] == [markdown]
    assert kb.search("not json", method="metadata") == []
    assert kb.search("[1, 2]", method="metadata") == []


def test_search_results_are_cached_until_documents_change() -> None:
    kb = KnowledgeBase()
    kb.add_document("redis cache eviction policies")

    first = kb.search("redis")
    second = kb.search("redis")

    assert first == second
    assert kb.cache.get_stats()["hits"] == 1

    kb.add_document("redis cluster setup")
    assert len(kb.cache) == 0
    assert len(kb.search("redis")) == 2


def test_removed_document_is_not_served_from_cache() -> None:
    kb = KnowledgeBase()
    doc_id = kb.add_document("nginx reverse proxy")
    assert len(kb.search("nginx")) == 1

    assert kb.remove_document(doc_id) is True
    assert kb.remove_document(doc_id) is False
    assert kb.search("nginx") == []


def test_semantic_search_uses_keyword_ranking() -> None:
    kb = KnowledgeBase()
    kb.add_document("terraform state files")

    assert kb.search("terraform", method="semantic") == kb.keyword_search("terraform")


def test_search_respects_limit() -> None:
    kb = KnowledgeBase()
    for index in range(4):
        kb.add_document(f"ansible playbook {index}")

    assert len(kb.search("ansible", limit=2)) == 2
    assert len(kb.search("ansible", limit=3)) == 3


def test_build_context_includes_every_filename_when_short() -> None:
    kb = KnowledgeBase()
    kb.add_document("alpha content", {"filename": "alpha.txt"})
    kb.add_document("beta content", {"filename": "beta.txt"})

    context = kb.build_context(kb.list_documents(), max_length=200)

    assert "[alpha.txt]" in context
    assert "[beta.txt]" in context
    assert len(context) <= 200


@pytest.mark.parametrize("max_length", [1, 10, 50, 120])
def test_build_context_never_exceeds_max_length(max_length: int) -> None:
    kb = KnowledgeBase()
    kb.add_document("x" * 100, {"filename": "first.txt"})
    kb.add_document("y" * 100, {"filename": "second.txt"})

    context = kb.build_context(kb.list_documents(), max_length=max_length)

    assert len(context) <= max_length


def test_build_context_truncates_with_ellipsis() -> None:
    kb = KnowledgeBase()
    kb.add_document("z" * 500, {"filename": "long.txt"})

    context = kb.build_context(kb.list_documents(), max_length=60)

    assert context.startswith("[long.txt]\n")
    assert context.endswith("...")
    assert len(context) == 60


def test_build_context_include_full_ignores_limit() -> None:
    kb = KnowledgeBase()
    kb.add_document("z" * 500, {"filename": "long.txt"})

    context = kb.build_context(kb.list_documents(), max_length=60, include_full=True)

    assert "z" * 500 in context


def test_full_content_requests() -> None:
    assert wants_full_content("show me the full document")
    assert wants_full_content("I need the complete file content")
    assert not wants_full_content("summarize the document")


def test_add_file_uses_loader_metadata(tmp_path) -> None:
    notes = tmp_path / "notes.md"
    notes.write_text("# Deploy\nUse blue green deployments.", encoding="utf-8")
    config = tmp_path / "config.json"
    config.write_text('{"retries": 3, "env": "prod"}', encoding="utf-8")
    kb = KnowledgeBase()

    notes_doc = kb.get_document(kb.add_file(notes))
    config_doc = kb.get_document(kb.add_file(config, {"team": "platform"}))

    assert notes_doc.metadata["filename"] == "notes.md"
    assert notes_doc.metadata["type"] == "markdown"
    assert config_doc.metadata["type"] == "json"
    assert config_doc.metadata["team"] == "platform"
    assert '"retries": 3' in config_doc.content


def test_add_file_rejects_unknown_extension(tmp_path) -> None:
    binary = tmp_path / "tool.exe"
    binary.write_bytes(b"\x00\x01")

    with pytest.raises(ValueError, match="Unsupported file type .exe"):
        KnowledgeBase().add_file(binary)


def test_add_file_rejects_invalid_json(tmp_path) -> None:
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    kb = KnowledgeBase()

    with pytest.raises(ValueError, match="Invalid JSON"):
        kb.add_file(broken)
    assert kb.list_documents() == []


def test_stats_and_clear() -> None:
    kb = KnowledgeBase()
    kb.add_document("grafana dashboards")
    kb.search("grafana")

    assert kb.get_stats()["document_count"] == 1
    assert kb.get_stats()["cache_stats"]["size"] == 1

    kb.clear()
    assert kb.get_stats()["document_count"] == 0
    assert kb.list_documents() == []


def test_identical_documents_keep_insertion_order() -> None:
    kb = KnowledgeBase()
    first = kb.add_document("helm chart values override")
    second = kb.add_document("helm chart values override")

    results = kb.keyword_search("helm")

    assert [document.doc_id for document in results] == [first, second]


def test_document_changes_keep_unrelated_cache_entries() -> None:
    cache = CAGCache(10)
    kb = KnowledgeBase(cache=cache)
    cache.set("session:token", "abc")
    kb.add_document("vault secrets engine")
    kb.search("vault")

    kb.add_document("vault policies")

    assert kb.cache is cache
    assert cache.get("session:token") == "abc"
    assert cache.get("keyword:vault") is None

    kb.clear()
    assert cache.get("session:token") == "abc"
