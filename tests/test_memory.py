import pytest

from finance_chat.classifiers.memory import MemoryMatcher


@pytest.fixture
def memory_matcher(tmp_path):
    data_file = tmp_path / "memory.json"
    return MemoryMatcher(data_path=str(data_file), threshold=50.0)

def test_memory_learn_and_exact_match(memory_matcher):
    memory_matcher.learn("Spotify Premium", "Entertainment")

    # Reload to verify persistence
    memory_matcher.load()

    res = memory_matcher.classify("spotify  premium")
    assert res is not None
    assert res.category == "Entertainment"
    assert res.confidence == 1.0
    assert res.source == "memory_exact"

def test_memory_fuzzy_match(memory_matcher):
    memory_matcher.learn("vet visit", "Healthcare")

    res = memory_matcher.classify("vet visit for rex")
    assert res is not None
    assert res.category == "Healthcare"
    assert res.confidence > 0.4
    assert res.source == "memory_fuzzy"

def test_memory_respects_valid_categories(memory_matcher):
    memory_matcher.learn("vet visit", "Pets")
    assert memory_matcher.classify("vet visit", valid_categories=["Food", "Other"]) is None

def test_memory_no_match(memory_matcher):
    assert memory_matcher.classify("Unknown Transaction") is None

def test_memory_corrupt_file_loads_empty(tmp_path):
    data_file = tmp_path / "memory.json"
    data_file.write_text("{not json")
    matcher = MemoryMatcher(data_path=str(data_file))
    assert matcher.memory == {}

def test_memory_clear(memory_matcher):
    memory_matcher.learn("vet visit", "Healthcare")
    memory_matcher.clear()
    memory_matcher.load()
    assert memory_matcher.memory == {}
