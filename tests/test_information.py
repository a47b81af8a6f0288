'''
Tests for the hierarchical metadata container and the named quantity registry.
'''

import threading

import pytest

from sts.core.exceptions import NameNotFoundError, ParameterError, TypeMismatchError
from sts.core.information import InformationSet, join_path, split_path
from sts.core.mapper import InformationMapper, Mapper


@pytest.fixture
def info() -> InformationSet:
    info = InformationSet()
    info.add("title", "decomposition")
    model = info.subset("model")
    model.add("level", 1.0)
    model.add("count", 3)
    model.subset("details").add("seed", 42)
    return info


# ---- InformationSet ----

def test_paths():
    assert split_path("model.level") == ["model", "level"]
    assert join_path("", "level") == "level"
    assert join_path("model", "level") == "model.level"


def test_exact_search(info):
    assert info.search("model.level", float) == 1.0
    assert info.search("model.details.seed", int) == 42
    assert info.search("model.level", int) is None
    assert info.search("model.unknown") is None
    assert info.search("title.level") is None


def test_deep_search(info):
    assert info.deep_search("seed", int) == 42
    assert info.deep_search("title", str) == "decomposition"
    assert info.deep_search("level", str) is None
    assert info.deep_search("missing") is None


def test_deep_search_prefers_shallow_items():
    info = InformationSet()
    info.subset("a").add("x", 1)
    info.add("x", 2)
    assert info.deep_search("x", int) == 2


def test_subset_reuses_existing(info):
    assert info.subset("model") is info.subset("model")
    with pytest.raises(ParameterError):
        info.subset("title")


def test_invalid_names():
    info = InformationSet()
    with pytest.raises(ParameterError):
        info.add("a.b", 1)
    with pytest.raises(ParameterError):
        info.add("", 1)


def test_dictionary_and_walk(info):
    assert info.get_dictionary(int) == ["model.count", "model.details.seed"]
    assert dict(info.walk())["model.level"] == 1.0
    assert len(info) == 2


def test_remove(info):
    assert info.remove("title")
    assert not info.remove("title")
    assert "title" not in info


# ---- InformationMapper ----

class Source:
    def __init__(self, value):
        self.value = value


def test_mapper_lookup():
    mapper = InformationMapper()
    mapper.add("value", Mapper(int, lambda s: s.value))
    mapper.add("double", lambda s: 2 * s.value)
    assert mapper.contains("value")
    assert mapper.get_data(Source(3), "value", int) == 3
    assert mapper.get_data(Source(3), "double") == 6
    assert set(mapper.names()) == {"value", "double"}


def test_mapper_errors():
    mapper = InformationMapper()
    mapper.add("value", Mapper(int, lambda s: s.value))
    with pytest.raises(NameNotFoundError):
        mapper.get_data(Source(1), "unknown")
    with pytest.raises(TypeMismatchError):
        mapper.get_data(Source(1), "value", str)
    with pytest.raises(TypeError):
        mapper.add("bad", 42)


def test_mapper_remove():
    mapper = InformationMapper()
    mapper.add("value", Mapper(int, lambda s: s.value))
    assert mapper.remove("value")
    assert not mapper.contains("value")
    assert not mapper.remove("value")
    assert len(mapper) == 0


def test_name_not_found_is_a_key_error():
    mapper = InformationMapper()
    with pytest.raises(KeyError):
        mapper.get_data(Source(1), "unknown")


def test_fill_dictionary():
    mapper = InformationMapper()
    mapper.add("value", Mapper(int, lambda s: s.value))
    dictionary = {}
    mapper.fill_dictionary("prefix", dictionary)
    assert dictionary == {"prefix.value": int}


def test_concurrent_registration_and_reads():
    """Registrations made while other threads read never corrupt lookups."""
    mapper = InformationMapper()
    mapper.add("base", Mapper(int, lambda s: s.value))
    source = Source(7)
    errors = []
    barrier = threading.Barrier(8)

    def reader():
        barrier.wait()
        for _ in range(200):
            if mapper.get_data(source, "base", int) != 7:
                errors.append("wrong value")

    def writer(k):
        barrier.wait()
        for i in range(50):
            mapper.add(f"name_{k}_{i}", Mapper(int, lambda s, i=i: i))

    threads = [threading.Thread(target=reader) for _ in range(4)]
    threads += [threading.Thread(target=writer, args=(k,)) for k in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert not errors
    assert len(mapper) == 1 + 4 * 50
    assert mapper.get_data(source, "name_3_49", int) == 49
