from odontoflow.services.local_cache import LocalCache


def test_missing_file_loads_empty(tmp_path):
    """An empty cache directory yields an empty collection."""
    cache = LocalCache(directory=str(tmp_path), namespace="odontoflow_patients")
    assert cache.load() == []


def test_save_then_load_preserves_records(tmp_path, make_record):
    cache = LocalCache(directory=str(tmp_path), namespace="odontoflow_patients")
    records = [
        make_record(name="Maria", procedures=["Urgência", "Exodontia simples"], notes="ok"),
        make_record(name="João", classification="FAB/EB"),
    ]
    cache.save(records)
    assert cache.path == tmp_path / "odontoflow_patients.json"
    assert cache.load() == records


def test_corrupt_file_loads_empty(tmp_path):
    """Unreadable cache content is ignored rather than raised."""
    cache = LocalCache(directory=str(tmp_path), namespace="odontoflow_patients")
    cache.path.write_text("{not json", encoding="utf-8")
    assert cache.load() == []


def test_wrong_shape_loads_empty(tmp_path):
    cache = LocalCache(directory=str(tmp_path), namespace="odontoflow_patients")
    cache.path.write_text('[{"name": "missing fields"}]', encoding="utf-8")
    assert cache.load() == []


def test_namespaces_are_independent(tmp_path, make_record):
    a = LocalCache(directory=str(tmp_path), namespace="a")
    b = LocalCache(directory=str(tmp_path), namespace="b")
    a.save([make_record(name="Maria")])
    assert b.load() == []


def test_clear_removes_file(tmp_path, make_record):
    cache = LocalCache(directory=str(tmp_path), namespace="odontoflow_patients")
    cache.save([make_record()])
    cache.clear()
    assert not cache.path.exists()
    cache.clear()  # already gone
    assert cache.load() == []
