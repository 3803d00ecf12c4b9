import pytest

from orchestrator.errors import ModelPoolError
from orchestrator.model_pool import DEFAULT_POOL_PATH, ModelPool


def test_default_pool_file_loads_in_declared_order():
    pool = ModelPool.from_yaml()
    candidates = pool.candidates()
    assert len(candidates) == 13
    assert candidates[0] == "google/gemini-2.0-flash:free"
    assert candidates[-1] == "microsoft/phi-4:free"
    assert all(name.endswith(":free") for name in candidates)


def test_candidates_are_stable_across_calls():
    pool = ModelPool.from_yaml(DEFAULT_POOL_PATH)
    assert pool.candidates() == pool.candidates()
    assert isinstance(pool.candidates(), tuple)


def test_routing_defaults_are_read_from_file():
    defaults = ModelPool.from_yaml().routing_defaults()
    assert defaults["attempt_timeout_s"] == 8
    assert defaults["max_attempts_per_candidate"] == 1
    assert defaults["thresholds"]["min_answer_chars"] == 1


def test_disabled_entries_are_skipped(tmp_path):
    path = tmp_path / "pool.yaml"
    path.write_text(
        "models:\n"
        "  - name: a:free\n"
        "  - name: b:free\n"
        "    enabled: false\n"
        "  - c:free\n",
        encoding="utf-8",
    )
    assert ModelPool.from_yaml(path).candidates() == ("a:free", "c:free")


def test_missing_file_raises(tmp_path):
    with pytest.raises(ModelPoolError):
        ModelPool.from_yaml(tmp_path / "absent.yaml")


def test_missing_models_key_raises(tmp_path):
    path = tmp_path / "pool.yaml"
    path.write_text("routing_defaults: {}\n", encoding="utf-8")
    with pytest.raises(ModelPoolError):
        ModelPool.from_yaml(path)


def test_duplicate_candidates_rejected():
    with pytest.raises(ModelPoolError):
        ModelPool.from_candidates(["a", "b", "a"])


def test_with_candidates_keeps_routing_defaults():
    pool = ModelPool.from_candidates(["a"], routing_defaults={"attempt_timeout_s": 3})
    replaced = pool.with_candidates(["x", " y ", ""])
    assert replaced.candidates() == ("x", "y")
    assert replaced.routing_defaults() == {"attempt_timeout_s": 3}


def test_empty_file_list_gives_empty_pool(tmp_path):
    path = tmp_path / "pool.yaml"
    path.write_text("models: []\n", encoding="utf-8")
    assert len(ModelPool.from_yaml(path)) == 0
