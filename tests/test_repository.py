import pytest
from pydantic import ValidationError

from tally.shared.domain.models import CounterRecord
from tally.shared.infrastructure.persistence import CounterRepository


def test_create_get_and_list(repository):
    repository.create("b", "Beanie", 2)
    repository.create("a", "Apron")
    assert repository.get("a") == CounterRecord(product_id="a", product_name="Apron", current_count=0)
    assert [r.product_id for r in repository.list_all()] == ["a", "b"]


def test_save_overwrites(repository):
    record = repository.create("a", "Apron", 1)
    repository.save(record.model_copy(update={"current_count": 6}))
    assert repository.get("a").current_count == 6


def test_delete(repository):
    repository.create("a", "Apron")
    assert repository.delete("a")
    assert not repository.delete("a")
    assert repository.get("a") is None


def test_negative_count_rejected():
    with pytest.raises(ValidationError):
        CounterRecord(product_id="a", product_name="Apron", current_count=-1)


def test_records_survive_reopen(tmp_path):
    path = str(tmp_path / "counters.duckdb")
    repo = CounterRepository(path)
    repo.create("a", "Apron", 9)
    repo.close()

    reopened = CounterRepository(path)
    assert reopened.get("a").current_count == 9
    reopened.close()
