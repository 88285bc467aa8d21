import pytest

from app.services.result import DataServiceError, ErrorKind, Result


def test_success_carries_value():
    result = Result.success([1, 2])
    assert result.ok
    assert result.value == [1, 2]
    assert result.unwrap() == [1, 2]


def test_failure_carries_reason_and_kind():
    result = Result.failure("No such person", ErrorKind.NOT_FOUND)
    assert not result.ok
    assert result.value is None
    with pytest.raises(DataServiceError) as exc:
        result.unwrap()
    assert exc.value.reason == "No such person"
    assert exc.value.kind is ErrorKind.NOT_FOUND


def test_failure_defaults_to_store_error():
    assert Result.failure("boom").kind is ErrorKind.STORE
