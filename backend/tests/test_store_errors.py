import pytest

from app.core.exceptions import InvalidRequestError, NotFoundError, StoreError
from app.services.store_errors import store_operation


def test_unclassified_failures_become_store_errors():
    with pytest.raises(StoreError) as excinfo:
        with store_operation("loading lessons"):
            raise RuntimeError("connection reset")

    assert excinfo.value.message == "Error while loading lessons"
    assert excinfo.value.status_code == 500
    assert isinstance(excinfo.value.__cause__, RuntimeError)


@pytest.mark.parametrize("error", [NotFoundError("Lesson not found"), InvalidRequestError("Duplicate label")])
def test_classified_failures_pass_through(error):
    with pytest.raises(type(error)) as excinfo:
        with store_operation("updating lesson"):
            raise error

    assert excinfo.value is error


def test_store_errors_are_not_wrapped_twice():
    original = StoreError("Store operation 'create' failed on table 'lessons'")

    with pytest.raises(StoreError) as excinfo:
        with store_operation("creating lesson"):
            raise original

    assert excinfo.value is original
