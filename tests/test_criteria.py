"""Tests for the built-in criteria."""

import dataclasses

import pytest
from sqlalchemy import select

from repokit.criteria import Criterion, FunctionCriterion, OrderBy, Where, WhereIn, criterion
from repokit.domain import UnknownFieldError

from library_app import Author, Book


def _sql(stmt) -> str:
    return str(stmt.compile(compile_kwargs={"literal_binds": True}))


def test_order_by_defaults_to_ascending():
    stmt = OrderBy("name").apply(select(Author))
    assert "ORDER BY authors.name ASC" in _sql(stmt)


def test_order_by_direction_is_case_insensitive():
    order = OrderBy("id", "DESC")
    assert order.direction == "desc"
    assert "ORDER BY authors.id DESC" in _sql(order.apply(select(Author)))


def test_order_by_rejects_unknown_direction():
    with pytest.raises(ValueError):
        OrderBy("id", "sideways")


def test_unknown_field_fails_only_when_applied():
    order = OrderBy("missing")  # construction does not validate the field

    with pytest.raises(UnknownFieldError) as exc_info:
        order.apply(select(Author))

    assert exc_info.value.field == "missing"
    assert isinstance(exc_info.value, AttributeError)


def test_order_by_composes_with_previous_ordering():
    stmt = select(Author)
    stmt = OrderBy("name").apply(stmt)
    stmt = OrderBy("id", "desc").apply(stmt)
    assert "ORDER BY authors.name ASC, authors.id DESC" in _sql(stmt)


def test_criteria_are_immutable():
    order = OrderBy("id")
    with pytest.raises(dataclasses.FrozenInstanceError):
        order.field = "name"


@pytest.mark.parametrize(
    "operator, fragment",
    [
        ("==", "authors.rating = 4"),
        ("!=", "authors.rating != 4"),
        ("<", "authors.rating < 4"),
        ("<=", "authors.rating <= 4"),
        (">", "authors.rating > 4"),
        (">=", "authors.rating >= 4"),
    ],
)
def test_where_operators(operator, fragment):
    stmt = Where("rating", 4, operator).apply(select(Author))
    assert fragment in _sql(stmt)


def test_where_none_renders_is_null():
    stmt = Where("genre", None).apply(select(Book))
    assert "books.genre IS NULL" in _sql(stmt)


def test_where_like():
    stmt = Where("name", "Ur%", "like").apply(select(Author))
    assert "authors.name LIKE 'Ur%'" in _sql(stmt)


def test_where_rejects_unknown_operator():
    with pytest.raises(ValueError):
        Where("rating", 1, "~=")


def test_where_in_copies_values():
    values = [1, 2]
    where_in = WhereIn("id", values)
    values.append(3)

    assert where_in.values == (1, 2)
    assert "authors.id IN (1, 2)" in _sql(where_in.apply(select(Author)))


def test_function_criterion_wraps_plain_function():
    @criterion
    def top_rated(query):
        return query.where(Author.rating >= 5)

    assert isinstance(top_rated, FunctionCriterion)
    assert isinstance(top_rated, Criterion)
    assert "authors.rating >= 5" in _sql(top_rated.apply(select(Author)))
    assert "top_rated" in repr(top_rated)


def test_builtin_criteria_satisfy_protocol():
    assert isinstance(OrderBy("id"), Criterion)
    assert isinstance(Where("id", 1), Criterion)
    assert isinstance(WhereIn("id", [1]), Criterion)
