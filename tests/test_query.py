"""
Tests for sysparm_query encoding.
"""
import pytest

from snow_incident.servicenow_api.query import LIKE, Clause, TableQueryFilter, encode_query


def test_equality_clause_is_escaped():
    """= is rendered as %3D"""
    assert str(TableQueryFilter.where("user_name", "abel.tuter")) == "user_name%3Dabel.tuter"


def test_email_at_sign_is_escaped():
    """@ in values is rendered as %40"""
    assert str(TableQueryFilter.where("email", "abel.tuter@example.com")) == "email%3Dabel.tuter%40example.com"


def test_clauses_joined_with_caret():
    """AND clauses are joined with ^"""
    query_filter = TableQueryFilter.where("first_name", "Abel").and_where("last_name", "Tuter")

    assert str(query_filter) == "first_name%3DAbel^last_name%3DTuter"


def test_like_operator_is_literal():
    """LIKE stays a literal operator token"""
    query_filter = TableQueryFilter.where("short_description", "email server", operator=LIKE)

    assert str(query_filter) == "short_descriptionLIKEemail%20server"


def test_encode_query_without_limit():
    assert encode_query(TableQueryFilter.where("number", "INC0010165")) == "sysparm_query=number%3DINC0010165"


def test_encode_query_with_limit():
    query = encode_query(TableQueryFilter.where("number", "INC0010165"), limit=1)

    assert query == "sysparm_query=number%3DINC0010165&sysparm_limit=1"


@pytest.mark.parametrize("value", [
    "abel.tuter@example.com",
    "a=b",
    "two words",
    "Tuter, Abel",
    "50% & more^",
])
def test_reserved_characters_never_unescaped(value):
    """=, @, space, & and ^ in values never leak into the query"""
    query = encode_query(TableQueryFilter.where("email", value), limit=5)
    filter_part = query[len("sysparm_query="):].split("&", 1)[0]

    for char in ("=", "@", " ", "&", "^"):
        assert char not in filter_part


def test_values_with_separators_stay_distinct():
    """Different values never render to the same filter"""
    first = TableQueryFilter.where("short_description", "a^b")
    second = TableQueryFilter.where("short_description", "a").and_where("b", "")

    assert str(first) != str(second)


@pytest.mark.parametrize("limit", [0, -1, "1", True])
def test_invalid_limit(limit):
    with pytest.raises(ValueError):
        encode_query(TableQueryFilter.where("number", "INC0010165"), limit=limit)


def test_empty_filter_rejected():
    with pytest.raises(ValueError):
        encode_query(TableQueryFilter(()))


def test_unknown_operator_rejected():
    with pytest.raises(ValueError):
        Clause("impact", ">", "1").render()
