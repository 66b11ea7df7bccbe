"""Unit tests for record projection (`Collection.to_array`) and path helpers."""

import pytest

from recordkit import Collection
from recordkit.records import key_children, key_roots
from tests.fixtures.records import Article, Nested

# pylint: disable=magic-value-comparison,too-few-public-methods


@pytest.mark.parametrize(
    ("paths", "wildcard", "expected"),
    [
        (["a", "b.c", "a.d"], False, ["a", "b"]),
        (["*.x", "a"], True, ["a"]),
        (["*.x", "a"], False, ["*", "a"]),
        (None, False, []),
    ],
)
def test_key_roots(paths, wildcard, expected) -> None:
    """Roots are unique, ordered, and skip `*` in wildcard mode."""
    assert key_roots(paths, wildcard) == expected


def test_key_children() -> None:
    """Children are the remainders of paths under a key."""
    paths = ["id", "empty.lies", "empty.deep.x", "*.virtual"]
    assert key_children("empty", paths) == ["lies", "deep.x"]
    assert key_children("empty", paths, wildcard=True) == ["lies", "deep.x", "virtual"]
    assert key_children("id", paths) is None


class TestToArray:
    """Projection rules."""

    @staticmethod
    def test_default_projection_drops_nulls_and_hidden() -> None:
        """Public non-null fields only, in declaration order."""
        article = Article({"id": 1, "title": "Hi", "secret": "s", "token": "t"})
        assert article.to_array() == {"id": 1, "title": "Hi", "tags": []}

    @staticmethod
    def test_include_nulls() -> None:
        """`include_nulls` keeps None values of public fields."""
        out = Article({"id": 1}).to_array(include_nulls=True)
        assert out == {"id": 1, "title": None, "empty": None, "child": None, "tags": []}

    @staticmethod
    def test_nested_path_filters_mapping() -> None:
        """`empty.lies` keeps only that key of the nested mapping."""
        article = Article({"empty": {"lies": "x", "description": "y"}, "id": 3})
        assert article.to_array(["empty.lies"]) == {"empty": {"lies": "x"}}

    @staticmethod
    def test_filter_follows_given_order() -> None:
        """Filtered output follows the allow-list order."""
        article = Article({"id": 1, "title": "T"})
        assert list(article.to_array(["title", "id"])) == ["title", "id"]

    @staticmethod
    def test_filter_cannot_reveal_hidden() -> None:
        """A hidden field named in the allow-list stays hidden."""
        article = Article({"id": 1, "secret": "s"})
        assert article.to_array(["id", "secret"]) == {"id": 1}

    @staticmethod
    def test_extra_reveals_hidden_and_computed() -> None:
        """Extra paths reveal hidden fields and evaluate extra callables."""
        article = Article({"title": "Hello World", "secret": "s"})
        out = article.to_array(extra=["secret", "slug"])
        assert out["secret"] == "s"
        assert out["slug"] == "hello-world"
        assert "token" not in out

    @staticmethod
    def test_extra_fields_not_projected_by_default() -> None:
        """Computed extra entries are only evaluated on request."""
        assert "slug" not in Article({"title": "x"}).to_array()

    @staticmethod
    def test_nested_record_recurses() -> None:
        """Nested records are projected with their own rules."""
        article = Article({"child": Nested({"lies": "a", "description": "b"})})
        assert article.to_array(["child.lies"]) == {"child": {"lies": "a"}}
        assert article.to_array()["child"] == {"lies": "a", "description": "b"}

    @staticmethod
    def test_wildcard_extra_reaches_nested_records() -> None:
        """`*.virtual` asks every nested record for its `virtual` extra."""
        article = Article({"id": 1, "child": Nested({"lies": "a"})})
        out = article.to_array(extra=["*.virtual"])
        assert out["child"] == {"lies": "a", "virtual": "nested:a"}
        assert out["id"] == 1

    @staticmethod
    def test_lists_project_each_element() -> None:
        """List elements share the same child paths."""
        article = Article({"empty": [{"lies": 1, "other": 2}, {"lies": 3}]})
        assert article.to_array(["empty.lies"]) == {"empty": [{"lies": 1}, {"lies": 3}]}

    @staticmethod
    def test_container_emptied_by_filter_is_dropped() -> None:
        """A nested mapping with no matching keys disappears."""
        article = Article({"id": 1, "empty": {"description": "y"}})
        assert article.to_array(["id", "empty.lies"]) == {"id": 1}

    @staticmethod
    def test_self_reference_is_skipped() -> None:
        """A field holding the record itself is not projected."""
        article = Article({"id": 1})
        article.empty = article
        assert article.to_array() == {"id": 1, "tags": []}

    @staticmethod
    def test_reference_cycle_terminates() -> None:
        """Records pointing at each other stop at the back-reference."""
        parent = Article({"id": 1})
        child = Article({"id": 2})
        parent.empty = child
        child.empty = [parent, Nested({"lies": "x"})]
        assert parent.to_array() == {
            "id": 1,
            "empty": {"id": 2, "empty": [{"lies": "x"}], "tags": []},
            "tags": [],
        }
        assert child.to_array() == {
            "id": 2,
            "empty": [{"id": 1, "tags": []}, {"lies": "x"}],
            "tags": [],
        }

    @staticmethod
    def test_shared_record_projects_at_each_use() -> None:
        """Only ancestors are skipped, not siblings."""
        shared = Nested({"lies": "x"})
        article = Article({"id": 1, "empty": [shared, shared]})
        assert article.to_array() == {"id": 1, "empty": [{"lies": "x"}, {"lies": "x"}], "tags": []}

    @staticmethod
    def test_projection_does_not_mutate() -> None:
        """The record is unchanged after projection."""
        article = Article({"empty": {"lies": "x", "description": "y"}})
        article.to_array(["empty.lies"])
        assert article.empty == {"lies": "x", "description": "y"}

    @staticmethod
    def test_computed_field_in_fields_override() -> None:
        """`fields()` can map a name to a callable."""
        calls = []

        class Greeting(Collection):
            name: str | None = None

            def fields(self):
                def shout():
                    calls.append(1)
                    return (self.name or "").upper()

                return {"name": True, "shout": shout}

        out = Greeting({"name": "hi"}).to_array()
        assert out == {"name": "hi", "shout": "HI"}
        assert calls == [1]
