"""Unit tests for `recordkit.records.collection.Collection`."""

import logging
from typing import Annotated, ClassVar

import pytest

from recordkit import Collection, Hidden, UnknownFieldError, UpdateMode, field, virtual
from recordkit.config import UPDATE_MODE_ENV
from recordkit.errors import InvalidUpdateModeError
from recordkit.records import FieldKind, Visibility
from tests.fixtures.records import Article, Payment, StrictPayment, TidyPayment

# pylint: disable=magic-value-comparison,too-few-public-methods,unused-variable


class TestFieldTable:
    """Field declarations are collected once per class."""

    @staticmethod
    def test_fields_in_declaration_order() -> None:
        """Stored fields keep source order, virtual keys follow."""
        table = Article.field_table()
        assert list(table) == ["id", "title", "secret", "token", "empty", "child", "tags", "route"]
        assert table["route"].kind is FieldKind.VIRTUAL
        assert table["route"].setter == "_set_route"

    @staticmethod
    def test_hidden_by_marker_or_option() -> None:
        """Both `Hidden()` metadata and `field(hidden=True)` hide a field."""
        table = Article.field_table()
        assert table["secret"].visibility is Visibility.HIDDEN
        assert table["token"].hidden
        assert not table["title"].hidden

    @staticmethod
    def test_table_is_cached() -> None:
        """The same table object is returned on every call."""
        assert Article.field_table() is Article.field_table()

    @staticmethod
    def test_subclass_inherits_and_extends() -> None:
        """Base fields come first, then the subclass's own fields."""

        class Base(Collection):
            a: int | None = None
            b: int | None = 2

        class Child(Base):
            c: int | None = 3

        assert list(Child.field_table()) == ["a", "b", "c"]
        assert dict(Child().items()) == {"a": None, "b": 2, "c": 3}
        assert list(Base.field_table()) == ["a", "b"]

    @staticmethod
    def test_classvar_and_private_names_are_not_fields() -> None:
        """ClassVar annotations and underscore names are skipped."""

        class Thing(Collection):
            LIMIT: ClassVar[int] = 5
            _cache: dict | None = None
            name: str | None = None

        assert list(Thing.field_table()) == ["name"]

    @staticmethod
    def test_virtual_key_clashing_with_field_raises() -> None:
        """A virtual key may not reuse a stored field name."""
        with pytest.raises(TypeError, match="clash"):

            class Broken(Collection):
                name: str | None = None

                @virtual("name")
                def _set_name(self, value):
                    pass

    @staticmethod
    def test_mutable_default_raises() -> None:
        """Lists and dicts must be given through a default factory."""
        with pytest.raises(ValueError, match="default_factory"):

            class Broken(Collection):
                tags: list = []

    @staticmethod
    def test_default_factory_gives_fresh_values() -> None:
        """Each instance gets its own default list."""
        one, two = Article(), Article()
        one.tags.append("x")
        assert two.tags == []

    @staticmethod
    def test_field_rejects_default_and_factory() -> None:
        """`default` and `default_factory` are mutually exclusive."""
        with pytest.raises(ValueError):
            field(default=1, default_factory=int)


class TestUpdate:
    """Bulk assignment and unknown-key policies."""

    @staticmethod
    def test_constructor_applies_config() -> None:
        """Known keys are assigned from the constructor mapping."""
        payment = Payment({"id": 3, "amount": 10})
        assert payment.id == 3
        assert payment["amount"] == 10

    @staticmethod
    def test_update_accepts_pairs_and_records() -> None:
        """Pairs and other records are valid update sources."""
        payment = Payment()
        payment.update([("id", 1)])
        payment.update(Payment({"amount": 4}))
        assert payment.items() == [("id", None), ("amount", 4)]

    @staticmethod
    def test_virtual_setter_runs_after_stored_keys() -> None:
        """The virtual setter sees stored values assigned in the same update."""
        article = Article({"route": "/articles/42", "id": 7})
        assert article.id == 42

    @staticmethod
    def test_virtual_setter_skips_none() -> None:
        """A None value never reaches a virtual setter."""
        article = Article({"id": 5, "route": None})
        assert article.id == 5

    @staticmethod
    def test_virtual_key_reads_as_default() -> None:
        """Virtual keys are write-only."""
        article = Article({"route": "/a/1"})
        assert article.get("route") is None
        assert article.get("route", "x") == "x"
        assert "route" not in article

    @staticmethod
    def test_lenient_ignores_unknown_keys() -> None:
        """LENIENT drops unknown keys without a trace."""
        payment = Payment({"id": 1, "colour": "red"})
        assert "colour" not in payment
        assert payment.unknown_fields == []
        assert payment.get("colour", "none") == "none"

    @staticmethod
    def test_strict_rejects_every_unknown_key() -> None:
        """STRICT raises once, naming every unknown key, and assigns nothing."""
        payment = StrictPayment()
        with pytest.raises(UnknownFieldError) as excinfo:
            payment.update({"id": 1, "colour": "red", "size": 2})
        assert excinfo.value.fields == ["colour", "size"]
        assert str(excinfo.value) == "Unknown fields (2): colour, size"
        assert payment.id is None

    @staticmethod
    def test_strict_get_of_unknown_key_raises() -> None:
        """Reading an undeclared key from a STRICT record raises."""
        with pytest.raises(UnknownFieldError):
            StrictPayment().get("colour")

    @staticmethod
    def test_strict_attribute_assignment_raises() -> None:
        """Attribute writes go through the same policy."""
        with pytest.raises(UnknownFieldError):
            StrictPayment().colour = "red"

    @staticmethod
    def test_unknown_field_message_is_truncated() -> None:
        """At most 25 names are listed."""
        names = [f"f{i}" for i in range(30)]
        message = str(UnknownFieldError(names))
        assert message.startswith("Unknown fields (30): f0, f1")
        assert message.endswith("f24 ...")

    @staticmethod
    def test_tidy_records_unknown_keys(caplog: pytest.LogCaptureFixture) -> None:
        """TIDY keeps the skipped names and logs a warning."""
        with caplog.at_level(logging.WARNING, logger="recordkit"):
            payment = TidyPayment({"id": 1, "colour": "red"})
        assert payment.unknown_fields == ["colour"]
        assert payment.id == 1
        assert "colour" in caplog.text

    @staticmethod
    def test_mode_argument_overrides_class_mode() -> None:
        """The constructor mode wins over UPDATE_MODE."""
        payment = StrictPayment({"colour": "red"}, mode="lenient")
        assert payment.mode is UpdateMode.LENIENT

    @staticmethod
    def test_env_sets_default_mode(monkeypatch: pytest.MonkeyPatch) -> None:
        """RECORDKIT_UPDATE_MODE applies when the class does not choose."""
        monkeypatch.setenv(UPDATE_MODE_ENV, "strict")
        with pytest.raises(UnknownFieldError):
            Payment({"colour": "red"})

    @staticmethod
    def test_bad_mode_name_raises() -> None:
        """Unknown mode names are rejected."""
        with pytest.raises(InvalidUpdateModeError):
            Payment(mode="sloppy")


class TestContainerProtocol:
    """Mapping-like access."""

    @staticmethod
    def test_attribute_and_item_access_share_storage() -> None:
        """Writes through one access path are visible through the other."""
        payment = Payment()
        payment.id = 9
        payment["amount"] = 3
        assert payment["id"] == 9
        assert payment.amount == 3

    @staticmethod
    def test_iteration_len_and_views() -> None:
        """Iteration covers stored fields only."""
        payment = Payment({"id": 1, "amount": 2})
        assert list(payment) == ["id", "amount"]
        assert len(payment) == 2
        assert payment.keys() == ["id", "amount"]
        assert payment.values() == [1, 2]

    @staticmethod
    def test_copy_is_independent() -> None:
        """A copy compares equal but does not share storage."""
        payment = Payment({"id": 1})
        clone = payment.copy()
        assert clone == payment
        clone.id = 2
        assert payment.id == 1

    @staticmethod
    def test_equality_requires_same_type() -> None:
        """Records of different types never compare equal."""
        assert Payment({"id": 1}) != TidyPayment({"id": 1})

    @staticmethod
    def test_repr_lists_fields() -> None:
        """repr shows the class and stored values."""
        assert repr(Payment({"id": 1})) == "Payment(id=1, amount=None)"

    @staticmethod
    def test_annotated_hidden_field_is_stored() -> None:
        """Hidden only affects projection, not storage."""

        class Secretive(Collection):
            pin: Annotated[str | None, Hidden()] = None

        assert Secretive({"pin": "1234"}).pin == "1234"
