"""Integration tests for the formstate engine.

Tests cover end-to-end scenarios on a realistic form:
- Validation through change, blur and submit
- Validators that restructure the field list (add, remove, reset)
- Deleting and resetting values and errors
- Submit after pre-filling values
"""

import pytest

from formstate.engine import FormEngine


def required(value):
    return "Required" if value is None or value == "" else None


def has_abc(value):
    return "Has abc" if "abc" in value else None


@pytest.fixture
def engine():
    """A form whose validators can restructure the field list."""
    holder = {}

    initial_fields = [
        {"name": "reset", "listener": {"onChange": [lambda v: holder["engine"].reset_fields()]}},
        {"name": "email", "listener": {"onChange": [has_abc]}},
        {"name": "password", "listener": {"onBlur": [required]}},
        {"name": "address", "listener": {"onSubmit": [required]}},
        {"name": "empty_array", "listener": {"onSubmit": []}},
        {"name": "add", "listener": {"onChange": [
            lambda v: holder["engine"].add_fields([{"name": "new_field"}], len(initial_fields)),
        ]}},
        {"name": "add-multiple", "listener": {"onChange": [
            lambda v: holder["engine"].add_fields(
                [{"name": "new_field_1"}, {"name": "new_field_2"}], len(initial_fields)
            ),
        ]}},
        {"name": "remove", "listener": {"onChange": [lambda v: holder["engine"].remove_fields("first_name")]}},
        {"name": "remove_multiple", "listener": {"onChange": [
            lambda v: holder["engine"].remove_fields(["new_field_1", "new_field_2"]),
        ]}},
        {"name": "first_name"},
    ]

    holder["engine"] = FormEngine(initial_fields)
    return holder["engine"]


def names(engine):
    return [fd.name for fd in engine.fields]


class TestValidationFlow:
    """Test validation across event types."""

    def test_change_validation(self, engine):
        """Should show the change error for a failing value."""
        engine.on_change({"name": "email", "value": "abc"})

        assert engine.errors["email"] == "Has abc"

    def test_blur_validation(self, engine):
        """Should show the blur error for an empty password."""
        engine.on_blur({"name": "password", "value": ""})

        assert engine.errors["password"] == "Required"

    def test_submit_validation(self, engine):
        """Should report change, blur and submit failures together."""
        engine.on_change({"name": "email", "value": "abc"})

        is_valid, count = engine.on_submit()

        assert is_valid is False
        assert count == 3
        assert engine.errors["email"] == "Has abc"
        assert engine.errors["password"] == "Required"
        assert engine.errors["address"] == "Required"
        assert engine.errors["empty_array"] is None
        assert "first_name" not in engine.errors

    def test_submit_then_fix(self):
        """Should pass a second submit once the value is provided."""
        engine = FormEngine([{"name": "addr", "listener": {"onSubmit": [required]}}])

        assert engine.on_submit() == (False, 1)

        engine.set_values({"addr": "x"})
        assert engine.on_submit() == (True, 0)
        assert engine.errors.get("addr") is None


class TestDeleteAndReset:
    """Test deleting and resetting values and errors."""

    def test_delete_values(self, engine):
        """Should clear selected values."""
        engine.on_change({"name": "email", "value": "test@test.com"})
        engine.on_change({"name": "password", "value": "password"})

        for key in ("email", "password"):
            engine.delete_value(key)

        assert engine.values.get("email") is None
        assert engine.values.get("password") is None

    def test_delete_errors(self, engine):
        """Should clear selected errors."""
        engine.on_change({"name": "email", "value": "abc"})
        engine.on_blur({"name": "password", "value": ""})

        for key in ("email", "password"):
            engine.delete_error(key)

        assert engine.errors.get("email") is None
        assert engine.errors.get("password") is None

    def test_reset_form_after_submit(self, engine):
        """Should clear values and every error."""
        engine.on_change({"name": "email", "value": "abc"})
        engine.on_blur({"name": "password", "value": ""})
        engine.on_submit()

        engine.reset_form()

        assert engine.values == {}
        assert engine.errors == {}


class TestReentrantMutators:
    """Test validators that restructure the field list."""

    def test_add_field(self, engine):
        """Should append a new field from inside a change validator."""
        engine.on_change({"name": "add", "value": "a"})

        assert names(engine)[-1] == "new_field"
        assert engine.get_field("new_field") is not None
        assert engine.values["add"] == "a"

    def test_add_multiple_fields(self, engine):
        """Should append several fields in order."""
        engine.on_change({"name": "add-multiple", "value": "a"})

        assert names(engine)[-2:] == ["new_field_1", "new_field_2"]

    def test_add_twice_keeps_names_unique(self, engine):
        """Should not duplicate a field added on every keystroke."""
        engine.on_change({"name": "add", "value": "a"})
        engine.on_change({"name": "add", "value": "ab"})

        assert names(engine).count("new_field") == 1

    def test_remove_field(self, engine):
        """Should remove a field from inside a change validator."""
        assert "first_name" in names(engine)

        engine.on_change({"name": "remove", "value": "a"})

        assert "first_name" not in names(engine)
        assert engine.get_field("first_name") is None

    def test_remove_multiple_fields(self, engine):
        """Should remove several fields at once."""
        engine.on_change({"name": "add-multiple", "value": "a"})
        engine.on_change({"name": "remove_multiple", "value": "a"})

        assert "new_field_1" not in names(engine)
        assert "new_field_2" not in names(engine)

    def test_reset_fields(self, engine):
        """Should restore the initial configuration from a change validator."""
        initial = names(engine)
        engine.on_change({"name": "add", "value": "a"})
        engine.on_change({"name": "remove", "value": "a"})

        engine.on_change({"name": "reset", "value": "x"})

        assert names(engine) == initial

    def test_reset_on_change_two_field_form(self):
        """Should discard earlier mutations in a minimal two-field form."""
        holder = {}
        engine = FormEngine([
            {"name": "reset", "listener": {"onChange": [lambda v: holder["engine"].reset_fields()]}},
            {"name": "a"},
        ])
        holder["engine"] = engine
        engine.add_fields([{"name": "b"}], 2)
        engine.remove_fields("a")

        engine.on_change({"name": "reset", "value": "x"})

        assert names(engine) == ["reset", "a"]

    def test_submit_with_field_added_mid_submit(self):
        """Should finish the submit over the fields present when it started."""
        holder = {}

        def add_extra(value):
            holder["engine"].add_fields([{"name": "extra", "listener": {"onSubmit": [required]}}], 0)
            return None

        engine = FormEngine([{"name": "a", "listener": {"onSubmit": [add_extra]}}])
        holder["engine"] = engine

        assert engine.on_submit() == (True, 0)
        assert names(engine) == ["extra", "a"]
        assert "extra" not in engine.errors

    def test_submit_skips_field_removed_mid_submit(self):
        """Should not validate or record a field removed earlier in the same submit."""
        holder = {}

        def drop_b(value):
            holder["engine"].remove_fields("b")
            return None

        engine = FormEngine([
            {"name": "a", "listener": {"onSubmit": [drop_b]}},
            {"name": "b", "listener": {"onSubmit": [lambda v: "Required"]}},
        ])
        holder["engine"] = engine

        assert engine.on_submit() == (True, 0)
        assert names(engine) == ["a"]
        assert engine.errors == {"a": None}
