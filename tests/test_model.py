"""Tests for Model."""

from kvobind import KVO, Model, is_bound


class Person(Model):
    first_name = "Bill"
    last_name = "Bob"
    age = 25


class View(Model):
    first_name = None

    def __init__(self, *args, **kwargs):
        self.rendered = []
        super().__init__(*args, **kwargs)

    def first_name_changed(self, first_name=None):
        self.rendered.append(self.get("first_name"))


class TestModel:
    def test_creation_from_schema(self):
        m = Model({"x": 10, "y": "hello"})
        assert m.get("x") == 10
        assert m.get("y") == "hello"
        assert isinstance(m, KVO)

    def test_initial_overrides(self):
        m = Model({"x": 10, "y": "hello"}, initial={"x": 99})
        assert m.get("x") == 99
        assert m.get("y") == "hello"

    def test_class_defaults_are_declared(self):
        p = Person(initial={"age": 30})
        assert p.keys() == ["first_name", "last_name", "age"]
        assert p.get("age") == 30
        assert Person.age == 25

    def test_keys_skip_methods(self):
        assert View().keys() == ["first_name"]

    def test_update(self):
        m = Model({"x": 0, "y": 0})
        m.update({"x": 1, "y": 2})
        assert (m.get("x"), m.get("y")) == (1, 2)

    def test_declare_adds_new_keys_only(self):
        m = Model({"x": 1})
        m.set("x", 42)
        added = m.declare({"x": 1, "z": 99})
        assert added == ["z"]
        assert m.get("x") == 42
        assert m.get("z") == 99

    def test_declare_keeps_bindings(self):
        source, view = Model({"x": 1}), Model({"x": 2})
        view.bind_to("x", source)
        view.declare({"x": 0})
        assert is_bound(view, "x")
        assert view.get("x") == 1

    def test_repr_shows_bound_values(self):
        source, view = Model({"x": 1}), Model({"x": 2})
        view.bind_to("x", source)
        assert repr(view) == "Model(x=1)"


class TestModelViewController:
    def test_view_proxied_through_controller(self):
        model = Person()
        controller = Model({"first_name": None, "show_button": True})
        view = View({"show_button": None})

        controller.bind_to("first_name", model)
        view.bind_to("first_name", controller)  # proxied from the model
        view.bind_to("show_button", controller)
        assert view.rendered == ["Bill"]
        assert view.get("show_button") is True

        view.set("first_name", "Ann")
        assert model.get("first_name") == "Ann"
        assert view.rendered == ["Bill", "Ann"]

        controller.set("show_button", False)
        assert view.get("show_button") is False
