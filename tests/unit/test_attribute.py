"""Tests for the Attribute collection."""

from __future__ import annotations

import copy

import pytest

from rendergate import Attribute, Environment, Markup, TemplateRuntimeError


class TestSerialization:
    def test_attributes_in_insertion_order(self) -> None:
        attrs = Attribute({"class": ["kittens"], "data-toggle": "modal", "data-lang": "es"})
        assert str(attrs) == 'class="kittens" data-toggle="modal" data-lang="es"'

    def test_empty(self) -> None:
        assert str(Attribute()) == ""

    def test_boolean_attributes(self) -> None:
        attrs = Attribute({"disabled": True, "hidden": False, "type": "checkbox"})
        assert str(attrs) == 'disabled type="checkbox"'

    def test_values_are_escaped(self) -> None:
        attrs = Attribute({"title": 'Say "hi" & <bye>'})
        assert str(attrs) == 'title="Say &quot;hi&quot; &amp; &lt;bye&gt;"'

    def test_list_values_are_space_joined(self) -> None:
        assert str(Attribute({"rel": ["noopener", "nofollow"]})) == 'rel="noopener nofollow"'

    def test_empty_class_is_omitted(self) -> None:
        assert str(Attribute({"class": [], "id": "x"})) == 'id="x"'

    def test_is_safe_markup(self) -> None:
        html = Attribute({"id": "x"}).__html__()
        assert isinstance(html, Markup)
        assert html == 'id="x"'

    def test_serialization_reflects_later_mutations(self) -> None:
        attrs = Attribute({"id": "x"})
        first = str(attrs)
        attrs.set_attribute("id", "y")
        assert first == 'id="x"'
        assert str(attrs) == 'id="y"'


class TestClasses:
    def test_class_string_is_tokenized(self) -> None:
        assert Attribute({"class": "a  b a"}).get_class() == ["a", "b"]

    def test_add_class_deduplicates(self) -> None:
        attrs = Attribute({"class": ["a"]}).add_class("b", ["a", "c"])
        assert attrs.get_class() == ["a", "b", "c"]

    def test_remove_class(self) -> None:
        attrs = Attribute({"class": ["a", "b", "c"]}).remove_class("b", "missing")
        assert attrs.get_class() == ["a", "c"]

    def test_remove_class_without_class_is_noop(self) -> None:
        assert str(Attribute({"id": "x"}).remove_class("a")) == 'id="x"'

    def test_has_class(self) -> None:
        attrs = Attribute({"class": "a b"})
        assert attrs.has_class("a")
        assert not attrs.hasClass("c")

    def test_twig_aliases(self) -> None:
        attrs = Attribute().addClass("meow").setAttribute("id", "cat")
        attrs.removeClass("meow").removeAttribute("id")
        assert len(attrs) == 1
        assert attrs.get_class() == []


class TestMapping:
    def test_none_removes(self) -> None:
        attrs = Attribute({"id": "x", "title": "t"})
        attrs["id"] = None
        assert "id" not in attrs
        assert list(attrs) == ["title"]

    def test_remove_attribute_accepts_lists(self) -> None:
        attrs = Attribute({"a": "1", "b": "2", "c": "3"}).remove_attribute(["a", "b"])
        assert attrs.to_dict() == {"c": "3"}

    def test_non_string_values_become_text(self) -> None:
        assert Attribute({"tabindex": 0})["tabindex"] == "0"

    def test_merge(self) -> None:
        attrs = Attribute({"class": ["a"], "id": "x"})
        attrs.merge({"class": "b", "id": "y", "role": "nav"})
        assert str(attrs) == 'class="a b" id="y" role="nav"'

    def test_copy_is_independent(self) -> None:
        attrs = Attribute({"class": ["a"]})
        clone = copy.copy(attrs)
        clone.add_class("b")
        assert attrs.get_class() == ["a"]
        assert clone == Attribute({"class": ["a", "b"]})

    def test_repr(self) -> None:
        assert repr(Attribute({"id": "x"})) == "Attribute({'id': 'x'})"


class TestNames:
    @pytest.mark.parametrize(
        "name",
        [
            'x"><script>alert(1)</script><b y',
            "onclick=alert(1) x",
            "a b",
            "a/b",
            "it's",
            "a\tb",
            "",
            7,
        ],
    )
    def test_invalid_names_are_rejected(self, name: object) -> None:
        with pytest.raises(ValueError, match="Invalid HTML attribute name"):
            Attribute({name: "v"})
        with pytest.raises(ValueError, match="Invalid HTML attribute name"):
            Attribute()[name] = "v"

    def test_name_is_escaped(self) -> None:
        assert str(Attribute({"data-a&b<c": "v", "x<y": True})) == 'data-a&amp;b&lt;c="v" x&lt;y'

    def test_removing_never_validates(self) -> None:
        attrs = Attribute({"id": "x"})
        attrs.set_attribute("bad name", None).remove_attribute("bad")
        assert str(attrs) == 'id="x"'


class TestEventHandlers:
    def test_plain_event_handler_warns(self) -> None:
        with pytest.warns(UserWarning, match="event handler attribute 'onclick'"):
            Attribute({"onclick": "go()"})

    def test_markup_event_handler_does_not_warn(self, recwarn: pytest.WarningsRecorder) -> None:
        Attribute({"onclick": Markup("go()")})
        assert not [w for w in recwarn if issubclass(w.category, UserWarning)]


class TestInTemplates:
    def test_create_attribute(self, env: Environment) -> None:
        html = env.from_string("<div {{ create_attribute().addClass('meow') }}></div>").render()
        assert html == '<div class="meow"></div>'

    def test_create_attribute_from_mapping(self, env: Environment) -> None:
        html = env.from_string('<a {{ create_attribute({"href": url}) }}>x</a>').render(
            url="/a?b=1&c=2"
        )
        assert html == '<a href="/a?b=1&amp;c=2">x</a>'

    def test_without_on_attribute(self, env: Environment) -> None:
        attrs = Attribute({"id": "x", "class": ["a"], "title": "t"})
        html = env.from_string('<p {{ attributes|without("id", "title") }}></p>').render(
            attributes=attrs
        )
        assert html == '<p class="a"></p>'
        assert "id" in attrs

    def test_hostile_key_cannot_break_out_of_tag(self, env: Environment) -> None:
        t = env.from_string("<div {{ create_attribute(a) }}></div>")
        with pytest.raises(TemplateRuntimeError) as exc_info:
            t.render(a={'x"><script>alert(1)</script><b y': "v"})
        assert isinstance(exc_info.value.__cause__, ValueError)
