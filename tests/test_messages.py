from __future__ import annotations

from rulekit.validation import DefaultMessageFormatter, FailureSet, MessageBag, MessageFormatter, Validator


def test_message_bag_preserves_order_and_appends():
    bag = MessageBag().add("age", "a").add("age", "b").add("size", "c")
    bag.merge({"age": ["d"]})
    assert bag.get("age") == ["a", "b", "d"]
    assert bag.keys() == ["age", "size"]
    assert bag.count() == len(bag) == 4
    assert bag.all() == ["a", "b", "d", "c"]
    assert bag.first() == "a"
    assert bag.first("size") == "c"
    assert "size" in bag and not bag.has("missing")


def test_message_bag_merge_with_prefix():
    inner = MessageBag({"age": ["too low"]})
    outer = MessageBag().merge(inner, prefix="nested.0")
    assert outer.messages() == {"nested.0.age": ["too low"]}
    assert MessageBag().is_empty()


def test_failure_set_merge_with_prefix():
    inner = FailureSet().record("age", "min", ["5"]).record("age", "numeric")
    outer = FailureSet().merge(inner, prefix="nested")
    assert outer.paths() == ["nested.age"]
    assert outer.rules_for("nested.age") == {"min": ("5",), "numeric": ()}
    assert outer.to_dict() == {"nested.age": {"min": ["5"], "numeric": []}}
    assert bool(outer) and not FailureSet()


def test_formatter_substitutes_placeholders():
    formatter = DefaultMessageFormatter()
    assert isinstance(formatter, MessageFormatter)
    assert formatter.render("min.numeric", "age", ["5"]) == "The age must be at least 5."
    assert formatter.render("between.string", "user_name", ["2", "8"]) == \
        "The user name must be between 2 and 8 characters."
    assert formatter.render("same", "password", ["password_repeat"]) == "The password and password repeat must match."


def test_formatter_template_and_fallback():
    formatter = DefaultMessageFormatter(fallback="Bad :attribute.")
    assert formatter.render("custom_rule", "age", []) == "Bad age."
    assert formatter.render("min.numeric", "age", ["5"], template=":attribute < :min") == "age < 5"
    assert formatter.render("in", "color", ["red", "blue"], template="Pick one of :values") == "Pick one of red, blue"


def test_size_message_keys_follow_value_kind():
    validator = Validator({"age": "numeric|min:5", "name": "string|min:3", "tags": "array|min:2"})
    result = validator.evaluate({"age": "1", "name": "ab", "tags": ["x"]})
    assert result.messages.get("age") == ["The age must be at least 5."]
    assert result.messages.get("name") == ["The name must be at least 3 characters."]
    assert result.messages.get("tags") == ["The tags must have at least 2 items."]


def test_override_lookup_order():
    validator = Validator(
        {"age": "required|min:5", "size": "required"},
        messages={"age.required": "Age please.", "required": "Needed.", "min.numeric": "Too small."},
        attributes={"size": "shoe size"},
    )
    result = validator.evaluate({"age": 1})
    assert result.messages.get("age") == ["Too small."]
    assert result.messages.get("size") == ["Needed."]
    assert validator.evaluate({}).messages.get("age") == ["Age please."]


def test_attribute_display_names():
    validator = Validator({"size": "required"}, attributes={"size": "shoe size"})
    assert validator.evaluate({}).messages.get("size") == ["The shoe size field is required."]


def test_custom_formatter_receives_key_and_locale():
    calls = []

    class Recorder:
        def render(self, key, attribute, params, *, template=None, locale=None):
            calls.append((key, attribute, tuple(params), template, locale))
            return key

    validator = Validator({"age": "numeric|between:1,3"}, formatter=Recorder())
    assert validator.evaluate({"age": 9}).messages.get("age") == ["between.numeric"]
    assert calls == [("between.numeric", "age", ("1", "3"), None, "en")]
