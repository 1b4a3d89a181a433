from rosflat.substitution_rule import SubstitutionRule, str_split


def test_str_split_on_both_delimiters():
    assert str_split("position.#/x", "./") == ["position", "#", "x"]


def test_str_split_keeps_empty_parts():
    assert str_split("a..b", ".") == ["a", "", "b"]
    assert str_split("", "./") == [""]


def test_str_split_join_round_trip():
    text = "joint_states/name/#/position"
    assert "/".join(str_split(text, "/")) == text


def test_rule_splits_its_parts():
    rule = SubstitutionRule("position.#", "name.#", "@.position")
    assert rule.pattern == ("position", "#")
    assert rule.alias == ("name", "#")
    assert rule.substitution == ("@", "position")
    assert rule.full_pattern == "position.#"


def test_equal_rules_hash_equal():
    a = SubstitutionRule("position.#", "name.#", "@.position")
    b = SubstitutionRule("position.#", "name.#", "@.position")
    assert a == b
    assert hash(a) == hash(b)
    assert len({a, b}) == 1


def test_different_rules_are_unequal():
    a = SubstitutionRule("position.#", "name.#", "@.position")
    b = SubstitutionRule("velocity.#", "name.#", "@.velocity")
    assert not (a == b)
    assert len({a, b}) == 2