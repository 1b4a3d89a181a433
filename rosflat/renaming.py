"""Renaming of flattened values after the strings found in sibling arrays."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from .introspection import FlatMessage, Parser, Variant
from .ros_type import BuiltinType, ROSType
from .substitution_rule import SubstitutionRule
from .tree import NUM_PLACEHOLDER, StringTreeLeaf, TreeNode, create_string_from_tree_leaf

_SUBSTITUTION_PLACEHOLDER = "@"


def find_pattern(pattern: Sequence[str], tail: TreeNode[str]) -> Optional[TreeNode[str]]:
    """Return the node where ``pattern`` first ends along a branch below ``tail``, or None."""

    def search(node: TreeNode[str], index: int) -> Optional[TreeNode[str]]:
        if node.value == pattern[index]:
            index += 1
        elif index > 0:
            return search(node, 0)
        else:
            index = 0

        if index == len(pattern):
            return node

        for child in node.children:
            found = search(child, index)
            if found is not None:
                return found
        return None

    if not pattern:
        return None
    return search(tail, 0)


def pattern_match_and_index_position(
    leaf: StringTreeLeaf, pattern_head: Optional[TreeNode[str]]
) -> int:
    """Return the position in ``leaf.index_array`` of the index at ``pattern_head``.

    Returns -1 when ``pattern_head`` is not on the branch of ``leaf``.
    """
    pos = len(leaf.index_array) - 1
    node = leaf.node
    while node is not None:
        if node is pattern_head:
            return pos
        if node.value == NUM_PLACEHOLDER:
            pos -= 1
        node = node.parent
    return -1


@dataclass(eq=False)
class RulesCache:
    """A rule with the nodes of one message tree where its pattern and alias end."""

    rule: SubstitutionRule
    pattern_head: Optional[TreeNode[str]] = None
    alias_head: Optional[TreeNode[str]] = None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RulesCache):
            return NotImplemented
        return (
            self.rule == other.rule
            and self.pattern_head is other.pattern_head
            and self.alias_head is other.alias_head
        )


class RenamingParser(Parser):
    """A Parser that can also give flattened values names built by substitution rules."""

    def __init__(self) -> None:
        super().__init__()
        self._registered_rules: Dict[ROSType, Dict[SubstitutionRule, None]] = {}
        self._rule_caches: Dict[str, List[RulesCache]] = {}

    def register_renaming_rules(self, type: ROSType, rules: Sequence[SubstitutionRule]) -> None:
        """Attach ``rules`` to the messages of ``type``; rules already known are ignored."""
        rule_set = self._registered_rules.setdefault(type, {})
        for rule in rules:
            if rule not in rule_set:
                rule_set[rule] = None
                self._rule_cache_dirty = True

    def _update_rule_cache(self) -> None:
        if not self._rule_cache_dirty:
            return
        self._rule_cache_dirty = False
        for type_, rule_set in self._registered_rules.items():
            for msg_identifier, info in self._registered_messages.items():
                if self.get_message_by_type(type_, info) is None:
                    continue
                caches = self._rule_caches.setdefault(msg_identifier, [])
                root = info.string_tree.root
                for rule in rule_set:
                    cache = RulesCache(
                        rule,
                        find_pattern(rule.pattern, root),
                        find_pattern(rule.alias, root),
                    )
                    if (
                        cache.pattern_head is not None
                        and cache.alias_head is not None
                        and cache not in caches
                    ):
                        caches.append(cache)

    def _substituted_name(
        self,
        rule: SubstitutionRule,
        leaf: StringTreeLeaf,
        pattern_head: TreeNode[str],
        new_name: str,
        skip_topicname: bool,
    ) -> str:
        parts: List[str] = []
        position = len(leaf.index_array) - 1

        def climb(node: Optional[TreeNode[str]], stop: Optional[TreeNode[str]]) -> Optional[TreeNode[str]]:
            nonlocal position
            while node is not stop and node is not None:
                if node.value == NUM_PLACEHOLDER:
                    parts.append(str(leaf.index_array[position]))
                    position -= 1
                else:
                    parts.append(node.value)
                node = node.parent
            return node

        node = climb(leaf.node, pattern_head)

        for piece in reversed(rule.substitution):
            if piece == _SUBSTITUTION_PLACEHOLDER:
                parts.append(new_name)
                position -= 1
            else:
                parts.append(piece)

        for _ in rule.pattern:
            if node is None:
                break
            node = node.parent

        climb(node, None)

        if skip_topicname and parts:
            parts.pop()
        return "/".join(reversed(parts))

    def apply_name_transform(
        self, msg_identifier: str, container: FlatMessage, skip_topicname: bool = False
    ) -> List[Tuple[str, Variant]]:
        """Return every value and string of ``container`` with its final name.

        Numeric values come first, in order, then the strings, whose values
        are given as STRING variants.
        """
        if self._rule_cache_dirty:
            self._update_rule_cache()

        num_values = len(container.value)
        renamed: List[Optional[Tuple[str, Variant]]] = [None] * num_values

        for cache in self._rule_caches.get(msg_identifier, []):
            pattern_head = cache.pattern_head
            alias_head = cache.alias_head
            if pattern_head is None or alias_head is None:
                continue

            alias_positions = [
                pattern_match_and_index_position(name_leaf, alias_head)
                for name_leaf, _ in container.name
            ]

            for value_index, (leaf, var) in enumerate(container.value):
                if renamed[value_index] is not None:
                    continue
                pattern_pos = pattern_match_and_index_position(leaf, pattern_head)
                if pattern_pos < 0:
                    continue

                new_name = ""
                for (alias_leaf, text), alias_pos in zip(container.name, alias_positions):
                    if alias_pos >= 0 and (
                        alias_leaf.index_array[alias_pos] == leaf.index_array[pattern_pos]
                    ):
                        new_name = text
                        break

                if new_name:
                    name = self._substituted_name(
                        cache.rule, leaf, pattern_head, new_name, skip_topicname
                    )
                    renamed[value_index] = (name, var)

        result: List[Tuple[str, Variant]] = []
        for entry, (leaf, var) in zip(renamed, container.value):
            if entry is None:
                entry = (create_string_from_tree_leaf(leaf, skip_topicname), var)
            result.append(entry)

        for leaf, text in container.name:
            result.append(
                (
                    create_string_from_tree_leaf(leaf, skip_topicname),
                    Variant(BuiltinType.STRING, text),
                )
            )
        return result