"""
Strata prefix trie (command-name index for “did you mean” suggestions).

Layout
- Nodes live in a flat arena (a list) and refer to their children by index.
  The root is always node 0. Parents exclusively own their children, so the
  structure is a strict tree and needs no back-references.
- Each node is a TrieNode record: a char → child-index mapping plus an optional
  terminal value (Unset when the node terminates no key).

Semantics
- insert(key, value): walks/creates nodes for every character of key and marks
  the last node terminal with value. Re-inserting a key overwrites its value.
- prefix_match(prefix): every terminal value beneath the node reached by prefix,
  in lexicographic key order; an unknown prefix yields an empty list and the
  empty prefix yields every value.

The trie is write-once-then-read-many: there is no deletion.
"""
from typing import NamedTuple

from .utils import Unset


class TrieNode(NamedTuple):
    children: dict
    value: object = Unset

    @property
    def terminal(self):
        return self.value is not Unset


class PrefixTrie:
    """
    Character trie over command names backed by an arena of TrieNode records.

    Example
        >>> trie = PrefixTrie()
        >>> trie.insert("server", "server")
        >>> trie.insert("serve", "serve")
        >>> trie.prefix_match("ser")
        ['serve', 'server']
    """
    __slots__ = ("_nodes", "_size")

    def __init__(self):
        self._nodes = [TrieNode({})]
        self._size = 0

    def _walk(self, prefix):
        """
        Return the arena index reached by consuming prefix, or None on a dead end.
        """
        index = 0
        for char in prefix:
            try:
                index = self._nodes[index].children[char]
            except KeyError:
                return None
        return index

    def insert(self, key, value, /):
        """
        Insert key → value, creating nodes as needed; overwrites an existing key.
        """
        if not isinstance(key, str):
            raise TypeError("insert() key must be a string")

        index = 0
        for char in key:
            children = self._nodes[index].children
            if char not in children:
                children[char] = len(self._nodes)
                self._nodes.append(TrieNode({}))
            index = children[char]

        node = self._nodes[index]
        if not node.terminal:
            self._size += 1
        self._nodes[index] = node._replace(value=value)

    def prefix_match(self, prefix, /):
        """
        Collect every terminal value under prefix (lexicographic key order).
        """
        if not isinstance(prefix, str):
            raise TypeError("prefix_match() argument must be a string")

        if (start := self._walk(prefix)) is None:
            return []

        matches = []
        stack = [start]
        while stack:
            node = self._nodes[stack.pop()]
            if node.terminal:
                matches.append(node.value)
            # Reverse order so the smallest character is visited first.
            stack.extend(node.children[char] for char in sorted(node.children, reverse=True))
        return matches

    def __contains__(self, key):
        if not isinstance(key, str):
            return False
        index = self._walk(key)
        return index is not None and self._nodes[index].terminal

    def __iter__(self):
        return iter(self.prefix_match(""))

    def __len__(self):
        return self._size

    def __repr__(self):
        return "prefix-trie(size=%d, nodes=%d)" % (self._size, len(self._nodes))


__all__ = (
    "TrieNode",
    "PrefixTrie",
)
