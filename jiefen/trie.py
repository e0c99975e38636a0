"""
Frequency dictionary for Jiefen.

A prefix trie mapping words to occurrence frequencies. Nodes with a
frequency of 0 are prefix markers: they keep partial paths walkable
(the DAG builder extends a match only while a node exists) without
counting as words.

The running ``total`` is the sum of all positive frequencies and is
maintained incrementally on every mutation. The trie itself does no
locking; the owning ``SegmentationContext`` serializes writers.
"""

from typing import Dict, Iterable, Iterator, Optional, Tuple


class TrieNode:
    """A single trie node: children keyed by character plus a frequency."""

    __slots__ = ('children', 'freq')

    def __init__(self):
        self.children: Dict[str, 'TrieNode'] = {}
        self.freq = 0


class FrequencyDictionary:
    """
    Prefix trie of words with frequencies.

    Example:
        >>> d = FrequencyDictionary([("a", 2), ("b", 2), ("ab", 5)])
        >>> d.total
        9
        >>> d.freq_or("ab", 1)
        5
    """

    def __init__(self, entries: Optional[Iterable[Tuple[str, int]]] = None):
        self.root = TrieNode()
        self.total = 0
        self._size = 0
        if entries is not None:
            for word, freq in entries:
                self.add(word, freq)

    def __repr__(self) -> str:
        return f"<FrequencyDictionary words={self._size} total={self.total}>"

    def __len__(self) -> int:
        return self._size

    def __contains__(self, word: str) -> bool:
        return self.contains(word)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def _find(self, word: str) -> Optional[TrieNode]:
        node = self.root
        for char in word:
            node = node.children.get(char)
            if node is None:
                return None
        return node

    def contains(self, word: str) -> bool:
        """True if the word is a real entry (positive frequency)."""
        if not word:
            return False
        node = self._find(word)
        return node is not None and node.freq > 0

    def freq_or(self, word: str, default: int = 0) -> int:
        """
        Frequency of a word, or ``default`` when absent or prefix-only.

        Args:
            word: Word to look up.
            default: Value returned for lookup misses.

        Returns:
            The stored positive frequency, else ``default``.
        """
        node = self._find(word) if word else None
        if node is None or node.freq <= 0:
            return default
        return node.freq

    def walk(self, sentence: str, start: int) -> Iterator[Tuple[int, int]]:
        """
        Follow the trie along ``sentence`` from ``start``.

        Yields:
            (end, freq) for each end index (inclusive) whose prefix
            sentence[start:end + 1] exists in the trie, in ascending order.
            ``freq`` is 0 for prefix-only nodes.
        """
        node = self.root
        for end in range(start, len(sentence)):
            node = node.children.get(sentence[end])
            if node is None:
                return
            yield end, node.freq

    def items(self) -> Iterator[Tuple[str, int]]:
        """Iterate over (word, freq) for all real entries, depth first."""
        stack = [('', self.root)]
        while stack:
            prefix, node = stack.pop()
            if node.freq > 0:
                yield prefix, node.freq
            for char, child in node.children.items():
                stack.append((prefix + char, child))

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add(self, word: str, freq: int) -> None:
        """
        Insert or replace a word.

        Prefix nodes are created first; the frequency (and the total) is
        updated last, so an interrupted insert leaves only prefix markers.
        """
        if not word:
            return
        freq = int(freq)
        node = self.root
        for char in word:
            child = node.children.get(char)
            if child is None:
                child = node.children[char] = TrieNode()
            node = child

        old = node.freq
        if old > 0:
            self.total -= old
            self._size -= 1
        if freq > 0:
            self.total += freq
            self._size += 1
        node.freq = max(freq, 0)

    def delete(self, word: str) -> None:
        """Drop a word to a prefix marker. Absent words are ignored."""
        node = self._find(word) if word else None
        if node is None or node.freq <= 0:
            return
        self.total -= node.freq
        self._size -= 1
        node.freq = 0

    # ------------------------------------------------------------------
    # Frequency suggestion
    # ------------------------------------------------------------------

    def _segments_probability(self, segments: Iterable[str]) -> float:
        total = float(self.total) or 1.0
        prob = 1.0
        for seg in segments:
            prob *= self.freq_or(seg, 1) / total
        return prob

    def suggest_frequency(self, word: str, segments: Iterable[str]) -> int:
        """
        Frequency that lets ``word`` win over its current split.

        With ``segments`` the word's best dictionary-only segmentation, the
        result is ``total * prod(freq(seg) / total)`` plus one, so that
        ln(freq / total) is at least the summed log-probability of the
        split. Never lower than the word's current frequency nor below 1.
        """
        estimate = int(self._segments_probability(segments) * self.total) + 1
        return max(estimate, self.freq_or(word, 1), 1)

    def tune_frequency(self, segments: Iterable[str]) -> int:
        """
        Frequency that lets the pieces of a word win over the whole word.

        Args:
            segments: The desired split, e.g. ("中", "将").

        Returns:
            A frequency no higher than the joined word's current one.
        """
        segments = list(segments)
        word = ''.join(segments)
        estimate = int(self._segments_probability(segments) * self.total)
        return min(estimate, self.freq_or(word, 0))
