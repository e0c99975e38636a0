"""
Hidden Markov Model decoding for Jiefen.

One generic Viterbi decoder serves two models:

- the boundary model, with labels B/M/E/S (Begin, Middle, End, Single),
  which splits runs of characters unknown to the dictionary into words;
- the tagging model, with compound labels such as "B-n" or "S-v", which
  splits and part-of-speech tags such runs at once.

Tables are resolved to small integer state ids when the model is built.
Labels are sorted first, so comparing ids compares labels.
"""

from dataclasses import dataclass
from typing import (
    Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Tuple,
)

from jiefen.characters import (
    RE_HAN_DETAIL, RE_SKIP_DETAIL, RE_SKIP_POS_DETAIL, split_blocks,
    tag_for_symbol_run,
)
from jiefen.settings import END_BOUNDARIES, MIN_INF, MIN_PROB


# ============================================================================
# Model
# ============================================================================

@dataclass(frozen=True)
class HmmModel:
    """
    Immutable HMM parameter tables indexed by state id.

    Attributes:
        labels: State labels, sorted; a state's id is its index here.
        start: Log-probability of starting in a state. States absent from
            the mapping cannot start a sequence.
        trans: For each state, the log-probabilities of the states it can
            move to. A missing entry is an impossible transition.
        emit: For each state, log-probabilities of emitting characters.
        state_tab: Candidate states per character; characters absent from
            the table may take any state.
        end_states: States a sequence may finish in.
    """
    labels: Tuple[str, ...]
    start: Mapping[int, float]
    trans: Tuple[Mapping[int, float], ...]
    emit: Tuple[Mapping[str, float], ...]
    state_tab: Mapping[str, Tuple[int, ...]]
    end_states: FrozenSet[int]

    @classmethod
    def from_tables(
        cls,
        start: Mapping[str, float],
        trans: Mapping[str, Mapping[str, float]],
        emit: Mapping[str, Mapping[str, float]],
        state_tab: Optional[Mapping[str, Iterable[str]]] = None,
        end_states: Optional[Iterable[str]] = None,
    ) -> 'HmmModel':
        """
        Build a model from label-keyed tables.

        Args:
            start: label -> log-probability.
            trans: label -> label -> log-probability.
            emit: label -> character -> log-probability.
            state_tab: character -> candidate labels.
            end_states: Labels allowed at the end of a sequence
                (defaults to every label).

        Returns:
            The compiled model.
        """
        names = set(start) | set(trans) | set(emit)
        for targets in trans.values():
            names.update(targets)
        for candidates in (state_tab or {}).values():
            names.update(candidates)

        labels = tuple(sorted(names))
        ids = {label: i for i, label in enumerate(labels)}

        def index(table: Mapping[str, float]) -> Dict[int, float]:
            return {ids[label]: float(p) for label, p in table.items()}

        model_trans = tuple(index(trans.get(label, {})) for label in labels)
        model_emit = tuple(
            {char: float(p) for char, p in emit.get(label, {}).items()}
            for label in labels
        )
        model_tab = {
            char: tuple(sorted(ids[label] for label in candidates))
            for char, candidates in (state_tab or {}).items()
        }
        if end_states is None:
            ends = frozenset(range(len(labels)))
        else:
            ends = frozenset(ids[label] for label in end_states if label in ids)

        return cls(
            labels=labels,
            start=index(start),
            trans=model_trans,
            emit=model_emit,
            state_tab=model_tab,
            end_states=ends,
        )

    @property
    def n_states(self) -> int:
        return len(self.labels)

    def candidates(self, char: str) -> Sequence[int]:
        """States allowed for a character."""
        return self.state_tab.get(char, range(self.n_states))

    def emit_prob(self, state: int, char: str) -> float:
        return self.emit[state].get(char, MIN_PROB)


# ============================================================================
# Viterbi
# ============================================================================

def viterbi(obs: str, model: HmmModel) -> Tuple[float, List[str]]:
    """
    Most probable label sequence for an observation.

    At each position the candidate states are those reachable from the
    previous position's states, narrowed by the character's state table.
    If the narrowing leaves nothing, the reachable states are used, and if
    nothing is reachable, every state. Among equal scores the greater label
    wins, both when choosing a predecessor and when choosing the final state.

    Args:
        obs: Observed characters (non-empty).
        model: Parameter tables.

    Returns:
        (log-probability, labels), one label per character.
    """
    if not obs:
        return 0.0, []

    all_states = range(model.n_states)

    # Initialization
    V: List[Dict[int, float]] = [{}]
    mem_path: List[Dict[int, int]] = [{}]
    first = [y for y in model.candidates(obs[0]) if y in model.start]
    if first:
        for y in first:
            V[0][y] = model.start[y] + model.emit_prob(y, obs[0])
            mem_path[0][y] = -1
    else:
        for y in model.candidates(obs[0]):
            V[0][y] = model.start.get(y, MIN_PROB) + model.emit_prob(y, obs[0])
            mem_path[0][y] = -1

    # Induction
    for t in range(1, len(obs)):
        V.append({})
        mem_path.append({})
        prev_states = [y0 for y0 in mem_path[t - 1] if model.trans[y0]]
        if not prev_states:
            prev_states = list(mem_path[t - 1])
        expect_next = {y for y0 in prev_states for y in model.trans[y0]}
        obs_states = expect_next.intersection(model.candidates(obs[t]))
        if not obs_states:
            obs_states = expect_next or set(all_states)

        for y in sorted(obs_states):
            em_p = model.emit_prob(y, obs[t])
            prob, state = max(
                (V[t - 1][y0] + model.trans[y0].get(y, MIN_INF) + em_p, y0)
                for y0 in prev_states
            )
            V[t][y] = prob
            mem_path[t][y] = state

    # Termination
    finals = [y for y in mem_path[-1] if y in model.end_states]
    if not finals:
        finals = list(mem_path[-1])
    prob, state = max((V[-1][y], y) for y in finals)

    route = [0] * len(obs)
    for i in range(len(obs) - 1, -1, -1):
        route[i] = state
        state = mem_path[i][state]

    return prob, [model.labels[y] for y in route]


def iter_spans(labels: Sequence[str]) -> Iterable[Tuple[int, int, str]]:
    """
    Turn boundary labels into word spans.

    Labels are either bare boundaries ("B") or compound ("B-n"). A word
    closes on E or S. A trailing run that never closes is returned whole,
    carrying the tag of its first label.

    Yields:
        (begin, end, tag) with ``end`` exclusive; ``tag`` is '' for bare
        boundary labels.
    """
    begin, nexti = 0, 0
    for i, label in enumerate(labels):
        boundary, _, tag = label.partition('-')
        if boundary == 'B':
            begin = i
        elif boundary == 'E':
            yield begin, i + 1, tag
            nexti = i + 1
        elif boundary == 'S':
            yield i, i + 1, tag
            nexti = i + 1
    if nexti < len(labels):
        yield nexti, len(labels), labels[nexti].partition('-')[2]


# ============================================================================
# Decoders
# ============================================================================

class BoundaryDecoder:
    """Splits unknown runs into words with the B/M/E/S model."""

    def __init__(self, model: HmmModel):
        self.model = model

    def _cut_han(self, sentence: str) -> List[str]:
        _, labels = viterbi(sentence, self.model)
        return [sentence[b:e] for b, e, _ in iter_spans(labels)]

    def cut(self, sentence: str, force_split: FrozenSet[str] = frozenset()) -> List[str]:
        """
        Segment a run of characters the dictionary could not group.

        Han sub-runs are decoded. The rest is split around Latin/digit
        pieces, and each piece on either side is kept whole. Words listed
        in ``force_split`` are broken back into characters.
        """
        words = []
        for _, block, matched in split_blocks(sentence, RE_HAN_DETAIL):
            if matched:
                for word in self._cut_han(block):
                    if word in force_split:
                        words.extend(word)
                    else:
                        words.append(word)
            else:
                words.extend(piece for _, piece, _ in split_blocks(block, RE_SKIP_DETAIL))
        return words


class PosDecoder:
    """Splits and tags unknown runs with the compound-label model."""

    def __init__(self, model: HmmModel):
        self.model = model

    def _cut_han(self, sentence: str) -> List[Tuple[str, str]]:
        _, labels = viterbi(sentence, self.model)
        return [(sentence[b:e], tag) for b, e, tag in iter_spans(labels)]

    def cut(self, sentence: str) -> List[Tuple[str, str]]:
        """
        Segment and tag a run of characters the dictionary could not group.

        Returns:
            (word, tag) pairs covering the run in order.
        """
        pairs = []
        for _, block, matched in split_blocks(sentence, RE_HAN_DETAIL):
            if matched:
                pairs.extend(self._cut_han(block))
            else:
                for _, piece, _ in split_blocks(block, RE_SKIP_POS_DETAIL):
                    pairs.append((piece, tag_for_symbol_run(piece)))
        return pairs


def boundary_end_labels(labels: Iterable[str],
                        boundaries: Iterable[str] = END_BOUNDARIES) -> List[str]:
    """Labels whose boundary part closes a word (E or S by default)."""
    boundaries = set(boundaries)
    return [label for label in labels if label.partition('-')[0] in boundaries]
