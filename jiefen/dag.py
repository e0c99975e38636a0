"""
Word graph construction and best-path search for Jiefen.

For a sentence of n characters, the DAG maps every start offset k to the
ascending list of end offsets j (inclusive) such that sentence[k:j + 1] is
a dictionary word. The route is then solved backward by dynamic
programming, maximizing the summed log-probability of the words.

Both structures are per-call and never shared between calls.
"""

from math import log
from typing import Dict, List, Tuple

from jiefen.trie import FrequencyDictionary

Dag = Dict[int, List[int]]
Route = Dict[int, Tuple[int, float]]


def build_dag(sentence: str, dictionary: FrequencyDictionary) -> Dag:
    """
    Build the word graph of a sentence.

    Keys are inserted in ascending order and every end list is ascending.
    Callers (full mode in particular) rely on iterating the DAG in that
    order. A start with no dictionary word gets the self-loop ``[k]``.

    Args:
        sentence: A CJK block.
        dictionary: Frequency dictionary to match against.

    Returns:
        Mapping of start offset to reachable end offsets.
    """
    dag: Dag = {}
    for k in range(len(sentence)):
        ends = [end for end, freq in dictionary.walk(sentence, k) if freq > 0]
        dag[k] = ends or [k]
    return dag


def solve_route(sentence: str, dag: Dag, dictionary: FrequencyDictionary) -> Route:
    """
    Find the maximum-probability path through the DAG.

    route[i] = (j, score) where sentence[i:j + 1] is the best first word
    from i and score is the cumulative log-probability from i to the end.
    Filled from n down to 0. Ends are tried in ascending order and only a
    strictly greater score replaces the current best, so ties keep the
    shorter word.

    Args:
        sentence: The sentence the DAG was built from.
        dag: Output of build_dag.
        dictionary: Frequency dictionary supplying word frequencies.

    Returns:
        Mapping of offset to (best end index, cumulative log-probability).
    """
    n = len(sentence)
    route: Route = {n: (0, 0.0)}
    logtotal = log(dictionary.total or 1)
    for i in range(n - 1, -1, -1):
        best_end, best_score = -1, None
        for j in dag[i]:
            score = (log(dictionary.freq_or(sentence[i:j + 1], 1)) - logtotal
                     + route[j + 1][1])
            if best_score is None or score > best_score:
                best_end, best_score = j, score
        route[i] = (best_end, best_score)
    return route
