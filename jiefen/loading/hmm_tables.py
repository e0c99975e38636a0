"""
HMM parameter table loading for Jiefen.

A model directory holds JSON files of log-probabilities:

    prob_start.json       {label: logp}
    prob_trans.json       {label: {label: logp}}
    prob_emit.json        {label: {char: logp}}
    char_state_tab.json   {char: [label, ...]}      (optional)

Tables are read once and compiled into an immutable ``HmmModel``.
"""

import json
import logging
import time
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Union

from jiefen.errors import ModelLoadError
from jiefen.hmm import HmmModel, boundary_end_labels
from jiefen.settings import END_BOUNDARIES

logger = logging.getLogger(__name__)

START_FILE = "prob_start.json"
TRANS_FILE = "prob_trans.json"
EMIT_FILE = "prob_emit.json"
STATE_TAB_FILE = "char_state_tab.json"


def _read_table(path: Path, required: bool = True) -> Optional[Dict[str, Any]]:
    if not path.exists():
        if required:
            raise ModelLoadError(f"HMM table not found: {path}")
        return None
    try:
        with open(path, 'r', encoding='utf-8') as f:
            table = json.load(f)
    except (OSError, ValueError) as e:
        raise ModelLoadError(f"'{path}' load failure, reason: {e}") from e
    if not isinstance(table, dict):
        raise ModelLoadError(f"'{path}' is not a JSON object")
    return table


def load_model_dir(
    model_dir: Union[str, Path],
    end_boundaries: Optional[Iterable[str]] = None,
) -> HmmModel:
    """
    Load an HMM from a directory of JSON tables.

    Sequences may only finish in states whose boundary part is one of
    ``end_boundaries`` (E and S by default).

    Args:
        model_dir: Directory holding the table files.
        end_boundaries: Boundary letters allowed at the end of a sequence.

    Returns:
        The compiled model.

    Raises:
        ModelLoadError: A required table is missing or malformed.
    """
    t0 = time.perf_counter()
    model_dir = Path(model_dir)

    start = _read_table(model_dir / START_FILE)
    trans = _read_table(model_dir / TRANS_FILE)
    emit = _read_table(model_dir / EMIT_FILE)
    state_tab = _read_table(model_dir / STATE_TAB_FILE, required=False)

    try:
        labels = set(start) | set(trans) | set(emit)
        model = HmmModel.from_tables(
            start=start,
            trans=trans,
            emit=emit,
            state_tab=state_tab,
            end_states=boundary_end_labels(labels, end_boundaries or END_BOUNDARIES),
        )
    except (TypeError, ValueError, AttributeError, KeyError) as e:
        raise ModelLoadError(f"'{model_dir}' holds malformed tables: {e}") from e

    elapsed = (time.perf_counter() - t0) * 1000
    logger.info(f"Loaded HMM model {model_dir}: {model.n_states} states, {elapsed:.1f}ms")
    return model
