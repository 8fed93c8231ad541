"""Deep merge for YAML documents.

The rule is deliberately asymmetric. When both sides are mappings, keys only
in the incoming side are inserted and keys on both sides are merged
recursively; nothing is ever deleted. In every other case (scalars,
sequences, type mismatch) the incoming value replaces the existing one
wholesale, so lists are never concatenated.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping

from src.app.core.models.project import YamlDocument


def merge_documents(existing: YamlDocument, incoming: YamlDocument) -> YamlDocument:
    """Return ``incoming`` merged into ``existing``. Neither input is mutated.

    Example:
        >>> merge_documents({"x": {"y": 1}}, {"x": {"z": 2}, "name": "n"})
        {'x': {'y': 1, 'z': 2}, 'name': 'n'}
        >>> merge_documents({"x": [1, 2]}, {"x": [3]})
        {'x': [3]}
    """
    return _merge(copy.deepcopy(existing), copy.deepcopy(incoming))


def _merge(existing: YamlDocument, incoming: YamlDocument) -> YamlDocument:
    if isinstance(existing, Mapping) and isinstance(incoming, Mapping):
        merged = dict(existing)
        for key, value in incoming.items():
            if key not in merged:
                merged[key] = value
            else:
                merged[key] = _merge(merged[key], value)
        return merged

    return incoming
