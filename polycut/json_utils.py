"""
JSON formatting utilities.

Triangle index lists and vertex arrays get long fast, and json.dumps()
with indent puts every single number on its own line. These helpers keep
the document indented but write number arrays on one line.
"""

import json
import re
from typing import Any, List, Optional

# A multi-line array that holds nothing but numbers (Infinity/NaN included,
# json.dumps writes those for non-finite floats)
_NUMBER_ARRAY = r'\[\s*\n\s*([\d\.\-\+eE,\sInfinityNa]+?)\n\s*\]'


def _collapse(body: str) -> str:
    return re.sub(r'\s+', ' ', body.strip())


def dumps_compact_arrays(
    data: Any,
    indent: int = 2,
    array_fields: Optional[List[str]] = None
) -> str:
    """
    Format JSON with compact number arrays on single lines.

    Args:
        data: Data structure to serialize
        indent: Number of spaces for indentation (default: 2)
        array_fields: Field names whose arrays should be compacted.
                     If None, compacts all arrays of numbers.

    Returns:
        JSON string with compact arrays and indented structure

    Example:
        >>> print(dumps_compact_arrays({"triangles": [2, 0, 1], "deviation": 0.0}))
        {
          "triangles": [2, 0, 1],
          "deviation": 0.0
        }
    """
    json_str = json.dumps(data, indent=indent, ensure_ascii=False)

    if array_fields is None:
        return re.sub(_NUMBER_ARRAY, lambda m: '[' + _collapse(m.group(1)) + ']', json_str)

    for name in array_fields:
        pattern = rf'"{re.escape(name)}":\s*' + _NUMBER_ARRAY
        json_str = re.sub(
            pattern,
            lambda m, name=name: f'"{name}": [' + _collapse(m.group(1)) + ']',
            json_str
        )
    return json_str
