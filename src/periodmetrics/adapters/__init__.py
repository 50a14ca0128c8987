"""
Adapters between metrics tables and external data shapes.

- frames: pandas wide / long views, and long frames into update values
- records: JSON records into update values, change lists into JSON

Adapters only call the public table API; they hold no state.
"""

from .frames import to_frame, to_long_frame, values_from_frame
from .records import decode_values, encode_changes

__all__ = ["to_frame", "to_long_frame", "values_from_frame", "decode_values", "encode_changes"]
