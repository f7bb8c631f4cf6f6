"""Core data types and the pure transcript algorithms.

WHY: Segmentation and active-line lookup are the parts with real
invariants. Keeping them free of I/O makes them easy to test and reuse
from every front end.

HOW: ir.py defines the dataclasses, segmenter.py groups words into lines,
locator.py maps playback time to a line index, credentials.py stores the
provider API key.

RULES:
- segmenter and locator are pure (no I/O, no global state)
- Only ValidationError escapes them, and only on contract violations
"""
