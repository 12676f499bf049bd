"""Asset resolution and metadata normalisation engine.

Everything in this package is a pure, synchronous transformation over
in-memory inputs. Missing or malformed data degrades to ``None`` or an
empty result instead of raising.
"""
