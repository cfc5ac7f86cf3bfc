"""patgrep: pattern recognition and extraction.

A library of composable pattern definitions (numbers, addresses, host names,
credentials, key material, card numbers, hashes, paths, quoted strings,
encoded blobs) and a leftmost-longest scanning engine that extracts every
non-overlapping occurrence from a text or byte stream.

Entry points:
  - ``patgrep.scanner.engine.list_categories()``
  - ``patgrep.scanner.engine.scan()``
  - ``patgrep`` console script (``patgrep.run:main``)
"""

__version__ = "0.3.0"
