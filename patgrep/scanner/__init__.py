"""patgrep scanner package.

  - regex_engine.py      : re2 compilation with leftmost-longest options
  - combinators.py       : Pattern, atom / union / sequence / repeat / optional
  - registry.py          : PatternRegistry, PatternEntry
  - definitions.py       : REGISTRY, the built-in categories
  - selection.py         : select(), Selection
  - streaming_scanner.py : StreamingScanner, chunked leftmost-longest scanning
  - engine.py            : scan(), list_categories()
"""
