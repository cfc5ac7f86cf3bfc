"""patgrep models package.

  - match.py : Match, the value yielded by the extraction engine.
"""
