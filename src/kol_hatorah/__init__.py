"""Kol HaTorah: Hebrew question answering over Tanakh, Mishnah and Bavli.

Subpackages:
 - planner: query intent planning, scope resolution and plan execution
 - quotes: biblical quotation detection and linking
 - storage: lexical (SQLite FTS5) segment store
 - qa: retrieval-only general question answering
 - api: Flask HTTP service
"""

__version__ = "0.1.0"
