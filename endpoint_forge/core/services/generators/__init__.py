"""
Generators — build handler source from a request and a bound pattern.

    fragments.py   — FragmentBuilder: imports, guards, queries, utilities
    dialects.py    — Operation → ORM call or parameterized SQL
    archetypes.py  — per-shape composers (CRUD, credential, download, …)
    serializer.py  — fragment list → source text
"""
