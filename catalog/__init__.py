"""catalog/ -- Stacks, content items, and the rules that bind them.

Layer rule: catalog/ imports only stdlib, third-party libraries, and core/.
It does NOT import from api/ or auth/. Owner ids arrive as plain ints that
the API layer took from the verified Identity.
"""
