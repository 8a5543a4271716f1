"""articles/ -- Article domain: dataclass, repository and ownership rules.

Layer rule: articles/ may import from core/ and auth/ (for the User type).
It does NOT import from api/.
"""
