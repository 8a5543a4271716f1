"""auth/ -- Authentication package for the blog API.

Token codec and password hashing (tokens.py), signup/login/token resolution
(service.py), the user repository (store.py) and the FastAPI access guard
(dependencies.py).

Layer rule: auth/ imports only stdlib, third-party libraries and core/.
It does NOT import from api/ or articles/.
api/ and articles/ import from auth/, not the other way around.
"""
