"""core/ -- Kernel: configuration and the shared error taxonomy.

Layer rule: core/ imports only stdlib + third-party libraries. auth/,
articles/ and api/ import from core/, never the other way around.
"""
