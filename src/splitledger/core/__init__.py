"""
Core domain models, money primitives, contracts and the error taxonomy.

This package contains the foundational building blocks that are independent
of persistence, transport and the settlement pipeline itself.
"""
