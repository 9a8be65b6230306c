"""
Core vault algorithms: fixed-point math, oracle adapter, guards, updates and
the ``OptionsContract`` engine.

Submodules are imported directly (``optvault.core.contract`` etc.); the
public API is re-exported from ``optvault``.
"""
