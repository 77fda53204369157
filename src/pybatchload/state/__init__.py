"""State/store layer.

This package is the single source of truth for per-identifier load state and
for the observers that want to hear about it.  The scheduler in
:mod:`pybatchload.loader` only ever changes state through the store.
"""
