"""Gophermon battle engine.

Resolves one turn-based encounter between a player's gopher (backed by a
reserve party) and an opponent gopher. See :mod:`gophermon.battle`.
"""
__version__ = "0.3.0"
