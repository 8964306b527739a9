"""Adaptive quiz core: skill state, questions, Q-table, and the engine."""
