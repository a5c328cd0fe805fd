"""Practice domain services: positions, sessions and progression.

This package holds the scoring and progression rules for a putting
session. It has no Flask dependency so it can run inside any client; the
only outward-facing piece is the storage collaborator passed to the
engine.
"""
