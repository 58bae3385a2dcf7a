"""Infrastructure Layer — database sessions, logging and in-process guards.

Invariants:
    - Infrastructure imports only core/errors from the domain (error mapping)
    - Lock and replay registries are instance state, never module singletons

Design Decisions:
    - Resilient wrappers over raw clients (ADR: ExMA single responsibility)
"""
