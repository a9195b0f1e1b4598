"""
Infrastructure Package
======================

Provides abstraction layers for external dependencies following the Dependency Inversion Principle.

Modules:
    - storage: key/value store abstraction (memory, Django cache)
    - events: in-process publish/subscribe
    - context: per-profile MarketplaceContext handed to every service
    - container: builds contexts and wires services

This package enables:
    - Easy testing with in-memory implementations
    - Switching store backends without code changes
"""
