"""
Shared Layer - Cross-Cutting Concerns
Configuration, logging, error contract, persistence primitives and security
helpers used by the identity, education and notifications contexts.
"""
