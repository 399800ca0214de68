"""
Studies: small, watchable scenarios.

Each study answers one question by running it.
"""
