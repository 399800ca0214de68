"""
Signal-Swarm: proximity signalling between agents that take turns
emitting and listening.

Agents pulse between two roles. A listener close enough to an emitter
hears it and forms a transient link; silence lets the link lapse.
A central controller watches the links come and go.
"""

__version__ = "0.1.0"
