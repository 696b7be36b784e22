"""Domain layer: value kinds, type naming, and host-bridged values.

This layer depends only on stdlib.
It must never import from the dispatcher, builtins, config, or plugins.
"""
