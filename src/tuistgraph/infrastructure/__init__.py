"""Infrastructure layer: subprocess runner, scratch filesystem, graph engine.

This layer depends on stdlib and third-party libs (NetworkX).
It must never import from services, commands, or output.
"""
