"""Domain layer: the decoded project graph.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""
