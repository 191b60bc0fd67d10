"""Service layer: loader operations returning ServiceResult.

Services may import from domain, infrastructure and the loader.
They must never import from commands or output.
"""
