"""Service layer: operations over a finalized container returning ServiceResult.

Services may import from the core packages (adapters, relation, commands,
mappers, lint).  They must never import from cli or output.
"""
