"""Domain layer — field models, parsing, merging, validation, mutation.

This layer depends only on stdlib, pydantic and ruamel.yaml.
It must never import from services, infrastructure, commands, or config.
"""
