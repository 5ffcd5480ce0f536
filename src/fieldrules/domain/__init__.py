"""Domain layer — field/rule records, the range DSL, and rule descriptions.

This layer depends only on stdlib and pydantic.
It must never import from engine, analysis, services, or config.
"""
