"""Service layer — template-level operations returning ServiceResult.

Services may import from domain, engine, analysis, and config. They never
perform file I/O; callers decode templates and settings first.
"""
