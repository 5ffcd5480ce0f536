"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, ``fieldrules.toml`` only contains
overrides, e.g.::

    [validation]
    suggest_merges = false
"""

from __future__ import annotations

from pydantic import BaseModel


class ValidationConfig(BaseModel):
    """[validation] section."""

    model_config = {"frozen": True}

    filter_contrapositives: bool = True
    suggest_merges: bool = True


class AuditConfig(BaseModel):
    """[audit] section."""

    model_config = {"frozen": True}

    enabled: bool = True
    load_plugins: bool = False
