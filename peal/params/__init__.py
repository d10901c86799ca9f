"""
Parameter schema and defaults, request normalization and resolution.
Use build_parameters(type, {}) for a validated default parameter set.
"""
from peal.params.schema import PARAM_SCHEMA, DEFAULT_PRESET
from peal.params.resolve import resolve_params, build_parameters
from peal.params.clamp import clamp_params

__all__ = ["PARAM_SCHEMA", "DEFAULT_PRESET", "resolve_params", "build_parameters", "clamp_params"]
