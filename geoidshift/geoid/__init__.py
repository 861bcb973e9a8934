"""Geoid-driven vertical datum transformation.

The module provides:
- context: GeodeticContext / ContextConfig (PROJ environment ownership)
- vertical: VerticalTransformation (MSL -> WGS 84 ellipsoidal heights)
- pool: TransformationPool (per-thread cached transformations)
- grids: grid availability, download and cache quota
- batch: chunked DataFrame conversion
"""

from .context import ContextConfig, GeodeticContext
from .pool import TransformationPool
from .vertical import BatchResult, VerticalTransformation

__all__ = [
    "BatchResult",
    "ContextConfig",
    "GeodeticContext",
    "TransformationPool",
    "VerticalTransformation",
]
