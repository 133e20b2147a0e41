"""Procedural generation of the dual-grid world layers."""

from .blobs import LargeBlobGenerator, LargeBlobSettings, SnakeBlobGenerator, SnakeSettings
from .spawner import BlobSpawnConfig, BlobSpawner, GenerationConfigError
from .generator import MapGenerator, MapGeneratorSettings
from .background import BackgroundAlgorithm, BackgroundMapGenerator
from .layers import DecorationMapGenerator, DistantDecorationMapGenerator, ForegroundMapGenerator
from .director import WorldGenerationDirector

__all__ = [
    "LargeBlobGenerator",
    "LargeBlobSettings",
    "SnakeBlobGenerator",
    "SnakeSettings",
    "BlobSpawnConfig",
    "BlobSpawner",
    "GenerationConfigError",
    "MapGenerator",
    "MapGeneratorSettings",
    "BackgroundAlgorithm",
    "BackgroundMapGenerator",
    "DecorationMapGenerator",
    "DistantDecorationMapGenerator",
    "ForegroundMapGenerator",
    "WorldGenerationDirector",
]
