"""Top level world generation: one seed, every layer, fixed order."""

from __future__ import annotations

import logging
import random
from typing import List, Optional, Protocol, Tuple

import constants
from mapgen.spawner import GenerationConfigError
from state.event_bus import EVENT_BUS, ON_WORLD_GENERATED

logger = logging.getLogger(__name__)


class LayerGenerator(Protocol):
    def generate(self, seed: Optional[int] = None) -> object: ...


class WorldGenerationDirector:
    """Hand one world seed to each layer generator in order.

    Layers run distant background, mid background, mining, decoration and
    foreground so the derived layers always see the finished mining layer.
    Any generator may be ``None``; only a missing mining generator is
    reported as an error.
    """

    def __init__(
        self,
        distant_bg: Optional[LayerGenerator] = None,
        mid_bg: Optional[LayerGenerator] = None,
        mining: Optional[LayerGenerator] = None,
        decoration: Optional[LayerGenerator] = None,
        foreground: Optional[LayerGenerator] = None,
        seed: Optional[int] = None,
        randomize_seed: bool = True,
    ) -> None:
        self.distant_bg = distant_bg
        self.mid_bg = mid_bg
        self.mining = mining
        self.decoration = decoration
        self.foreground = foreground
        self.seed = seed if seed is not None else 12345
        self.randomize_seed = randomize_seed
        self.failed_layers: List[str] = []

    def layers(self) -> List[Tuple[str, Optional[LayerGenerator]]]:
        by_name = {
            constants.LAYER_DISTANT_BACKGROUND: self.distant_bg,
            constants.LAYER_MID_BACKGROUND: self.mid_bg,
            constants.LAYER_MINING: self.mining,
            constants.LAYER_DECORATION: self.decoration,
            constants.LAYER_FOREGROUND: self.foreground,
        }
        return [(name, by_name[name]) for name in constants.LAYER_ORDER]

    def pick_seed(self, seed: Optional[int] = None) -> int:
        if seed is not None:
            return seed
        if self.randomize_seed:
            return random.SystemRandom().randrange(constants.MAX_RANDOM_SEED)
        return self.seed

    def generate_world(self, seed: Optional[int] = None) -> int:
        """Generate every layer and return the seed that was used."""
        self.seed = self.pick_seed(seed)
        self.failed_layers = []
        logger.info("World generation starting (seed %d)", self.seed)
        for name, generator in self.layers():
            if generator is None:
                if name == constants.LAYER_MINING:
                    logger.error("Mining generator is missing, world has no gameplay layer")
                continue
            try:
                generator.generate(self.seed)
            except GenerationConfigError as exc:
                self.failed_layers.append(name)
                logger.error("Layer %s skipped: %s", name, exc)
        logger.info("World generation complete (seed %d)", self.seed)
        EVENT_BUS.publish(ON_WORLD_GENERATED, self.seed)
        return self.seed


__all__ = ["LayerGenerator", "WorldGenerationDirector"]
