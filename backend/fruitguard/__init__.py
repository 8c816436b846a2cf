"""FruitGuard: fruit disease detection relay for hosted multimodal models."""

__version__ = "1.0.0"
