"""Catalogue of sample fruit images."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel

logger = logging.getLogger(__name__)

DEFAULT_SAMPLES_FILE = Path(__file__).resolve().parent / "data" / "samples.yaml"


class SampleImage(BaseModel):
    label: str
    url: str
    emoji: str = ""


def load_samples(path: Optional[Path] = None) -> List[SampleImage]:
    """Read the sample catalogue from YAML."""
    samples_path = Path(path) if path is not None else DEFAULT_SAMPLES_FILE
    with samples_path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    entries = data.get("samples") if isinstance(data, dict) else None
    if not isinstance(entries, list):
        raise ValueError(f"{samples_path} must define a 'samples' list")

    samples = [SampleImage.model_validate(entry) for entry in entries]
    logger.debug("Loaded %s sample images from %s", len(samples), samples_path)
    return samples


def find_sample(label: str, samples: Optional[List[SampleImage]] = None) -> Optional[SampleImage]:
    """Return the sample whose label matches ``label`` case-insensitively."""
    wanted = label.strip().lower()
    for sample in samples if samples is not None else load_samples():
        if sample.label.lower() == wanted:
            return sample
    return None
