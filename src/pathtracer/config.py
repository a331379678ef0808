"""Render configuration: quality presets, environment overrides and validated settings."""

import os
from typing import Mapping, Optional

# Quality presets, selectable by name from the CLI
QUALITY_LEVELS = {
    "preview": {"samples": 1, "bounces": 5},
    "balanced": {"samples": 10, "bounces": 20},
    "final": {"samples": 100, "bounces": 50},
}
DEFAULT_QUALITY = "balanced"

# Image settings
DEFAULT_IMAGE_WIDTH = 400
DEFAULT_ASPECT_RATIO = 16.0 / 9.0

# Sampling settings
DEFAULT_SEED = 0
BACKENDS = ("python", "numba")
DEFAULT_BACKEND = "python"

# Environment variables that override the preset values
ENV_SAMPLES_PER_PIXEL = "PATHTRACER_SAMPLES_PER_PIXEL"
ENV_MAX_DEPTH = "PATHTRACER_MAX_DEPTH"
ENV_IMAGE_WIDTH = "PATHTRACER_IMAGE_WIDTH"
ENV_SEED = "PATHTRACER_SEED"
ENV_WORKERS = "PATHTRACER_WORKERS"

# Logging settings
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
DEFAULT_LOG_LEVEL = "INFO"
ENV_LOG_LEVEL = "PATHTRACER_LOG_LEVEL"
LOG_FORMAT = os.getenv("PATHTRACER_LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")


def default_workers() -> int:
    return os.cpu_count() or 1


def _env_int(environ: Mapping[str, str], name: str) -> Optional[int]:
    value = environ.get(name)
    if value is None or value.strip() == "":
        return None
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


class RenderSettings:
    """
    Validated render configuration.

    The image height is derived from the width and the aspect ratio.
    """

    def __init__(
        self,
        image_width: int = DEFAULT_IMAGE_WIDTH,
        aspect_ratio: float = DEFAULT_ASPECT_RATIO,
        samples_per_pixel: int = QUALITY_LEVELS[DEFAULT_QUALITY]["samples"],
        max_depth: int = QUALITY_LEVELS[DEFAULT_QUALITY]["bounces"],
        seed: int = DEFAULT_SEED,
        workers: Optional[int] = None,
        backend: str = DEFAULT_BACKEND,
        jitter: bool = True,
    ):
        if image_width < 1:
            raise ValueError(f"image width must be at least 1, got {image_width}")
        if aspect_ratio <= 0:
            raise ValueError(f"aspect ratio must be positive, got {aspect_ratio}")
        if samples_per_pixel < 1:
            raise ValueError(f"samples per pixel must be at least 1, got {samples_per_pixel}")
        if max_depth < 0:
            raise ValueError(f"max depth must be non-negative, got {max_depth}")
        if seed < 0:
            raise ValueError(f"seed must be non-negative, got {seed}")
        if workers is None:
            workers = default_workers()
        if workers < 1:
            raise ValueError(f"workers must be at least 1, got {workers}")
        if backend not in BACKENDS:
            raise ValueError(f"unknown backend {backend!r}, expected one of {', '.join(BACKENDS)}")

        self.image_width = image_width
        self.aspect_ratio = aspect_ratio
        self.image_height = max(1, int(image_width / aspect_ratio))
        self.samples_per_pixel = samples_per_pixel
        self.max_depth = max_depth
        self.seed = seed
        self.workers = workers
        self.backend = backend
        self.jitter = jitter

    @classmethod
    def from_quality(
        cls,
        quality: str = DEFAULT_QUALITY,
        environ: Optional[Mapping[str, str]] = None,
        **overrides,
    ) -> "RenderSettings":
        """
        Builds settings from a named quality preset, then applies environment
        variables, then explicit keyword overrides. An override of None means
        "not given" and leaves the lower layer in place.
        """
        if quality not in QUALITY_LEVELS:
            raise ValueError(
                f"unknown quality {quality!r}, expected one of {', '.join(QUALITY_LEVELS)}"
            )
        if environ is None:
            environ = os.environ

        preset = QUALITY_LEVELS[quality]
        values = {
            "samples_per_pixel": preset["samples"],
            "max_depth": preset["bounces"],
        }

        env_values = {
            "samples_per_pixel": _env_int(environ, ENV_SAMPLES_PER_PIXEL),
            "max_depth": _env_int(environ, ENV_MAX_DEPTH),
            "image_width": _env_int(environ, ENV_IMAGE_WIDTH),
            "seed": _env_int(environ, ENV_SEED),
            "workers": _env_int(environ, ENV_WORKERS),
        }
        values.update({key: value for key, value in env_values.items() if value is not None})
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)

    def __repr__(self) -> str:
        return (
            f"RenderSettings({self.image_width}x{self.image_height}, "
            f"samples_per_pixel={self.samples_per_pixel}, max_depth={self.max_depth}, "
            f"seed={self.seed}, workers={self.workers}, backend={self.backend!r}, "
            f"jitter={self.jitter})"
        )
