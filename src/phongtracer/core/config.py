"""Tracer configuration.

Render resolution, background, ambient lighting and CPU thread settings are
grouped in a single dataclass so the renderer, the CLI and scene files share
one description of a render.
"""

from dataclasses import asdict, dataclass
from typing import Any

# Defaults used by the tracer when nothing else is configured
DEFAULT_WIDTH = 640
DEFAULT_HEIGHT = 480
DEFAULT_BACKGROUND_COLOUR = (0.0, 0.0, 0.0)
DEFAULT_AMBIENT_INTENSITY = 0.01


@dataclass
class TracerConfig:
    """Configuration for a render.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        background_colour: RGB colour (0-255 per channel) returned for rays
            that escape the scene.
        ambient_enabled: Whether the ambient term is added at hit points.
        ambient_intensity: Scene-wide ambient light intensity.
        threads: Number of CPU worker threads. None lets Taichi decide.
    """

    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    background_colour: tuple[float, float, float] = DEFAULT_BACKGROUND_COLOUR
    ambient_enabled: bool = True
    ambient_intensity: float = DEFAULT_AMBIENT_INTENSITY
    threads: int | None = None

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Render dimensions must be positive, got {self.width}x{self.height}"
            )
        if self.threads is not None and self.threads <= 0:
            raise ValueError(f"Thread count must be positive, got {self.threads}")
        if len(self.background_colour) != 3:
            raise ValueError("background_colour must have exactly 3 components")
        self.background_colour = (
            float(self.background_colour[0]),
            float(self.background_colour[1]),
            float(self.background_colour[2]),
        )

    def to_dict(self) -> dict[str, Any]:
        """Export the configuration to a dictionary (for JSON serialization)."""
        data = asdict(self)
        data["background_colour"] = list(self.background_colour)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TracerConfig":
        """Build a configuration from a dictionary.

        Missing keys fall back to the defaults. Unknown keys are rejected.

        Raises:
            ValueError: If the dictionary contains unknown keys or invalid
                values.
        """
        known = set(cls.__dataclass_fields__)
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown configuration keys: {sorted(unknown)}")

        kwargs = dict(data)
        if "background_colour" in kwargs:
            colour = kwargs["background_colour"]
            kwargs["background_colour"] = (colour[0], colour[1], colour[2])
        return cls(**kwargs)
