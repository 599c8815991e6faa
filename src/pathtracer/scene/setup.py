"""Setup files: render parameters plus a scene, stored as JSON.

A setup file holds everything needed to reproduce a render:

    {
        "parameters": {"image_width": 1024, "image_height": 576, ...},
        "camera": {"origin": [0, -0.6, 0], "look_at": [0, 1, -0.2], ...},
        "objects": [
            {"center": [0, 1.4, 0], "radius": 0.5,
             "material": {"type": "diffuse", "albedo": [0.8, 0.3, 0.3]}},
            ...
        ]
    }

Missing parameter and camera keys take their defaults. Any malformed content
is reported as a SetupError naming the file.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Union

from pathtracer.core.parameters import RenderParameters
from pathtracer.scene.manager import Scene

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class SetupError(ValueError):
    """A setup file or dictionary could not be turned into a Setup."""


@dataclass
class Setup:
    """Render parameters together with the scene they apply to."""

    parameters: RenderParameters = field(default_factory=RenderParameters)
    scene: Scene = field(default_factory=Scene)

    def to_dict(self) -> dict[str, Any]:
        data = {"parameters": self.parameters.to_dict()}
        data.update(self.scene.to_dict())
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Setup":
        """Create a setup from its dictionary form.

        Raises:
            SetupError: If the dictionary is malformed or holds invalid values.
        """
        if not isinstance(data, dict):
            raise SetupError(f"Setup must be a JSON object, got {type(data).__name__}")
        unknown = set(data) - {"parameters", "camera", "objects"}
        if unknown:
            raise SetupError(f"Unknown setup sections: {sorted(unknown)}")
        try:
            parameters = RenderParameters.from_dict(data.get("parameters") or {})
            scene = Scene.from_dict(data)
        except (KeyError, TypeError, ValueError) as err:
            raise SetupError(f"Invalid setup: {err}") from err
        return cls(parameters=parameters, scene=scene)


def save_setup(path: PathLike, setup: Setup) -> None:
    """Write a setup to a JSON file."""
    path = Path(path)
    path.write_text(json.dumps(setup.to_dict(), indent=2) + "\n", encoding="utf-8")
    logger.info("Saved setup to %s", path)


def load_setup(path: PathLike) -> Setup:
    """Read a setup from a JSON file.

    Raises:
        FileNotFoundError: If the file does not exist.
        SetupError: If the file is not valid JSON or describes an invalid setup.
    """
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as err:
        raise SetupError(f"{path}: not valid JSON ({err})") from err
    try:
        setup = Setup.from_dict(data)
    except SetupError as err:
        raise SetupError(f"{path}: {err}") from err
    logger.info("Loaded setup from %s (%d objects)", path, len(setup.scene))
    return setup
