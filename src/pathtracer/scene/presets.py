"""Preset scenes.

Each factory returns a complete Setup (render parameters plus scene):

    spheres   Glass, hollow glass, diffuse and two metal spheres on a ground sphere
    metallic  A row of nine metal spheres with roughness from 0 to 1
    focus     A ring of diffuse spheres around a mirror, shallow depth of field
    diffuse   One sphere on the ground under DebugMode.DIFFUSE
    normals   The same geometry under DebugMode.NORMALS

The full-size parameters are slow to render; preview_parameters() scales a
preset down for a quick look.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.scene.presets import create_preset, preview_parameters
    >>> setup = create_preset("spheres")
    >>> quick = preview_parameters(setup.parameters)
    >>> (quick.image_width, quick.image_height)
    (64, 36)
"""

from collections.abc import Callable
from dataclasses import replace

from pathtracer.camera.thin_lens import CameraParameters
from pathtracer.core.parameters import DebugMode, RenderParameters
from pathtracer.materials.material import DiffuseMaterial, MetallicMaterial, RefractiveMaterial
from pathtracer.scene.manager import Scene
from pathtracer.scene.setup import Setup


def _ground(scene: Scene, center, radius: float, albedo=(0.8, 0.8, 0.0)) -> None:
    scene.add_sphere(center, radius, DiffuseMaterial(albedo=albedo))


def create_spheres_setup() -> Setup:
    """Mixed materials: solid glass, a hollow glass shell, diffuse and metal."""
    camera = CameraParameters(
        origin=(0.0, -0.6, 0.0),
        look_at=(0.0, 1.0, -0.2),
        field_of_view=55.0,
    )
    scene = Scene(camera=camera)
    scene.add_sphere((0.3, 0.5, -0.3), 0.2, RefractiveMaterial(refractive_index=1.008))
    # Negative radius: hollow shell
    scene.add_sphere((-0.3, 0.5, -0.3), -0.2, RefractiveMaterial(refractive_index=1.3))
    scene.add_sphere((0.0, 1.4, 0.0), 0.5, DiffuseMaterial(albedo=(0.8, 0.3, 0.3)))
    scene.add_sphere((0.8, 1.0, -0.1), 0.4, MetallicMaterial(albedo=(0.8, 0.8, 0.8), roughness=0.0))
    scene.add_sphere((-0.8, 1.0, -0.1), 0.4, MetallicMaterial(albedo=(0.8, 0.8, 0.8), roughness=0.8))
    _ground(scene, (0.0, 1.0, -100.5), 100.0)

    parameters = RenderParameters(
        image_width=1024, image_height=576, antialias_samples=16, scatter_limit=16
    )
    return Setup(parameters=parameters, scene=scene)


def create_metallic_setup() -> Setup:
    """Nine metal spheres with roughness increasing in steps of 1/8."""
    camera = CameraParameters(
        origin=(0.0, -5.5, 0.0),
        look_at=(0.0, 0.0, 0.0),
        field_of_view=20.0,
    )
    scene = Scene(camera=camera)
    _ground(scene, (0.0, 1.0, -600.5), 600.0)
    for i in range(9):
        scene.add_sphere(
            (i - 4.0, 0.0, -0.002 * abs(i - 4)),
            0.5,
            MetallicMaterial(albedo=(0.9, 0.9, 0.9), roughness=i / 8.0),
        )

    parameters = RenderParameters(
        image_width=1024, image_height=200, antialias_samples=16, scatter_limit=16
    )
    return Setup(parameters=parameters, scene=scene)


def create_focus_setup() -> Setup:
    """Diffuse spheres around a mirror ball, focused just in front of it."""
    camera = CameraParameters(
        origin=(0.8, 1.2, 1.0),
        look_at=(0.0, 0.0, 0.0),
        field_of_view=55.0,
        aperture_radius=0.1,
    )
    camera.focus_on_look_at(-0.25)

    scene = Scene(camera=camera)
    _ground(scene, (0.0, 0.0, -100.5), 100.0)
    ring = [
        ((1.3, 0.0, 0.0), (0.8, 0.8, 0.3)),
        ((-1.3, 0.0, 0.0), (0.3, 0.6, 0.3)),
        ((0.0, 1.3, 0.0), (0.6, 0.2, 0.2)),
        ((0.0, -1.3, 0.0), (0.3, 0.3, 0.6)),
        ((1.0, 1.0, 0.0), (1.0, 0.3, 0.3)),
        ((-1.0, -1.0, 0.0), (0.3, 1.0, 0.3)),
        ((-1.0, 1.0, 0.0), (1.0, 0.6, 0.3)),
        ((1.0, -1.0, 0.0), (0.3, 0.3, 1.0)),
    ]
    for center, albedo in ring:
        scene.add_sphere(center, 0.5, DiffuseMaterial(albedo=albedo))
    scene.add_sphere((0.0, 0.0, 0.0), 0.5, MetallicMaterial(albedo=(0.8, 0.8, 0.8), roughness=0.0))

    parameters = RenderParameters(
        image_width=1024, image_height=576, antialias_samples=16, scatter_limit=16
    )
    return Setup(parameters=parameters, scene=scene)


def _debug_scene() -> Scene:
    camera = CameraParameters(
        origin=(0.0, -0.6, 0.0),
        look_at=(0.0, 1.0, -0.2),
        field_of_view=55.0,
    )
    scene = Scene(camera=camera)
    scene.add_sphere((0.0, 0.5, -0.1), 0.4, DiffuseMaterial(albedo=(0.8, 0.8, 0.8)))
    _ground(scene, (0.0, 1.0, -100.5), 100.0, albedo=(0.8, 0.8, 0.8))
    return scene


def create_diffuse_setup() -> Setup:
    """Geometry shaded with the grey diffuse override under a white sky."""
    parameters = RenderParameters(
        image_width=1024,
        image_height=576,
        antialias_samples=16,
        scatter_limit=32,
        debug_mode=DebugMode.DIFFUSE,
    )
    return Setup(parameters=parameters, scene=_debug_scene())


def create_normals_setup() -> Setup:
    """First-hit normals mapped to colors."""
    parameters = RenderParameters(
        image_width=1024,
        image_height=576,
        antialias_samples=4,
        scatter_limit=1,
        debug_mode=DebugMode.NORMALS,
    )
    return Setup(parameters=parameters, scene=_debug_scene())


PRESETS: dict[str, Callable[[], Setup]] = {
    "spheres": create_spheres_setup,
    "metallic": create_metallic_setup,
    "focus": create_focus_setup,
    "diffuse": create_diffuse_setup,
    "normals": create_normals_setup,
}


def create_preset(name: str) -> Setup:
    """Create a preset setup by name.

    Raises:
        ValueError: If no preset has that name.
    """
    try:
        factory = PRESETS[name]
    except KeyError:
        raise ValueError(f"Unknown preset {name!r}, choose from {sorted(PRESETS)}") from None
    return factory()


def preview_parameters(
    parameters: RenderParameters, divisor: int = 16, scatter_limit: int = 8
) -> RenderParameters:
    """Scale render parameters down for a quick preview.

    The image is divided by ``divisor`` in each dimension (at least 1 pixel),
    antialiasing drops to one sample and the scatter limit is capped.
    """
    if divisor < 1:
        raise ValueError(f"Divisor = {divisor}, must be at least 1")
    return replace(
        parameters,
        image_width=max(1, parameters.image_width // divisor),
        image_height=max(1, parameters.image_height // divisor),
        antialias_samples=1,
        scatter_limit=min(parameters.scatter_limit, scatter_limit),
    )
