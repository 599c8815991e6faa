"""Explicit per-pixel random streams for Monte Carlo sampling.

Every pixel task owns one random stream: a 32-bit xorshift state stored in a
Taichi field and indexed by the pixel's stream id. Streams are seeded by
hashing the render seed together with the stream index, so pixels draw
uncorrelated sequences without sharing any mutable state, and a render with
a fixed seed is reproducible.

All sampling helpers take the stream index explicitly:

    u = random_f32(stream)
    p = random_in_unit_sphere(stream)

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.core.sampler import seed_streams
    >>> seed_streams(42, count=64 * 64)
"""

import taichi as ti
import taichi.math as tm

from pathtracer.core.parameters import MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# One stream per pixel of the largest supported image
MAX_STREAMS = MAX_IMAGE_WIDTH * MAX_IMAGE_HEIGHT

# 2^24, maps the top 24 bits of a state to [0, 1)
_FLOAT_SCALE = 1.0 / 16777216.0

# Rejection sampling attempts before giving up on a candidate
_MAX_REJECTION_ATTEMPTS = 100

_stream_state = ti.field(dtype=ti.u32, shape=MAX_STREAMS)


@ti.func
def _wang_hash(key: ti.u32) -> ti.u32:
    """Scramble a 32-bit key (Thomas Wang's integer hash)."""
    h = key
    h = (h ^ ti.cast(61, ti.u32)) ^ ti.bit_shr(h, 16)
    h *= ti.cast(9, ti.u32)
    h = h ^ ti.bit_shr(h, 4)
    h *= ti.cast(0x27D4EB2D, ti.u32)
    h = h ^ ti.bit_shr(h, 15)
    return h


@ti.kernel
def _seed_streams(seed: ti.u32, count: ti.i32):
    for k in range(count):
        state = _wang_hash(ti.cast(k, ti.u32) ^ _wang_hash(seed))
        # xorshift never leaves the all-zero state
        if state == 0:
            state = ti.cast(1, ti.u32)
        _stream_state[k] = state


def seed_streams(seed: int, count: int = MAX_STREAMS) -> None:
    """Seed the first ``count`` random streams from a render seed.

    Args:
        seed: Render seed. Only the low 32 bits are used.
        count: Number of streams to seed (normally the pixel count).

    Raises:
        ValueError: If count is outside [1, MAX_STREAMS].
    """
    if not 1 <= count <= MAX_STREAMS:
        raise ValueError(f"Stream count {count} is outside [1, {MAX_STREAMS}]")
    _seed_streams(seed & 0xFFFFFFFF, count)


def get_stream_state(stream: int) -> int:
    """Get the raw state of a stream (for diagnostics and tests)."""
    return int(_stream_state[stream])


@ti.func
def random_f32(stream: ti.i32) -> ti.f32:
    """Draw a uniform float in [0, 1) from a stream and advance it.

    Args:
        stream: Index of the stream owned by the calling pixel task.

    Returns:
        A uniformly distributed float in [0, 1).
    """
    s = _stream_state[stream]
    s ^= s << 13
    s ^= ti.bit_shr(s, 17)
    s ^= s << 5
    _stream_state[stream] = s
    return ti.cast(ti.bit_shr(s, 8), ti.f32) * _FLOAT_SCALE


@ti.func
def random_in_unit_sphere(stream: ti.i32) -> vec3:
    """Generate a random point inside the unit sphere.

    Uses rejection sampling on the enclosing cube.

    Args:
        stream: Index of the stream owned by the calling pixel task.

    Returns:
        A random point with length <= 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(_MAX_REJECTION_ATTEMPTS):
        if not found:
            candidate = vec3(
                random_f32(stream) * 2.0 - 1.0,
                random_f32(stream) * 2.0 - 1.0,
                random_f32(stream) * 2.0 - 1.0,
            )
            if tm.dot(candidate, candidate) <= 1.0:
                p = candidate
                found = True
    return p


@ti.func
def random_in_unit_disc(stream: ti.i32) -> vec3:
    """Generate a random point inside the unit disc in the xy-plane.

    Used for lens sampling (depth of field).

    Args:
        stream: Index of the stream owned by the calling pixel task.

    Returns:
        A random point (x, y, 0) with x^2 + y^2 <= 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(_MAX_REJECTION_ATTEMPTS):
        if not found:
            candidate = vec3(
                random_f32(stream) * 2.0 - 1.0,
                random_f32(stream) * 2.0 - 1.0,
                0.0,
            )
            if candidate.x * candidate.x + candidate.y * candidate.y <= 1.0:
                p = candidate
                found = True
    return p
