"""Scene management for the path tracer.

Components:
    intersection: Taichi sphere tables and nearest-hit queries
    manager: Scene and SceneObject, validated and uploaded to the tables
    setup: Render parameters plus scene, stored as JSON
    presets: Ready-made setups

These modules declare Taichi fields and must be imported after ti.init().
"""
