"""Rendering subpackage.

Turns a ``SelectedLayers`` into pixels:

* :mod:`wojak_compositor.renderer.compositor` loads every resolved layer through
  the shared image cache, sorts by depth and alpha-composites onto a square
  Pillow surface, honouring per-layer clip regions.
* :mod:`wojak_compositor.renderer.export` wraps the compositor for preview,
  thumbnail and export resolutions and encodes the result.
"""
