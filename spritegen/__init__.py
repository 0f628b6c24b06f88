"""
spritegen: seeded procedural pixel-art generators.

`spritegen.raster` holds the drawing primitives (PRNG, canvas, shapes,
palettes, output), `spritegen.generators` the registered image generators,
and `spritegen.remote` the Flux client.
"""

__version__ = "0.1.0"
