# rdog

`rdog` shades a small scene built from signed distance fields. It runs on the
CPU. The scene holds an animated centre piece, a metal floor, a metal ball and
a spherical light.

Every shading pass is a plain Python function that works on one pixel. Vectors
are `numpy` arrays. You can probe a single pixel, build a small image in a
loop, or test one piece of the lighting model on its own.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

### `rdog.vecmath`

Vector helpers that follow GLSL:

- `vec(*args)` joins scalars and vectors into one float vector.
- `normalize`, `fract`, `saturate`, `clamp`, `mix` and `smoothstep`.
- `wrap(x)` maps values into `(0, 1]`. A positive value keeps its fractional
  part. Zero and negative whole numbers become `1.0`.

It also holds the rotation helpers:

- `rotate_vector(q, v)` rotates by a quaternion `(x, y, z, w)`.
- `rotor_y(a)` is the quaternion for a rotation by `a` around the y axis.
- `aar(v, axis, a)` rotates `v` by `a` around a unit axis.

### `rdog.sdf`

Distance functions:

- `sphere`, `plane`, `sd_round_box` and `sd_rounded_cylinder`.

Ways to combine them:

- `op_smooth_union` and `op_smooth_subtraction`.
- `min_sd`, which picks the `(distance, id)` pair with the smaller distance.

### `rdog.rng`

Integer hashes that wrap at 32 bits: `pcg` and `pcg3d`.

Helpers built on them:

- `rng01(s, seed, width)` gives a number in `[0, 1]` for a 2D position.
- `rng(s, seed)` does the same for a 3D position.
- `hash_vec(s, seed)` gives three 32-bit integers.

### `rdog.frame`

`Frame` is an ordered, immutable 32-bit frame number. In every cycle of six
frames, four are global-illumination tracing frames and two are validation
frames. `Frame.is_gi_tracing()` and `Frame.is_gi_validation()` tell them apart.

### `rdog.camera`

`Camera` is the camera as the passes see it. It holds two 4×4 matrices, an
origin and a screen size. Its methods are:

- `world_to_clip`
- `world_to_screen`
- `clip_to_screen`
- `screen_to_idx`

`Globals` carries the time as `(elapsed, delta)` and a pair of seeds.
`Globals.with_seed` returns a copy with new seeds. `RayParams` holds the same
two fields.

### `rdog.texture`

`Texture` is an RGBA image in memory, `height × width × 4`.

- `read(x, y)` and `write(x, y, value)` give access to one texel. Both raise
  `IndexError` outside the image.
- `Texture.sample(uv)` looks the image up at normalised coordinates. It clamps
  at the edges and uses nearest-texel filtering. With `linear=True` it uses
  bilinear filtering.
- `Texture.from_array` builds a texture from an existing array.
- The module-level `sample(tex, uv)` first wraps `uv` with `vecmath.wrap`.

### `rdog.scene`

The scene and the queries on it:

- The data types `Ray`, `Light` and `Material`.
- `scene_map(p, el, seed)` returns `(distance, material id)`.
- `hit` is the ray marcher. It returns a `Material`. On a miss it returns the
  default material, whose `dist` is `TMAX`.
- `lookup_mat`, `calc_normal`, `light_map` and `translate_to_ws`.
- `get_camera_ray(pos, camera, el)` orbits the camera as time passes.
- `sample_atmos` gives a faint sky term.
- `calculate_derivatives`, `checkers_grad_box` and `checker` produce a filtered
  checkerboard.

### Shading passes

Each pass takes a pixel id `(x, y, ...)`, a `Camera`, a `Globals` and a
`Texture`:

- `rdog.trace.trace_pixel` writes the distance to the first surface into all
  four channels. On a miss that distance is `TMAX`.
- `rdog.direct.direct_pixel` writes direct plus bounced diffuse light. The
  ray starts at the distance stored in alpha.
- `rdog.scatter.scatter_pixel` adds subsurface scattering through the
  centre piece to the stored colour.
- `rdog.specular.specular_pixel` blends GGX reflections over the stored
  colour, weighted by the Fresnel term.

The sky has its own pair of functions:

- `rdog.atmosphere.noise_pixel(global_id, globals, out)` fills one texel of a
  grey noise texture. The texture is `NOISE_DIM`, that is 64×64.
- `rdog.atmosphere.atmosphere_pixel(global_id, camera, globals, noise_tx, out)`
  renders one texel of the sky with volumetric clouds. The sky texture is
  `ATMOS_MULT` (4) times the screen size.

`rdog.raster.fragment(pos, camera, trace_tx, prev_tx)` samples the traced
image and encodes it with `srgb`. It then clamps the result to `[0, 1]` and
also writes it to `prev_tx`. `full_screen_triangle(i)` gives the clip-space
position of vertex `i` of a triangle that covers the screen.

### Host side

`rdog.config`:

- `CameraConfig` holds a transform, a projection, a `CameraMode` and a
  `CameraViewport`.
- `CameraConfig.serialize()` returns a `Camera`.
- `CameraConfig.is_invalidated_by(older)` is true when the mode, the format or
  the size changed.
- `globals_for(time, seed, frame)` builds `Globals`. The second seed is offset
  by the frame number.

`rdog.controllers.CameraRegistry` hands out `CameraHandle`s and looks the
cameras up again. `get` raises `KeyError` for a removed handle.

`rdog.buffers`:

- `to_bytes` packs a value in the little-endian layout that a uniform buffer
  uses. It accepts a `Camera`, a `Globals`, 32-bit ints and floats, numpy
  values and sequences of these.
- `pad_size` rounds a size up to 32 bytes.
- `measure(name, func)` calls `func`. It logs the time taken at debug level
  when that time exceeds `RDOG_METRIC_THRESHOLD`, for example `5ms`.

## Example

```python
import numpy as np

from rdog.camera import Camera, Globals
from rdog.direct import direct_pixel
from rdog.texture import Texture
from rdog.trace import trace_pixel

width, height = 8, 8
camera = Camera(screen=np.array([width, height, 0.0, 0.0]))
globals_ = Globals(time=(0.0, 0.0), seed=(7, 7))
out = Texture(width, height)

for y in range(height):
    for x in range(width):
        trace_pixel((x, y, 0), camera, globals_, out)
        direct_pixel((x, y, 0), camera, globals_, out)

print(out.read(width // 2, height // 2))
```

The passes are pure Python and march every ray step by step, so expect even
small images to take a while.

## What the package does not do

`rdog` has no command-line program. It does not open a window, use a GPU, or
write images to files. To display or save the textures it fills, use another
tool. `CameraRegistry` stores whatever objects you give it; the package does
not allocate per-camera buffers or schedule passes for you. The package has no
image atlas and no support for loading image assets.