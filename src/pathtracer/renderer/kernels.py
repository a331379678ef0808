# renderer/kernels.py
"""
Compiled CPU backend.

The scene is flattened into numpy arrays and rendered by a numba kernel that
runs scanlines in parallel with prange. Vectors are plain 3-tuples of floats.
The integrator, scattering rules and pixel encoding match the Python objects
in pathtracer.geometry, pathtracer.materials and pathtracer.renderer.raytracer;
only the random streams differ.
"""
import logging
import math

import numpy as np
from numba import njit, prange

from pathtracer.geometry.hittable import T_MIN
from pathtracer.geometry.sphere import Sphere
from pathtracer.materials.lambertian import Lambertian
from pathtracer.materials.metal import Metal
from pathtracer.materials.dielectric import Dielectric

logger = logging.getLogger(__name__)

# Material type codes
LAMBERTIAN = 0
METAL = 1
DIELECTRIC = 2

###############################################################################
# Scene packing
###############################################################################
def pack_scene(world):
    """
    Flattens the spheres of world into arrays:
    centers (N, 3), radii (N,), material types (N,) and material
    parameters (N, 4), holding albedo rgb + fuzz, or the refractive index.
    """
    objects = list(world)
    n = len(objects)
    centers = np.zeros((n, 3), dtype=np.float64)
    radii = np.zeros(n, dtype=np.float64)
    material_types = np.zeros(n, dtype=np.int64)
    material_params = np.zeros((n, 4), dtype=np.float64)

    for idx, obj in enumerate(objects):
        if not isinstance(obj, Sphere):
            raise ValueError(f"the numba backend only renders spheres, got {type(obj).__name__}")
        centers[idx] = [obj.center.x, obj.center.y, obj.center.z]
        radii[idx] = obj.radius

        mat = obj.material
        if isinstance(mat, Lambertian):
            material_types[idx] = LAMBERTIAN
            material_params[idx, :3] = [mat.albedo.x, mat.albedo.y, mat.albedo.z]
        elif isinstance(mat, Metal):
            material_types[idx] = METAL
            material_params[idx] = [mat.albedo.x, mat.albedo.y, mat.albedo.z, mat.fuzz]
        elif isinstance(mat, Dielectric):
            material_types[idx] = DIELECTRIC
            material_params[idx, 0] = mat.ref_idx
        else:
            raise ValueError(f"unsupported material {type(mat).__name__}")

    logger.debug("Packed %d spheres for the numba backend", n)
    return centers, radii, material_types, material_params

def _as_tuple(v):
    return (float(v.x), float(v.y), float(v.z))

def pack_camera(camera):
    return (
        _as_tuple(camera.origin),
        _as_tuple(camera.lower_left_corner),
        _as_tuple(camera.horizontal),
        _as_tuple(camera.vertical),
        _as_tuple(camera.u),
        _as_tuple(camera.v),
        float(camera.lens_radius),
    )

###############################################################################
# Vector helpers
###############################################################################
@njit
def dot(a, b):
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]

@njit
def add(a, b):
    return (a[0] + b[0], a[1] + b[1], a[2] + b[2])

@njit
def sub(a, b):
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])

@njit
def scale(v, s):
    return (v[0] * s, v[1] * s, v[2] * s)

@njit
def mul(a, b):
    return (a[0] * b[0], a[1] * b[1], a[2] * b[2])

@njit
def div(v, s):
    return (v[0] / s, v[1] / s, v[2] / s)

@njit
def unit(v):
    return div(v, math.sqrt(dot(v, v)))

@njit
def near_zero(v):
    s = 1e-8
    return abs(v[0]) < s and abs(v[1]) < s and abs(v[2]) < s

@njit
def reflect(v, n):
    return sub(v, scale(n, 2.0 * dot(v, n)))

@njit
def refract(uv, n, etai_over_etat):
    cos_theta = min(-dot(uv, n), 1.0)
    r_out_perp = scale(add(uv, scale(n, cos_theta)), etai_over_etat)
    r_out_parallel = scale(n, -math.sqrt(abs(1.0 - dot(r_out_perp, r_out_perp))))
    return add(r_out_perp, r_out_parallel)

@njit
def schlick(cos_theta, refraction_ratio):
    r0 = (1.0 - refraction_ratio) / (1.0 + refraction_ratio)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * (1.0 - cos_theta) ** 5

###############################################################################
# Sampling (numba's thread-local numpy generator)
###############################################################################
@njit
def random_in_unit_sphere():
    while True:
        p = (np.random.uniform(-1.0, 1.0),
             np.random.uniform(-1.0, 1.0),
             np.random.uniform(-1.0, 1.0))
        if dot(p, p) < 1.0:
            return p

@njit
def random_unit_vector():
    return unit(random_in_unit_sphere())

@njit
def random_in_unit_disk():
    while True:
        p = (np.random.uniform(-1.0, 1.0), np.random.uniform(-1.0, 1.0), 0.0)
        if dot(p, p) < 1.0:
            return p

###############################################################################
# Intersection and scattering
###############################################################################
@njit
def hit_spheres(origin, direction, centers, radii, t_min, t_max):
    """Index and t of the closest sphere hit in (t_min, t_max); index -1 on a miss."""
    closest = t_max
    hit_index = -1
    a = dot(direction, direction)
    for k in range(radii.shape[0]):
        oc = sub(origin, (centers[k, 0], centers[k, 1], centers[k, 2]))
        half_b = dot(oc, direction)
        c = dot(oc, oc) - radii[k] * radii[k]
        discriminant = half_b * half_b - a * c
        if discriminant < 0.0:
            continue
        sqrtd = math.sqrt(discriminant)
        root = (-half_b - sqrtd) / a
        if root <= t_min or root >= closest:
            root = (-half_b + sqrtd) / a
            if root <= t_min or root >= closest:
                continue
        closest = root
        hit_index = k
    return hit_index, closest

@njit
def face_normal(direction, p, center, radius):
    """(front_face, normal) at p, with the normal facing against direction."""
    outward_normal = div(sub(p, center), radius)
    front_face = dot(direction, outward_normal) <= 0.0
    if front_face:
        return front_face, outward_normal
    return front_face, scale(outward_normal, -1.0)

@njit
def scatter(direction, normal, front_face, material_type, params):
    """Returns (scattered, new_direction, attenuation)."""
    if material_type == LAMBERTIAN:
        scatter_direction = add(normal, random_unit_vector())
        if near_zero(scatter_direction):
            scatter_direction = normal
        return True, scatter_direction, (params[0], params[1], params[2])
    elif material_type == METAL:
        reflected = reflect(unit(direction), normal)
        scatter_direction = add(reflected, scale(random_in_unit_sphere(), params[3]))
        return dot(scatter_direction, normal) > 0.0, scatter_direction, (params[0], params[1], params[2])
    else:
        refraction_ratio = 1.0 / params[0] if front_face else params[0]
        unit_direction = unit(direction)
        cos_theta = min(-dot(unit_direction, normal), 1.0)
        sin_theta = math.sqrt(1.0 - cos_theta * cos_theta)
        if refraction_ratio * sin_theta > 1.0 or schlick(cos_theta, refraction_ratio) > np.random.random():
            scatter_direction = reflect(unit_direction, normal)
        else:
            scatter_direction = refract(unit_direction, normal, refraction_ratio)
        return True, scatter_direction, (1.0, 1.0, 1.0)

@njit
def ray_color(origin, direction, centers, radii, material_types, material_params, depth):
    attenuation = (1.0, 1.0, 1.0)
    while depth > 0:
        k, t = hit_spheres(origin, direction, centers, radii, T_MIN, np.inf)
        if k < 0:
            unit_direction = unit(direction)
            a = 0.5 * (unit_direction[1] + 1.0)
            sky = ((1.0 - a) * 1.0 + a * 0.5,
                   (1.0 - a) * 1.0 + a * 0.7,
                   (1.0 - a) * 1.0 + a * 1.0)
            return mul(attenuation, sky)

        p = add(origin, scale(direction, t))
        front_face, normal = face_normal(direction, p, (centers[k, 0], centers[k, 1], centers[k, 2]),
                                         radii[k])

        scattered, new_direction, color = scatter(direction, normal, front_face,
                                                  material_types[k], material_params[k])
        if not scattered:
            return (0.0, 0.0, 0.0)

        attenuation = mul(attenuation, color)
        origin = p
        direction = new_direction
        depth -= 1

    return (0.0, 0.0, 0.0)

@njit
def to_byte(total, samples_per_pixel):
    c = math.sqrt(total / samples_per_pixel)
    c = min(max(c, 0.0), 0.999)
    return int(256.0 * c)

###############################################################################
# Kernel
###############################################################################
@njit(parallel=True)
def render_kernel(image, camera, centers, radii, material_types, material_params,
                  samples_per_pixel, max_depth, seed, jitter):
    height = image.shape[0]
    width = image.shape[1]
    origin, lower_left, horizontal, vertical, u, v, lens_radius = camera
    s_scale = max(width - 1, 1)
    t_scale = max(height - 1, 1)

    for j in prange(height):
        # Reseed this thread's generator so each scanline is reproducible
        # no matter which thread renders it.
        np.random.seed((seed * 1000003 + j) % 4294967296)
        row = height - 1 - j
        for i in range(width):
            r = 0.0
            g = 0.0
            b = 0.0
            for _ in range(samples_per_pixel):
                du = np.random.random() if jitter else 0.0
                dv = np.random.random() if jitter else 0.0
                s = (i + du) / s_scale
                t = (j + dv) / t_scale
                target = add(add(lower_left, scale(horizontal, s)), scale(vertical, t))
                ray_origin = origin
                if lens_radius > 0.0:
                    rd = scale(random_in_unit_disk(), lens_radius)
                    ray_origin = add(origin, add(scale(u, rd[0]), scale(v, rd[1])))
                c = ray_color(ray_origin, sub(target, ray_origin), centers, radii,
                              material_types, material_params, max_depth)
                r += c[0]
                g += c[1]
                b += c[2]
            image[row, i, 0] = to_byte(r, samples_per_pixel)
            image[row, i, 1] = to_byte(g, samples_per_pixel)
            image[row, i, 2] = to_byte(b, samples_per_pixel)

def render(camera, world, width, height, samples_per_pixel, max_depth, seed, jitter=True):
    """
    Renders world through camera with the compiled kernel and returns an
    (height, width, 3) uint8 image, top scanline first.
    """
    centers, radii, material_types, material_params = pack_scene(world)
    image = np.zeros((height, width, 3), dtype=np.uint8)
    render_kernel(image, pack_camera(camera), centers, radii, material_types,
                  material_params, samples_per_pixel, max_depth, seed, jitter)
    return image
