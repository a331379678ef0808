# core/utils.py
import math
from pathtracer.core.vector import Vector3

# Every sampler takes the caller's generator (a numpy.random.Generator) so that
# each render worker draws from its own independent stream.

def degrees_to_radians(degrees: float) -> float:
    return degrees * math.pi / 180.0

def random_double(rng, min: float = 0.0, max: float = 1.0) -> float:
    """
    Returns a uniform float in [min, max).
    """
    return float(rng.uniform(min, max))

def random_vector(rng, min: float = 0.0, max: float = 1.0) -> Vector3:
    """
    Returns a vector with each component uniform in [min, max).
    """
    return Vector3(random_double(rng, min, max),
                   random_double(rng, min, max),
                   random_double(rng, min, max))

def random_in_unit_sphere(rng) -> Vector3:
    """
    Returns a random point strictly inside the unit sphere (rejection sampling).
    """
    while True:
        p = random_vector(rng, -1.0, 1.0)
        if p.length_squared() < 1.0:
            return p

def random_in_hemisphere(rng, normal: Vector3) -> Vector3:
    """
    Returns a random point in the unit ball on the same side as normal.
    """
    in_unit_sphere = random_in_unit_sphere(rng)
    if in_unit_sphere.dot(normal) > 0.0:
        return in_unit_sphere
    return -in_unit_sphere

def random_unit_vector(rng) -> Vector3:
    """
    Returns a random unit vector (uniformly distributed over the sphere).
    """
    return random_in_unit_sphere(rng).normalize()

def random_in_unit_disk(rng) -> Vector3:
    """
    Returns a random point inside the unit disk in the z = 0 plane.
    """
    while True:
        p = Vector3(random_double(rng, -1.0, 1.0),
                    random_double(rng, -1.0, 1.0),
                    0.0)
        if p.length_squared() < 1.0:
            return p

def reflect(v: Vector3, n: Vector3) -> Vector3:
    """
    Reflects vector v about the normal n.
    """
    return v - n * 2 * v.dot(n)

def refract(uv: Vector3, n: Vector3, etai_over_etat: float) -> Vector3:
    """
    Refracts uv through a surface with normal n (Snell's law).
    uv is expected to be a unit vector on the side opposite to n.
    """
    cos_theta = min((-uv).dot(n), 1.0)
    r_out_perp = (uv + n * cos_theta) * etai_over_etat
    r_out_parallel = n * -math.sqrt(abs(1.0 - r_out_perp.length_squared()))
    return r_out_perp + r_out_parallel
