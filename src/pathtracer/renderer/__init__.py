from pathtracer.renderer.raytracer import Renderer, ray_color, render_scanline
from pathtracer.renderer.image_output import save_image, to_rgb8, write_ppm

__all__ = ["Renderer", "ray_color", "render_scanline", "save_image", "to_rgb8", "write_ppm"]
