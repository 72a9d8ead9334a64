from .sources import VisualsBackend, get_visuals_backend

__all__ = [
    "VisualsBackend",
    "get_visuals_backend",
]
