from .steam import AmbientParticles, PointCloud, SteamSettings, create_ambient_particles

__all__ = [
    'AmbientParticles',
    'PointCloud',
    'SteamSettings',
    'create_ambient_particles',
]
