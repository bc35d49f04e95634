from .config import get_default_sampler_config, sampler_config

__all__ = [
    "get_default_sampler_config",
    "sampler_config",
]
