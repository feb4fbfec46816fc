from .sampler import Sampler
from .prosac_sampler import ProsacSampler
from .uniform_sampler import UniformSampler
