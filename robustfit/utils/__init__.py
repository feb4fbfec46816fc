from .logger import get_logger
from .quality_scores import QualityScores
from .uniform_random_generator import UniformRandomGenerator
