import numpy as np
import pytest

from robustfit.sampler import ProsacSampler, UniformSampler
from robustfit.utils import QualityScores, UniformRandomGenerator


def test_unique_random_set_is_distinct_and_in_range():
    generator = UniformRandomGenerator(seed=0)
    for _ in range(100):
        sample = generator.generateUniqueRandomSet(5, max=9)
        assert len(sample) == 5
        assert len(set(sample)) == 5
        assert all(0 <= i <= 9 for i in sample)


def test_unique_random_set_skips_value():
    generator = UniformRandomGenerator(seed=1)
    for _ in range(50):
        sample = generator.generateUniqueRandomSet(3, max=3, to_skip=2)
        assert 2 not in sample
        assert sorted(sample) == [0, 1, 3]


def test_unique_random_set_rejects_oversized_sample():
    generator = UniformRandomGenerator(seed=0)
    with pytest.raises(ValueError):
        generator.generateUniqueRandomSet(4, max=2)


def test_uniform_sampler_is_reproducible_with_seed():
    first = UniformSampler(100, UniformRandomGenerator(seed=42))
    second = UniformSampler(100, UniformRandomGenerator(seed=42))
    assert [first.sample(4) for _ in range(20)] == [second.sample(4) for _ in range(20)]


def test_uniform_sampler_covers_all_points():
    sampler = UniformSampler(20, UniformRandomGenerator(seed=3))
    seen = set()
    for _ in range(200):
        seen.update(sampler.sample(3))
    assert seen == set(range(20))


def test_uniform_sampler_rejects_sample_larger_than_set():
    sampler = UniformSampler(3, UniformRandomGenerator(seed=0))
    with pytest.raises(ValueError):
        sampler.sample(4)


def test_prosac_first_sample_is_best_points():
    scores = np.linspace(0.0, 1.0, 50)
    sorted_indices = QualityScores(scores).sortedIndices()
    sampler = ProsacSampler(sorted_indices, 4, UniformRandomGenerator(seed=0))

    sample = sampler.sample(4)
    assert sorted(sample) == [46, 47, 48, 49]


def test_prosac_growth_function_is_non_decreasing():
    sampler = ProsacSampler(np.arange(200), 3, UniformRandomGenerator(seed=0))
    growth = np.array(sampler.growth_function)
    assert np.all(np.diff(growth) >= 0)
    assert growth[0] == 1


def test_prosac_samples_stay_inside_growing_prefix():
    rng = np.random.default_rng(5)
    sorted_indices = rng.permutation(100)
    sampler = ProsacSampler(sorted_indices, 3, UniformRandomGenerator(seed=5))
    position = {int(index): i for i, index in enumerate(sorted_indices)}

    for _ in range(300):
        subset_size = sampler.subset_size
        sample = sampler.sample(3)
        positions = sorted(position[i] for i in sample)
        assert len(set(sample)) == 3
        # 最后一个点为当前前缀的末尾
        assert positions[-1] == subset_size - 1
    assert 3 < sampler.subset_size <= 100


def test_prosac_becomes_uniform_after_convergence_iterations():
    sampler = ProsacSampler(np.arange(50), 3, UniformRandomGenerator(seed=9), ransac_convergence_iterations=5)
    seen = set()
    for _ in range(300):
        seen.update(sampler.sample(3))
    assert len(seen) > 40


def test_prosac_set_sample_number_grows_subset():
    sampler = ProsacSampler(np.arange(100), 3, UniformRandomGenerator(seed=0))
    sampler.setSampleNumber(1000)
    assert sampler.subset_size > 3
    assert sampler.growth_function[sampler.subset_size - 2] < 1000


def test_prosac_rejects_other_sample_size():
    sampler = ProsacSampler(np.arange(10), 3, UniformRandomGenerator(seed=0))
    with pytest.raises(ValueError):
        sampler.sample(4)


def test_prosac_needs_enough_points():
    with pytest.raises(ValueError):
        ProsacSampler(np.arange(2), 3)


def test_quality_scores_order_and_weights():
    quality = QualityScores([0.5, 2.0, 1.0, 2.0])
    assert list(quality.sortedIndices()) == [1, 3, 2, 0]
    np.testing.assert_allclose(quality.weights(), [0.25, 1.0, 0.5, 1.0])


def test_quality_scores_weights_with_non_positive_scores():
    weights = QualityScores([-1.0, 0.0, 1.0]).weights()
    np.testing.assert_allclose(weights, [QualityScores.WEIGHT_FLOOR, 0.55, 1.0])
    np.testing.assert_allclose(QualityScores([0.0, 0.0]).weights(), [1.0, 1.0])


def test_quality_scores_validation():
    with pytest.raises(ValueError):
        QualityScores([[1.0, 2.0]])
    with pytest.raises(ValueError):
        QualityScores([1.0, np.nan])


def test_quality_scores_copy_input():
    scores = np.array([1.0, 2.0, 3.0])
    quality = QualityScores(scores)
    scores[0] = 10.0
    assert quality.scores[0] == 1.0
    assert scores.flags.writeable
