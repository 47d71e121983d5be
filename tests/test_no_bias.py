"""
抽样分布无偏性检验（Kolmogorov-Smirnov）
"""

import pytest

from kinegen import InteractionContext, MaxXSecCache, RejectionSampler, SamplerConfig
from kinegen.testing import (
    BoxBounds,
    ConstantCrossSection,
    PowerLawCrossSection,
    ks_no_bias_test,
    power_law_cdf,
    run_quick_test,
)


@pytest.fixture
def context():
    return InteractionContext(probe_energy=5.0, process="synthetic")


def one_dim_sampler(model, config=None):
    return RejectionSampler(("x",), BoxBounds({"x": (1.0, 10.0)}), model, MaxXSecCache(), config)


class TestKolmogorovSmirnov:
    """测试接受点的分布与解析分布一致"""

    def test_jacobian_weighted_power_law(self, context):
        """测试带雅可比权重时接受点服从 x^-2 分布"""
        sampler = one_dim_sampler(PowerLawCrossSection({"x": -2.0}), SamplerConfig(include_jacobian=True))
        statistic, pvalue, samples = ks_no_bias_test(
            sampler, context, "x", power_law_cdf(-2.0, 1.0, 10.0), n_samples=2000, seed=21)

        assert pvalue > 0.001, f"KS D = {statistic:.4f}"
        assert samples.min() >= 1.0
        assert samples.max() <= 10.0

    def test_log_measure_linear_model(self, context):
        """测试对数测度下截面 x 给出均匀分布"""
        sampler = one_dim_sampler(PowerLawCrossSection({"x": 1.0}))
        statistic, pvalue, _ = ks_no_bias_test(
            sampler, context, "x", power_law_cdf(0.0, 1.0, 10.0), n_samples=2000, seed=22)
        assert pvalue > 0.001, f"KS D = {statistic:.4f}"

    def test_constant_model_is_log_uniform(self, context):
        """测试常数截面不带雅可比权重时给出对数均匀分布"""
        sampler = one_dim_sampler(ConstantCrossSection(3.0))
        statistic, pvalue, _ = ks_no_bias_test(
            sampler, context, "x", power_law_cdf(-1.0, 1.0, 10.0), n_samples=2000, seed=23)
        assert pvalue > 0.001, f"KS D = {statistic:.4f}"

    def test_wrong_density_is_detected(self, context):
        """测试检验能识别错误的分布"""
        sampler = one_dim_sampler(ConstantCrossSection(3.0))
        _, pvalue, _ = ks_no_bias_test(
            sampler, context, "x", power_law_cdf(0.0, 1.0, 10.0), n_samples=2000, seed=24)
        assert pvalue < 1e-6


class TestQuickValidation:
    """测试内置快速验证"""

    def test_quick_validation_passes(self):
        """测试快速验证全部通过"""
        assert run_quick_test(verbose=False)
