"""
运动学生成器基本使用示例

这个示例展示了如何使用 kinegen 包的基本功能。
"""

import numpy as np

# 导入主要模块
from kinegen import (
    # 数据类
    InteractionContext,
    SamplerConfig,

    # 常数
    MUON_MASS,

    # 功能函数
    MaxXSecCache,
    RejectionSampler,
    build_sampler,
    w_range,
    q2_range_at_w,
    numpy_uniform_source,
)

# 导入子包
from kinegen.testing import (
    ConstantCrossSection,
    DipoleToyCrossSection,
    scenario_w_q2_bounds,
    run_quick_test,
)


def example_kinematic_limits():
    """运动学边界计算示例"""
    print("=" * 60)
    print("运动学边界计算示例")
    print("=" * 60)

    context = InteractionContext(probe_energy=5.0, final_lepton_mass=MUON_MASS)
    w = w_range(context)
    print(f"\nE = {context.probe_energy} GeV, mu 轻子")
    print(f"W 范围: [{w.lo:.4f}, {w.hi:.4f}] GeV")

    # 不同 W 下的 Q2 范围
    for value in np.linspace(w.lo, w.hi, 5)[:-1]:
        q2 = q2_range_at_w(context, value)
        print(f"  W = {value:.3f} GeV: Q2 范围 [{q2.lo:.4g}, {q2.hi:.4g}] GeV^2")


def example_constant_model():
    """常数截面抽样示例"""
    print("\n" + "=" * 60)
    print("常数截面舍选抽样示例")
    print("=" * 60)

    cache = MaxXSecCache()
    sampler = RejectionSampler(("W", "Q2"), scenario_w_q2_bounds(), ConstantCrossSection(2.0), cache)
    context = InteractionContext(probe_energy=5.0)
    uniform = numpy_uniform_source(42)

    for i in range(5):
        result = sampler.generate(context, uniform)
        print(f"  样本 {i+1}: W = {result.point['W']:.4f}, Q2 = {result.point['Q2']:.4f}, "
              f"拒绝次数 = {result.attempts}, 缓存命中 = {result.cache_hit}")

    print(f"\n缓存最大截面: {result.max_xsec:.3f} (网格最大值 2.0 x 安全系数 1.25)")
    print(f"接受率: {sampler.statistics.acceptance_rate:.3f}")


def example_dis_process():
    """深度非弹性散射运动学示例"""
    print("\n" + "=" * 60)
    print("DIS 运动学抽样示例")
    print("=" * 60)

    cache = MaxXSecCache()
    config = SamplerConfig(user_ranges={"Q2": (0.5, 100.0)})
    sampler = build_sampler("dis", DipoleToyCrossSection(), cache, config, numpy_uniform_source(7))

    context = InteractionContext(probe_energy=10.0, process="dis", final_lepton_mass=MUON_MASS)
    for i in range(5):
        result = sampler.generate(context)
        derived = context.kinematics.derived
        print(f"  事件 {i+1}: W = {result.point['W']:.3f}, Q2 = {result.point['Q2']:.3f}, "
              f"x = {derived['x']:.3f}, y = {derived['y']:.3f}")

    stats = cache.statistics()
    print(f"\n网格搜索次数: {sampler.statistics.grid_searches}, 缓存命中: {stats['hits']}")


def example_validation():
    """验证测试示例"""
    print("\n" + "=" * 60)
    print("抽样模块验证")
    print("=" * 60)

    run_quick_test()


def main():
    """主函数"""
    print("\n" + "=" * 60)
    print("运动学生成器基本使用示例")
    print("=" * 60)

    # 运行各个示例
    example_kinematic_limits()
    example_constant_model()
    example_dis_process()
    example_validation()

    print("\n" + "=" * 60)
    print("示例完成！")
    print("=" * 60)


if __name__ == "__main__":
    main()
