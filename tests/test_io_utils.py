"""
数据导出与事例生成流程的单元测试
"""

import runpy
from pathlib import Path

import matplotlib
matplotlib.use("Agg")

import numpy as np
import pytest

from kinegen import (
    InteractionContext,
    MaxXSecCache,
    SamplingResult,
    SamplingStatus,
    build_contexts,
    build_sampler,
    export_sampling_results_to_csv,
    generate_events,
    run_generation,
)
from kinegen.plotting import load_event_data, plot_density_comparison
from kinegen import runner
from kinegen.core import models
from kinegen.runner import build_model, main
from kinegen.testing import DipoleToyCrossSection

SCRIPT = Path(__file__).resolve().parent.parent / "scripts" / "run_generation.py"


@pytest.fixture
def dis_events():
    sampler = build_sampler("dis", DipoleToyCrossSection(), MaxXSecCache())
    contexts = build_contexts("dis", 20, 5.0, seed=1)
    results = generate_events(sampler, contexts, seed=2, progress=False)
    return sampler, results, contexts


class TestCsvExport:
    """测试 CSV 导出"""

    def test_export_and_load(self, tmp_path, dis_events):
        """测试导出后可以读回"""
        sampler, results, contexts = dis_events
        path = export_sampling_results_to_csv(results, contexts, str(tmp_path / "events.csv"),
                                              variables=sampler.variables)
        events = load_event_data(path)

        assert len(events) == 20
        for column in ("W", "Q2", "x", "y", "diff_xsec", "attempts", "cache_hit"):
            assert column in events.columns
        assert events['W'].tolist() == pytest.approx([r.point['W'] for r in results])

    def test_failed_events_filtered(self, tmp_path):
        """测试读取时过滤失败事例"""
        contexts = [InteractionContext(probe_energy=5.0), InteractionContext(probe_energy=5.0)]
        results = [
            SamplingResult(status=SamplingStatus.ACCEPTED, point=None, xsec=1.0, max_xsec=1.25),
            SamplingResult(status=SamplingStatus.BUDGET_EXHAUSTED, max_xsec=1.25, attempts=5),
        ]
        path = export_sampling_results_to_csv(results, contexts, str(tmp_path / "mixed.csv"))

        assert len(load_event_data(path, accepted_only=False)) == 2
        assert len(load_event_data(path)) == 1

    def test_empty_results(self, tmp_path):
        """测试无结果时不写文件"""
        assert export_sampling_results_to_csv([], [], str(tmp_path / "empty.csv")) is None
        assert not (tmp_path / "empty.csv").exists()

    def test_length_mismatch(self, tmp_path, dis_events):
        """测试结果与上下文数量不一致时报错"""
        _, results, contexts = dis_events
        with pytest.raises(ValueError):
            export_sampling_results_to_csv(results, contexts[:-1], str(tmp_path / "bad.csv"))


class TestRunner:
    """测试事例生成流程"""

    def test_energy_spread(self):
        """测试能量展宽"""
        contexts = build_contexts("dis", 50, 5.0, energy_spread=0.1, seed=3)
        energies = {ctx.probe_energy for ctx in contexts}
        assert len(energies) == 50
        assert all(e > 0.0 for e in energies)

    def test_thread_count_does_not_change_results(self):
        """测试线程数不影响抽样结果"""
        def run(n_workers):
            sampler = build_sampler("dis", DipoleToyCrossSection(), MaxXSecCache())
            contexts = build_contexts("dis", 40, 5.0, seed=4)
            results = generate_events(sampler, contexts, seed=5, n_workers=n_workers, progress=False)
            return [r.point.as_tuple() for r in results]

        assert run(1) == run(4)

    def test_run_generation_outputs(self, tmp_path):
        """测试完整流程输出数据与图像"""
        results, contexts = run_generation(process="qel", energy_gev=2.0, n_events=30, seed=6,
                                           output_dir=tmp_path)

        assert len(results) == len(contexts) == 30
        assert all(r.accepted for r in results)
        assert (tmp_path / "Data" / "kinematics_events.csv").exists()
        assert (tmp_path / "Figures" / "kinematics_distributions.png").exists()

    def test_command_line(self, tmp_path):
        """测试命令行入口"""
        main(["--process", "res", "-n", "10", "--no-plot", "--output-dir", str(tmp_path)])
        assert len(load_event_data(tmp_path / "Data" / "kinematics_events.csv")) == 10

    def test_unknown_model(self):
        """测试未知模型报错"""
        with pytest.raises(KeyError):
            build_model("nonexistent")

    def test_models_registered_in_core(self):
        """测试命令行模型注册表位于核心包"""
        assert runner.MODELS is models.MODELS
        assert set(models.MODELS) == {"constant", "dipole"}
        assert isinstance(build_model("constant"), models.ConstantCrossSection)
        assert isinstance(build_model("dipole"), DipoleToyCrossSection)

    def test_script_forwards_arguments(self, tmp_path):
        """测试脚本把命令行参数转交给运行器"""
        script = runpy.run_path(str(SCRIPT))
        script["main"](["--process", "qel", "-n", "5", "--no-plot", "--output-dir", str(tmp_path)])
        assert len(load_event_data(tmp_path / "Data" / "kinematics_events.csv")) == 5


class TestPlotting:
    """测试绘图输出"""

    def test_density_comparison_saved(self, tmp_path):
        """测试抽样分布与解析密度对比图"""
        samples = np.random.default_rng(7).uniform(1.0, 10.0, 500)
        plot_density_comparison(samples, lambda x: np.full_like(x, 1.0 / 9.0), "x",
                                save_path=str(tmp_path / "uniform"))
        assert (tmp_path / "uniform_density.png").exists()
