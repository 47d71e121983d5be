"""
运动学生成器核心模块

该子包包含舍选抽样引擎的核心功能模块：
- constants: 物理常数（粒子质量）
- exceptions: 错误类型
- data_classes: 数据结构定义（InteractionContext, KinematicsPoint, SamplingResult 等）
- ranges: 运动学变量范围与用户截断
- models: 截面模型接口
- sampling: 随机数源与对数均匀抽样
- cache: 最大截面缓存
- grid_search: 相空间网格搜索
- sampler: 舍选抽样器
- kinematics: 运动学边界计算
- generators: 各物理过程的运动学生成器
- io_utils: 输入输出工具
"""

# 常数
from .constants import (
    ELECTRON_MASS,
    MUON_MASS,
    TAU_MASS,
    PION_MASS,
    PROTON_MASS,
    NEUTRON_MASS,
    NUCLEON_MASS,
    Q2_MIN_LIMIT,
    LEPTON_MASSES,
)

# 错误类型
from .exceptions import (
    KinematicsError,
    InfeasiblePhaseSpace,
    ModelError,
    RejectionBudgetExhausted,
    CacheConsistencyViolation,
)

# 数据类
from .data_classes import (
    Interval,
    Kinematics,
    InteractionContext,
    KinematicsPoint,
    CacheKey,
    CacheEntry,
    SamplingStatus,
    SamplingResult,
    SamplerConfig,
)

# 范围处理
from .ranges import (
    BoundsProvider,
    apply_cuts_to_limits,
    check_log_range,
    resolve_range,
    log_limits,
    log_grid,
)

# 截面模型
from .models import (
    CrossSectionModel,
    evaluate_cross_section,
    jacobian_weight,
    acceptance_weight,
    BaseCrossSection,
    MODELS,
)

# 抽样
from .sampling import (
    UniformSource,
    numpy_uniform_source,
    spawn_uniform_sources,
    sample_log_uniform,
    sample_probe_energy,
)

# 缓存
from .cache import (
    MaxXSecCache,
    energy_bin,
    make_cache_key,
)

# 网格搜索
from .grid_search import (
    PhaseSpaceGridSearch,
    GridSearchResult,
)

# 舍选抽样
from .sampler import (
    RejectionSampler,
    SamplerState,
    SamplerStatistics,
)

# 运动学
from .kinematics import (
    invariant_mass_squared,
    w_range,
    q2_range_at_w,
    w_q2_to_x_y,
)

# 物理过程
from .generators import (
    DISBounds,
    QELBounds,
    ProcessKinematics,
    PROCESS_KINEMATICS,
    build_sampler,
    set_kine_x_y,
)

# IO工具
from .io_utils import export_sampling_results_to_csv

__all__ = [
    # 常数
    'ELECTRON_MASS',
    'MUON_MASS',
    'TAU_MASS',
    'PION_MASS',
    'PROTON_MASS',
    'NEUTRON_MASS',
    'NUCLEON_MASS',
    'Q2_MIN_LIMIT',
    'LEPTON_MASSES',
    # 错误类型
    'KinematicsError',
    'InfeasiblePhaseSpace',
    'ModelError',
    'RejectionBudgetExhausted',
    'CacheConsistencyViolation',
    # 数据类
    'Interval',
    'Kinematics',
    'InteractionContext',
    'KinematicsPoint',
    'CacheKey',
    'CacheEntry',
    'SamplingStatus',
    'SamplingResult',
    'SamplerConfig',
    # 范围
    'BoundsProvider',
    'apply_cuts_to_limits',
    'check_log_range',
    'resolve_range',
    'log_limits',
    'log_grid',
    # 截面模型
    'CrossSectionModel',
    'evaluate_cross_section',
    'jacobian_weight',
    'acceptance_weight',
    'BaseCrossSection',
    'MODELS',
    # 抽样
    'UniformSource',
    'numpy_uniform_source',
    'spawn_uniform_sources',
    'sample_log_uniform',
    'sample_probe_energy',
    # 缓存
    'MaxXSecCache',
    'energy_bin',
    'make_cache_key',
    # 网格搜索
    'PhaseSpaceGridSearch',
    'GridSearchResult',
    # 舍选抽样
    'RejectionSampler',
    'SamplerState',
    'SamplerStatistics',
    # 运动学
    'invariant_mass_squared',
    'w_range',
    'q2_range_at_w',
    'w_q2_to_x_y',
    # 物理过程
    'DISBounds',
    'QELBounds',
    'ProcessKinematics',
    'PROCESS_KINEMATICS',
    'build_sampler',
    'set_kine_x_y',
    # IO
    'export_sampling_results_to_csv',
]
