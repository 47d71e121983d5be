#!/usr/bin/env python
"""
Generate neutrino-nucleon event kinematics from a source checkout.

Runs ``kinegen.runner.main`` without installing the package. Unless
``--output-dir`` is given, Data/ and Figures/ are written to the project
directory.

Options:
    --process {dis,res,qel}   process whose kinematics are sampled (default: dis)
    --energy GEV              probe energy in GeV
    --energy-spread FRAC      relative Gaussian spread of the probe energy
    -n, --events N            number of events
    --seed SEED               master random seed
    --workers N               worker threads sharing one max-xsec cache
    --model {constant,dipole} synthetic cross-section model
    --no-save                 skip the CSV export
    --no-plot                 skip the distribution figures
    --output-dir DIR          where Data/ and Figures/ are written
    -v, --verbose             debug logging (cache hits, grid searches)

Examples:
    python scripts/run_generation.py -n 5000 --process res
    python scripts/run_generation.py --energy 10 --energy-spread 0.1 --workers 4 --no-plot
"""

from pathlib import Path
import sys

# 源码目录运行时需要把项目根目录加入路径
project_dir = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_dir))

from kinegen.runner import main as runner_main


def main(argv=None):
    """脚本入口点：默认输出到项目目录"""
    argv = list(sys.argv[1:] if argv is None else argv)
    if not any(arg == "--output-dir" or arg.startswith("--output-dir=") for arg in argv):
        argv += ["--output-dir", str(project_dir)]
    runner_main(argv)


if __name__ == "__main__":
    main()
