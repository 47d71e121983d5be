"""
Plotting subpackage for generated kinematics.

This subpackage provides visualization tools for:
- Histograms and scatter plots of accepted kinematics
- Comparisons of sampled distributions with analytic densities
- Run statistics

Example usage:
    from kinegen.plotting import load_event_data, visualize_kinematics

    events = load_event_data('Data/kinematics_events.csv')
    visualize_kinematics(results, variables=("W", "Q2"), save_path='Figures/kinematics')
"""

from .results import (
    load_event_data,
    visualize_kinematics,
    plot_density_comparison,
    print_statistics,
)

__all__ = [
    "load_event_data",
    "visualize_kinematics",
    "plot_density_comparison",
    "print_statistics",
]
