"""
plots.py
========
Diagnostic figures for the coefficient tables

- plot_wang_coefficients: alpha/beta against age, faceted by measure and
  race/sex. Transcription mistakes show up as spikes in otherwise smooth lines.
- plot_knudson_curves: predicted values across age for fixed heights. Shows
  the steps at the stratum boundaries.

Figures are returned; when output_path is given they are also saved
(300 dpi) and closed.
"""

import logging
from pathlib import Path
from typing import Optional, Sequence, Union

import matplotlib.pyplot as plt
import numpy as np
import seaborn as sns

from .coefficients import CoefficientTable
from .knudson import KnudsonEquation
from .tables import WANG_TABLE

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def _save(fig: plt.Figure, output_path: Optional[PathLike]) -> None:
    if output_path is None:
        return
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(output_path, dpi=300, bbox_inches='tight')
    plt.close(fig)
    logger.info(f"Saved figure: {output_path}")


def plot_wang_coefficients(table: CoefficientTable = WANG_TABLE,
                           output_path: Optional[PathLike] = None) -> plt.Figure:
    """
    Facet grid of Wang alpha and beta by age.

    Rows are measures, columns are race/sex groups.
    """
    frame = table.frame
    frame['group'] = frame['race'] + ' ' + frame['sex']
    long = frame.melt(id_vars=['measure', 'group', 'age_lb'], value_vars=['alpha', 'beta'],
                      var_name='coef', value_name='value')

    grid = sns.relplot(
        data=long, x='age_lb', y='value', hue='coef',
        row='measure', col='group', row_order=table.measures,
        kind='line', palette=sns.color_palette('magma', n_colors=2),
        height=2.2, aspect=1.3,
    )
    grid.set(xticks=list(range(6, 19, 2)))
    grid.set_axis_labels('Age (years)', 'Coefficient')
    grid.figure.suptitle('Wang (1993) coefficients', y=1.02)

    _save(grid.figure, output_path)
    return grid.figure


def plot_knudson_curves(measure: str = 'fev',
                        heights: Sequence[float] = (130.0, 155.0, 175.0),
                        ages: Optional[np.ndarray] = None,
                        equation: Optional[KnudsonEquation] = None,
                        output_path: Optional[PathLike] = None) -> plt.Figure:
    """
    Predicted Knudson values across age for each sex at fixed heights (cm).
    """
    equation = equation or KnudsonEquation()
    ages = np.arange(6.0, 80.5, 0.5) if ages is None else np.asarray(ages, dtype=float)

    fig, axes = plt.subplots(1, 2, figsize=(12, 5), sharey=True)
    colors = sns.color_palette('viridis', n_colors=len(heights))

    for ax, (sex_code, label) in zip(axes, equation.config['sex_codes'].items()):
        for color, height in zip(colors, heights):
            predicted = equation.predicted(
                sex=np.full(len(ages), sex_code), age=ages,
                height=np.full(len(ages), height), measure=measure,
            )
            ax.plot(ages, predicted.to_numpy(dtype=float, na_value=np.nan),
                    color=color, label=f"{height:g} cm")

        for edge in equation.age_bins[sex_code][1:-1]:
            ax.axvline(edge, color='grey', linestyle=':', linewidth=1)

        ax.set_title(f"{label.capitalize()}")
        ax.set_xlabel('Age (years)')
        ax.grid(True, alpha=0.3)

    axes[0].set_ylabel(f"Predicted {measure}")
    axes[1].legend(title='Height')
    fig.suptitle(f"{equation.name}: predicted {measure} by age", fontweight='bold')
    plt.tight_layout()

    _save(fig, output_path)
    return fig
