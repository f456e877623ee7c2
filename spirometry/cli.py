"""
cli.py
======
Batch percent-of-predicted calculation from the command line

Reads observations from CSV, applies one reference equation and writes the
input rows back with predicted_<measure> (and pct_predicted_<measure> when
an observed column is given).

Usage:
    spirometry knudson --input obs.csv --output out.csv --measure fev --observed-column fev
    spirometry wang --input obs.csv --output out.csv --measure fvc --adult
    spirometry run --config batch.json
    spirometry plot-coefficients --output wang_coefs.png
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from . import __version__
from .config import BATCH_REQUIRED_FIELDS, EQUATION_CONFIGS, LOG_DATE_FORMAT, LOG_FORMAT, LOG_LEVEL
from .exceptions import ConfigurationError, UsageError
from .knudson import KnudsonEquation
from .wang import WangEquation

logger = logging.getLogger(__name__)

EQUATION_CLASSES = {
    'knudson': KnudsonEquation,
    'wang': WangEquation,
}

# ============================================================================
# LOGGING
# ============================================================================


def setup_logging(level: str = LOG_LEVEL, log_file: Optional[str] = None) -> None:
    """Console handler plus optional UTF-8 log file on the package logger"""
    package_logger = logging.getLogger('spirometry')
    package_logger.setLevel(level.upper())
    for handler in list(package_logger.handlers):
        handler.close()
        package_logger.removeHandler(handler)
    package_logger.propagate = False

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    package_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setFormatter(formatter)
        package_logger.addHandler(file_handler)

# ============================================================================
# BATCH CONFIGURATION
# ============================================================================


def load_batch_config(config_path: str) -> Dict[str, Any]:
    """Load and validate a JSON batch configuration"""
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with open(path, 'r', encoding='utf-8') as f:
        try:
            settings = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Could not parse {path}: {e}") from e

    validate_batch_config(settings)
    return settings


def validate_batch_config(settings: Dict[str, Any]) -> None:
    for field in BATCH_REQUIRED_FIELDS:
        if field not in settings:
            raise ConfigurationError(f"Missing required field in config: {field}")

    if settings['equation'] not in EQUATION_CONFIGS:
        raise ConfigurationError(
            f"Unknown equation '{settings['equation']}' (expected one of {sorted(EQUATION_CONFIGS)})"
        )

    if not isinstance(settings['measure'], str):
        raise ConfigurationError("'measure' must be a single measure name")

    if settings.get('adult') and settings['equation'] != 'wang':
        raise ConfigurationError("'adult' only applies to the wang equation")


def run_batch(settings: Dict[str, Any]) -> pd.DataFrame:
    """
    Evaluate one CSV file as described by a batch configuration.

    Args:
        settings: equation, measure, input, output; optional observed_column,
            columns (input name -> CSV column) and adult (wang only)

    Returns:
        The DataFrame written to settings['output']
    """
    validate_batch_config(settings)
    equation = EQUATION_CLASSES[settings['equation']]()

    input_path = Path(settings['input'])
    if not input_path.exists():
        raise FileNotFoundError(f"Input file not found: {input_path}")

    frame = pd.read_csv(input_path)
    logger.info(f"Loaded {len(frame):,} observations from {input_path}")

    options = {'adult': bool(settings.get('adult', False))} if settings['equation'] == 'wang' else {}
    result = equation.evaluate_frame(
        frame,
        measure=settings['measure'],
        observed_column=settings.get('observed_column'),
        columns=settings.get('columns'),
        **options,
    )

    output_path = Path(settings['output'])
    output_path.parent.mkdir(parents=True, exist_ok=True)
    result.to_csv(output_path, index=False)
    logger.info(f"Saved {len(result):,} rows to {output_path}")

    return result

# ============================================================================
# MAIN EXECUTION
# ============================================================================


def _add_equation_parser(subparsers, name: str, help_text: str) -> argparse.ArgumentParser:
    parser = subparsers.add_parser(name, help=help_text)
    parser.add_argument('--input', required=True, help='CSV file with one row per observation')
    parser.add_argument('--output', required=True, help='CSV file to write')
    parser.add_argument('--measure', required=True,
                        choices=EQUATION_CONFIGS[name]['measures'], help='Spirometry measure')
    parser.add_argument('--observed-column', default=None,
                        help='Column with observed values; adds percent of predicted')
    parser.add_argument('--sex-column', default='sex')
    parser.add_argument('--age-column', default='age')
    parser.add_argument('--height-column', default='height')
    return parser


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='spirometry',
        description='Predicted and percent-of-predicted spirometry (Knudson 1983, Wang 1993)',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
    Examples:
    spirometry knudson --input obs.csv --output out.csv --measure fev --observed-column fev
    spirometry wang --input obs.csv --output out.csv --measure fvc --adult
    spirometry run --config batch.json
            """
    )
    parser.add_argument('--version', action='version', version=f"%(prog)s {__version__}")
    parser.add_argument('--log-level', default=LOG_LEVEL,
                        help='DEBUG, INFO, WARNING, ERROR (default: $SPIROMETRY_LOG_LEVEL or WARNING)')
    parser.add_argument('--log-file', default=None, help='Also write log records to this file')

    subparsers = parser.add_subparsers(dest='command', required=True)

    _add_equation_parser(subparsers, 'knudson', 'Knudson (1983): sex 1/2, height in cm')

    wang = _add_equation_parser(subparsers, 'wang', "Wang (1993): sex 'm'/'f', height in m")
    wang.add_argument('--race-column', default='race')
    wang.add_argument('--adult', action='store_true',
                      help='Apply the 18 year old equations to ages 19 and over')

    run = subparsers.add_parser('run', help='Run a batch described by a JSON file')
    run.add_argument('--config', required=True, help='Path to JSON configuration file')

    plot = subparsers.add_parser('plot-coefficients', help='Draw the Wang coefficient diagnostic')
    plot.add_argument('--output', required=True, help='Image file to write (e.g. PNG)')

    return parser


def _settings_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    columns = {'sex': args.sex_column, 'age': args.age_column, 'height': args.height_column}
    settings = {
        'equation': args.command,
        'measure': args.measure,
        'input': args.input,
        'output': args.output,
        'observed_column': args.observed_column,
        'columns': columns,
    }
    if args.command == 'wang':
        columns['race'] = args.race_column
        settings['adult'] = args.adult
    return settings


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level, args.log_file)

    try:
        if args.command == 'plot-coefficients':
            from .plots import plot_wang_coefficients
            plot_wang_coefficients(output_path=args.output)
            return 0

        if args.command == 'run':
            settings = load_batch_config(args.config)
        else:
            settings = _settings_from_args(args)

        result = run_batch(settings)

    except (UsageError, ConfigurationError, FileNotFoundError) as e:
        logger.error(f"ERROR: {e}")
        return 1

    predicted_column = f"predicted_{settings['measure']}"
    missing = int(result[predicted_column].isna().sum())
    logger.info(f"Done: {len(result):,} rows, {missing:,} without a prediction")
    return 0


if __name__ == '__main__':
    sys.exit(main())
