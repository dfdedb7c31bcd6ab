"""Core spectrum inspection/conversion logic.

This module contains the actual runner, separated from the thin script
wrapper in ``scripts/inspect_spectra.py``. It resolves configuration
(Param < User < CLI), decodes every file given, prints a one-line summary
per spectrum and optionally converts the results.
"""

import argparse
import importlib.util
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from edsio.contracts import DecodeError
from edsio.model import Spectrum, SpectrumProperty as P
from edsio.registry import read_spectra
from edsio.schemas import CLIConfig, InternalConfig, ParamConfig, UserConfig, resolve_config
from edsio.writers import write_csv, write_emsa, write_netcdf, write_summary

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATEFMT = '%Y-%m-%d %H:%M:%S'


def load_user_config_dict(config_path: str) -> dict:
    """Load user config dict from Python file.

    Returns the raw dict before Pydantic validation.

    Parameters
    ----------
    config_path : str
        Path to user config Python file containing CONFIG dict.

    Returns
    -------
    dict
        Raw user configuration dictionary.

    Raises
    ------
    FileNotFoundError
        If config file does not exist.
    ValueError
        If no CONFIG dict found in file.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")

    spec = importlib.util.spec_from_file_location("config_module", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    # Find CONFIG dict
    for name in dir(module):
        if name.startswith('CONFIG'):
            obj = getattr(module, name)
            if isinstance(obj, dict):
                return obj

    raise ValueError(f"No CONFIG dict found in {path}")


def configure_logging(level: str = "INFO") -> None:
    """Route log records to stderr. Only the command line configures handlers."""
    log_level = getattr(logging, level.upper(), logging.INFO)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)

    root = logging.getLogger()
    root.setLevel(log_level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(log_level)
    ch.setFormatter(formatter)
    root.addHandler(ch)


def build_config(config_path: Optional[str] = None, cli_args: Optional[dict] = None) -> InternalConfig:
    """Resolve the runtime configuration from an optional user file and CLI overrides."""
    user_cfg = UserConfig.model_validate(load_user_config_dict(config_path)) if config_path else UserConfig()
    cli_dict = {k: v for k, v in (cli_args or {}).items() if v is not None}
    cli_cfg = CLIConfig.model_validate(cli_dict) if cli_dict else CLIConfig()
    return resolve_config(ParamConfig(), user_cfg, cli_cfg)


def describe(spectrum: Spectrum) -> str:
    """One-line human summary of a spectrum."""
    props = spectrum.properties()
    parts = [
        props.get_text(P.SourceFileId, "") or spectrum.display_name(),
        f"{spectrum.channel_count()} ch",
        f"{spectrum.offset:g} eV + {spectrum.width:g} eV/ch",
        f"{spectrum.channels.sum():.0f} counts",
    ]
    for prop in (P.BeamEnergy, P.LiveTime, P.RealTime):
        value = props.get_number(prop)
        if value is not None:
            parts.append(f"{prop.label} {value:g} {prop.unit}".rstrip())
    when = props.get(P.AcquisitionTime)
    if when is not None:
        parts.append(when.isoformat())
    return " | ".join(parts)


def _output_name(path: Path, index: int, count: int, suffix: str) -> str:
    return f"{path.stem}{suffix}" if count == 1 else f"{path.stem}_{index + 1}{suffix}"


def inspect_files(
    files: Sequence[str],
    config: InternalConfig,
    emsa_dir: Optional[str] = None,
    csv_dir: Optional[str] = None,
    netcdf_path: Optional[str] = None,
    summary_path: Optional[str] = None,
) -> tuple[list[Spectrum], list[str]]:
    """Decode ``files``, print summaries and write the requested outputs.

    A file that cannot be decoded is logged and skipped; the rest are
    still processed.

    Returns
    -------
    spectra : list of Spectrum
        Everything decoded, in input order.
    failed : list of str
        Files that could not be decoded.
    """
    spectra: list[Spectrum] = []
    failed: list[str] = []
    for name in files:
        path = Path(name)
        try:
            found = read_spectra(path, config)
        except (DecodeError, OSError) as e:
            logger.error("Failed to read %s: %s", path, e)
            failed.append(name)
            continue
        for idx, spectrum in enumerate(found):
            print(describe(spectrum))
            if emsa_dir:
                out = Path(emsa_dir)
                out.mkdir(parents=True, exist_ok=True)
                write_emsa(spectrum, out / _output_name(path, idx, len(found), ".msa"), config)
            if csv_dir:
                out = Path(csv_dir)
                out.mkdir(parents=True, exist_ok=True)
                write_csv(spectrum, out / _output_name(path, idx, len(found), ".csv"), config=config)
        spectra.extend(found)

    if spectra and netcdf_path:
        write_netcdf(spectra, netcdf_path)
    if spectra and summary_path:
        write_summary(spectra, summary_path)
    return spectra, failed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="edsio-inspect",
        description="Identify, summarise and convert vendor EDS/XRF spectrum files",
    )
    parser.add_argument("files", nargs="+", help="Spectrum files to read")
    parser.add_argument("--config", help="Path to user config file (Python file with CONFIG dict)")
    parser.add_argument("--emsa", metavar="OUTDIR", help="Write every spectrum as EMSA into OUTDIR")
    parser.add_argument("--csv", metavar="OUTDIR", help="Write every spectrum as CSV into OUTDIR")
    parser.add_argument("--netcdf", metavar="FILE", help="Write all spectra into one NetCDF file")
    parser.add_argument("--summary", metavar="FILE", help="Write a per-spectrum table (.parquet or .csv)")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        help="Override log level")
    parser.add_argument("--no-elevation-fix", action="store_true",
                        help="Keep vendor detector elevations unchanged")
    parser.add_argument("--fail-fast", action="store_true",
                        help="Treat any corruption as fatal instead of returning partial data")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    cli_args = {
        "log_level": "DEBUG" if args.verbose else args.log_level,
        "failure_policy": "fail_fast" if args.fail_fast else None,
        "fix_elevation": False if args.no_elevation_fix else None,
    }
    config = build_config(args.config, cli_args)
    configure_logging(config.logging.level)

    if args.verbose:
        print("Full Internal Configuration:")
        print(json.dumps(config.model_dump(), indent=2))

    spectra, failed = inspect_files(
        args.files, config,
        emsa_dir=args.emsa,
        csv_dir=args.csv,
        netcdf_path=args.netcdf,
        summary_path=args.summary,
    )
    logger.info("Read %d spectra from %d files (%d failed)", len(spectra), len(args.files), len(failed))
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
