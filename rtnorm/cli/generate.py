#!/usr/bin/env -S uv run --script

import logging
from collections import namedtuple
from importlib.resources import as_file, files
from pathlib import Path
from pprint import pformat

import numpy as np
import pandas as pd
import tqdm
import typer
import yaml

from rtnorm.basic_samplers import TruncatedNormalSampler, get_partition_table
from rtnorm.exceptions import RtnormError
from rtnorm.support_utils.utils import truncnorm_moments, truncnorm_reference

app = typer.Typer(add_completion=False)

CHUNK_SIZE = 10_000


def _read_yaml(yaml_config_path) -> dict:
    # Handle both file paths and file-like objects (makes mock testing easier)
    if hasattr(yaml_config_path, "read"):
        loaded = yaml.safe_load(yaml_config_path)
    else:
        with open(yaml_config_path, "rb") as f:
            loaded = yaml.safe_load(f)
    return {k.lower(): v for k, v in (loaded or {}).items()}


def load_sampling_config(yaml_config_path=None) -> dict:
    """Load sampling settings, layering a YAML file over the packaged defaults.

    Keys are case-insensitive. Unknown keys raise ``ValueError``.
    """
    with as_file(files("rtnorm.cli") / "config_sampling.yaml") as default_config:
        config = _read_yaml(default_config)

    if yaml_config_path is not None:
        overrides = _read_yaml(yaml_config_path)
        unknown = sorted(set(overrides) - set(config))
        if unknown:
            raise ValueError(f"Unknown sampling configuration keys: {unknown}")
        config.update(overrides)
    return config


def parse_dict_as_namedtuple(d: dict, to_lowercase: bool = True):
    """Convert a dictionary to a named tuple."""
    d = {k.lower() if to_lowercase else k: v for k, v in d.items()}
    return namedtuple("Config", d.keys())(**d)


def generate_samples(sampler: TruncatedNormalSampler, n_samples: int) -> np.ndarray:
    """Draw ``n_samples`` values in chunks behind a progress bar."""
    chunks = []
    for start in tqdm.tqdm(
        range(0, n_samples, CHUNK_SIZE),
        desc="Drawing truncated normal samples",
        unit="chunk",
    ):
        chunks.append(sampler.sample(min(CHUNK_SIZE, n_samples - start)))
    return np.concatenate(chunks)


def plot_samples(samples: np.ndarray, config, path: Path) -> None:
    """Save a histogram of ``samples`` with the exact density overlaid."""
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    reference = truncnorm_reference(config.a, config.b, config.mu, config.sigma)
    grid = np.linspace(samples.min(), samples.max(), 400)

    fig, ax = plt.subplots(figsize=(8, 5))
    ax.hist(samples, bins=100, density=True, alpha=0.6, label="samples")
    ax.plot(grid, reference.pdf(grid), "r-", label="truncated normal pdf")
    ax.set_title(
        f"N({config.mu}, {config.sigma}^2) truncated to [{config.a}, {config.b}]"
    )
    ax.legend()
    fig.savefig(path)
    plt.close(fig)


log_level_option = typer.Option(
    "WARNING",
    "--log-level",
    "-l",
    help="Set the logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).",
    case_sensitive=False,
    show_default=True,
    rich_help_panel="Logging",
    metavar="LEVEL",
    autocompletion=lambda: ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
)

epilog = "Example: `rtnorm-generate --a 1 --b 9 --mu 2 --sigma 3 -n 100000 --output samples.csv`"


@app.command(epilog=epilog)
def main(
    config_path: Path = typer.Option(None, help="Path to the YAML configuration file."),
    a: float = typer.Option(None, "--a", help="Lower truncation bound."),
    b: float = typer.Option(None, "--b", help="Upper truncation bound."),
    mu: float = typer.Option(None, "--mu", help="Mean of the untruncated normal."),
    sigma: float = typer.Option(
        None, "--sigma", help="Standard deviation of the untruncated normal."
    ),
    n_samples: int = typer.Option(
        None, "--n-samples", "-n", help="Number of samples to draw.", min=1
    ),
    seed: int = typer.Option(None, "--seed", help="Seed of the random generator."),
    output: Path = typer.Option(
        None, help="CSV file to write; samples are printed when omitted."
    ),
    plot: Path = typer.Option(None, help="PNG file for a histogram of the samples."),
    show_table: bool = typer.Option(
        False, "--show-table", help="Print the partition table design constants."
    ),
    log_level: str = log_level_option,
):
    """
    Draw samples from a truncated normal distribution.
    """
    logging.basicConfig(
        level=log_level.upper(), format="%(asctime)s - %(levelname)s - %(message)s"
    )
    logger = logging.getLogger(__name__)

    if show_table:
        for key, value in get_partition_table().design_constants().items():
            typer.echo(f"{key}: {value}")
        return

    if config_path is None:
        logger.info("No config path provided, using default configuration.")
    config_dict = load_sampling_config(config_path)
    cli_overrides = {
        "a": a,
        "b": b,
        "mu": mu,
        "sigma": sigma,
        "n_samples": n_samples,
        "seed": seed,
    }
    config_dict.update({k: v for k, v in cli_overrides.items() if v is not None})
    config = parse_dict_as_namedtuple(config_dict)

    logger.debug("SAMPLING CONFIG")
    logger.debug(pformat(config_dict))

    try:
        sampler = TruncatedNormalSampler(
            a=config.a,
            b=config.b,
            mu=config.mu,
            sigma=config.sigma,
            random_state=config.seed,
        )
        samples = generate_samples(sampler, config.n_samples)
    except RtnormError as e:
        logger.error("Sampling failed: %s", e)
        raise typer.Exit(code=1) from e

    expected_mean, expected_var = truncnorm_moments(
        config.a, config.b, config.mu, config.sigma
    )
    logger.info(
        "Sample mean %.6f (expected %.6f), variance %.6f (expected %.6f)",
        np.mean(samples),
        expected_mean,
        np.var(samples),
        expected_var,
    )

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        pd.DataFrame({"value": samples}).to_csv(output, index=False)
        logger.info("Saved %d samples to: %s", samples.size, output)
    else:
        typer.echo(f"underlying distribution: Normal({config.mu}, {config.sigma})")
        typer.echo(f"truncated interval: [{config.a}, {config.b}]")
        for value in samples:
            typer.echo(f"{value:f}")

    if plot is not None:
        plot_samples(samples, config, plot)
        logger.info("Saved histogram to: %s", plot)


if __name__ == "__main__":
    app()
