import io

import pandas as pd
import pytest
import yaml
from typer.testing import CliRunner

from rtnorm.cli.generate import (
    app,
    generate_samples,
    load_sampling_config,
    parse_dict_as_namedtuple,
)
from rtnorm.basic_samplers import TruncatedNormalSampler

runner = CliRunner()


def _is_number(text):
    try:
        float(text)
    except ValueError:
        return False
    return True


@pytest.fixture
def yaml_config():
    return {
        "A": -1.0,
        "B": 2.0,
        "MU": 0.5,
        "SIGMA": 1.5,
        "N_SAMPLES": 250,
        "SEED": 7,
    }


def test_load_sampling_config_defaults():
    config = load_sampling_config()
    assert config == {
        "a": 1.0,
        "b": 9.0,
        "mu": 2.0,
        "sigma": 3.0,
        "n_samples": 100000,
        "seed": None,
    }


def test_load_sampling_config_override(yaml_config):
    # Use StringIO to create an in-memory file-like object
    yaml_buffer = io.StringIO()
    yaml.dump({"A": 0.5, "N_SAMPLES": 10}, yaml_buffer)
    yaml_buffer.seek(0)

    config = load_sampling_config(yaml_buffer)
    assert config["a"] == 0.5
    assert config["n_samples"] == 10
    # Untouched keys keep their defaults
    assert config["b"] == 9.0
    assert config["sigma"] == 3.0


def test_load_sampling_config_unknown_key():
    yaml_buffer = io.StringIO("A: 0.0\nLAMBDA: 2.0\n")
    with pytest.raises(ValueError, match="Unknown sampling configuration keys"):
        load_sampling_config(yaml_buffer)


def test_parse_dict_as_namedtuple():
    config = parse_dict_as_namedtuple({"A": 1.0, "N_SAMPLES": 3})
    assert config.a == 1.0
    assert config.n_samples == 3


def test_generate_samples_spans_chunks(monkeypatch):
    monkeypatch.setattr("rtnorm.cli.generate.CHUNK_SIZE", 40)
    sampler = TruncatedNormalSampler(0.0, 1.0, random_state=1)
    samples = generate_samples(sampler, 101)
    assert samples.shape == (101,)
    assert ((samples >= 0.0) & (samples <= 1.0)).all()


def test_cli_writes_csv(tmp_path):
    output = tmp_path / "out" / "samples.csv"
    result = runner.invoke(
        app,
        ["--a", "1", "--b", "9", "--mu", "2", "--sigma", "3", "-n", "500",
         "--seed", "3", "--output", str(output)],
    )
    assert result.exit_code == 0, result.output
    frame = pd.read_csv(output)
    assert list(frame.columns) == ["value"]
    assert len(frame) == 500
    assert frame["value"].between(1.0, 9.0).all()


def test_cli_prints_samples():
    result = runner.invoke(
        app, ["--a", "1", "--b", "9", "--mu", "2", "--sigma", "3", "-n", "5", "--seed", "1"]
    )
    assert result.exit_code == 0, result.output
    assert "underlying distribution: Normal(2.0, 3.0)" in result.output
    assert "truncated interval: [1.0, 9.0]" in result.output
    values = [float(line) for line in result.stdout.splitlines() if _is_number(line)]
    assert len(values) == 5
    assert all(1.0 <= v <= 9.0 for v in values)


def test_cli_seed_is_reproducible(tmp_path):
    args = ["--a", "0", "--b", "1", "-n", "50", "--seed", "11", "--output"]
    runner.invoke(app, [*args, str(tmp_path / "first.csv")])
    runner.invoke(app, [*args, str(tmp_path / "second.csv")])
    first = pd.read_csv(tmp_path / "first.csv")
    second = pd.read_csv(tmp_path / "second.csv")
    pd.testing.assert_frame_equal(first, second)


def test_cli_yaml_config(tmp_path, yaml_config):
    config_path = tmp_path / "config.yaml"
    config_path.write_text(yaml.dump(yaml_config))
    output = tmp_path / "samples.csv"

    result = runner.invoke(
        app, ["--config-path", str(config_path), "--output", str(output)]
    )
    assert result.exit_code == 0, result.output
    frame = pd.read_csv(output)
    assert len(frame) == 250
    assert frame["value"].between(-1.0, 2.0).all()


def test_cli_options_override_yaml(tmp_path, yaml_config):
    config_path = tmp_path / "config.yaml"
    config_path.write_text(yaml.dump(yaml_config))
    output = tmp_path / "samples.csv"

    result = runner.invoke(
        app,
        ["--config-path", str(config_path), "-n", "20", "--b", "-0.5",
         "--output", str(output)],
    )
    assert result.exit_code == 0, result.output
    frame = pd.read_csv(output)
    assert len(frame) == 20
    assert frame["value"].between(-1.0, -0.5).all()


def test_cli_invalid_interval_exits_with_error(tmp_path):
    output = tmp_path / "samples.csv"
    result = runner.invoke(
        app, ["--a", "2", "--b", "1", "-n", "10", "--output", str(output)]
    )
    assert result.exit_code == 1
    assert not output.exists()


def test_cli_show_table():
    result = runner.invoke(app, ["--show-table"])
    assert result.exit_code == 0, result.output
    assert "n_cells: 4001" in result.output
    assert "kmin: 5" in result.output
    assert "xmax:" in result.output


def test_cli_plot(tmp_path):
    plot = tmp_path / "hist.png"
    output = tmp_path / "samples.csv"
    result = runner.invoke(
        app,
        ["--a", "1", "--b", "9", "--mu", "2", "--sigma", "3", "-n", "200",
         "--seed", "5", "--output", str(output), "--plot", str(plot)],
    )
    assert result.exit_code == 0, result.output
    assert plot.exists()
    assert plot.stat().st_size > 0
