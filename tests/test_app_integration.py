from __future__ import annotations

import io
import json
from pathlib import Path

import pytest

from prnglab.__main__ import (
    EXIT_INVALID_CONFIG,
    EXIT_INVALID_PARAMETERS,
    EXIT_MISSING_FILE,
    EXIT_SUCCESS,
    main,
)
from prnglab.app import PrngLabApp
from prnglab.errors import InvalidConfigurationError

CONFIG_TEMPLATE = """
[generator]
algorithm = lcg
seeds = 12345
multiplier = 1103515245
increment = 12345
modulus = 2147483648
mode = count
count = 500

[distribution]
name = uniform
params = 0, 1

[output]
log_results = true
log_path = logs/history.jsonl
""".strip()


def _write_config(tmp_path: Path, content: str = CONFIG_TEMPLATE) -> Path:
    config_path = tmp_path / "config.ini"
    config_path.write_text(content, encoding="utf-8")
    return config_path


def test_app_run_generates_and_tests(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path)
    app = PrngLabApp(stream=io.StringIO())

    result = app.run(config_path=config_path, report_path=tmp_path / "report.md", verbose=True)

    assert result.total_entries == 500
    assert result.source == "generator:lcg"
    assert result.sequence.terminated_by == "count"
    assert [test.name for test in result.randomness.results] == [
        "mean_variance",
        "chi_square",
        "runs",
        "run_length",
        "gaps",
        "poker",
    ]
    assert result.samples.consumed == 500
    assert len(result.distribution.results) == 2
    assert result.sample_summary.count == 500
    assert (tmp_path / "report.md").exists()

    log_lines = (tmp_path / "logs" / "history.jsonl").read_text(encoding="utf-8").splitlines()
    assert len(log_lines) == 1
    assert json.loads(log_lines[0])["entries"] == 500


def test_app_run_reads_input_file(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path, "[randomness]\npoker = false\n")
    input_path = tmp_path / "values.txt"
    input_path.write_text("\n".join(str((idx * 37 % 100) / 100) for idx in range(100)), encoding="utf-8")
    buffer = io.StringIO()

    result = PrngLabApp(stream=buffer).run(config_path=config_path, input_path=input_path)

    assert result.sequence is None
    assert result.input_path == input_path.resolve()
    assert result.total_entries == 100
    assert "poker" not in [test.name for test in result.randomness.results]
    assert result.distribution is None
    assert buffer.getvalue().startswith("Result:")


def test_app_requires_a_value_source(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path, "[randomness]\nruns = true\n")

    with pytest.raises(InvalidConfigurationError):
        PrngLabApp(stream=io.StringIO()).run(config_path=config_path)


def test_main_returns_success(tmp_path: Path, capsys) -> None:
    config_path = _write_config(tmp_path)

    exit_code = main(["--config", str(config_path), "--report", str(tmp_path / "out.md")])

    assert exit_code == EXIT_SUCCESS
    assert capsys.readouterr().out.startswith("Result:")


def test_main_reports_missing_config(tmp_path: Path, capsys) -> None:
    exit_code = main(["--config", str(tmp_path / "absent.ini")])

    assert exit_code == EXIT_MISSING_FILE
    assert "not found" in capsys.readouterr().err


def test_main_reports_invalid_config(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path, "[generator]\nalgorithm = lcg\nmode = sometimes\n")

    assert main(["--config", str(config_path)]) == EXIT_INVALID_CONFIG


def test_main_reports_structural_violation(tmp_path: Path, capsys) -> None:
    config_path = _write_config(tmp_path, "[generator]\nalgorithm = bbs\nseeds = 3\np = 5\nq = 11\n")

    exit_code = main(["--config", str(config_path)])

    assert exit_code == EXIT_INVALID_PARAMETERS
    assert "Blum Blum Shub" in capsys.readouterr().err


@pytest.mark.parametrize(
    ("distribution", "params", "samples", "consumed"),
    [("exponential", "1.0", 15, 15), ("erlang", "2, 1.0", 7, 14)],
)
def test_app_skips_uniforms_outside_transform_domain(
    tmp_path: Path, distribution: str, params: str, samples: int, consumed: int
) -> None:
    content = (
        "[generator]\nalgorithm = lcg\nseeds = 7\nmultiplier = 5\nincrement = 3\nmodulus = 16\n\n"
        f"[distribution]\nname = {distribution}\nparams = {params}\n"
    )
    config_path = _write_config(tmp_path, content)
    app = PrngLabApp(stream=io.StringIO())

    result = app.run(config_path=config_path, report_path=tmp_path / "report.md")

    assert result.total_entries == 16
    assert len(result.samples.values) == samples
    assert result.samples.consumed == consumed
    assert result.samples.rejected == 1
    assert "Uniforms rejected:** 1" in (tmp_path / "report.md").read_text(encoding="utf-8")


def test_main_succeeds_for_full_period_erlang(tmp_path: Path) -> None:
    content = (
        "[generator]\nalgorithm = lcg\nseeds = 7\nmultiplier = 5\nincrement = 3\nmodulus = 16\n\n"
        "[distribution]\nname = erlang\nparams = 2, 1\n"
    )
    config_path = _write_config(tmp_path, content)

    exit_code = main(["--config", str(config_path), "--report", str(tmp_path / "report.md")])

    assert exit_code == EXIT_SUCCESS
