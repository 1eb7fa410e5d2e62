# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

import logging

import pytest
from stagflow.cli import main


@pytest.fixture
def reset_stagflow_logger():
    logger = logging.getLogger("stagflow")
    handlers, level = list(logger.handlers), logger.level
    yield
    for h in logger.handlers:
        if h not in handlers:
            h.close()
    logger.handlers = handlers
    logger.setLevel(level)


@pytest.mark.slow
def test_cli_writes_results(tmp_path, capsys, reset_stagflow_logger):
    main(["-N", "8", "8", "4", "--n-iter", "2", "--name", "tiny",
          "--outdir", str(tmp_path)])
    assert (tmp_path / "tiny.json").exists()
    assert (tmp_path / "tiny_summary.csv").exists()
    assert (tmp_path / "tiny.log").exists()
    out = capsys.readouterr().out
    assert "divergence" in out


def test_cli_rejects_bad_size(tmp_path):
    with pytest.raises(SystemExit):
        main(["-N", "8", "8", "--outdir", str(tmp_path)])
