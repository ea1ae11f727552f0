from __future__ import annotations

import json
import sys
from subprocess import run as subprocess_run  # noqa: S404
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path


def test_cli_search_and_validate_static_options(tmp_path: Path) -> None:
    options = tmp_path / "countries.json"
    options.write_text(
        json.dumps(
            [
                {"key": "fr", "label": "France"},
                {"key": "de", "label": "Germany"},
                {"key": "pt", "label": "Portugal"},
            ],
        ),
        encoding="utf-8",
    )

    search = subprocess_run(  # noqa: S603
        [sys.executable, "-m", "searchselect.cli", "search", "--options", str(options), "--query", "GER"],
        capture_output=True,
        text=True,
        check=False,
        cwd=tmp_path,
    )
    assert search.returncode == 0
    assert json.loads(search.stdout) == [{"key": "de", "label": "Germany", "disabled": False}]

    validate = subprocess_run(  # noqa: S603
        [
            sys.executable,
            "-m",
            "searchselect.cli",
            "validate",
            "--options",
            str(options),
            "--multiple",
            "--max-items",
            "1",
            "--value",
            "fr",
            "--value",
            "xx",
        ],
        capture_output=True,
        text=True,
        check=False,
        cwd=tmp_path,
    )
    assert validate.returncode == 1
    assert [item["rule"] for item in json.loads(validate.stdout)] == ["max_items", "unknown_option"]
