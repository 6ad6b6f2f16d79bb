import json
from pathlib import Path

import pytest

from elementselector import __main__ as cli

TOOLBAR = '<div id="toolbar"><button>A</button><button>B</button></div>'
SHADOW = '<div id="app"><my-card><template shadowrootmode="open"><p>a</p><p>b</p></template></my-card></div>'


@pytest.fixture(autouse=True)
def _log_to_tmp(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "CONFIG_DIR", tmp_path / "logs")


def _write(tmp_path: Path, markup: str) -> Path:
    page = tmp_path / "page.html"
    page.write_text(markup, encoding="utf-8")
    return page


def test_cli_prints_payload_for_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    page = _write(tmp_path, TOOLBAR)
    code = cli.main([str(page), "--target", "button:nth-of-type(2)", "--config", str(tmp_path / "none.json")])
    assert code == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload == {
        "primaryLocator": "#toolbar > button:nth-of-type(2)",
        "alternateLocator": None,
        "rationale": "structural path",
        "shadowPath": {"hosts": [], "anyClosed": False},
    }


def test_cli_tree_flag_prints_ancestry(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    page = _write(tmp_path, TOOLBAR)
    cli.main([str(page), "--target", "button:nth-of-type(2)", "--tree", "--config", str(tmp_path / "none.json")])

    out = capsys.readouterr().out
    assert "div #toolbar\n" in out
    assert '└─ button "B"' in out
    assert out.rstrip().endswith("#toolbar > button:nth-of-type(2)")


def test_cli_shadow_flags_and_config(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    page = _write(tmp_path, SHADOW)
    config = tmp_path / "none.json"

    cli.main([str(page), "--target", "my-card >>> p:nth-of-type(2)", "--config", str(config)])
    deep = json.loads(capsys.readouterr().out)
    assert deep["primaryLocator"] == "#app > my-card:nth-of-type(1) >>> :scope > p:nth-of-type(2)"
    assert deep["shadowPath"] == {"hosts": ["my-card"], "anyClosed": False}

    cli.main([str(page), "--target", "my-card >>> p:nth-of-type(2)", "--no-deep-shadow", "--config", str(config)])
    assert json.loads(capsys.readouterr().out)["primaryLocator"] == "my-card > p:nth-of-type(2)"

    config.write_text(json.dumps({"deep_shadow_traversal": False}), encoding="utf-8")
    cli.main([str(page), "--target", "my-card >>> p:nth-of-type(2)", "--config", str(config)])
    assert json.loads(capsys.readouterr().out)["primaryLocator"] == "my-card > p:nth-of-type(2)"


def test_cli_rejects_ambiguous_target(tmp_path: Path) -> None:
    page = _write(tmp_path, TOOLBAR)
    with pytest.raises(SystemExit) as excinfo:
        cli.main([str(page), "--target", "button", "--config", str(tmp_path / "none.json")])
    assert "matched 2 node(s)" in str(excinfo.value)


def test_cli_reports_unreadable_file(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main([str(tmp_path / "missing.html"), "--target", "p", "--config", str(tmp_path / "none.json")])
    assert str(excinfo.value).startswith("Could not read")


def test_cli_requires_exactly_one_source(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--target", "p"])
    assert excinfo.value.code == 2

    with pytest.raises(SystemExit):
        cli.main([str(tmp_path / "page.html"), "--url", "example.org", "--target", "p"])


def test_normalize_url() -> None:
    assert cli._normalize_url("example.org") == "https://example.org"
    assert cli._normalize_url("http://localhost:8000") == "http://localhost:8000"
    assert cli._normalize_url("  ") == ""


def test_cli_reports_unparseable_file(tmp_path: Path) -> None:
    page = _write(tmp_path, "")
    with pytest.raises(SystemExit) as excinfo:
        cli.main([str(page), "--target", "p", "--config", str(tmp_path / "none.json")])
    assert str(excinfo.value).startswith("Could not parse")
