from pathlib import Path

from click.testing import CliRunner

from folio import __version__
from folio.cli import EXIT_FATAL, EXIT_OK, EXIT_PARTIAL, cli


def create_site(tmp_path: Path, documents: dict) -> tuple[Path, Path, Path]:
    source = tmp_path / "content"
    templates = tmp_path / "templates"
    source.mkdir()
    templates.mkdir()
    for name in ("post", "page", "listing"):
        (templates / f"{name}.html").write_text("{{ page.title }}", encoding="utf-8")
    for rel, text in documents.items():
        (source / rel).write_text(text, encoding="utf-8")
    return source, templates, tmp_path / "public"


GOOD = "---\ntitle: Good\ndate: 2024-01-01\n---\nok"
BAD = "---\ntitle: [broken\n---\nbody"


def test_version():
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_build_success(tmp_path):
    source, templates, output = create_site(tmp_path, {"good.md": GOOD})
    result = CliRunner().invoke(cli, ["build", str(source), str(templates), str(output)])
    assert result.exit_code == EXIT_OK, result.output
    assert "2 page(s) written" in result.output
    assert "0 draft(s) skipped" in result.output
    assert (output / "good" / "index.html").read_text(encoding="utf-8") == "Good"


def test_build_partial_success(tmp_path):
    source, templates, output = create_site(tmp_path, {"good.md": GOOD, "bad.md": BAD})
    result = CliRunner().invoke(cli, ["build", str(source), str(templates), str(output)])
    assert result.exit_code == EXIT_PARTIAL
    assert "bad.md: MalformedFrontMatterError" in result.output
    assert (output / "good" / "index.html").exists()


def test_build_strict_failure(tmp_path):
    source, templates, output = create_site(tmp_path, {"good.md": GOOD, "bad.md": BAD})
    result = CliRunner().invoke(
        cli, ["build", "--strict", str(source), str(templates), str(output)]
    )
    assert result.exit_code == EXIT_FATAL
    assert "Build failed" in result.output
    assert "bad.md" in result.output
    assert not output.exists()


def test_build_with_explicit_config_and_no_clean(tmp_path):
    source, templates, output = create_site(tmp_path, {"good.md": GOOD})
    config = tmp_path / "site.yaml"
    config.write_text("title: Configured\n", encoding="utf-8")
    output.mkdir()
    (output / "keep.txt").write_text("keep", encoding="utf-8")
    result = CliRunner().invoke(
        cli,
        [
            "build",
            "--config",
            str(config),
            "--no-clean",
            "--workers",
            "2",
            str(source),
            str(templates),
            str(output),
        ],
    )
    assert result.exit_code == EXIT_OK, result.output
    assert (output / "index.html").read_text(encoding="utf-8") == "Configured"
    assert (output / "keep.txt").exists()


def test_build_missing_source_is_a_usage_error(tmp_path):
    result = CliRunner().invoke(
        cli, ["build", str(tmp_path / "nope"), str(tmp_path), str(tmp_path / "out")]
    )
    assert result.exit_code == 2
