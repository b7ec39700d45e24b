"""Integration tests for the tessera preview command.

Tests:
- Previews print to stdout with a separator per fixture
- Filters, --no-metadata and --outdir file output
- Registry load failures exit with status 1
- Summary lines for incomplete fixtures
"""

from __future__ import annotations

import textwrap

import pytest
from click.testing import CliRunner

from tessera.interfaces.cli.app import cli


REGISTRY_SOURCE = textwrap.dedent(
    '''
    from tessera import Component, Composition, CompositionEntry, CostConfig, Registry

    role = Component(key="role", schema={"role": str}, template="You are a {{role}}.")
    task = Component(key="task", schema={"task": str}, template="Task: {{task}}")

    briefing = Composition(id="briefing", components=[role, task])

    registry = Registry(
        [
            CompositionEntry(
                composition=briefing,
                fixtures={
                    "basic": {"role": "doctor", "task": "diagnose"},
                    "partial": {"role": "nurse"},
                },
            ),
        ],
        default_cost=CostConfig(input_token_price=0.000005),
    )
    '''
)


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def registry_ref(tmp_path) -> str:
    (tmp_path / "prompts.py").write_text(REGISTRY_SOURCE)
    return "prompts.py:registry"


class TestPreviewCommand:
    """Tests for `tessera preview`."""

    def test_prints_all_fixtures(self, runner, registry_ref):
        result = runner.invoke(cli, ["preview", "-r", registry_ref], obj={})
        assert result.exit_code == 0, result.output
        assert result.output.count("=" * 70) == 2
        assert "Composition ID: briefing" in result.output
        assert "Fixture: basic (complete - 2/2)" in result.output
        assert "  Total: 6 tokens / $0.000030" in result.output
        assert "You are a doctor.\nTask: diagnose" in result.output
        assert "You are a nurse.\nTask: {{task}}" in result.output
        assert "Generated 2 previews" in result.output
        assert "1 with incomplete fixtures - review before using" in result.output

    def test_fixture_filter_without_metadata(self, runner, registry_ref):
        result = runner.invoke(
            cli,
            ["preview", "-r", registry_ref, "-c", "briefing", "-f", "basic", "--no-metadata"],
            obj={},
        )
        assert result.exit_code == 0, result.output
        assert "Composition ID" not in result.output
        assert "You are a doctor.\nTask: diagnose" in result.output
        assert "Generated 1 preview\n" in result.output
        assert "incomplete fixtures" not in result.output

    def test_metadata_default_from_settings(self, runner, registry_ref, monkeypatch):
        monkeypatch.setenv("TESSERA_PREVIEW_METADATA", "false")
        result = runner.invoke(cli, ["preview", "-r", registry_ref, "-f", "basic"], obj={})
        assert result.exit_code == 0, result.output
        assert "Composition ID" not in result.output

    def test_outdir(self, runner, registry_ref, tmp_path):
        outdir = tmp_path / "previews"
        result = runner.invoke(cli, ["preview", "-r", registry_ref, "-o", str(outdir)], obj={})
        assert result.exit_code == 0, result.output
        assert sorted(path.name for path in outdir.iterdir()) == ["briefing_basic.txt", "briefing_partial.txt"]
        assert (outdir / "briefing_basic.txt").read_text(encoding="utf-8").endswith(
            "You are a doctor.\nTask: diagnose"
        )
        assert "Generated: briefing_basic.txt" in result.output
        assert "=" * 70 not in result.output

    def test_no_matching_fixtures(self, runner, registry_ref):
        result = runner.invoke(cli, ["preview", "-r", registry_ref, "-c", "missing"], obj={})
        assert result.exit_code == 0
        assert "No previews generated." in result.output

    def test_bad_registry(self, runner, registry_ref):
        result = runner.invoke(cli, ["preview", "-r", "prompts.py:catalog"], obj={})
        assert result.exit_code == 1
        assert 'ERROR: Registry module prompts.py has no attribute "catalog"' in result.output

    def test_broken_registry_file(self, runner, tmp_path):
        (tmp_path / "broken.py").write_text("registry = (\n")
        result = runner.invoke(cli, ["preview", "-r", "broken.py"], obj={})
        assert result.exit_code == 1
        assert "ERROR: Failed to load registry module broken.py: SyntaxError" in result.output
        assert "Traceback" not in result.output

    def test_registry_is_required(self, runner):
        result = runner.invoke(cli, ["preview"], obj={})
        assert result.exit_code == 2
        assert "--registry" in result.output

    def test_debug_flag(self, runner, registry_ref):
        result = runner.invoke(cli, ["--debug", "preview", "-r", registry_ref, "-f", "basic"], obj={})
        assert result.exit_code == 0, result.output
