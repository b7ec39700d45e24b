"""CLI for Tessera.

CLI Commands:
    tessera preview --registry MODULE:ATTR    Render registry fixtures

Key Components:
    - cli: Main CLI application (click-based)
    - load_registry / generate_previews: Preview pipeline used by the command
"""

from tessera.interfaces.cli.app import cli, main
from tessera.interfaces.cli.preview import Preview, generate_previews, load_registry, render_fixture

__all__ = ["cli", "main", "Preview", "generate_previews", "load_registry", "render_fixture"]
