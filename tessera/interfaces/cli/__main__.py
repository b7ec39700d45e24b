"""Entry point for running CLI as module.

Usage:
    python -m tessera.interfaces.cli preview --registry prompts.py
"""

if __name__ == "__main__":
    from tessera.interfaces.cli.app import main
    main()
