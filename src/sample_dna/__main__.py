# src/sample_dna/__main__.py
from __future__ import annotations


def main() -> int:
    """
    Module entrypoint:
      - python -m sample_dna            -> CLI usage
      - python -m sample_dna <command>  -> CLI command
    """
    from sample_dna.cli import main as cli_main

    # Let the CLI parse sys.argv itself.
    return int(cli_main())


if __name__ == "__main__":
    raise SystemExit(main())
