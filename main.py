"""
main.py - af 콘솔 스크립트 진입점

    $ af elasticache list
    $ python main.py vpc search shared
"""

from cli.app import cli


def main() -> None:
    """Entry point for the af CLI. Delegates to cli.app:cli."""
    cli(prog_name="af")


if __name__ == "__main__":
    main()
