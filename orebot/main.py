from __future__ import annotations

from orebot.config import load_settings
from orebot.runtime.app import run_main


def main() -> None:
    run_main(load_settings())


if __name__ == "__main__":
    main()
