"""Entry point for ``python -m config_updater``."""

from config_updater.main import run

if __name__ == "__main__":
    run()
