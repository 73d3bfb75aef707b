import logging
import sys

# ロギング設定
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

if __name__ == "__main__":
    import flet as ft

    from support_console.app_main import main

    try:
        ft.app(target=main)
    except Exception:
        logging.exception("Unhandled exception running Flet app")
        # exit with non-zero so local runs notice failure
        sys.exit(1)
