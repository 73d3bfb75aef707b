"""
config.py - パス解決・アプリ定数
Support Console v1.0
"""

import getpass
import os
import sys

# ---------------------------------------------------------------------------
# パス解決（exe 化対応）
# ---------------------------------------------------------------------------


def get_base_path() -> str:
    """
    実行環境に応じてアプリのベースディレクトリを返す。
    - exe 化後  : exe ファイルの存在するディレクトリ
    - スクリプト: プロジェクトルート
    """
    if getattr(sys, "frozen", False):
        return os.path.dirname(sys.executable)
    # config.py is in support_console/, so project root is one level up
    return os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


BASE_PATH = get_base_path()

# DB パス: 共有フォルダ上のチケット DB（環境変数で上書き可）
DB_PATH = os.environ.get("SUPPORT_CONSOLE_DB") or os.path.join(BASE_PATH, "data.db")

# ---------------------------------------------------------------------------
# アプリ定数
# ---------------------------------------------------------------------------

APP_TITLE = "サポートチケット"
APP_VERSION = "0.1.0"

ADMIN_NAME = os.environ.get("SUPPORT_CONSOLE_ADMIN") or getpass.getuser()


def _env_seconds(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


# ポーリング間隔（秒）
DETAIL_POLL_INTERVAL = _env_seconds("SUPPORT_CONSOLE_DETAIL_POLL", 3.0)
LIST_POLL_INTERVAL = _env_seconds("SUPPORT_CONSOLE_LIST_POLL", 5.0)
LIST_LIMIT = 100

# ---------------------------------------------------------------------------
# カラーパレット（Modern / GitHub ライク）
# ---------------------------------------------------------------------------

COLOR_BG = "#F0F2F5"  # 非常に薄いグレー（背景）
COLOR_CARD = "#FFFFFF"  # カード背景
COLOR_BORDER = "#D0D7DE"  # ボーダー
COLOR_TEXT_MUTED = "#656D76"  # 薄いテキスト
COLOR_TEXT_MAIN = "#1F2328"  # メインテキスト
COLOR_PRIMARY = "#0969DA"  # プライマリ（青）
COLOR_DANGER = "#CF222E"  # 危険色（赤）
COLOR_UNREAD = "#CF222E"  # 未読バッジ

# ステータス色
COLOR_STATUS = {
    "open": "#ef4444",
    "in_progress": "#f59e0b",
    "resolved": "#10b981",
    "closed": "#10b981",
}

# 優先度色
COLOR_PRIORITY = {
    "urgent": "#ef4444",
    "high": "#f59e0b",
    "medium": "#eab308",
    "low": "#10b981",
}

# メッセージ吹き出し
COLOR_BUBBLE_ADMIN = "#DDF4FF"
COLOR_BUBBLE_USER = "#FFFFFF"

# AppBar
COLOR_APPBAR_BG = "#FFFFFF"
COLOR_APPBAR_FG = "#1F2328"

# UI 定数
BORDER_RADIUS_CARD = 10
BORDER_RADIUS_BTN = 6
DETAIL_PANEL_WIDTH = 560
