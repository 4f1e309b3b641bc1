"""
skillpack 包入口点 - 支持 `python -m skillpack` 调用
"""

from skillpack.main import app

if __name__ == "__main__":
    app()
