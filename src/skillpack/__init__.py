"""
skillpack - Agent Skills 技能系统

按 Agent Skills 规范发现、校验、加载、安装、导出技能，
并把相关技能组合进 Agent 的系统提示词。
"""

__version__ = "0.1.0"
