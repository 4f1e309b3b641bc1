"""
skillpack CLI 入口

使用 Typer 和 Rich 管理技能目录:
列出/查看/搜索技能、测试相关性解析、校验、安装、卸载、导出、
创建新技能模板，以及预览系统提示词中的技能清单
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

import typer
from rich.console import Console
from rich.markdown import Markdown
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .config import settings
from .logging import setup_logging_from_settings
from .skills import (
    RESOURCE_DIRS,
    SKILL_FILE,
    SkillError,
    SkillExporter,
    SkillManager,
    ValidationResult,
)

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="skillpack",
    help="skillpack - Agent Skills 技能管理工具",
    add_completion=False,
)

console = Console()

_manager: SkillManager | None = None


def get_manager() -> SkillManager:
    """获取或创建技能管理器"""
    global _manager
    if _manager is None:
        _manager = SkillManager()
    return _manager


@contextmanager
def _skill_errors() -> Iterator[None]:
    """把技能系统异常转换为红色错误输出 + 退出码 1"""
    try:
        yield
    except SkillError as e:
        console.print(f"[red]✗ {escape(e.message)}[/red]")
        for detail in getattr(e, "errors", []):
            console.print(f"  [red]- {escape(detail)}[/red]")
        raise typer.Exit(1)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    skills_dir: str | None = typer.Option(
        None, "--skills-dir", "-d", help="技能目录（默认使用配置中的 skills_dir）"
    ),
    verbose: bool = typer.Option(False, "--verbose", help="输出 DEBUG 日志"),
    version: bool = typer.Option(False, "--version", "-v", help="显示版本信息"),
):
    """
    skillpack - Agent Skills 技能管理工具
    """
    if version:
        from . import __version__

        console.print(f"skillpack v{__version__}")
        raise typer.Exit(0)

    setup_logging_from_settings(settings, log_level="DEBUG" if verbose else None)

    global _manager
    _manager = SkillManager(Path(skills_dir)) if skills_dir else SkillManager()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command("list")
def list_skills():
    """列出所有已发现的技能"""
    manager = get_manager()
    with _skill_errors():
        skills = manager.all()

    if not skills:
        console.print("[yellow]暂无技能[/yellow]")
        console.print(f"在 {manager.loader.skills_path} 下创建技能，或使用 'skillpack new'")
        return

    table = Table(title=f"技能 ({len(skills)})")
    table.add_column("名称", style="cyan")
    table.add_column("描述", style="white")
    table.add_column("类型", style="magenta")
    table.add_column("路径", style="dim")

    for skill in skills.values():
        if skill.is_mode:
            kind = "mode"
        elif not skill.is_auto_invocable:
            kind = "manual"
        else:
            kind = "auto"
        table.add_row(escape(skill.name), escape(skill.description), kind, escape(skill.path))

    console.print(table)


@app.command()
def show(
    name: str = typer.Argument(..., help="技能名称"),
):
    """显示技能的完整指令和资源"""
    manager = get_manager()
    with _skill_errors():
        skill = manager.get(name)

    console.print(f"[bold cyan]{escape(skill.name)}[/bold cyan]: {escape(skill.description)}")
    meta = skill.metadata
    if meta.version:
        console.print(f"版本: {escape(meta.version)}")
    if meta.license:
        console.print(f"许可: {escape(meta.license)}")
    if meta.author:
        console.print(f"作者: {escape(meta.author)}")
    if meta.tags:
        console.print(f"标签: {escape(', '.join(meta.tags))}")

    for label, names in (
        ("Scripts", skill.scripts),
        ("References", skill.references),
        ("Assets", skill.assets),
    ):
        if names:
            console.print(f"{label}: {escape(', '.join(names))}")

    console.print(
        Panel(
            Markdown(skill.instructions or "_(no instructions)_"),
            title=SKILL_FILE,
            border_style="blue",
        )
    )


@app.command()
def search(
    query: str = typer.Argument(..., help="搜索词（匹配名称、描述或标签）"),
):
    """按子串搜索技能"""
    with _skill_errors():
        results = get_manager().search(query)

    if not results:
        console.print(f"[yellow]没有匹配 '{escape(query)}' 的技能[/yellow]")
        return

    table = Table(title=f"搜索结果: {escape(query)}")
    table.add_column("名称", style="cyan")
    table.add_column("描述", style="white")
    for skill in results.values():
        table.add_row(escape(skill.name), escape(skill.description))
    console.print(table)


@app.command()
def resolve(
    text: str = typer.Argument(..., help="用户输入或任务描述"),
    threshold: float | None = typer.Option(
        None, "--threshold", "-t", min=0.0, max=1.0, help="相关性阈值（默认使用配置）"
    ),
):
    """显示与任务相关的技能及其分数"""
    with _skill_errors():
        results = get_manager().resolve_with_scores(text, threshold)

    if not results:
        console.print("[yellow]没有相关技能[/yellow]")
        return

    table = Table(title="相关技能")
    table.add_column("名称", style="cyan")
    table.add_column("分数", style="green", justify="right")
    table.add_column("描述", style="white")
    for item in results:
        table.add_row(escape(item.skill.name), f"{item.score:.2f}", escape(item.skill.description))
    console.print(table)


def _print_validation(result: ValidationResult) -> None:
    for error in result.errors:
        console.print(f"[red]✗ {escape(error)}[/red]")
    for warning in result.warnings:
        console.print(f"[yellow]⚠ {escape(warning)}[/yellow]")


@app.command()
def validate(
    path: Path = typer.Argument(..., help="技能目录或 SKILL.md 文件"),
):
    """校验技能目录或 SKILL.md"""
    manager = get_manager()

    if path.is_dir():
        result = manager.validate_directory(path)
    elif path.is_file():
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            console.print(f"[red]✗ 无法读取 {escape(str(path))}: {escape(str(e))}[/red]")
            raise typer.Exit(1)
        result = manager.validate(content)
    else:
        console.print(f"[red]✗ 路径不存在: {escape(str(path))}[/red]")
        raise typer.Exit(1)

    _print_validation(result)

    if not result.valid:
        console.print(f"[red]校验失败 ({len(result.errors)} 个错误)[/red]")
        raise typer.Exit(1)

    console.print(f"[green]✓[/green] 校验通过 ({len(result.warnings)} 个警告)")


@app.command()
def install(
    source: Path = typer.Argument(..., help="技能源目录"),
):
    """安装技能到受管技能目录"""
    manager = get_manager()
    with _skill_errors():
        skill = manager.install(source)
    console.print(
        f"[green]✓[/green] 已安装技能: {escape(skill.name)} -> {escape(skill.path)}"
    )


@app.command()
def uninstall(
    name: str = typer.Argument(..., help="技能名称"),
):
    """从受管技能目录卸载技能"""
    with _skill_errors():
        get_manager().uninstall(name)
    console.print(f"[green]✓[/green] 已卸载技能: {escape(name)}")


@app.command()
def export(
    name: str = typer.Argument(..., help="技能名称"),
    target: Path = typer.Argument(..., help="导出目录"),
):
    """导出技能到目标目录"""
    with _skill_errors():
        skill_dir = get_manager().export(name, target)
    console.print(f"[green]✓[/green] 已导出技能: {escape(name)} -> {escape(str(skill_dir))}")


@app.command()
def new(
    name: str = typer.Argument(..., help="技能名称（kebab-case）"),
    description: str = typer.Argument(..., help="技能描述"),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="输出目录（默认为受管技能目录）"
    ),
):
    """从模板创建新技能"""
    manager = get_manager()
    exporter = SkillExporter()
    content = exporter.generate_template(name, description)

    result = manager.validate(content)
    if not result.valid:
        _print_validation(result)
        raise typer.Exit(1)

    skill_dir = (output or manager.loader.skills_path) / name
    if skill_dir.exists():
        console.print(f"[red]✗ 目录已存在: {escape(str(skill_dir))}[/red]")
        raise typer.Exit(1)

    try:
        skill_dir.mkdir(parents=True)
        (skill_dir / SKILL_FILE).write_text(content, encoding="utf-8")
        for kind in RESOURCE_DIRS:
            (skill_dir / kind).mkdir()
    except OSError as e:
        console.print(f"[red]✗ 创建失败: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    _print_validation(result)
    console.print(f"[green]✓[/green] 已创建技能: {escape(str(skill_dir / SKILL_FILE))}")


@app.command()
def prompt():
    """预览系统提示词中的技能清单"""
    with _skill_errors():
        text = get_manager().generate_skills_prompt()

    if not text:
        console.print("[yellow]暂无可用技能[/yellow]")
        return

    console.print(text, markup=False, highlight=False)


if __name__ == "__main__":
    app()
