"""测试公共 fixture: 在临时目录中构造技能"""

from pathlib import Path
from typing import Optional

import pytest

from skillpack.skills import reset_default


def write_skill(
    base: Path,
    name: str,
    description: str = "A test skill",
    body: str = "# Instructions\n\nDo the thing.",
    *,
    dir_name: Optional[str] = None,
    extra: str = "",
) -> Path:
    """
    在 base 下创建 <dir_name or name>/SKILL.md

    extra 是追加到 frontmatter 中的原始行
    """
    skill_dir = base / (dir_name or name)
    skill_dir.mkdir(parents=True, exist_ok=True)
    frontmatter = f"name: {name}\ndescription: {description}\n"
    if extra:
        frontmatter += extra.rstrip("\n") + "\n"
    (skill_dir / "SKILL.md").write_text(f"---\n{frontmatter}---\n\n{body}\n", encoding="utf-8")
    return skill_dir


@pytest.fixture
def make_skill():
    return write_skill


@pytest.fixture
def skills_dir(tmp_path):
    path = tmp_path / "skills"
    path.mkdir()
    return path


@pytest.fixture
def sample_skills(skills_dir):
    """code-review + api-testing + 一个禁用自动调用的技能"""
    write_skill(
        skills_dir,
        "code-review",
        "Review code for quality, security, and best practices",
        "# Code Review\n\nCheck naming, error handling and tests.",
        extra="metadata:\n  author: team\n  tags: [review, quality]",
    )
    write_skill(
        skills_dir,
        "api-testing",
        "Test REST APIs with automated requests",
        "# API Testing\n\nSend requests and assert on responses.",
        extra="metadata:\n  tags: [api, testing, http]",
    )
    write_skill(
        skills_dir,
        "deploy-prod",
        "Deploy the application to production",
        "# Deploy\n\nOnly run when explicitly asked.",
        extra="disable-model-invocation: true",
    )
    return skills_dir


@pytest.fixture(autouse=True)
def _reset_default_manager():
    yield
    reset_default()
