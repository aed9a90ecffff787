"""Assistant roles: role definitions and a persistent role registry."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

DEFAULT_ROLE = "默认"
ROLES_FILE = "roles.json"

BUILTIN_ROLES: dict[str, tuple[str, str]] = {
    "默认": (
        "通用助手",
        "你是一个智能助手，能够帮助用户解决各种问题。你会以友好、专业的态度回答用户的问题，"
        "提供准确、有用的信息。在回答时，你会注意语言的简洁性和逻辑性，确保信息传达清晰。"
        "如果遇到不确定的问题，你会诚实地表示，并尽可能提供相关的参考信息。",
    ),
    "律师": (
        "法律顾问",
        "你是一位专业的律师，精通中国法律体系。你能够为用户提供准确的法律咨询，"
        "包括但不限于民事、刑事、商事等领域的法律问题。在回答时，你会引用相关法律条文，"
        "解释法律概念，分析案件要点，提供专业的法律建议。你会始终保持客观、严谨的态度，"
        "并提醒用户最终决策需要咨询执业律师。",
    ),
    "教师": (
        "教育辅导",
        "你是一位富有耐心的教师，擅长因材施教。你能够根据用户的学习水平和需求，"
        "提供个性化的学习指导。你可以解答各类学科问题，帮助学生理解难点，提供学习方法建议。"
        "在回答时，你会循序渐进地引导思考，鼓励提问，并适时给予肯定和鼓励。"
        "你会注重培养学生的独立思考能力和学习兴趣。",
    ),
    "程序员": (
        "技术顾问",
        "你是一位资深程序员，精通多种编程语言和开发技术。你能够帮助用户解决编程问题，"
        "提供代码优化建议，解释技术概念。在回答时，你会注重代码的可读性、可维护性和性能优化。"
        "你可以提供最佳实践建议，帮助用户养成良好的编程习惯。对于复杂问题，"
        "你会提供清晰的解决思路和详细的实现方案。",
    ),
    "作家": (
        "创作指导",
        "你是一位经验丰富的作家，擅长多种文学体裁的创作。你具有丰富的想象力和创造力，"
        "能够帮助用户构思故事情节、塑造人物形象、设计对话场景。你可以提供写作技巧指导，"
        "帮助用户改进文章结构、优化语言表达、增强情感描写。在回答时，你会结合具体的写作案例，"
        "给出实用的建议和修改意见。",
    ),
}

RoleListener = Callable[[str, str], None]


class RoleError(Exception):
    """Raised when a role operation cannot be carried out."""


@dataclass
class RoleData:
    """Plain role fields as entered by the user."""

    name: str = ""
    description: str = ""
    prompt: str = ""

    def validate(self) -> None:
        """Raise RoleError if the data cannot define a role."""
        if not self.name:
            raise RoleError("请输入角色名称")


@dataclass
class CustomRole:
    """A named assistant persona with a guiding prompt."""

    name: str = ""
    description: str = ""
    prompt: str = ""

    def process_message(self, message: str) -> str:
        """Tag a message with the role's name."""
        return f"[{self.name}] {message}"


class RoleManager:
    """Registry of roles, backed by a JSON file.

    Listeners in ``on_change`` are called as ``listener(event, name)`` where
    event is one of ``"added"``, ``"removed"`` or ``"modified"``.
    """

    def __init__(self, path: str | Path = ROLES_FILE) -> None:
        self.path = Path(path)
        self.on_change: list[RoleListener] = []
        self._roles: dict[str, CustomRole] = {}
        for name, (description, prompt) in BUILTIN_ROLES.items():
            self.add_custom_role(name, description, prompt)
        self.load()

    def _notify(self, event: str, name: str) -> None:
        for listener in list(self.on_change):
            listener(event, name)

    def add_custom_role(self, name: str, description: str, prompt: str) -> None:
        """Add a role without saving; raise RoleError if the name is taken."""
        if name in self._roles:
            raise RoleError("角色名称已存在")
        self._roles[name] = CustomRole(name, description, prompt)
        self._notify("added", name)

    def add_role(self, name: str, description: str, prompt: str) -> bool:
        """Add a role and save; return False if the name is taken."""
        if name in self._roles:
            return False
        self._roles[name] = CustomRole(name, description, prompt)
        self.save()
        self._notify("added", name)
        return True

    def remove_role(self, name: str) -> None:
        """Remove a non-built-in role."""
        if name not in self._roles:
            raise RoleError("角色不存在")
        if name in BUILTIN_ROLES:
            raise RoleError("不能删除内置角色")
        del self._roles[name]
        self._notify("removed", name)

    def edit_role(self, name: str, description: str, prompt: str) -> None:
        """Change the description and prompt of an existing role."""
        role = self._roles.get(name)
        if role is None:
            raise RoleError("角色不存在")
        role.description = description
        role.prompt = prompt
        self._notify("modified", name)

    def role_list(self) -> list[str]:
        """Names of all roles in sorted order."""
        return sorted(self._roles)

    def get_role(self, name: str) -> CustomRole | None:
        """The role with this name, or None."""
        return self._roles.get(name)

    def save(self) -> None:
        """Write every role to the JSON file."""
        records = [
            {"name": role.name, "description": role.description, "prompt": role.prompt}
            for _, role in sorted(self._roles.items())
        ]
        text = json.dumps(records, ensure_ascii=False, indent=4, sort_keys=True) + "\n"
        try:
            self.path.write_text(text, encoding="utf-8")
        except OSError as exc:
            raise RoleError("无法保存角色配置文件") from exc

    def load(self) -> None:
        """Add roles from the JSON file whose names are not yet known."""
        if not self.path.exists():
            return
        try:
            raw = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            return
        try:
            document = json.loads(raw)
        except json.JSONDecodeError:
            return
        if not isinstance(document, list):
            return
        for entry in document:
            record = entry if isinstance(entry, dict) else {}
            name, description, prompt = (
                value if isinstance(value := record.get(key), str) else ""
                for key in ("name", "description", "prompt")
            )
            if name not in self._roles:
                self._roles[name] = CustomRole(name, description, prompt)

    def close(self) -> None:
        """Persist the roles."""
        self.save()

    def __enter__(self) -> RoleManager:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()