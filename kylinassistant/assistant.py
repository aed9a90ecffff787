"""The assistant's top level: page switching and role bookkeeping."""

from __future__ import annotations

import enum

from .chatview import ChatView
from .roles import RoleData, RoleError, RoleManager


class Page(enum.Enum):
    """The pages the assistant can show."""

    CHAT = "chat"
    ROLES = "roles"


class Assistant:
    """Ties the role registry to the chat view."""

    def __init__(self, role_manager: RoleManager, chat_view: ChatView) -> None:
        self.role_manager = role_manager
        self.chat_view = chat_view
        self.page = Page.CHAT
        self.notices: list[str] = []

        role_manager.on_change.append(lambda _event, _name: self.update_role_list())
        chat_view.on_new_role.append(self.handle_new_role)
        chat_view.role_manager = role_manager
        self.switch_to_chat()
        self.update_role_list()

    def switch_to_chat(self) -> None:
        """Show the chat page."""
        self.page = Page.CHAT

    def switch_to_role_manager(self) -> None:
        """Show the role management page."""
        self.page = Page.ROLES

    def handle_role_selected(self, role_name: str) -> None:
        """Go to the chat page talking as the chosen role."""
        self.switch_to_chat()
        self.chat_view.set_current_role(role_name)

    def update_role_list(self) -> None:
        """Refresh the chat view's role list from the registry."""
        self.chat_view.update_role_list(self.role_manager.role_list())

    def handle_new_role(self, data: RoleData) -> None:
        """Register a new role and switch to it; raise RoleError if it exists."""
        if not self.role_manager.add_role(data.name, data.description, data.prompt):
            raise RoleError("创建角色失败，请重试！\n可能原因：角色名称已存在。")
        self.update_role_list()
        self.chat_view.set_current_role(data.name)
        self.switch_to_chat()
        self.notices.append("新角色创建成功！")