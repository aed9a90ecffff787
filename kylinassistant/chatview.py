"""The chat view: role selection, message display and the input line."""

from __future__ import annotations

from datetime import datetime
from typing import Callable

from .chatcore import ChatCore, ChatError, Message
from .roles import DEFAULT_ROLE, RoleData, RoleManager

GREETING = "您好！我是您的AI助手，请问有什么可以帮您？"
INTRO = (
    "<div style='color: #666; font-style: italic;'>"
    "欢迎使用麒麟AI助手，请输入您的问题...</div>"
)
PLACEHOLDER = "请输入消息..."
TIME_FORMAT = "%H:%M:%S"


def welcome_message(role: str) -> str:
    """The HTML block shown after switching to a role."""
    return (
        "<div style='background-color: #F5F5F5; padding: 10px; border-radius: 5px; "
        "margin-bottom: 10px;'>"
        f"<span style='font-weight: bold; color: #4CAF50;'>已切换到角色：{role}</span><br><br>"
        f"{GREETING}</div>"
    )


def format_user_message(message: str, time_str: str) -> tuple[str, str]:
    """The header and body blocks for a message typed by the user."""
    header = (
        "<div style='text-align: right;'><span style='color: #2196F3; "
        f"font-weight: bold;'>我 ({time_str})</span></div>"
    )
    body = (
        "<div style='text-align: right; background-color: #E3F2FD; border-radius: 10px; "
        f"padding: 8px; margin: 4px;'>{message}</div>"
    )
    return header, body


def format_reply(message: Message, time_str: str) -> tuple[str, str]:
    """The header and body blocks for a reply, one paragraph per line."""
    header = (
        "<div><span style='color: #4CAF50; font-weight: bold;'>"
        f"{message.role} ({time_str})</span></div>"
    )
    paragraphs = "<p>" + message.content.replace("\n", "</p><p>") + "</p>"
    body = (
        "<div style='background-color: #F1F8E9; border-radius: 10px; padding: 12px; "
        f"margin: 8px; line-height: 1.5;'>{paragraphs}</div>"
    )
    return header, body


class ChatView:
    """State of the chat page: the role list, the transcript and the input.

    ``display`` holds the HTML blocks shown, ``errors`` the error texts
    reported. Listeners in ``on_error`` get each error text, listeners in
    ``on_new_role`` each confirmed :class:`RoleData`.
    """

    def __init__(self, core: ChatCore, role_manager: RoleManager | None = None) -> None:
        self.core = core
        self.role_manager = role_manager
        self.current_role = DEFAULT_ROLE
        self.roles: list[str] = []
        self.current_index = -1
        self.display: list[str] = []
        self.errors: list[str] = []
        self.input_text = ""
        self.placeholder = PLACEHOLDER
        self.on_error: list[Callable[[str], None]] = []
        self.on_new_role: list[Callable[[RoleData], None]] = []

        core.on_message.append(self.handle_message_received)
        core.on_error.append(lambda error: self.handle_error(str(error)))
        if not core.is_initialized:
            try:
                core.initialize()
            except ChatError as exc:
                self.handle_error(str(exc))
                self.handle_error("聊天核心初始化失败")
        self.display.append(INTRO)

    @staticmethod
    def _time() -> str:
        return datetime.now().strftime(TIME_FORMAT)

    def set_current_role(self, role: str) -> None:
        """Switch to a role, select it in the list and restart the transcript."""
        self.current_role = role
        self.core.set_current_role(role)
        if role in self.roles:
            self.current_index = self.roles.index(role)
        self.display = [welcome_message(role)]

    def update_role_list(self, roles: list[str]) -> None:
        """Replace the selectable roles, making sure the default role is first."""
        new_roles = list(roles)
        if DEFAULT_ROLE not in new_roles:
            new_roles.insert(0, DEFAULT_ROLE)
        self.roles = new_roles
        self.current_index = self.roles.index(DEFAULT_ROLE)
        self.set_current_role(DEFAULT_ROLE)

    def current_role_prompt(self) -> str:
        """The prompt of the current role; empty for the default role."""
        if self.current_role == DEFAULT_ROLE or self.role_manager is None:
            return ""
        role = self.role_manager.get_role(self.current_role)
        return role.prompt if role is not None else ""

    def send(self, message: str | None = None) -> None:
        """Show and send a message, by default the text in the input line."""
        text = (self.input_text if message is None else message).strip()
        if not text:
            return
        self.display.extend(format_user_message(text, self._time()))
        self.input_text = ""
        prompt = self.current_role_prompt()
        full_message = f"{prompt}\n\n{text}" if prompt else text
        try:
            self.core.send_message(full_message, self.current_role)
        except ChatError as exc:
            self.handle_error(str(exc))

    def handle_message_received(self, message: Message) -> None:
        """Show a complete reply."""
        self.display.extend(format_reply(message, self._time()))

    def handle_error(self, error: str) -> None:
        """Record an error and pass it on to the listeners."""
        self.errors.append(error)
        for listener in list(self.on_error):
            listener(error)

    def handle_text_recognized(self, text: str) -> None:
        """Put recognised speech into the input line for editing."""
        if text:
            self.input_text = text

    def confirm_new_role(self, data: RoleData) -> None:
        """Validate a role entered by the user and hand it to the listeners."""
        data.validate()
        for listener in list(self.on_new_role):
            listener(data)