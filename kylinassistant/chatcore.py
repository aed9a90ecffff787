"""Chat session handling: message history, streamed replies and model settings."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Protocol

DEFAULT_MODEL = "Qwen-2.5-3b_1.0"
DEFAULT_ROLE = "default"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class ModelDeployType(enum.Enum):
    """Deployment target of the text model."""

    ON_DEVICE = "OnDevice"
    PUBLIC_CLOUD = "PublicCloud"


@dataclass
class Message:
    """One chat message, from the user or from the assistant."""

    content: str
    is_user: bool
    timestamp: str
    role: str
    model: str


@dataclass
class ChatResult:
    """A piece of a streamed reply as delivered by a text session."""

    assistant_message: Optional[str] = None
    is_end: bool = False
    error_code: int = 0
    error_message: str = ""


ResultCallback = Callable[[ChatResult], None]


class TextSession(Protocol):
    """The text-generation backend a ChatCore drives."""

    def set_model_config(self, name: str, deploy_type: ModelDeployType) -> None: ...

    def set_result_callback(self, callback: ResultCallback) -> None: ...

    def init_session(self) -> int: ...

    def chat_async(self, message: str) -> None: ...

    def clear_history(self) -> None: ...

    def set_system_prompt(self, prompt: str) -> None: ...

    def stop_chat(self) -> None: ...


SessionFactory = Callable[[], Optional[TextSession]]


class ChatError(Exception):
    """A chat failure, optionally carrying a backend error code."""

    def __init__(self, message: str, code: int | None = None) -> None:
        self.message = message
        self.code = code
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.code is None:
            return self.message
        return f"错误 [{self.code}]: {self.message}"


class ChatCore:
    """Sends user messages to a text session and collects streamed replies.

    Listeners:
    ``on_message(message)`` when a complete reply has arrived,
    ``on_error(error)`` when the backend reports an error in a reply,
    ``on_initialized(success, text)`` after a successful initialisation,
    ``on_state_changed(is_processing)`` when a request starts or ends.
    """

    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory
        self._session: TextSession | None = None
        self._history: list[Message] = []
        self._current_response: list[str] = []
        self.current_role = DEFAULT_ROLE
        self.current_model = DEFAULT_MODEL
        self.is_initialized = False
        self.is_processing = False
        self.on_message: list[Callable[[Message], None]] = []
        self.on_error: list[Callable[[ChatError], None]] = []
        self.on_initialized: list[Callable[[bool, str], None]] = []
        self.on_state_changed: list[Callable[[bool], None]] = []

    @staticmethod
    def _now() -> str:
        return datetime.now().strftime(TIMESTAMP_FORMAT)

    def _set_processing(self, value: bool) -> None:
        self.is_processing = value
        for listener in list(self.on_state_changed):
            listener(value)

    def _report(self, error: ChatError) -> None:
        for listener in list(self.on_error):
            listener(error)

    def initialize(self) -> None:
        """Create and configure the session; raise ChatError on failure."""
        try:
            session = self._session_factory()
        except Exception as exc:
            raise ChatError(f"SDK初始化异常: {exc}", -1) from exc
        if session is None:
            raise ChatError("创建会话失败", -1)
        self._session = session
        session.set_model_config(self.current_model, ModelDeployType.ON_DEVICE)
        session.set_result_callback(self.handle_result)
        code = session.init_session()
        if code != 0:
            raise ChatError("会话初始化失败", code)
        self.is_initialized = True
        for listener in list(self.on_initialized):
            listener(True, "SDK初始化成功")

    def send_message(self, message: str, role: str = DEFAULT_ROLE) -> None:
        """Record the user's message and start an asynchronous reply."""
        if not self.is_initialized or self._session is None:
            raise ChatError("SDK未初始化")
        if self.is_processing:
            raise ChatError("正在处理上一条消息")
        self._history.append(
            Message(
                content=message,
                is_user=True,
                timestamp=self._now(),
                role=role,
                model=self.current_model,
            )
        )
        self._set_processing(True)
        try:
            self._session.chat_async(message)
        except Exception as exc:
            self._set_processing(False)
            raise ChatError(f"消息处理异常: {exc}", -1) from exc

    def handle_result(self, result: ChatResult) -> None:
        """Take one streamed piece of a reply from the session."""
        if result.error_code != 0:
            self._report(ChatError(result.error_message, result.error_code))
            return
        if result.assistant_message:
            self._current_response.append(result.assistant_message)
        if not result.is_end:
            return
        reply = Message(
            content="".join(self._current_response),
            is_user=False,
            timestamp=self._now(),
            role=self.current_role,
            model=self.current_model,
        )
        self._history.append(reply)
        for listener in list(self.on_message):
            listener(reply)
        self._current_response.clear()
        self._set_processing(False)

    def history(self) -> list[Message]:
        """A copy of all messages exchanged so far."""
        return list(self._history)

    def clear_history(self) -> None:
        """Forget the local history and the session's history."""
        self._history.clear()
        if self._session is not None:
            self._session.clear_history()

    def set_current_role(self, role: str) -> None:
        """Set the role name attached to replies."""
        self.current_role = role

    def set_model_config(
        self,
        model_name: str,
        deploy_type: ModelDeployType = ModelDeployType.PUBLIC_CLOUD,
    ) -> None:
        """Switch model; has no effect before initialisation."""
        if self._session is None:
            return
        self.current_model = model_name
        self._session.set_model_config(model_name, deploy_type)

    def set_system_prompt(self, prompt: str) -> None:
        """Pass a system prompt to the session, if there is one."""
        if self._session is not None:
            self._session.set_system_prompt(prompt)

    def stop_chat(self) -> None:
        """Abort the reply in progress, if any."""
        if self._session is not None and self.is_processing:
            self._session.stop_chat()
            self._set_processing(False)