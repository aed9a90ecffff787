# kylinassistant

The core of a role-based AI chat assistant. There is no user-interface toolkit in
it and no model back end. It has four modules:

- `kylinassistant.roles` holds chat personas (`CustomRole`) and a registry for
  them (`RoleManager`). The registry is saved to a JSON file. Five roles are
  built in: 默认, 律师, 教师, 程序员 and 作家.
- `kylinassistant.chatcore` holds `ChatCore`. It drives a text session that you
  supply, keeps the message history and joins streamed reply pieces into
  complete replies.
- `kylinassistant.chatview` holds `ChatView`, the state of a chat page. It keeps
  the role list, the current role, the input text and the transcript, which is a
  list of HTML blocks. It also has the helpers `welcome_message`,
  `format_user_message` and `format_reply`.
- `kylinassistant.assistant` holds `Assistant`. It connects a `RoleManager` to a
  `ChatView` and tracks which `Page` is shown (`Page.CHAT` or `Page.ROLES`).

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Roles

When a `RoleManager` starts, it loads the built-in roles first. It then adds
every role in its JSON file (`roles.json` by default) whose name is not already
known. If the file is missing, unreadable or not a JSON array, it is ignored.
`close()` saves the roles to the file, and so does leaving a `with` block.

```python
from kylinassistant.roles import RoleData, RoleError, RoleManager

with RoleManager("roles.json") as roles:
    print(roles.role_list())            # names, sorted

    data = RoleData(name="翻译", description="翻译助手", prompt="你是一名专业翻译。")
    data.validate()                     # RoleError if the name is empty
    roles.add_role(data.name, data.description, data.prompt)  # saves; False if taken

    role = roles.get_role("翻译")        # None if unknown
    print(role.process_message("你好"))  # "[翻译] 你好"

    roles.edit_role("翻译", "翻译助手", "你是一名专业的中英翻译。")

    try:
        roles.remove_role("默认")
    except RoleError as exc:
        print(exc)                      # built-in roles cannot be removed
```

The methods differ as follows:

- `add_custom_role` raises `RoleError` when the name is already taken, and does not save.
- `add_role` returns `False` when the name is already taken. Otherwise it adds the role and saves at once.
- `remove_role` and `edit_role` raise `RoleError` for unknown names.
- `save` raises `RoleError` if the file cannot be written.

Every listener in `roles.on_change` is called as `listener(event, name)`, where
`event` is one of `"added"`, `"removed"` or `"modified"`.

## Chatting

`ChatCore` takes a factory that returns a `TextSession`. A session is any object
with these methods: `set_model_config`, `set_result_callback`, `init_session`,
`chat_async`, `clear_history`, `set_system_prompt` and `stop_chat`. The session
sends back the pieces of a reply as `ChatResult` values, through the callback it
was given.

```python
from kylinassistant.chatcore import ChatCore, ChatError, ChatResult


class EchoSession:
    def set_model_config(self, name, deploy_type): ...
    def set_result_callback(self, callback): self.callback = callback
    def init_session(self): return 0
    def chat_async(self, message):
        self.callback(ChatResult(assistant_message="echo: "))
        self.callback(ChatResult(assistant_message=message, is_end=True))
    def clear_history(self): ...
    def set_system_prompt(self, prompt): ...
    def stop_chat(self): ...


core = ChatCore(EchoSession)
core.on_message.append(lambda message: print(message.role, message.content))
core.initialize()                        # ChatError on failure
core.send_message("介绍一下你自己", "默认")  # ChatError if not initialised or still busy
print([m.content for m in core.history()])
```

When a result carries a non-zero `error_code`, it goes to the `on_error`
listeners as a `ChatError`. The other listener lists are `on_initialized` and
`on_state_changed`. `set_model_config` does nothing until the core has a session.
Its `deploy_type` defaults to `ModelDeployType.PUBLIC_CLOUD`. `initialize`
configures the model with `ModelDeployType.ON_DEVICE`, and the default model is
`Qwen-2.5-3b_1.0`.

## Wiring it together

```python
from kylinassistant.assistant import Assistant
from kylinassistant.chatview import ChatView
from kylinassistant.roles import RoleData, RoleManager

roles = RoleManager("roles.json")
view = ChatView(core, roles)      # initialises the core if that has not been done
app = Assistant(roles, view)

app.handle_role_selected("程序员")
view.send("如何写单元测试？")        # the role's prompt is put in front of the message
print(view.display)               # HTML blocks of the transcript
print(view.errors)                # error texts reported so far

view.confirm_new_role(RoleData("翻译", "翻译助手", "你是一名专业翻译。"))
print(view.current_role, app.notices)
```

`ChatView.send()` sends `view.input_text` when no message is given, and then
clears the input. It does nothing if the text is only whitespace. Errors from
the core are collected in `view.errors` and passed to `view.on_error`. They are
not raised.

`confirm_new_role` calls `RoleData.validate()` and then hands the data to the
`on_new_role` listeners. Through `Assistant.handle_new_role`, this adds the role,
switches to it and records a notice. If the name is already taken, it raises
`RoleError`.

## What this package does not do

- It has no windows or widgets. `ChatView` and `Assistant` only keep state and
  produce HTML strings. Drawing them on screen is up to you.
- It has no text-generation back end. You supply the `TextSession`.
- It has no speech input or output. `ChatView.handle_text_recognized` only
  accepts text that has already been recognised.
- It has no command-line program.