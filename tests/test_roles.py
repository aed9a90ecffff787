import json

import pytest

from kylinassistant.roles import (
    BUILTIN_ROLES,
    CustomRole,
    RoleData,
    RoleError,
    RoleManager,
)

BUILTINS = ["默认", "律师", "教师", "程序员", "作家"]


@pytest.fixture
def manager(tmp_path):
    return RoleManager(tmp_path / "roles.json")


def test_builtin_roles_present(manager):
    assert sorted(BUILTINS) == manager.role_list()


def test_builtin_role_fields(manager):
    role = manager.get_role("律师")
    assert role.description == "法律顾问"
    assert role.prompt == BUILTIN_ROLES["律师"][1]


def test_get_missing_role_is_none(manager):
    assert manager.get_role("nobody") is None


def test_role_list_is_sorted(manager):
    manager.add_role("zeta", "z", "")
    manager.add_role("alpha", "a", "")
    names = manager.role_list()
    assert names == sorted(names)
    assert "alpha" in names and "zeta" in names


def test_add_role_saves_and_reloads(tmp_path):
    path = tmp_path / "roles.json"
    manager = RoleManager(path)
    assert manager.add_role("guide", "tour guide", "be helpful") is True
    assert path.exists()
    reloaded = RoleManager(path)
    role = reloaded.get_role("guide")
    assert role == CustomRole("guide", "tour guide", "be helpful")


def test_add_role_duplicate_returns_false(manager):
    assert manager.add_role("guide", "d", "p") is True
    assert manager.add_role("guide", "other", "other") is False
    assert manager.get_role("guide").description == "d"


def test_add_role_with_builtin_name_fails(manager):
    assert manager.add_role("默认", "x", "y") is False


def test_add_custom_role_duplicate_raises(manager):
    with pytest.raises(RoleError, match="角色名称已存在"):
        manager.add_custom_role("教师", "x", "y")


def test_remove_builtin_raises(manager):
    with pytest.raises(RoleError, match="不能删除内置角色"):
        manager.remove_role("作家")
    assert "作家" in manager.role_list()


def test_remove_missing_raises(manager):
    with pytest.raises(RoleError, match="角色不存在"):
        manager.remove_role("ghost")


def test_remove_custom_role(manager):
    manager.add_role("guide", "d", "p")
    manager.remove_role("guide")
    assert manager.get_role("guide") is None
    assert manager.role_list() == sorted(BUILTINS)


def test_edit_role(manager):
    manager.add_role("guide", "d", "p")
    manager.edit_role("guide", "new description", "new prompt")
    role = manager.get_role("guide")
    assert (role.description, role.prompt) == ("new description", "new prompt")


def test_edit_missing_raises(manager):
    with pytest.raises(RoleError, match="角色不存在"):
        manager.edit_role("ghost", "d", "p")


def test_listeners_receive_events(manager):
    events = []
    manager.on_change.append(lambda event, name: events.append((event, name)))
    manager.add_role("guide", "d", "p")
    manager.edit_role("guide", "d2", "p2")
    manager.remove_role("guide")
    assert events == [("added", "guide"), ("modified", "guide"), ("removed", "guide")]


def test_saved_file_format(tmp_path):
    path = tmp_path / "roles.json"
    manager = RoleManager(path)
    manager.add_role("guide", "d", "p")
    records = json.loads(path.read_text(encoding="utf-8"))
    assert {"name": "guide", "description": "d", "prompt": "p"} in records
    assert {record["name"] for record in records} == set(BUILTINS) | {"guide"}


def test_load_does_not_override_builtin(tmp_path):
    path = tmp_path / "roles.json"
    path.write_text(
        json.dumps([{"name": "默认", "description": "changed", "prompt": "changed"}]),
        encoding="utf-8",
    )
    manager = RoleManager(path)
    assert manager.get_role("默认").description == BUILTIN_ROLES["默认"][0]


def test_load_ignores_invalid_json(tmp_path):
    path = tmp_path / "roles.json"
    path.write_text("{not json", encoding="utf-8")
    manager = RoleManager(path)
    assert manager.role_list() == sorted(BUILTINS)


def test_load_ignores_non_array(tmp_path):
    path = tmp_path / "roles.json"
    path.write_text(json.dumps({"name": "guide"}), encoding="utf-8")
    manager = RoleManager(path)
    assert manager.get_role("guide") is None


def test_context_manager_saves_on_exit(tmp_path):
    path = tmp_path / "roles.json"
    with RoleManager(path) as manager:
        manager.add_custom_role("guide", "d", "p")
        assert not path.exists()
    assert RoleManager(path).get_role("guide") == CustomRole("guide", "d", "p")


def test_remove_persists_after_close(tmp_path):
    path = tmp_path / "roles.json"
    manager = RoleManager(path)
    manager.add_role("guide", "d", "p")
    manager.remove_role("guide")
    manager.close()
    assert RoleManager(path).get_role("guide") is None


def test_save_failure_raises(tmp_path):
    manager = RoleManager(tmp_path)
    with pytest.raises(RoleError, match="无法保存角色配置文件"):
        manager.save()


def test_process_message_tags_with_name():
    role = CustomRole("guide", "d", "p")
    assert role.process_message("hi") == "[guide] hi"


def test_process_message_without_prompt():
    role = CustomRole("guide", "d")
    assert role.process_message("hi") == "[guide] hi"


def test_role_data_validate_empty_name():
    with pytest.raises(RoleError, match="请输入角色名称"):
        RoleData("", "d", "p").validate()


def test_role_data_validate_passes_and_feeds_manager(manager):
    data = RoleData("guide", "d", "p")
    data.validate()
    assert manager.add_role(data.name, data.description, data.prompt) is True
    assert manager.get_role("guide").prompt == "p"