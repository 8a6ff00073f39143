import logging

import pytest

import ordmap
from ordmap import configparser
from ordmap.configdefaults import add_ordered_map_configvars, config


def _create_test_config(flags_dict=None):
    # Every ConfigParam becomes a class attribute, so each test gets its own class.
    class TestConfigParser(configparser.OrdmapConfigParser):
        pass

    return TestConfigParser(flags_dict=flags_dict or {})


def test_parse_config_string():
    assert configparser.parse_config_string("") == {}
    assert configparser.parse_config_string(
        "check_invariants=True, on_ignored_index = warn,"
    ) == {"check_invariants": "True", "on_ignored_index": "warn"}
    assert configparser.parse_config_string("a=b=c") == {"a": "b=c"}
    with pytest.raises(ValueError, match="has no value"):
        configparser.parse_config_string("check_invariants")


def test_defaults():
    root = _create_test_config()
    add_ordered_map_configvars(root)
    assert root.check_invariants is False
    assert root.on_ignored_index == "ignore"
    assert root.copy_on_write is True


def test_flags_dict_overrides_defaults():
    root = _create_test_config(
        {"check_invariants": "1", "on_ignored_index": "raise", "bogus": "x"}
    )
    add_ordered_map_configvars(root)
    assert root.check_invariants is True
    assert root.on_ignored_index == "raise"

    with pytest.warns(UserWarning, match="unknown flag bogus"):
        root.warn_unused_flags()


def test_invalid_flag_value():
    root = _create_test_config({"on_ignored_index": "explode"})
    with pytest.raises(ValueError, match="Valid options are"):
        add_ordered_map_configvars(root)


def test_bool_param():
    root = _create_test_config()
    root.add("test__flag", "A test flag", configparser.BoolParam(True))
    for value in (False, 0, "false", "False", "0"):
        root.test__flag = value
        assert root.test__flag is False
    for value in (True, 1, "true", "True", "1"):
        root.test__flag = value
        assert root.test__flag is True
    with pytest.raises(ValueError):
        root.test__flag = "maybe"


def test_enum_str():
    with pytest.raises(ValueError, match="Non-str value"):
        configparser.EnumStr("a", ["b", 3])

    root = _create_test_config()
    root.add("test__mode", "A test enum", configparser.EnumStr("a", ["b"]))
    root.test__mode = "b"
    assert root.test__mode == "b"
    with pytest.raises(ValueError):
        root.test__mode = "c"
    assert root.test__mode == "b"


def test_config_param_passes_values_through():
    root = _create_test_config({"test__plain": "text"})
    root.add("test__plain", "A plain flag", configparser.ConfigParam(3))
    assert root.test__plain == "text"
    root.test__plain = 4
    assert root.test__plain == 4
    assert type(root).test__plain.default == 3


def test_add_rejects_bad_names():
    root = _create_test_config()
    with pytest.raises(ValueError, match="double underscores"):
        root.add("a.b", "Dotted", configparser.BoolParam(True))
    root.add("test__dup", "First", configparser.BoolParam(True))
    with pytest.raises(AttributeError, match="already taken"):
        root.add("test__dup", "Second", configparser.BoolParam(True))


def test_change_flags_context_and_decorator():
    root = _create_test_config()
    add_ordered_map_configvars(root)

    with root.change_flags(check_invariants=True, on_ignored_index="warn"):
        assert root.check_invariants is True
        assert root.on_ignored_index == "warn"
    assert root.check_invariants is False
    assert root.on_ignored_index == "ignore"

    @root.change_flags(copy_on_write=False)
    def inner():
        return root.copy_on_write

    assert inner() is False
    assert root.copy_on_write is True


def test_change_flags_takes_keywords_only():
    root = _create_test_config()
    add_ordered_map_configvars(root)
    with pytest.raises(TypeError):
        root.change_flags({"check_invariants": True})
    with pytest.raises(KeyError):
        root.change_flags(no_such_flag=True)
    assert root.check_invariants is False


def test_change_flags_restores_on_invalid_value():
    root = _create_test_config()
    add_ordered_map_configvars(root)
    with pytest.raises(ValueError):
        with root.change_flags(check_invariants=True, on_ignored_index="nope"):
            pass
    assert root.check_invariants is False
    assert root.on_ignored_index == "ignore"


def test_str_lists_every_flag():
    text = str(config)
    for name in ("check_invariants", "on_ignored_index", "copy_on_write"):
        assert name in text


def test_package_exports_config():
    assert ordmap.config is config
    assert ordmap.change_flags.__self__ is config


def test_disable_log_handler():
    logger = logging.getLogger("ordmap.test_disable_log_handler")
    handler = logging.NullHandler()
    logger.addHandler(handler)
    ordmap.disable_log_handler(logger=logger, handler=handler)
    assert handler not in logger.handlers


def test_package_logger_level():
    assert logging.getLogger("ordmap").level == logging.WARNING
