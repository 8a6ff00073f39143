import logging
import os
import warnings
from collections.abc import Callable, Sequence
from functools import wraps


_logger = logging.getLogger("ordmap.configparser")


class _ChangeFlagsDecorator:
    def __init__(self, root: "OrdmapConfigParser", **kwargs):
        self._root = root
        self.confs = {k: root._config_var_dict[k] for k in kwargs}
        self.new_vals = kwargs

    def __call__(self, f: Callable) -> Callable:
        @wraps(f)
        def res(*args, **kwargs):
            with self:
                return f(*args, **kwargs)

        return res

    def __enter__(self):
        self.old_vals = {k: v.val for k, v in self.confs.items()}
        try:
            for k, v in self.confs.items():
                v.__set__(self._root, self.new_vals[k])
        except Exception:
            _logger.error(f"Failed to change flags for {list(self.confs)}.")
            self.__exit__()
            raise

    def __exit__(self, *args):
        for k, v in self.confs.items():
            v.val = self.old_vals[k]


class ConfigParam:
    """A configuration flag, installed as a descriptor on the config class.

    Assigned values go through `apply`, which converts them (flags read from
    ``ORDMAP_FLAGS`` arrive as strings) or raises ``ValueError``.
    """

    def __init__(self, default):
        self.default = default
        # set by OrdmapConfigParser.add:
        self.name = None
        self.doc = None

    def apply(self, value):
        return value

    def __get__(self, instance, owner):
        if instance is None:
            return self
        return self.val

    def __set__(self, instance, value):
        self.val = self.apply(value)


class EnumStr(ConfigParam):
    def __init__(self, default: str, options: Sequence[str]):
        """Creates a str-based parameter that takes a predefined set of options.

        Parameters
        ----------
        default : str
            The default setting.
        options : sequence
            Further str values that the parameter may take.
            May, but does not need to include the default.
        """
        self.all = {default, *options}
        for val in self.all:
            if not isinstance(val, str):
                raise ValueError(f"Non-str value '{val}' for an EnumStr parameter.")
        super().__init__(default)

    def apply(self, value):
        if value in self.all:
            return value
        raise ValueError(
            f"Invalid value ('{value}') for configuration variable '{self.name}'. "
            f"Valid options are {sorted(self.all)}"
        )

    def __str__(self):
        return f"one of {sorted(self.all)}"


class BoolParam(ConfigParam):
    """A boolean parameter that may be initialized from any of the following:
    False, 0, "false", "False", "0"
    True, 1, "true", "True", "1"
    """

    def apply(self, value):
        if value in {False, 0, "false", "False", "0"}:
            return False
        elif value in {True, 1, "true", "True", "1"}:
            return True
        raise ValueError(
            f"Invalid value ({value}) for configuration variable '{self.name}'."
        )

    def __str__(self):
        return "bool"


class OrdmapConfigParser:
    """Object that holds configuration settings."""

    def __init__(self, flags_dict: dict | None = None):
        self._flags_dict = flags_dict or {}
        self._config_var_dict: dict[str, ConfigParam] = {}

    def __str__(self):
        lines = []
        for cv in self._config_var_dict.values():
            lines.append(f"{cv.name} ({cv})")
            lines.append(f"    Doc:  {cv.doc}")
            lines.append(f"    Value:  {cv.val}\n")
        return "\n".join(lines)

    def add(self, name: str, doc: str, configparam: ConfigParam):
        """Register `configparam` under `name`.

        The value comes from the flags given at construction when present,
        otherwise from the parameter's default. Either way it is validated here.
        """
        if "." in name:
            raise ValueError(
                f"Dot-based sections were removed. Use double underscores! ({name})"
            )
        existing = getattr(type(self), name, None)
        if name in self._config_var_dict or (
            existing is not None and not isinstance(existing, ConfigParam)
        ):
            raise AttributeError(f"The name {name} is already taken")
        configparam.doc = doc
        configparam.name = name
        configparam.__set__(self, self._flags_dict.pop(name, configparam.default))
        self._config_var_dict[name] = configparam
        setattr(type(self), name, configparam)

    def change_flags(self, **kwargs) -> _ChangeFlagsDecorator:
        """
        Use this as a decorator or context manager to change the value of
        configuration variables.
        """
        return _ChangeFlagsDecorator(self, **kwargs)

    def warn_unused_flags(self):
        for key in self._flags_dict:
            warnings.warn(f"ORDMAP_FLAGS contains unknown flag {key}")


def parse_config_string(config_string: str) -> dict[str, str]:
    """
    Parses a config string (comma-separated key=value components) into a dict.
    """
    config_dict = {}
    for kv_pair in config_string.split(","):
        kv_pair = kv_pair.strip()
        if not kv_pair:
            continue
        kv_tuple = kv_pair.split("=", 1)
        if len(kv_tuple) == 1:
            raise ValueError(f"Config key '{kv_tuple[0]}' has no value")
        k, v = kv_tuple
        config_dict[k.strip()] = v.strip()
    return config_dict


def _create_default_config() -> OrdmapConfigParser:
    return OrdmapConfigParser(
        flags_dict=parse_config_string(os.environ.get("ORDMAP_FLAGS", ""))
    )
