"""UCI option table.

Options are looked up by name case-insensitively, printed in the order they
were registered, and validated on assignment the way UCI GUIs expect:

    check   "true" / "false"
    spin    an integer within [min, max]
    combo   one of the listed vars
    button  no value; assignment only fires the callback
    string  any non-empty text ("<empty>" stands for an empty string)
"""

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field

from loguru import logger

from ucicore.configs.schema import OptionsConfig

OnChange = Callable[["Option"], None]

EMPTY_STRING = "<empty>"


@dataclass
class Option:
    """A single UCI option."""

    type: str
    default: str = ""
    min: int = 0
    max: int = 0
    vars: list[str] = field(default_factory=list)
    on_change: OnChange | None = None
    value: str = field(init=False)
    idx: int = field(init=False, default=0)

    def __post_init__(self) -> None:
        self.value = self.default

    @classmethod
    def check(cls, default: bool, on_change: OnChange | None = None) -> "Option":
        return cls("check", "true" if default else "false", on_change=on_change)

    @classmethod
    def spin(
        cls, default: int, min_value: int, max_value: int, on_change: OnChange | None = None
    ) -> "Option":
        return cls("spin", str(default), min_value, max_value, on_change=on_change)

    @classmethod
    def string(cls, default: str, on_change: OnChange | None = None) -> "Option":
        return cls("string", default, on_change=on_change)

    @classmethod
    def button(cls, on_change: OnChange | None = None) -> "Option":
        return cls("button", on_change=on_change)

    @classmethod
    def combo(cls, default: str, choices: list[str], on_change: OnChange | None = None) -> "Option":
        return cls("combo", default, vars=list(choices), on_change=on_change)

    def accepts(self, v: str) -> bool:
        """Return True if ``v`` is a valid value for this option."""
        if self.type != "button" and not v:
            return False
        if self.type == "check":
            return v in ("true", "false")
        if self.type == "spin":
            try:
                number = float(v)
            except ValueError:
                return False
            return self.min <= number <= self.max
        if self.type == "combo":
            return v.lower() in (var.lower() for var in self.vars)
        return True

    def assign(self, v: str) -> bool:
        """Set the value and fire the callback.

        Returns:
            False if the value was rejected and nothing changed.
        """
        if not self.accepts(v):
            return False

        if self.type != "button":
            self.value = v

        if self.on_change is not None:
            self.on_change(self)
        return True

    def __int__(self) -> int:
        return int(float(self.value)) if self.type == "spin" else int(self.value == "true")

    def __bool__(self) -> bool:
        if self.type == "check":
            return self.value == "true"
        return bool(self.value)

    def __str__(self) -> str:
        if self.type == "string" and self.value == EMPTY_STRING:
            return ""
        return self.value

    def describe(self) -> str:
        """Render the "type ..." part of the UCI option line."""
        text = f"type {self.type}"
        if self.type in ("string", "check", "combo"):
            text += f" default {self.default}"
        if self.type == "combo":
            text += "".join(f" var {var}" for var in self.vars)
        if self.type == "spin":
            text += f" default {int(float(self.default))} min {self.min} max {self.max}"
        return text


class OptionsMap:
    """Name to option mapping with case-insensitive lookup."""

    def __init__(self) -> None:
        self._options: dict[str, tuple[str, Option]] = {}

    def add(self, name: str, option: Option) -> Option:
        option.idx = len(self._options)
        self._options[name.lower()] = (name, option)
        return option

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._options

    def __getitem__(self, name: str) -> Option:
        return self._options[name.lower()][1]

    def __len__(self) -> int:
        return len(self._options)

    def __iter__(self) -> Iterator[str]:
        for name, _ in sorted(self._options.values(), key=lambda item: item[1].idx):
            yield name

    def set(self, name: str, value: str) -> bool:
        """Assign ``value`` to an existing option.

        Returns:
            False if the option does not exist or rejected the value.
        """
        if name not in self:
            return False
        option = self[name]
        if not option.assign(value):
            logger.warning(f"Rejected value {value!r} for option {name!r} ({option.describe()})")
            return False
        logger.debug(f"Option {name!r} set to {option.value!r}")
        return True

    def __str__(self) -> str:
        return "\n".join(f"option name {name} {self[name].describe()}" for name in self)


def init_options(
    config: OptionsConfig,
    callbacks: dict[str, OnChange] | None = None,
) -> OptionsMap:
    """Build the engine's option table.

    Args:
        config: Default values.
        callbacks: Optional on-change handlers keyed by option name.

    Returns:
        The populated option table.
    """
    callbacks = callbacks or {}
    options = OptionsMap()
    options.add(
        "Debug Log File",
        Option.string(config.debug_log_file or EMPTY_STRING, callbacks.get("Debug Log File")),
    )
    options.add("Threads", Option.spin(config.threads, 1, 512, callbacks.get("Threads")))
    options.add("Hash", Option.spin(config.hash, 1, 131072, callbacks.get("Hash")))
    options.add("Clear Hash", Option.button(callbacks.get("Clear Hash")))
    options.add("Ponder", Option.check(config.ponder))
    options.add("Move Overhead", Option.spin(config.move_overhead, 0, 5000))
    options.add("UCI_Chess960", Option.check(config.chess960))
    options.add(
        "Learning File",
        Option.string(config.learning_file or EMPTY_STRING, callbacks.get("Learning File")),
    )
    return options
